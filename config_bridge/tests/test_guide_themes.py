"""Tests for Guide theme creation."""

import io
import json
import logging
import zipfile

import httpx
import pytest

from config_bridge.adapters.zendesk import ZendeskClient
from config_bridge.adapters.zendesk.guide_themes import (
    StaticFile,
    create_theme,
    create_theme_package,
    poll_job_status,
)
from config_bridge.core.config import ClientConfig, ClientRetryConfig

UPLOAD_URL = "https://storage.example.com/upload"

JOB = {
    "id": "job1",
    "status": "pending",
    "data": {
        "theme_id": "theme1",
        "upload": {"url": UPLOAD_URL, "parameters": {"key": "uploads/abc", "policy": "p"}},
    },
}

FILES = [
    StaticFile("manifest.json", b'{"name": "Copenhagen"}'),
    StaticFile("templates/home_page.hbs", b"<h1>{{help_center.name}}</h1>"),
]


class _ZendeskAPI:
    def __init__(self, job_response=None, statuses=("pending", "completed")):
        self.job_response = {"job": JOB} if job_response is None else job_response
        self.statuses = list(statuses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path == "/api/v2/account":
            return httpx.Response(200, json={"account": {}})
        if path == "/api/v2/guide/theming/jobs/themes/imports":
            return httpx.Response(202, json=self.job_response)
        if path == "/api/v2/guide/theming/jobs/job1":
            status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
            body = {"job": {"id": "job1", "status": status}}
            if status == "failed":
                body["job"]["errors"] = [
                    {"title": "InvalidTemplates", "code": "E1", "message": "bad hbs"}
                ]
            return httpx.Response(200, json=body)
        return httpx.Response(404)


class _Storage:
    def __init__(self, status=204):
        self.status = status
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status)


def _client(api):
    return ZendeskClient(
        {"base_url": "https://acme.zendesk.com", "username": "a@acme.com", "api_key": "k"},
        ClientConfig(retry=ClientRetryConfig(max_attempts=1, retry_delay=0)),
        transport=httpx.MockTransport(api),
    )


class TestCreateThemePackage:
    def test_zip_contains_files(self):
        package = create_theme_package(FILES)
        with zipfile.ZipFile(io.BytesIO(package)) as archive:
            assert sorted(archive.namelist()) == ["manifest.json", "templates/home_page.hbs"]
            assert archive.read("manifest.json") == b'{"name": "Copenhagen"}'


class TestCreateTheme:
    @pytest.mark.asyncio
    async def test_success(self):
        api, storage = _ZendeskAPI(), _Storage()
        client = _client(api)
        async with httpx.AsyncClient(transport=httpx.MockTransport(storage)) as upload:
            theme_id, errors = await create_theme(
                FILES, "brand1", client, upload_client=upload, poll_interval=0
            )
        await client.close()

        assert theme_id == "theme1"
        assert errors == []

        job_request = next(r for r in api.requests if r.method == "POST")
        assert json.loads(job_request.content) == {
            "job": {"attributes": {"brand_id": "brand1", "format": "zip"}}
        }
        assert len(storage.requests) == 1
        upload_body = storage.requests[0].content
        assert str(storage.requests[0].url) == UPLOAD_URL
        assert b'filename="theme.zip"' in upload_body
        assert b"uploads/abc" in upload_body
        polls = [r for r in api.requests if r.url.path.endswith("/job1")]
        assert len(polls) == 2

    @pytest.mark.asyncio
    async def test_invalid_job_response(self):
        api = _ZendeskAPI(job_response={"job": {"id": "job1"}})
        client = _client(api)
        theme_id, errors = await create_theme(FILES, "brand1", client, poll_interval=0)
        await client.close()
        assert theme_id is None
        assert len(errors) == 1
        assert "invalid response" in errors[0]

    @pytest.mark.asyncio
    async def test_job_failed(self, caplog):
        api, storage = _ZendeskAPI(statuses=("failed",)), _Storage()
        client = _client(api)
        with caplog.at_level(logging.WARNING, logger="config_bridge.zendesk.guide_themes"):
            async with httpx.AsyncClient(transport=httpx.MockTransport(storage)) as upload:
                theme_id, errors = await create_theme(
                    FILES, "brand1", client, upload_client=upload, poll_interval=0
                )
        await client.close()
        assert theme_id == "theme1"
        assert errors == ["InvalidTemplates: bad hbs"]
        assert "Could not verify upload of new theme to brand brand1" in caplog.text

    @pytest.mark.asyncio
    async def test_upload_failure_is_reported(self):
        api, storage = _ZendeskAPI(), _Storage(status=403)
        client = _client(api)
        async with httpx.AsyncClient(transport=httpx.MockTransport(storage)) as upload:
            theme_id, errors = await create_theme(
                FILES, "brand1", client, upload_client=upload, poll_interval=0
            )
        await client.close()
        assert theme_id == "theme1"
        assert len(errors) == 1
        assert "status 403" in errors[0]


class TestPollJobStatus:
    @pytest.mark.asyncio
    async def test_gives_up(self):
        api = _ZendeskAPI(statuses=("pending",))
        client = _client(api)
        success, errors = await poll_job_status("job1", client, interval=0, max_attempts=3)
        await client.close()
        assert not success
        assert errors == ["Theme job job1 did not complete after 3 attempts"]

    @pytest.mark.asyncio
    async def test_http_error(self):
        def handler(request):
            if request.url.path == "/api/v2/account":
                return httpx.Response(200, json={})
            return httpx.Response(404, json={"error": "RecordNotFound"})

        client = _client(handler)
        success, errors = await poll_job_status("job1", client, interval=0)
        await client.close()
        assert not success
        assert "status code 404" in errors[0]
