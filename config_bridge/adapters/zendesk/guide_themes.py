"""
Guide theme creation.

Creating a theme is a three step job against the Zendesk theming API:
  1. open an import job for the brand,
  2. zip the theme files and upload them to the storage URL the job hands out,
  3. poll the job until Zendesk reports it completed or failed.
Every step reports failures as error strings rather than raising, so the
caller can attach them to the deploy result of the theme change.
"""

from __future__ import annotations

import asyncio
import io
import logging
import zipfile
from dataclasses import dataclass

import httpx
from pydantic import BaseModel, ValidationError

from config_bridge.core.http_client import ClientError
from config_bridge.adapters.zendesk.client import ZendeskClient

logger = logging.getLogger("config_bridge.zendesk.guide_themes")

IMPORT_JOB_URL = "/api/v2/guide/theming/jobs/themes/imports"
JOB_STATUS_URL = "/api/v2/guide/theming/jobs/{job_id}"

JOB_COMPLETED = "completed"
JOB_FAILED = "failed"


@dataclass
class StaticFile:
    filename: str
    content: bytes


class _UploadInfo(BaseModel):
    url: str
    parameters: dict[str, str]


class _JobData(BaseModel):
    theme_id: str | None = None
    upload: _UploadInfo


class ThemeJob(BaseModel):
    id: str
    status: str
    data: _JobData


class _JobError(BaseModel):
    title: str | None = None
    code: str | None = None
    message: str | None = None


class _JobStatus(BaseModel):
    id: str
    status: str
    errors: list[_JobError] | None = None


async def create_theme_import_job(
    brand_id: str, client: ZendeskClient
) -> tuple[ThemeJob | None, list[str]]:
    try:
        res = await client.post(
            IMPORT_JOB_URL,
            data={"job": {"attributes": {"brand_id": brand_id, "format": "zip"}}},
        )
    except ClientError as exc:
        return None, [str(exc)]
    try:
        return ThemeJob.model_validate((res.data or {}).get("job")), []
    except (ValidationError, AttributeError) as exc:
        logger.error("Received invalid theme import job response: %s", exc)
        return None, [f"Received an invalid response from Zendesk API: {res.data}"]


def create_theme_package(static_files: list[StaticFile]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for static_file in static_files:
            archive.writestr(static_file.filename, static_file.content)
    return buffer.getvalue()


async def upload_theme_package(
    static_files: list[StaticFile],
    job: ThemeJob,
    upload_client: httpx.AsyncClient | None = None,
) -> list[str]:
    """Upload the zipped theme to the job's storage URL (not the Zendesk API)."""
    package = create_theme_package(static_files)
    upload = job.data.upload
    owns_client = upload_client is None
    http = upload_client or httpx.AsyncClient(timeout=60.0)
    try:
        resp = await http.post(
            upload.url,
            data=upload.parameters,
            files={"file": ("theme.zip", package, "application/zip")},
        )
    except httpx.HTTPError as exc:
        return [f"Failed to upload theme package: {exc}"]
    finally:
        if owns_client:
            await http.aclose()
    if resp.is_error:
        return [f"Failed to upload theme package, status {resp.status_code}: {resp.text}"]
    return []


async def poll_job_status(
    job_id: str,
    client: ZendeskClient,
    interval: float = 1.0,
    max_attempts: int = 60,
) -> tuple[bool, list[str]]:
    url = JOB_STATUS_URL.format(job_id=job_id)
    for _ in range(max_attempts):
        try:
            res = await client.get(url)
            status = _JobStatus.model_validate((res.data or {}).get("job"))
        except ClientError as exc:
            return False, [str(exc)]
        except (ValidationError, AttributeError) as exc:
            logger.error("Received invalid job status response: %s", exc)
            return False, [f"Received an invalid response from Zendesk API for job {job_id}"]

        if status.status == JOB_COMPLETED:
            return True, []
        if status.status == JOB_FAILED:
            return False, [
                f"{err.title or err.code}: {err.message}" for err in status.errors or []
            ] or [f"Theme job {job_id} failed"]
        await asyncio.sleep(interval)

    return False, [f"Theme job {job_id} did not complete after {max_attempts} attempts"]


async def create_theme(
    static_files: list[StaticFile],
    brand_id: str,
    client: ZendeskClient,
    upload_client: httpx.AsyncClient | None = None,
    poll_interval: float = 1.0,
) -> tuple[str | None, list[str]]:
    """Create a new theme for *brand_id*; returns ``(theme_id, errors)``."""
    job, errors = await create_theme_import_job(brand_id, client)
    if job is None:
        return None, errors
    errors.extend(await upload_theme_package(static_files, job, upload_client))

    success, poll_errors = await poll_job_status(job.id, client, interval=poll_interval)
    errors.extend(poll_errors)
    if not success:
        logger.warning(
            "Failed to receive 'completed' job status from Zendesk API. "
            "Could not verify upload of new theme to brand %s",
            brand_id,
        )
    else:
        logger.debug("Theme created successfully, id: %s", job.data.theme_id)

    return job.data.theme_id, errors
