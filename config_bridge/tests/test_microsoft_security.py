"""Tests for the Microsoft Security (Entra) adapter."""

import httpx
import pytest

from config_bridge.adapters.microsoft_security import (
    MicrosoftSecurityClient,
    create_microsoft_security_change_validator,
    entra_change_validators,
)
from config_bridge.adapters.microsoft_security.change_validators import (
    application_setup_validator,
    on_prem_group_addition_validator,
)
from config_bridge.core.config import ClientConfig, ClientRetryConfig
from config_bridge.core.elements import (
    ADDITION,
    MODIFICATION,
    Change,
    ElemID,
    InstanceElement,
    ObjectType,
)

ADAPTER = "microsoft_security"


def _instance(type_name, name, value=None):
    return InstanceElement(name, ObjectType(ElemID(ADAPTER, type_name)), value or {})


class TestApplicationSetup:
    @pytest.mark.asyncio
    async def test_new_application_gets_post_action(self):
        app = _instance("EntraApplication", "portal")
        errors = await application_setup_validator([Change(ADDITION, after=app)])
        assert len(errors) == 1
        assert errors[0].severity == "Info"
        post_action = errors[0].deploy_actions["post_action"]
        assert "portal" in post_action["description"]
        assert post_action["sub_actions"]
        assert errors[0].to_dict()["deploy_actions"] == errors[0].deploy_actions

    @pytest.mark.asyncio
    async def test_service_principal_addition(self):
        sp = _instance("EntraServicePrincipal", "portal_sp")
        assert len(await application_setup_validator([Change(ADDITION, after=sp)])) == 1

    @pytest.mark.asyncio
    async def test_modification_ignored(self):
        app = _instance("EntraApplication", "portal")
        assert await application_setup_validator(
            [Change(MODIFICATION, before=app, after=app)]
        ) == []


class TestOnPremGroupAddition:
    @pytest.mark.asyncio
    async def test_synced_group_rejected(self):
        group = _instance("EntraGroup", "sales", {"onPremisesSyncEnabled": True})
        errors = await on_prem_group_addition_validator([Change(ADDITION, after=group)])
        assert len(errors) == 1
        assert errors[0].severity == "Error"
        assert errors[0].elem_id == group.elem_id

    @pytest.mark.asyncio
    async def test_cloud_group_allowed(self):
        cloud = _instance("EntraGroup", "cloud", {"onPremisesSyncEnabled": None})
        plain = _instance("EntraGroup", "plain")
        changes = [Change(ADDITION, after=cloud), Change(ADDITION, after=plain)]
        assert await on_prem_group_addition_validator(changes) == []


class TestCombinedValidator:
    def test_validator_names(self):
        assert set(entra_change_validators()) == {"applicationSetup", "onPremGroupAddition"}

    @pytest.mark.asyncio
    async def test_combined(self):
        app = _instance("EntraApplication", "portal")
        group = _instance("EntraGroup", "sales", {"onPremisesSyncEnabled": True})
        changes = [Change(ADDITION, after=app), Change(ADDITION, after=group)]
        errors = await create_microsoft_security_change_validator()(changes)
        assert sorted(e.severity for e in errors) == ["Error", "Info"]
        errors = await create_microsoft_security_change_validator(["applicationSetup"])(changes)
        assert [e.severity for e in errors] == ["Error"]


class TestMicrosoftSecurityClient:
    @pytest.mark.asyncio
    async def test_login_fetches_graph_token(self):
        seen = []

        def handler(request):
            seen.append(request)
            if request.url.host == "login.microsoftonline.com":
                return httpx.Response(200, json={"access_token": "graph-token", "expires_in": 3600})
            return httpx.Response(200, json={"value": []})

        client = MicrosoftSecurityClient(
            {
                "token_url": "https://login.microsoftonline.com/tenant/oauth2/v2.0/token",
                "client_id": "id",
                "client_secret": "secret",
            },
            ClientConfig(retry=ClientRetryConfig(max_attempts=1, retry_delay=0)),
            transport=httpx.MockTransport(handler),
        )
        await client.ensure_logged_in()
        await client.close()

        assert b"scope=https%3A%2F%2Fgraph.microsoft.com%2F.default" in seen[0].content
        assert seen[1].url.path == "/v1.0/organization"
        assert seen[1].headers["Authorization"] == "Bearer graph-token"
