"""Tests for the adapter registry."""

import pytest

from config_bridge.adapters import (
    ADAPTER_REGISTRY,
    JiraClient,
    NetsuiteClient,
    ZendeskClient,
    create_client,
    get_change_validator,
)
from config_bridge.core.config import ConnectionProfile
from config_bridge.core.elements import ADDITION, Change, ElemID, InstanceElement, ObjectType


class TestRegistry:
    def test_all_adapters_registered(self):
        assert set(ADAPTER_REGISTRY) == {
            "zendesk", "netsuite", "salesforce", "jira", "microsoft_security"
        }

    def test_create_client_applies_profile_config(self):
        profile = ConnectionProfile("zd", {
            "adapter": "zendesk",
            "credentials": {"subdomain": "acme", "username": "a@acme.com", "api_key": "k"},
            "client": {"retry": {"max_attempts": 2}},
        })
        client = create_client(profile)
        assert isinstance(client, ZendeskClient)
        assert client.base_url == "https://acme.zendesk.com"
        assert client.config.retry.max_attempts == 2
        # untouched sections keep the adapter defaults
        assert client.config.max_requests_per_minute == 600
        assert client.config.rate_limit.get == 100

    def test_create_client_netsuite(self):
        profile = ConnectionProfile("ns", {
            "adapter": "netsuite",
            "credentials": {"account_id": "1234_SB1", "access_token": "tok"},
        })
        client = create_client(profile)
        assert isinstance(client, NetsuiteClient)
        assert client.config is NetsuiteClient.defaults

    def test_create_client_unknown_adapter(self):
        profile = ConnectionProfile("x", {"adapter": "sap"})
        with pytest.raises(ValueError, match="Unknown adapter"):
            create_client(profile)

    def test_jira_page_size(self):
        client = JiraClient({"base_url": "https://a.atlassian.net", "username": "u", "api_key": "k"})
        assert client.get_page_size() == 1000


class TestGetChangeValidator:
    @pytest.mark.asyncio
    async def test_zendesk(self):
        status = InstanceElement(
            "s", ObjectType(ElemID("zendesk", "custom_status")), {"status_category": "x"}
        )
        validator = get_change_validator("zendesk")
        errors = await validator([Change(ADDITION, after=status)], None)
        assert [e.severity for e in errors] == ["Error"]

    @pytest.mark.asyncio
    async def test_adapter_without_validators(self):
        validator = get_change_validator("jira")
        assert await validator([], None) == []

    def test_adapter_without_validators_rejects_disabled_names(self):
        with pytest.raises(ValueError, match="Unknown change validators"):
            get_change_validator("salesforce", ["anything"])

    def test_unknown_adapter(self):
        with pytest.raises(ValueError, match="Unknown adapter"):
            get_change_validator("oracle")
