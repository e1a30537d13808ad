"""Tests for the NetSuite client and change validators."""

import json

import httpx
import pytest

from config_bridge.adapters.netsuite import NetsuiteClient, create_netsuite_change_validator
from config_bridge.adapters.netsuite.change_validators import (
    account_specific_values_validator,
    remove_customlist_item_validator,
)
from config_bridge.adapters.netsuite.client import account_host
from config_bridge.core.config import ClientConfig, ClientRetryConfig
from config_bridge.core.elements import (
    ADDITION,
    MODIFICATION,
    REMOVAL,
    Change,
    ElemID,
    InstanceElement,
    ObjectType,
)

NETSUITE = "netsuite"
CUSTOM_LIST_TYPE = ObjectType(ElemID(NETSUITE, "customlist"))
WORKFLOW_TYPE = ObjectType(ElemID(NETSUITE, "workflow"))
STANDARD_TYPE = ObjectType(ElemID(NETSUITE, "subsidiary"))


def _custom_list(values):
    return InstanceElement(
        "customlist1",
        CUSTOM_LIST_TYPE,
        {"scriptid": "customlist1", "customvalues": {"customvalue": values}},
    )


class TestAccountSpecificValues:
    @pytest.mark.asyncio
    async def test_nested_account_specific_value(self):
        workflow = InstanceElement("wf", WORKFLOW_TYPE, {
            "scriptid": "customworkflow1",
            "workflowstates": {
                "workflowstate": [
                    {"scriptid": "state1", "owner": "[ACCOUNT_SPECIFIC_VALUE]"},
                ],
            },
        })
        errors = await account_specific_values_validator([Change(ADDITION, after=workflow)])
        assert len(errors) == 1
        assert errors[0].severity == "Warning"
        assert errors[0].elem_id == workflow.elem_id
        assert "account specific values" in errors[0].message

    @pytest.mark.asyncio
    async def test_value_embedded_in_string(self):
        workflow = InstanceElement("wf", WORKFLOW_TYPE, {
            "initcondition": {"formula": "x = [ACCOUNT_SPECIFIC_VALUE] AND y"},
        })
        errors = await account_specific_values_validator(
            [Change(MODIFICATION, before=workflow, after=workflow)]
        )
        assert len(errors) == 1

    @pytest.mark.asyncio
    async def test_clean_instance(self):
        workflow = InstanceElement("wf", WORKFLOW_TYPE, {"owner": "-5"})
        assert await account_specific_values_validator([Change(ADDITION, after=workflow)]) == []

    @pytest.mark.asyncio
    async def test_non_custom_type_ignored(self):
        record = InstanceElement("sub", STANDARD_TYPE, {"parent": "[ACCOUNT_SPECIFIC_VALUE]"})
        assert await account_specific_values_validator([Change(ADDITION, after=record)]) == []

    @pytest.mark.asyncio
    async def test_removal_ignored(self):
        workflow = InstanceElement("wf", WORKFLOW_TYPE, {"owner": "[ACCOUNT_SPECIFIC_VALUE]"})
        assert await account_specific_values_validator([Change(REMOVAL, before=workflow)]) == []


class TestRemoveCustomListItem:
    @pytest.mark.asyncio
    async def test_removed_item(self):
        before = _custom_list([{"scriptid": "val_1"}, {"scriptid": "val_2"}])
        after = _custom_list([{"scriptid": "val_1"}])
        errors = await remove_customlist_item_validator(
            [Change(MODIFICATION, before=before, after=after)]
        )
        assert len(errors) == 1
        assert errors[0].severity == "Error"
        assert errors[0].message == "Removing customvalue from customlist is forbidden"
        assert errors[0].detailed_message == "customlist1 has customvalues that were removed"

    @pytest.mark.asyncio
    async def test_single_item_value(self):
        before = _custom_list({"scriptid": "val_1"})
        after = _custom_list([{"scriptid": "val_2"}])
        errors = await remove_customlist_item_validator(
            [Change(MODIFICATION, before=before, after=after)]
        )
        assert len(errors) == 1

    @pytest.mark.asyncio
    async def test_added_item(self):
        before = _custom_list({"scriptid": "val_1"})
        after = _custom_list([{"scriptid": "val_1"}, {"scriptid": "val_2"}])
        assert await remove_customlist_item_validator(
            [Change(MODIFICATION, before=before, after=after)]
        ) == []

    @pytest.mark.asyncio
    async def test_malformed_customvalues(self):
        before = InstanceElement(
            "customlist1", CUSTOM_LIST_TYPE, {"customvalues": [{"scriptid": "val_1"}]}
        )
        after = InstanceElement("customlist1", CUSTOM_LIST_TYPE, {"customvalues": "none"})
        assert await remove_customlist_item_validator(
            [Change(MODIFICATION, before=before, after=after)]
        ) == []

    @pytest.mark.asyncio
    async def test_other_types_ignored(self):
        before = InstanceElement("wf", WORKFLOW_TYPE, {"customvalues": {"customvalue": [{"scriptid": "a"}]}})
        after = InstanceElement("wf", WORKFLOW_TYPE, {"customvalues": {"customvalue": []}})
        assert await remove_customlist_item_validator(
            [Change(MODIFICATION, before=before, after=after)]
        ) == []


class TestCombinedValidator:
    @pytest.mark.asyncio
    async def test_disable(self):
        before = _custom_list([{"scriptid": "val_1", "label": "[ACCOUNT_SPECIFIC_VALUE]"}])
        after = _custom_list([])
        changes = [Change(MODIFICATION, before=before, after=after)]
        assert len(await create_netsuite_change_validator()(changes)) == 1
        assert await create_netsuite_change_validator(["removeCustomListItem"])(changes) == []


class TestNetsuiteClient:
    def test_account_host(self):
        assert account_host("TSTDRV123456_SB1") == "tstdrv123456-sb1"

    def test_base_url(self):
        client = NetsuiteClient({"account_id": "123456_SB1", "access_token": "tok"})
        assert client.base_url == "https://123456-sb1.suitetalk.api.netsuite.com"

    @pytest.mark.asyncio
    async def test_run_suiteql(self):
        requests = []

        def handler(request):
            requests.append(request)
            if request.url.path.endswith("metadata-catalog"):
                return httpx.Response(200, json={"items": []})
            return httpx.Response(200, json={"items": [{"id": "1"}], "hasMore": False})

        client = NetsuiteClient(
            {"account_id": "123456", "access_token": "tok"},
            ClientConfig(retry=ClientRetryConfig(max_attempts=1, retry_delay=0)),
            transport=httpx.MockTransport(handler),
        )
        rows = await client.run_suiteql("SELECT id FROM customer", limit=10)
        await client.close()

        assert rows == [{"id": "1"}]
        query = requests[-1]
        assert query.url.path == "/services/rest/query/v1/suiteql"
        assert query.url.params["limit"] == "10"
        assert json.loads(query.content) == {"q": "SELECT id FROM customer"}
        assert query.headers["Authorization"] == "Bearer tok"
        assert query.headers["Prefer"] == "transient"
