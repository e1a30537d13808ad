"""Salesforce fetch filters."""

from __future__ import annotations

import logging

from config_bridge.core.elements import (
    RECORDS_PATH,
    ElemID,
    Element,
    InstanceElement,
    ObjectType,
    is_instance_element,
)
from config_bridge.core.filter import Filter, FilterResult
from config_bridge.core.http_client import ClientError
from config_bridge.adapters.salesforce.client import SALESFORCE
from config_bridge.adapters.salesforce.filter import (
    FilterOpts,
    LocalFilterCreator,
    LocalFilterOpts,
    RemoteFilterCreator,
)

logger = logging.getLogger("config_bridge.salesforce.filters")

ORGANIZATION_TYPE_NAME = "Organization"
ORGANIZATION_SETTINGS_NAME = "OrganizationSettings"
ORGANIZATION_FIELDS = [
    "Id",
    "Name",
    "DefaultLocaleSidKey",
    "LanguageLocaleKey",
    "TimeZoneSidKey",
    "OrganizationType",
    "IsSandbox",
]


class RemoveUnsupportedSystemFieldsFilter(Filter):
    """Drop the configured unsupported system fields from fetched instances."""

    name = "remove_unsupported_system_fields"

    def __init__(self, opts: LocalFilterOpts) -> None:
        self._fields = set(opts.config.unsupported_system_fields or [])

    async def on_fetch(self, elements: list[Element]) -> None:
        if not self._fields:
            return
        for elem in elements:
            if is_instance_element(elem) and elem.elem_id.adapter == SALESFORCE:
                for field_name in self._fields & set(elem.value):
                    del elem.value[field_name]


class OrganizationSettingsFilter(Filter):
    """Add the org-wide settings record as an instance."""

    name = "organization_settings"

    def __init__(self, opts: FilterOpts) -> None:
        self._client = opts.client
        self._fetch_profile = opts.config.fetch_profile

    async def on_fetch(self, elements: list[Element]) -> FilterResult | None:
        if not self._fetch_profile.is_feature_enabled("organizationSettings"):
            logger.debug("organization settings fetch is disabled")
            return None
        soql = f"SELECT {', '.join(ORGANIZATION_FIELDS)} FROM {ORGANIZATION_TYPE_NAME}"
        try:
            records = await self._client.query(soql)
        except ClientError as exc:
            logger.warning("Failed to fetch organization settings: %s", exc)
            return FilterResult(errors=[f"Failed to fetch organization settings: {exc}"])
        if len(records) != 1:
            logger.warning("Expected a single Organization record, got %d", len(records))
            return None

        values = {k: v for k, v in records[0].items() if k != "attributes"}
        org_type = ObjectType(ElemID(SALESFORCE, ORGANIZATION_TYPE_NAME))
        elements.append(org_type)
        elements.append(InstanceElement(
            ORGANIZATION_SETTINGS_NAME,
            org_type,
            values,
            path=[SALESFORCE, RECORDS_PATH, ORGANIZATION_TYPE_NAME, ORGANIZATION_SETTINGS_NAME],
        ))
        return None


remove_unsupported_system_fields: LocalFilterCreator = RemoveUnsupportedSystemFieldsFilter
organization_settings: RemoteFilterCreator = OrganizationSettingsFilter

LOCAL_FILTER_CREATORS: list[LocalFilterCreator] = [remove_unsupported_system_fields]
REMOTE_FILTER_CREATORS: list[RemoteFilterCreator] = [organization_settings]
