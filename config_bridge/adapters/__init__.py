"""SaaS adapters for Zendesk, NetSuite, Salesforce, Jira and Microsoft Security."""

from __future__ import annotations

from typing import Callable, Iterable

from config_bridge.adapters.jira import JiraClient
from config_bridge.adapters.microsoft_security import (
    MicrosoftSecurityClient,
    create_microsoft_security_change_validator,
)
from config_bridge.adapters.netsuite import NetsuiteClient, create_netsuite_change_validator
from config_bridge.adapters.salesforce import SalesforceClient
from config_bridge.adapters.zendesk import ZendeskClient, create_zendesk_change_validator
from config_bridge.core.change_validator import ChangeValidator, create_change_validator
from config_bridge.core.config import ConnectionProfile
from config_bridge.core.http_client import AdapterHTTPClient

ADAPTER_REGISTRY: dict[str, type[AdapterHTTPClient]] = {
    "zendesk": ZendeskClient,
    "netsuite": NetsuiteClient,
    "salesforce": SalesforceClient,
    "jira": JiraClient,
    "microsoft_security": MicrosoftSecurityClient,
}

CHANGE_VALIDATORS: dict[str, Callable[[Iterable[str]], ChangeValidator]] = {
    "zendesk": create_zendesk_change_validator,
    "netsuite": create_netsuite_change_validator,
    "microsoft_security": create_microsoft_security_change_validator,
}


def create_client(profile: ConnectionProfile) -> AdapterHTTPClient:
    client_cls = ADAPTER_REGISTRY.get(profile.adapter)
    if client_cls is None:
        raise ValueError(f"Unknown adapter: {profile.adapter!r}")
    return client_cls(profile.credentials, profile.client_config(client_cls.defaults))


def get_change_validator(adapter: str, disabled: Iterable[str] = ()) -> ChangeValidator:
    if adapter not in ADAPTER_REGISTRY:
        raise ValueError(f"Unknown adapter: {adapter!r}")
    factory = CHANGE_VALIDATORS.get(adapter)
    if factory is None:
        return create_change_validator({}, disabled)
    return factory(disabled)


__all__ = [
    "ADAPTER_REGISTRY",
    "CHANGE_VALIDATORS",
    "JiraClient",
    "MicrosoftSecurityClient",
    "NetsuiteClient",
    "SalesforceClient",
    "ZendeskClient",
    "create_client",
    "get_change_validator",
]
