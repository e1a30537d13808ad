"""Zendesk adapter: client, change validators, Guide filters and themes."""

from config_bridge.adapters.zendesk.change_validators import create_zendesk_change_validator
from config_bridge.adapters.zendesk.client import ZendeskClient
from config_bridge.adapters.zendesk.filters import FILTER_CREATORS, FilterOpts

__all__ = [
    "ZendeskClient",
    "create_zendesk_change_validator",
    "FILTER_CREATORS",
    "FilterOpts",
]
