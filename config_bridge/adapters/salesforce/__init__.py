"""Salesforce adapter: client and fetch filters."""

from config_bridge.adapters.salesforce.client import SalesforceClient
from config_bridge.adapters.salesforce.filter import FetchProfile, FilterContext, FilterOpts
from config_bridge.adapters.salesforce.filters import (
    LOCAL_FILTER_CREATORS,
    REMOTE_FILTER_CREATORS,
)

__all__ = [
    "SalesforceClient",
    "FetchProfile",
    "FilterContext",
    "FilterOpts",
    "LOCAL_FILTER_CREATORS",
    "REMOTE_FILTER_CREATORS",
]
