"""
Filter types for the Salesforce adapter.

Local filters only use information in existing elements.  They can change
the format of elements, but cannot use external sources of information.

Remote filters can add more information to existing elements.  They
should not change the format of existing elements and focus only on
adding the new information.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable

from config_bridge.core.elements_source import ElementsSource
from config_bridge.core.filter import Filter, FilterResult
from config_bridge.adapters.salesforce.client import SalesforceClient


@dataclass
class FetchProfile:
    optional_features: dict[str, bool] = field(default_factory=dict)

    def is_feature_enabled(self, name: str) -> bool:
        return self.optional_features.get(name, True)


@dataclass
class FilterContext:
    fetch_profile: FetchProfile
    elements_source: ElementsSource
    unsupported_system_fields: list[str] | None = None
    system_fields: list[str] | None = None
    enum_field_permissions: bool | None = None
    separate_field_to_files: list[str] | None = None


@dataclass
class LocalFilterOpts:
    config: FilterContext


@dataclass
class FilterOpts(LocalFilterOpts):
    client: SalesforceClient


LocalFilterCreator = Callable[[LocalFilterOpts], Filter]
RemoteFilterCreator = Callable[[FilterOpts], Filter]

__all__ = [
    "FetchProfile",
    "FilterContext",
    "FilterOpts",
    "FilterResult",
    "LocalFilterCreator",
    "LocalFilterOpts",
    "RemoteFilterCreator",
]
