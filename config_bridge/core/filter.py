"""
Filters transform elements during fetch and changes during deploy.

Each adapter builds an ordered list of filters from FilterCreators.  On
fetch the filters run in order; before and after deploy they run in
reverse so that the last fetch transformation is the first one undone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Sequence, TypeVar

from config_bridge.core.elements import Change, Element

logger = logging.getLogger("config_bridge.filter")

OptsT = TypeVar("OptsT")


@dataclass
class FilterResult:
    errors: list[str] = field(default_factory=list)
    config_suggestions: list[dict[str, Any]] = field(default_factory=list)

    def merge(self, other: "FilterResult | None") -> None:
        if other is None:
            return
        self.errors.extend(other.errors)
        self.config_suggestions.extend(other.config_suggestions)


class Filter:
    """Base filter; every hook is a no-op unless overridden."""

    name: str = "filter"

    async def on_fetch(self, elements: list[Element]) -> FilterResult | None:
        return None

    async def pre_deploy(self, changes: Sequence[Change]) -> FilterResult | None:
        return None

    async def on_deploy(self, changes: Sequence[Change]) -> FilterResult | None:
        return None


FilterCreator = Callable[[OptsT], Filter]


class FiltersRunner(Filter, Generic[OptsT]):
    name = "filters_runner"

    def __init__(self, opts: OptsT, creators: Sequence[FilterCreator]) -> None:
        self.filters = [create(opts) for create in creators]

    async def on_fetch(self, elements: list[Element]) -> FilterResult:
        result = FilterResult()
        for flt in self.filters:
            logger.debug("Running onFetch of filter %s", flt.name)
            result.merge(await flt.on_fetch(elements))
        return result

    async def pre_deploy(self, changes: Sequence[Change]) -> FilterResult:
        result = FilterResult()
        for flt in reversed(self.filters):
            logger.debug("Running preDeploy of filter %s", flt.name)
            result.merge(await flt.pre_deploy(changes))
        return result

    async def on_deploy(self, changes: Sequence[Change]) -> FilterResult:
        result = FilterResult()
        for flt in reversed(self.filters):
            logger.debug("Running onDeploy of filter %s", flt.name)
            result.merge(await flt.on_deploy(changes))
        return result


def filters_runner(opts: OptsT, creators: Sequence[FilterCreator]) -> FiltersRunner[OptsT]:
    return FiltersRunner(opts, creators)
