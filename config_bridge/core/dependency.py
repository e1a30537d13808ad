"""
Dependency changers rewrite edges of the change dependency graph.

The deploy planner hands each changer the changes keyed by an opaque id
and the current dependencies (source id -> set of target ids).  A changer
answers with the edges to add or remove.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Hashable, Iterable

from config_bridge.core.elements import Change

ADD = "add"
REMOVE = "remove"

ChangeId = Hashable


@dataclass(frozen=True)
class Dependency:
    source: ChangeId
    target: ChangeId


@dataclass(frozen=True)
class DependencyChange:
    action: str
    dependency: Dependency


def dependency_change(action: str, source: ChangeId, target: ChangeId) -> DependencyChange:
    if action not in (ADD, REMOVE):
        raise ValueError(f"Unknown dependency action: {action!r}")
    return DependencyChange(action=action, dependency=Dependency(source, target))


DependencyChanger = Callable[
    [dict[ChangeId, Change], dict[ChangeId, set[ChangeId]]],
    Awaitable[Iterable[DependencyChange]],
]
