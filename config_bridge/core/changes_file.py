"""
Load a set of proposed changes from a YAML/JSON document.

Used by the CLI and MCP server to run change validators outside of a
deploy.  The document lists workspace elements (the elements source) and
the changes to validate:

    adapter: zendesk
    elements:
      - {type: custom_status, name: open_new, value: {raw_agent_label: New}}
    changes:
      - action: add
        type: custom_status
        name: open_other
        after: {raw_agent_label: New, status_category: open}

A value of the form ``{ref: <full element name>}`` becomes a
ReferenceExpression resolved against the listed elements and the changed
instances.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from config_bridge.core.elements import (
    ADDITION,
    MODIFICATION,
    REMOVAL,
    Change,
    ElemID,
    InstanceElement,
    ObjectType,
    ReferenceExpression,
)
from config_bridge.core.elements_source import InMemoryElementsSource

REF_KEY = "ref"


def parse_elem_id(full_name: str) -> ElemID:
    parts = full_name.split(".")
    if len(parts) < 2:
        raise ValueError(f"Invalid element id: {full_name!r}")
    adapter, type_name, *rest = parts
    if not rest:
        return ElemID(adapter, type_name)
    if len(rest) < 2:
        raise ValueError(f"Invalid element id: {full_name!r}")
    return ElemID(adapter, type_name, rest[0], *rest[1:])


class ChangesDocument:
    def __init__(
        self, adapter: str, elements: list[InstanceElement], changes: list[Change]
    ) -> None:
        self.adapter = adapter
        self.elements = elements
        self.changes = changes

    def elements_source(self) -> InMemoryElementsSource:
        """The workspace as it would look after the changes are applied."""
        by_id = {e.elem_id: e for e in self.elements}
        for change in self.changes:
            if change.after is not None:
                by_id[change.after.elem_id] = change.after
            else:
                by_id.pop(change.before.elem_id, None)
        return InMemoryElementsSource(by_id.values())


def _instance(adapter: str, raw: dict[str, Any], value: dict[str, Any] | None) -> InstanceElement:
    try:
        type_name, name = raw["type"], raw["name"]
    except KeyError as exc:
        raise ValueError(f"Element is missing {exc.args[0]!r}: {raw}") from exc
    return InstanceElement(
        name,
        ObjectType(ElemID(adapter, type_name)),
        dict(value or {}),
        annotations=dict(raw.get("annotations") or {}),
    )


def _resolve(value: Any, by_name: dict[str, InstanceElement]) -> Any:
    if isinstance(value, dict):
        if set(value) == {REF_KEY}:
            elem_id = parse_elem_id(value[REF_KEY])
            return ReferenceExpression(elem_id, by_name.get(elem_id.get_full_name()))
        return {k: _resolve(v, by_name) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve(v, by_name) for v in value]
    return value


def parse_changes_document(raw: dict[str, Any]) -> ChangesDocument:
    adapter = raw.get("adapter")
    if not adapter:
        raise ValueError("Changes document must name an 'adapter'")

    elements = [_instance(adapter, e, e.get("value")) for e in raw.get("elements") or []]

    changes: list[Change] = []
    for entry in raw.get("changes") or []:
        action = entry.get("action")
        before = _instance(adapter, entry, entry["before"]) if "before" in entry else None
        after = _instance(adapter, entry, entry["after"]) if "after" in entry else None
        expected = {
            ADDITION: (False, True),
            MODIFICATION: (True, True),
            REMOVAL: (True, False),
        }.get(action)
        if expected is None:
            raise ValueError(f"Unknown change action: {action!r}")
        if expected != (before is not None, after is not None):
            raise ValueError(
                f"Change {action!r} of {entry.get('type')}.{entry.get('name')} "
                "has mismatching before/after values"
            )
        changes.append(Change(action, before=before, after=after))

    by_name = {e.elem_id.get_full_name(): e for e in elements}
    for change in changes:
        if change.after is not None:
            by_name[change.after.elem_id.get_full_name()] = change.after

    instances = elements + [
        elem for change in changes for elem in (change.before, change.after) if elem is not None
    ]
    for instance in instances:
        instance.value = _resolve(instance.value, by_name)
        instance.annotations = _resolve(instance.annotations, by_name)

    return ChangesDocument(adapter, elements, changes)


def load_changes_file(path: str | Path) -> ChangesDocument:
    raw = yaml.safe_load(Path(path).read_text()) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Changes file {path} must contain a mapping")
    return parse_changes_document(raw)
