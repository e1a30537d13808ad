"""
Minimal element graph consumed by the adapter logic.

Elements are the uniform representation of fetched configuration:
types (ObjectType), instances (InstanceElement) and references between
them (ReferenceExpression).  Changes wrap elements with the action the
deploy planner intends to take.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

RECORDS_PATH = "Records"
PARENT_ANNOTATION = "_parent"
MAX_PATH_LENGTH = 200
NACL_ESCAPING_SUFFIX_SEPARATOR = "@"

ADDITION = "add"
MODIFICATION = "modify"
REMOVAL = "remove"


class ElemID:
    """Identifier of an element: ``adapter.type_name[.id_type.name...]``."""

    def __init__(
        self, adapter: str, type_name: str, id_type: str = "type", *name_parts: str
    ) -> None:
        self.adapter = adapter
        self.type_name = type_name
        self.id_type = id_type
        self.name_parts = tuple(name_parts)

    @property
    def name(self) -> str:
        return self.name_parts[-1] if self.name_parts else self.type_name

    def get_full_name(self) -> str:
        parts = [self.adapter, self.type_name]
        if self.name_parts:
            parts += [self.id_type, *self.name_parts]
        return ".".join(parts)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ElemID) and other.get_full_name() == self.get_full_name()

    def __hash__(self) -> int:
        return hash(self.get_full_name())

    def __repr__(self) -> str:
        return f"ElemID({self.get_full_name()!r})"


@dataclass
class ObjectType:
    elem_id: ElemID
    annotations: dict[str, Any] = field(default_factory=dict)


class InstanceElement:
    """A single configuration object of a given type."""

    def __init__(
        self,
        name: str,
        ref_type: ObjectType,
        value: dict[str, Any] | None = None,
        path: list[str] | None = None,
        annotations: dict[str, Any] | None = None,
    ) -> None:
        self.ref_type = ref_type
        self.elem_id = ElemID(
            ref_type.elem_id.adapter, ref_type.elem_id.type_name, "instance", name
        )
        self.value: dict[str, Any] = value if value is not None else {}
        self.path = path
        self.annotations: dict[str, Any] = annotations if annotations is not None else {}

    def __repr__(self) -> str:
        return f"InstanceElement({self.elem_id.get_full_name()!r})"


@dataclass
class ReferenceExpression:
    elem_id: ElemID
    value: Any = None


Element = ObjectType | InstanceElement


def is_instance_element(elem: Any) -> bool:
    return isinstance(elem, InstanceElement)


def get_parent(instance: InstanceElement) -> InstanceElement:
    """Return the single parent of *instance* from its ``_parent`` annotation."""
    parents = instance.annotations.get(PARENT_ANNOTATION, [])
    if not isinstance(parents, list):
        parents = [parents]
    if len(parents) != 1:
        raise ValueError(
            f"Expected {instance.elem_id.get_full_name()} to have exactly one "
            f"parent, found {len(parents)}"
        )
    parent = parents[0]
    if isinstance(parent, ReferenceExpression):
        parent = parent.value
    if not isinstance(parent, InstanceElement):
        raise ValueError(
            f"Expected {instance.elem_id.get_full_name()} parent to be an instance"
        )
    return parent


# ── Changes ─────────────────────────────────────────────────────────────


@dataclass
class Change:
    action: str
    before: Element | None = None
    after: Element | None = None


def to_change(before: Element | None = None, after: Element | None = None) -> Change:
    if before is not None and after is not None:
        return Change(MODIFICATION, before=before, after=after)
    if after is not None:
        return Change(ADDITION, after=after)
    if before is not None:
        return Change(REMOVAL, before=before)
    raise ValueError("A change must have a before or an after element")


def get_change_data(change: Change) -> Element:
    return change.after if change.after is not None else change.before


def is_instance_change(change: Change) -> bool:
    return isinstance(get_change_data(change), InstanceElement)


def is_addition_change(change: Change) -> bool:
    return change.action == ADDITION


def is_modification_change(change: Change) -> bool:
    return change.action == MODIFICATION


def is_removal_change(change: Change) -> bool:
    return change.action == REMOVAL


def is_addition_or_modification_change(change: Change) -> bool:
    return change.action in (ADDITION, MODIFICATION)


@dataclass
class ChangeError:
    """Warning or error produced by a change validator before deploy."""

    elem_id: ElemID
    severity: str
    message: str
    detailed_message: str
    deploy_actions: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "elem_id": self.elem_id.get_full_name(),
            "severity": self.severity,
            "message": self.message,
            "detailed_message": self.detailed_message,
        }
        if self.deploy_actions:
            d["deploy_actions"] = self.deploy_actions
        return d


# ── Helpers ─────────────────────────────────────────────────────────────


def walk_values(value: Any) -> Iterator[Any]:
    """Yield every leaf value nested under *value*."""
    if isinstance(value, InstanceElement):
        yield from walk_values(value.value)
    elif isinstance(value, dict):
        for item in value.values():
            yield from walk_values(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from walk_values(item)
    else:
        yield value


def make_array(value: Any) -> list[Any]:
    if value is None:
        return []
    return value if isinstance(value, list) else [value]


def path_nacl_case(name: str | None) -> str:
    if not name:
        return ""
    return name.split(NACL_ESCAPING_SUFFIX_SEPARATOR)[0][:MAX_PATH_LENGTH]
