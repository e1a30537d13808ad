"""NetSuite change validators."""

from __future__ import annotations

from typing import Iterable, Sequence

from config_bridge.core.change_validator import ChangeValidator, create_change_validator
from config_bridge.core.elements import (
    Change,
    ChangeError,
    InstanceElement,
    ObjectType,
    get_change_data,
    is_addition_or_modification_change,
    is_instance_change,
    is_modification_change,
    make_array,
    walk_values,
)
from config_bridge.core.elements_source import ElementsSource
from config_bridge.adapters.netsuite.constants import (
    ACCOUNT_SPECIFIC_VALUE,
    CUSTOM_LIST,
    CUSTOM_TYPES,
    NETSUITE,
)


def is_custom_type(ref_type: ObjectType) -> bool:
    return ref_type.elem_id.adapter == NETSUITE and ref_type.elem_id.type_name in CUSTOM_TYPES


def is_instance_contains_string_value(instance: InstanceElement, expected: str) -> bool:
    return any(
        isinstance(value, str) and expected in value for value in walk_values(instance.value)
    )


async def account_specific_values_validator(
    changes: Sequence[Change], elements_source: ElementsSource | None = None
) -> list[ChangeError]:
    errors = []
    for change in changes:
        if not (is_addition_or_modification_change(change) and is_instance_change(change)):
            continue
        instance = get_change_data(change)
        if not is_custom_type(instance.ref_type):
            continue
        if not is_instance_contains_string_value(instance, ACCOUNT_SPECIFIC_VALUE):
            continue
        errors.append(ChangeError(
            elem_id=instance.elem_id,
            severity="Warning",
            message=(
                "Element contains fields with account specific values. "
                "These fields will be skipped from the deployment."
            ),
            detailed_message=(
                "Fields with account specific values (ACCOUNT_SPECIFIC_VALUE) will be "
                "skipped from the deployment. After deploying this element, please make "
                "sure these fields are mapped correctly in NetSuite."
            ),
        ))
    return errors


def _custom_value_script_ids(custom_list: InstanceElement) -> list[str]:
    custom_values = custom_list.value.get("customvalues")
    if not isinstance(custom_values, dict):
        return []
    return [
        item.get("scriptid")
        for item in make_array(custom_values.get("customvalue"))
        if isinstance(item, dict)
    ]


def has_item_removal(change: Change) -> bool:
    after_ids = set(_custom_value_script_ids(change.after))
    return any(
        script_id not in after_ids for script_id in _custom_value_script_ids(change.before)
    )


async def remove_customlist_item_validator(
    changes: Sequence[Change], elements_source: ElementsSource | None = None
) -> list[ChangeError]:
    return [
        ChangeError(
            elem_id=change.after.elem_id,
            severity="Error",
            message=f"Removing customvalue from {CUSTOM_LIST} is forbidden",
            detailed_message=f"{change.after.elem_id.name} has customvalues that were removed",
        )
        for change in changes
        if is_modification_change(change)
        and is_instance_change(change)
        and change.after.ref_type.elem_id.adapter == NETSUITE
        and change.after.ref_type.elem_id.type_name == CUSTOM_LIST
        and has_item_removal(change)
    ]


CHANGE_VALIDATORS: dict[str, ChangeValidator] = {
    "accountSpecificValues": account_specific_values_validator,
    "removeCustomListItem": remove_customlist_item_validator,
}


def create_netsuite_change_validator(disabled: Iterable[str] = ()) -> ChangeValidator:
    return create_change_validator(CHANGE_VALIDATORS, disabled)
