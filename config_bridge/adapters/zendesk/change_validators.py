"""Zendesk change validators."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Sequence

from pydantic import BaseModel, ConfigDict, field_validator

from config_bridge.core.change_validator import ChangeValidator, create_change_validator
from config_bridge.core.elements import (
    Change,
    ChangeError,
    InstanceElement,
    ReferenceExpression,
    get_change_data,
    is_addition_or_modification_change,
    is_instance_change,
    is_instance_element,
)
from config_bridge.core.elements_source import ElementsSource
from config_bridge.core.schema import create_schema_guard, create_schema_guard_for_instance
from config_bridge.adapters.zendesk.constants import (
    ARTICLE_TYPE_NAME,
    CATEGORY_TYPE_NAME,
    CUSTOM_STATUS_TYPE_NAME,
    HOLD_CATEGORY,
    OPEN_CATEGORY,
    PENDING_CATEGORY,
    SECTION_TYPE_NAME,
    SOLVED_CATEGORY,
)

logger = logging.getLogger("config_bridge.zendesk.change_validators")

VALID_CATEGORY = [PENDING_CATEGORY, SOLVED_CATEGORY, HOLD_CATEGORY, OPEN_CATEGORY]


def _custom_status_instances(changes: Sequence[Change]) -> list[InstanceElement]:
    return [
        get_change_data(change)
        for change in changes
        if is_instance_change(change)
        and get_change_data(change).elem_id.type_name == CUSTOM_STATUS_TYPE_NAME
    ]


# ── custom status category ──────────────────────────────────────────────


async def custom_status_category_validator(
    changes: Sequence[Change], elements_source: ElementsSource | None = None
) -> list[ChangeError]:
    return [
        ChangeError(
            elem_id=instance.elem_id,
            severity="Error",
            message=(
                "Invalid status category. Status Category - must be one of "
                "these: open, pending, hold, and solved"
            ),
            detailed_message=(
                f"Invalid status category for {instance.elem_id.name}. Status "
                "Category - must be one of these: open, pending, hold, and solved"
            ),
        )
        for instance in _custom_status_instances(changes)
        if instance.value.get("status_category") not in VALID_CATEGORY
    ]


# ── custom status agent label ───────────────────────────────────────────


async def custom_status_unique_agent_label_validator(
    changes: Sequence[Change], elements_source: ElementsSource | None = None
) -> list[ChangeError]:
    if elements_source is None:
        logger.error(
            "Failed to run custom_status_unique_agent_label_validator because "
            "no element source was provided"
        )
        return []

    all_statuses = [
        elem
        for elem in await elements_source.get_all()
        if elem.elem_id.type_name == CUSTOM_STATUS_TYPE_NAME and is_instance_element(elem)
    ]
    agent_label_by_name = {
        status.elem_id.name: status.value.get("raw_agent_label") for status in all_statuses
    }

    def is_agent_label_taken(instance: InstanceElement) -> bool:
        label = instance.value.get("raw_agent_label")
        if label is None:
            return False
        return any(
            name != instance.elem_id.name and other_label == label
            for name, other_label in agent_label_by_name.items()
        )

    return [
        ChangeError(
            elem_id=instance.elem_id,
            severity="Error",
            message="Invalid agent label. The label is already used by another status",
            detailed_message=(
                f"Invalid agent label for {instance.elem_id.name}. "
                "The label is already used by another status"
            ),
        )
        for instance in _custom_status_instances(changes)
        if is_agent_label_taken(instance)
    ]


# ── translation for default locale ──────────────────────────────────────

PARENTS_TYPE_NAMES = [SECTION_TYPE_NAME, CATEGORY_TYPE_NAME, ARTICLE_TYPE_NAME]


class _ParentValue(BaseModel):
    model_config = ConfigDict(extra="allow")

    source_locale: Any
    translations: list[Any]

    @field_validator("source_locale")
    @classmethod
    def _must_be_reference(cls, value: Any) -> Any:
        if not isinstance(value, ReferenceExpression):
            raise ValueError("source_locale must be a reference")
        return value


class _TranslationValue(BaseModel):
    model_config = ConfigDict(extra="allow")

    locale: Any
    body: str | None = None


_is_parent = create_schema_guard_for_instance(
    _ParentValue, "Received an invalid value for section/category/article"
)
_is_translation = create_schema_guard(
    _TranslationValue, "Received an invalid value for translation"
)


def _locale_id(locale: Any) -> Any:
    """Resolve a locale given either as a plain value or a reference to its settings."""
    if isinstance(locale, ReferenceExpression):
        target = locale.value
        if isinstance(target, InstanceElement):
            return target.value.get("id")
        return target
    return locale


def _translation_values(translations: Iterable[Any]) -> list[dict[str, Any]]:
    values = []
    for translation in translations:
        if isinstance(translation, ReferenceExpression):
            translation = translation.value
        if isinstance(translation, InstanceElement):
            translation = translation.value
        if isinstance(translation, dict) and _is_translation(translation):
            values.append(translation)
    return values


def no_translation_for_default_locale(instance: InstanceElement) -> bool:
    if not _is_parent(instance):
        return False
    source_locale = _locale_id(instance.value["source_locale"])
    return not any(
        _locale_id(tran["locale"]) == source_locale
        for tran in _translation_values(instance.value["translations"])
    )


async def translation_for_default_locale_validator(
    changes: Sequence[Change], elements_source: ElementsSource | None = None
) -> list[ChangeError]:
    relevant = [
        get_change_data(change)
        for change in changes
        if is_addition_or_modification_change(change) and is_instance_change(change)
    ]
    return [
        ChangeError(
            elem_id=instance.elem_id,
            severity="Error",
            message=(
                f"Instance {instance.elem_id.get_full_name()} does not have a "
                "translation for the source locale"
            ),
            detailed_message=(
                f"Instance {instance.elem_id.get_full_name()} does not have a "
                "translation for the source locale "
                f"{_locale_id(instance.value['source_locale'])}"
            ),
        )
        for instance in relevant
        if instance.elem_id.type_name in PARENTS_TYPE_NAMES
        and no_translation_for_default_locale(instance)
    ]


CHANGE_VALIDATORS: dict[str, ChangeValidator] = {
    "customStatusCategory": custom_status_category_validator,
    "customStatusUniqueAgentLabel": custom_status_unique_agent_label_validator,
    "translationForDefaultLocale": translation_for_default_locale_validator,
}


def create_zendesk_change_validator(disabled: Iterable[str] = ()) -> ChangeValidator:
    return create_change_validator(CHANGE_VALIDATORS, disabled)
