"""
Schema guards for instance values.

Adapter logic often needs to know that a value has a particular shape
before reading nested fields out of it.  A guard validates the value
against a pydantic model and logs (rather than raises) when it does not
match, so one malformed instance never fails a whole validation run.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from pydantic import BaseModel, ValidationError

from config_bridge.core.elements import InstanceElement

logger = logging.getLogger("config_bridge.schema")


def create_schema_guard(model: type[BaseModel], error_message: str) -> Callable[[Any], bool]:
    def guard(value: Any) -> bool:
        try:
            model.model_validate(value)
        except ValidationError as exc:
            logger.error("%s: %s", error_message, exc)
            return False
        return True

    return guard


def create_schema_guard_for_instance(
    model: type[BaseModel], error_message: str
) -> Callable[[InstanceElement], bool]:
    def guard(instance: InstanceElement) -> bool:
        try:
            model.model_validate(instance.value)
        except ValidationError as exc:
            logger.error(
                "%s for %s: %s", error_message, instance.elem_id.get_full_name(), exc
            )
            return False
        return True

    return guard
