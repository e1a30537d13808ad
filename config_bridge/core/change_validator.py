"""
Change validators run over a proposed set of changes before deploy.

A validator is an async callable taking the changes (and optionally the
full elements source) and returning a list of ChangeError.  Adapters
register their validators by name so that individual checks can be
disabled from the connection profile.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable, Sequence

from config_bridge.core.elements import Change, ChangeError
from config_bridge.core.elements_source import ElementsSource

logger = logging.getLogger("config_bridge.change_validator")

ChangeValidator = Callable[
    [Sequence[Change], "ElementsSource | None"], Awaitable[list[ChangeError]]
]


def create_change_validator(
    validators: dict[str, ChangeValidator],
    disabled: Iterable[str] = (),
) -> ChangeValidator:
    """Combine named validators into one, skipping those in *disabled*."""
    disabled = set(disabled)
    unknown = disabled - set(validators)
    if unknown:
        raise ValueError(
            f"Unknown change validators: {sorted(unknown)}. "
            f"Available: {list(validators.keys())}"
        )

    active = {name: v for name, v in validators.items() if name not in disabled}

    async def validate(
        changes: Sequence[Change], elements_source: ElementsSource | None = None
    ) -> list[ChangeError]:
        errors: list[ChangeError] = []
        for name, validator in active.items():
            found = await validator(changes, elements_source)
            logger.debug("Change validator %s returned %d errors", name, len(found))
            errors.extend(found)
        return errors

    return validate
