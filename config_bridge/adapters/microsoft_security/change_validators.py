"""Entra change validators."""

from __future__ import annotations

from typing import Iterable, Sequence

from config_bridge.core.change_validator import ChangeValidator, create_change_validator
from config_bridge.core.elements import (
    Change,
    ChangeError,
    get_change_data,
    is_addition_change,
    is_instance_change,
)
from config_bridge.core.elements_source import ElementsSource
from config_bridge.adapters.microsoft_security.constants import (
    APPLICATION_TYPE_NAME,
    GROUP_TYPE_NAME,
    ON_PREMISES_SYNC_ENABLED_FIELD,
    SERVICE_PRINCIPAL_TYPE_NAME,
)


def _instance_additions(changes: Sequence[Change], type_names: Iterable[str]) -> list:
    type_names = set(type_names)
    return [
        get_change_data(change)
        for change in changes
        if is_instance_change(change)
        and is_addition_change(change)
        and get_change_data(change).elem_id.type_name in type_names
    ]


async def application_setup_validator(
    changes: Sequence[Change], elements_source: ElementsSource | None = None
) -> list[ChangeError]:
    return [
        ChangeError(
            elem_id=instance.elem_id,
            severity="Info",
            message="Application setup may require additional steps",
            detailed_message=(
                "Some application settings, such as credentials and admin consent, "
                "cannot be deployed and must be configured in the Entra admin center."
            ),
            deploy_actions={
                "post_action": {
                    "title": "Complete the application setup",
                    "description": (
                        f"Complete the setup of {instance.elem_id.name} in the Entra admin center"
                    ),
                    "show_on_failure": False,
                    "sub_actions": [
                        "Open the Entra admin center and go to 'App registrations'",
                        f"Select {instance.elem_id.name}",
                        "Add certificates or client secrets as needed",
                        "Grant admin consent for the configured API permissions",
                    ],
                },
            },
        )
        for instance in _instance_additions(
            changes, [APPLICATION_TYPE_NAME, SERVICE_PRINCIPAL_TYPE_NAME]
        )
    ]


async def on_prem_group_addition_validator(
    changes: Sequence[Change], elements_source: ElementsSource | None = None
) -> list[ChangeError]:
    return [
        ChangeError(
            elem_id=instance.elem_id,
            severity="Error",
            message="Creation of on-premises groups is not supported",
            detailed_message=(
                f"Group {instance.elem_id.name} is synced from an on-premises directory. "
                "Such groups must be created on-premises and cannot be added through "
                "Microsoft Graph."
            ),
        )
        for instance in _instance_additions(changes, [GROUP_TYPE_NAME])
        if instance.value.get(ON_PREMISES_SYNC_ENABLED_FIELD) is True
    ]


def entra_change_validators() -> dict[str, ChangeValidator]:
    return {
        "applicationSetup": application_setup_validator,
        "onPremGroupAddition": on_prem_group_addition_validator,
    }


def create_microsoft_security_change_validator(disabled: Iterable[str] = ()) -> ChangeValidator:
    return create_change_validator(entra_change_validators(), disabled)
