"""Microsoft Security (Entra) adapter: Graph client and change validators."""

from config_bridge.adapters.microsoft_security.change_validators import (
    create_microsoft_security_change_validator,
    entra_change_validators,
)
from config_bridge.adapters.microsoft_security.client import MicrosoftSecurityClient

__all__ = [
    "MicrosoftSecurityClient",
    "create_microsoft_security_change_validator",
    "entra_change_validators",
]
