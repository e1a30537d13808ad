"""NetSuite adapter: client and change validators."""

from config_bridge.adapters.netsuite.change_validators import create_netsuite_change_validator
from config_bridge.adapters.netsuite.client import NetsuiteClient

__all__ = ["NetsuiteClient", "create_netsuite_change_validator"]
