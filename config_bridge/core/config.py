"""
Configuration management for Config Bridge.

Loads connection profiles from a YAML/JSON config file or environment
variables.  Each profile names the adapter, its credentials, the HTTP
client tuning (retry, rate limits, page size, timeouts) and the change
validators to skip on deploy.

Default config location: ~/.config-bridge/config.yaml
Override with CONFIG_BRIDGE_CONFIG env var.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

import yaml


DEFAULT_CONFIG_DIR = Path.home() / ".config-bridge"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
ENV_CONFIG_PATH = "CONFIG_BRIDGE_CONFIG"
ENV_PREFIX = "CB_"

CREDENTIAL_KEYS = (
    "subdomain",
    "username",
    "password",
    "api_key",
    "client_id",
    "client_secret",
    "token_url",
    "account_id",
    "access_token",
    "base_url",
)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML config; JSON files parse as YAML too."""
    return yaml.safe_load(path.read_text()) or {}


def _env_overrides() -> dict[str, str]:
    """Collect CB_* environment variables."""
    return {
        k[len(ENV_PREFIX) :]: v
        for k, v in os.environ.items()
        if k.startswith(ENV_PREFIX)
    }


# ── Client tuning ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ClientRetryConfig:
    max_attempts: int = 5
    retry_delay: float = 5.0  # seconds
    additional_status_codes_to_retry: tuple[int, ...] = ()


@dataclass(frozen=True)
class ClientRateLimitConfig:
    total: int = -1  # -1 → unlimited
    get: int = -1
    deploy: int = -1


@dataclass(frozen=True)
class ClientPageSizeConfig:
    get: int = 100


@dataclass(frozen=True)
class ClientTimeoutConfig:
    max_duration: float = 0.0  # 0 → no timeout
    retry_on_timeout: bool = True


@dataclass(frozen=True)
class ClientConfig:
    retry: ClientRetryConfig = field(default_factory=ClientRetryConfig)
    rate_limit: ClientRateLimitConfig = field(default_factory=ClientRateLimitConfig)
    max_requests_per_minute: int = -1
    page_size: ClientPageSizeConfig = field(default_factory=ClientPageSizeConfig)
    timeout: ClientTimeoutConfig = field(default_factory=ClientTimeoutConfig)

    def merged_with(self, overrides: dict[str, Any] | None) -> "ClientConfig":
        """Return a copy with the values from a raw ``client:`` section applied."""
        if not overrides:
            return self
        sections = {
            "retry": self.retry,
            "rate_limit": self.rate_limit,
            "page_size": self.page_size,
            "timeout": self.timeout,
        }
        changes: dict[str, Any] = {}
        for key, value in overrides.items():
            if key in sections:
                if not isinstance(value, dict):
                    raise ValueError(f"Client config section {key!r} must be a mapping")
                changes[key] = _replace_known(sections[key], value)
            elif key == "max_requests_per_minute":
                changes[key] = int(value)
            else:
                raise ValueError(f"Unknown client config key: {key!r}")
        return replace(self, **changes)


def _replace_known(section: Any, values: dict[str, Any]) -> Any:
    known = {f.name for f in fields(section)}
    unknown = set(values) - known
    if unknown:
        raise ValueError(
            f"Unknown keys for {type(section).__name__}: {sorted(unknown)}"
        )
    if "additional_status_codes_to_retry" in values:
        values = {
            **values,
            "additional_status_codes_to_retry": tuple(
                values["additional_status_codes_to_retry"]
            ),
        }
    return replace(section, **values)


# ── Profiles ─────────────────────────────────────────────────────────────


class ConnectionProfile:
    """A single adapter connection definition."""

    def __init__(self, name: str, raw: dict[str, Any]) -> None:
        self.name = name
        self.adapter: str = raw["adapter"]  # zendesk | netsuite | salesforce | jira | microsoft_security
        self.credentials: dict[str, Any] = raw.get("credentials", {})
        self.client: dict[str, Any] = raw.get("client", {})
        deploy = raw.get("deploy", {})
        self.disabled_validators: list[str] = deploy.get("disabled_validators", [])

    def client_config(self, defaults: ClientConfig | None = None) -> ClientConfig:
        return (defaults or ClientConfig()).merged_with(self.client)


class Config:
    """Top-level configuration container."""

    def __init__(self, raw: dict[str, Any] | None = None) -> None:
        self._raw = raw or {}
        self.profiles: dict[str, ConnectionProfile] = {}
        self._parse()

    def _parse(self) -> None:
        for name, defn in self._raw.get("connections", {}).items():
            self.profiles[name] = ConnectionProfile(name, defn)

    def get_profile(self, name: str) -> ConnectionProfile:
        if name not in self.profiles:
            raise KeyError(
                f"Connection profile {name!r} not found. "
                f"Available: {list(self.profiles.keys())}"
            )
        return self.profiles[name]

    def list_profiles(self) -> list[dict[str, str]]:
        return [
            {"name": p.name, "adapter": p.adapter}
            for p in self.profiles.values()
        ]

    @classmethod
    def load(cls, path: str | Path | None = None) -> "Config":
        """
        Load configuration from file, with env-var overrides applied.

        Resolution order:
        1. Explicit *path* argument
        2. CONFIG_BRIDGE_CONFIG env var
        3. ~/.config-bridge/config.yaml
        """
        if path is None:
            path = os.environ.get(ENV_CONFIG_PATH, str(DEFAULT_CONFIG_FILE))
        path = Path(path).expanduser()

        if path.exists():
            raw = _load_yaml(path)
        else:
            raw = {}

        # Apply CB_<PROFILE>_<KEY> env-var overrides for credentials
        env = _env_overrides()
        for profile_name, profile in raw.get("connections", {}).items():
            prefix = profile_name.upper()
            credentials = profile.setdefault("credentials", {})
            for key in CREDENTIAL_KEYS:
                env_key = f"{prefix}_{key.upper()}"
                if env_key in env:
                    credentials[key] = env[env_key]

        return cls(raw)

    @staticmethod
    def generate_template() -> str:
        """Return a YAML template users can fill in."""
        return """\
# Config Bridge configuration
# Place this file at ~/.config-bridge/config.yaml
# or set CONFIG_BRIDGE_CONFIG=/path/to/config.yaml
#
# Credentials can also be supplied via environment variables:
#   CB_<PROFILE_NAME>_USERNAME, CB_<PROFILE_NAME>_API_KEY, etc.

connections:
  my_zendesk:
    adapter: zendesk
    credentials:
      subdomain: mycompany
      username: admin@mycompany.com
      api_key: YOUR_API_TOKEN
    client:
      retry:
        max_attempts: 5
        retry_delay: 5
      rate_limit:
        get: 100
        deploy: 100
      max_requests_per_minute: 600
    deploy:
      disabled_validators: []

  my_netsuite:
    adapter: netsuite
    credentials:
      account_id: "tstdrv123456-sb"
      access_token: YOUR_OAUTH2_ACCESS_TOKEN

  my_salesforce:
    adapter: salesforce
    credentials:
      base_url: https://myorg.my.salesforce.com
      token_url: https://login.salesforce.com/services/oauth2/token
      client_id: YOUR_CLIENT_ID
      client_secret: YOUR_CLIENT_SECRET

  my_jira:
    adapter: jira
    credentials:
      base_url: https://mycompany.atlassian.net
      username: admin@mycompany.com
      api_key: YOUR_API_TOKEN

  my_entra:
    adapter: microsoft_security
    credentials:
      token_url: https://login.microsoftonline.com/TENANT_ID/oauth2/v2.0/token
      client_id: YOUR_CLIENT_ID
      client_secret: YOUR_CLIENT_SECRET
"""
