from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pincho.exceptions import ConfigurationError, InvalidArgumentError
from pincho.services.retry import DEFAULT_MAX_RETRIES

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class ApiVariant:
    """
    Endpoint and field naming for one flavour of the notification API.

    Both variants share the same request pipeline; only the default base URL
    and a handful of JSON field names differ.
    """

    name: str
    base_url: str
    send_path: str = "send"
    notifai_path: str = "notifai"
    notifai_input_field: str = "text"
    image_url_field: str = "imageURL"
    action_url_field: str = "actionURL"
    user_id_field: str = "id"
    device_id_field: str = "device_id"


PINCHO = ApiVariant(
    name="pincho",
    base_url="https://api.pincho.app/",
)

WIREPUSHER = ApiVariant(
    name="wirepusher",
    base_url="https://wirepusher-gateway-1xatwfdc.uc.gateway.dev/",
    notifai_input_field="input",
    image_url_field="image_url",
    action_url_field="action_url",
)

VARIANTS: dict[str, ApiVariant] = {v.name: v for v in (PINCHO, WIREPUSHER)}


def get_variant(name: str) -> ApiVariant:
    """Look up an API variant by name."""
    try:
        return VARIANTS[name.lower()]
    except KeyError:
        msg = f"Unknown API variant '{name}' (expected one of: {', '.join(VARIANTS)})"
        raise ConfigurationError(msg, context={"variant": name}) from None


@dataclass(frozen=True)
class Credentials:
    """
    Authentication for one client instance.

    Exactly one mode is populated: a bearer token, or the legacy user id
    and/or device id embedded in the request payload.
    """

    token: str | None = None
    user_id: str | None = None
    device_id: str | None = None

    def __post_init__(self) -> None:
        has_token = bool(self.token and self.token.strip())
        has_legacy = bool(
            (self.user_id and self.user_id.strip()) or (self.device_id and self.device_id.strip())
        )
        if has_token and has_legacy:
            raise InvalidArgumentError(
                "Provide either a token or a legacy user/device id, not both",
                context={"field": "credentials"},
            )
        if not has_token and not has_legacy:
            raise InvalidArgumentError(
                "Token is required (or a legacy user/device id)",
                context={"field": "credentials"},
            )

    @property
    def uses_bearer_token(self) -> bool:
        """Whether requests authenticate with an Authorization header."""
        return bool(self.token and self.token.strip())

    def __repr__(self) -> str:
        mode = "token" if self.uses_bearer_token else "legacy"
        return f"Credentials(mode={mode!r})"


def expand_env_vars(config_str: str) -> str:
    """
    Expand environment variables in the format ${VAR_NAME} within a YAML string.
    Skips expansion in YAML comments (lines starting with #).

    Args:
        config_str: YAML configuration string potentially containing ${VAR_NAME} placeholders

    Returns:
        YAML string with all ${VAR_NAME} placeholders expanded to environment variable values

    Raises:
        KeyError: If a referenced environment variable is not set
    """

    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        try:
            return os.environ[var_name]
        except KeyError:
            msg = f"Environment variable '{var_name}' referenced in config file but not set"
            raise KeyError(msg) from None

    lines = []
    for line in config_str.split("\n"):
        if line.lstrip().startswith("#"):
            lines.append(line)
        else:
            lines.append(re.sub(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}", replace_var, line))

    return "\n".join(lines)


def load_config_from_yaml(config_path: str | Path | None = None) -> dict[str, Any]:
    """
    Load YAML configuration file and expand environment variables.

    Args:
        config_path: Path to the config file. If None, uses the PINCHO_CONFIG_PATH
                     environment variable.

    Returns:
        Dictionary containing the parsed configuration

    Raises:
        ConfigurationError: If the file is missing, invalid, or references unset variables
    """
    if config_path is None:
        config_path = os.environ.get("PINCHO_CONFIG_PATH")
    if not config_path:
        raise ConfigurationError("No config file given and PINCHO_CONFIG_PATH is not set")

    config_file = Path(config_path)
    if not config_file.exists():
        msg = f"Configuration file not found at {config_file}"
        raise ConfigurationError(msg, context={"config_file": str(config_file)})

    config_str = config_file.read_text(encoding="utf-8")

    try:
        expanded_config = expand_env_vars(config_str)
    except KeyError as e:
        msg = f"Error expanding environment variables in {config_file.name}: {e}"
        raise ConfigurationError(msg, context={"config_file": str(config_file)}) from None

    try:
        config_dict = yaml.safe_load(expanded_config)
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in {config_file.name}: {e}"
        raise ConfigurationError(msg, context={"config_file": str(config_file)}) from None

    if config_dict is None:
        return {}
    if not isinstance(config_dict, dict):
        msg = f"{config_file.name} must contain a YAML mapping at root level"
        raise ConfigurationError(msg, context={"config_file": str(config_file)})

    return config_dict


class PinchoSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="PINCHO_",
        env_file=None,
        case_sensitive=False,
    )

    # Credentials (token, or legacy user/device id)
    token: str | None = None
    user_id: str | None = None
    device_id: str | None = None

    # Endpoint
    variant: Literal["pincho", "wirepusher"] = "pincho"
    base_url: str | None = None  # Overrides the variant's default base URL

    # Request behaviour
    timeout_seconds: float = Field(
        default=DEFAULT_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout for each physical HTTP attempt",
    )
    max_retries: int = Field(
        default=DEFAULT_MAX_RETRIES,
        description="Retries after the first attempt (0 disables, negative means default)",
    )

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is a standard logging level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            msg = f"Invalid log level: {v}"
            raise ValueError(msg)
        return level

    def credentials(self) -> Credentials:
        """Build validated credentials from the configured values."""
        return Credentials(token=self.token, user_id=self.user_id, device_id=self.device_id)

    def api_variant(self) -> ApiVariant:
        """Resolve the configured API variant."""
        return get_variant(self.variant)


def load_settings(config_path: str | Path | None = None) -> PinchoSettings:
    """
    Build settings from a YAML file, with PINCHO_* environment variables as fallback.

    Expected layout::

        pincho:
          token: ${PINCHO_TOKEN}
          variant: pincho
          timeout_seconds: 30
          max_retries: 3
        logging:
          level: INFO
          json: true

    Raises:
        ConfigurationError: If the file cannot be loaded or values are invalid
    """
    config_dict = load_config_from_yaml(config_path)

    # Flatten nested YAML structure to settings field names
    flat_config: dict[str, Any] = {}

    client_section = config_dict.get("pincho")
    if isinstance(client_section, dict):
        for key in (
            "token",
            "user_id",
            "device_id",
            "variant",
            "base_url",
            "timeout_seconds",
            "max_retries",
        ):
            if client_section.get(key) is not None:
                flat_config[key] = client_section[key]

    logging_section = config_dict.get("logging")
    if isinstance(logging_section, dict):
        if "level" in logging_section:
            flat_config["log_level"] = logging_section["level"]
        if "json" in logging_section:
            flat_config["log_json"] = logging_section["json"]

    try:
        return PinchoSettings(**flat_config)
    except ValidationError as e:
        logger.error("Configuration validation error", extra={"error_count": e.error_count()})
        raise ConfigurationError(f"Invalid configuration: {e}") from e
