"""Load ``config.yaml`` with environment placeholders resolved."""

import os
import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic_core import ValidationError

from src.storefront.runtime.config.config_data import ConfigData

PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")

# JWT secrets that must be replaced before running in production
PRODUCTION_SECRETS = ("access_secret", "refresh_secret")


def _resolve(expression: str) -> str:
    if ":-" in expression:
        name, default = expression.split(":-", 1)
        return os.getenv(name, default)

    name, _, message = expression.partition(":?")
    value = os.getenv(name)
    if value is None:
        if message:
            raise ValueError(f"Required environment variable {name}: {message}")
        raise ValueError(f"Required environment variable {name} not set")
    return value


def substitute_env_vars(text: str) -> str:
    """Replace ``${VAR}``, ``${VAR:-default}`` and ``${VAR:?message}`` in *text*.

    ``${VAR}`` and ``${VAR:?message}`` raise ``ValueError`` when VAR is unset.
    """
    return PLACEHOLDER.sub(lambda match: _resolve(match.group(1)), text)


def apply_environment_overrides(env_mode: str) -> list[str]:
    """Copy ``<ENV>_NAME`` variables onto ``NAME`` for the active environment.

    Returns the promoted names.
    """
    prefix = f"{env_mode.upper()}_"
    promoted = []
    for name, value in list(os.environ.items()):
        if name.startswith(prefix):
            target = name.removeprefix(prefix)
            os.environ[target] = value
            promoted.append(target)
    return promoted


def _check_production_secrets(config: ConfigData) -> None:
    for field_name in PRODUCTION_SECRETS:
        if getattr(config.jwt, field_name).startswith("change-me"):
            raise ValueError(
                f"Invalid configuration: jwt.{field_name} must be set in production"
            )


def load_templated_yaml(file_path: Path) -> ConfigData:
    """Read *file_path*, resolve placeholders and validate the ``config`` section.

    Raises:
        ValueError: a required variable is missing, the YAML is malformed, or
            the values fail validation.
        FileNotFoundError: the file does not exist.
    """
    env_mode = os.getenv("APP_ENVIRONMENT", "development")
    promoted = apply_environment_overrides(env_mode)
    # Override values may be secrets; log names only
    logger.bind(overrides=sorted(promoted)).info(
        "Loading configuration {} for {}", file_path, env_mode
    )

    raw = substitute_env_vars(Path(file_path).read_text())
    try:
        document = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e
    if not document:
        raise ValueError(f"Configuration file {file_path} is empty")

    try:
        config = ConfigData(**(document.get("config") or {}))
    except ValidationError as e:
        raise ValueError(f"Invalid configuration: {e}") from e

    if config.app.environment == "production":
        _check_production_secrets(config)
    return config
