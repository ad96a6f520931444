"""Build a :class:`ClientConfig` from a YAML file and the environment."""
from __future__ import annotations

import logging
import os
import pathlib
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import ValidationError

from .models import ClientConfig, Region

LOGGER = logging.getLogger(__name__)

DEFAULT_REGION = Region.EU

ENV_VARS = {
    "schema": "TUYA_SCHEMA",
    "client_id": "TUYA_CLIENT_ID",
    "client_secret": "TUYA_CLIENT_SECRET",
    "region": "TUYA_REGION",
    "country_code": "TUYA_COUNTRY_CODE",
}
REQUIRED_KEYS = ("schema", "client_id", "client_secret")


class ConfigError(ValueError):
    """Raised when credentials are missing or invalid."""


def load_config_file(path: Union[str, pathlib.Path, None]) -> Dict[str, Any]:
    """Read a YAML config file, returning an empty dict when no path is given."""
    if path is None:
        return {}
    config_path = pathlib.Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Tuya config not found: {config_path}")
    try:
        with config_path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse Tuya config {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Tuya config {config_path} must contain a mapping")
    return data


def load_client_config(
    path: Union[str, pathlib.Path, None] = None,
    *,
    region: Union[str, Region, None] = None,
    environ: Optional[Dict[str, str]] = None,
) -> ClientConfig:
    """Merge file values with ``TUYA_*`` environment variables.

    File values win over the environment; an explicit ``region`` wins over both.
    The region falls back to EU when neither source names one.
    """
    env = os.environ if environ is None else environ
    values = dict(load_config_file(path))

    for key, env_name in ENV_VARS.items():
        if values.get(key) in (None, ""):
            env_value = env.get(env_name, "").strip()
            if env_value:
                values[key] = env_value

    missing = [ENV_VARS[key] for key in REQUIRED_KEYS if values.get(key) in (None, "")]
    if missing:
        raise ConfigError(f"Missing required Tuya credentials: {', '.join(missing)}")

    if region is not None:
        values["region"] = region
    if values.get("region") in (None, ""):
        LOGGER.debug("No Tuya region configured; using %s", DEFAULT_REGION.name)
        values["region"] = DEFAULT_REGION

    try:
        return ClientConfig.model_validate(values)
    except (ValidationError, ValueError) as exc:
        raise ConfigError(f"Invalid Tuya configuration: {exc}") from exc
