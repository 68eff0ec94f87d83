from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..mapping.rules import DEFAULT_SALES_AGENTS, MappingRules
from ..services.customer_api import DEFAULT_TIMEOUT_SECONDS

"""Config loader.

Responsibilities:
- Load YAML config (default config/monarch.yml)
- Validate against the bundled JSON schema
- Apply defaults
- Let MONARCH_API_URL / MONARCH_API_USER / MONARCH_API_PASSWORD override the
  api section (the CLI loads them from .env first)
"""

__all__ = [
    "ApiConfig",
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "ExportConfig",
    "load_config",
]

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/monarch.yml")

ENV_API_URL = "MONARCH_API_URL"
ENV_API_USER = "MONARCH_API_USER"
ENV_API_PASSWORD = "MONARCH_API_PASSWORD"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class ApiConfig:
    base_url: str | None = None
    username: str | None = None
    password: str | None = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True)
class ExportConfig:
    api: ApiConfig = field(default_factory=ApiConfig)
    sales_agents: dict[str, list[int]] = field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_SALES_AGENTS.items()}
    )
    default_sales_agent: str = "pinch"
    output_directory: str = "./output"
    logs_directory: str = "./logs"
    write_rejection_log: bool = True

    def mapping_rules(self) -> MappingRules:
        return MappingRules.from_mapping(self.sales_agents, self.default_sales_agent)

    def with_env_overrides(self) -> ExportConfig:
        """Return a copy whose api section prefers the MONARCH_API_* variables."""
        api = ApiConfig(
            base_url=os.getenv(ENV_API_URL) or self.api.base_url,
            username=os.getenv(ENV_API_USER) or self.api.username,
            password=os.getenv(ENV_API_PASSWORD) or self.api.password,
            timeout_seconds=self.api.timeout_seconds,
        )
        return ExportConfig(
            api=api,
            sales_agents=self.sales_agents,
            default_sales_agent=self.default_sales_agent,
            output_directory=self.output_directory,
            logs_directory=self.logs_directory,
            write_rejection_log=self.write_rejection_log,
        )


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def load_config(path: Path) -> ExportConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    api_raw = data.get("api", {})
    api = ApiConfig(
        base_url=api_raw.get("base_url"),
        username=api_raw.get("username"),
        password=api_raw.get("password"),
        timeout_seconds=float(api_raw.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
    )
    agents_raw = data.get("sales_agents", {})
    defaults = ExportConfig()
    return ExportConfig(
        api=api,
        sales_agents=agents_raw.get("agents") or defaults.sales_agents,
        default_sales_agent=agents_raw.get("default", defaults.default_sales_agent),
        output_directory=data.get("output_directory", defaults.output_directory),
        logs_directory=data.get("logs_directory", defaults.logs_directory),
        write_rejection_log=data.get("write_rejection_log", defaults.write_rejection_log),
    )
