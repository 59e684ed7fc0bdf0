"""
Configuration Module

Architectural Intent:
- Centralized configuration loading from a JSON file
- Provides typed access to all alertbridge settings
- Falls back to sensible defaults when config file is absent
- Environment variables override file-based config

Design Decisions:
- Config is a frozen dataclass for immutability after load
- Nested config sections map to sub-dataclasses
- Environment values arrive as strings and are coerced to the field type
"""

from __future__ import annotations
import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import json
import logging
import os

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreConfig:
    """Alert/incident persistence configuration."""
    backend: str = "memory"  # "memory" or "sqlite"
    db_path: str = "alertbridge.db"


@dataclass(frozen=True)
class WebConfig:
    """HTTP ingestion endpoint configuration."""
    host: str = "127.0.0.1"
    port: int = 8080


@dataclass(frozen=True)
class IngestConfig:
    """Submission validation limits."""
    max_message_length: int = 4000


@dataclass(frozen=True)
class UnitsConfig:
    """Unit directory configuration."""
    directory_path: str = ""


@dataclass(frozen=True)
class RoutingConfig:
    """Extra or overriding alert type -> assignment group entries."""
    overrides: dict = field(default_factory=dict)


@dataclass(frozen=True)
class RetryConfig:
    """Retry schedule for transient store failures."""
    delays: tuple[float, ...] = (0.1, 0.5, 1.0)


@dataclass(frozen=True)
class TelemetryConfig:
    """OpenTelemetry metrics export configuration."""
    endpoint: str = ""
    insecure: bool = False
    service_name: str = "alertbridge"
    export_interval: int = 5


@dataclass(frozen=True)
class AlertBridgeConfig:
    """Root configuration for the alertbridge application."""
    store: StoreConfig = field(default_factory=StoreConfig)
    web: WebConfig = field(default_factory=WebConfig)
    ingest: IngestConfig = field(default_factory=IngestConfig)
    units: UnitsConfig = field(default_factory=UnitsConfig)
    routing: RoutingConfig = field(default_factory=RoutingConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    log_level: str = "WARNING"
    log_format: str = "text"  # "text" or "json"


def _env_override(data: dict, prefix: str = "ALERTBRIDGE") -> dict:
    """Override config values with environment variables.

    Environment variables follow the pattern ALERTBRIDGE_SECTION_KEY.
    For example: ALERTBRIDGE_WEB_PORT=9090, ALERTBRIDGE_RETRY_DELAYS=0.5,1,2
    Root keys use the bare name: ALERTBRIDGE_LOG_LEVEL=DEBUG
    """
    root_keys = {"log_level", "log_format"}
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}_"):
            continue
        name = key[len(prefix) + 1:].lower()
        if name in root_keys:
            data[name] = value
            continue
        parts = name.split("_", 1)
        if len(parts) == 2:
            section, field_name = parts
            if not isinstance(data.get(section), dict):
                data[section] = {}
            data[section][field_name] = value
    return data


def _parse_config_file(path: Path) -> dict:
    """Parse a JSON config file. Returns empty dict on failure."""
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Invalid config file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file %s must hold a JSON object", path)
        return {}
    return data


def _coerce(type_name: str, value):
    if type_name == "int" and isinstance(value, str):
        return int(value)
    if type_name == "float" and isinstance(value, str):
        return float(value)
    if type_name == "bool" and isinstance(value, str):
        return value.lower() in ("true", "1", "yes")
    if type_name.startswith("tuple["):
        if isinstance(value, str):
            value = [v.strip() for v in value.split(",") if v.strip()]
        if "float" in type_name:
            return tuple(float(v) for v in value)
        return tuple(value)
    if type_name == "dict" and isinstance(value, str):
        return json.loads(value)
    return value


def _build_sub_config(cls, data: dict):
    """Build a sub-config dataclass from a dict, ignoring unknown keys."""
    if not isinstance(data, dict):
        return cls()
    fields = {f.name: f for f in dataclasses.fields(cls)}
    filtered = {
        k: _coerce(str(fields[k].type), v) for k, v in data.items() if k in fields
    }
    return cls(**filtered)


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "ALERTBRIDGE",
) -> AlertBridgeConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (ALERTBRIDGE_SECTION_KEY)
    2. Config file values
    3. Defaults

    Args:
        path: Path to config file (JSON). Defaults to alertbridge.json in CWD.
        env_prefix: Environment variable prefix. Defaults to ALERTBRIDGE.
    """
    config_path = Path(path) if path else Path("alertbridge.json")
    data = _parse_config_file(config_path)
    data = _env_override(data, env_prefix)

    return AlertBridgeConfig(
        store=_build_sub_config(StoreConfig, data.get("store", {})),
        web=_build_sub_config(WebConfig, data.get("web", {})),
        ingest=_build_sub_config(IngestConfig, data.get("ingest", {})),
        units=_build_sub_config(UnitsConfig, data.get("units", {})),
        routing=_build_sub_config(RoutingConfig, data.get("routing", {})),
        retry=_build_sub_config(RetryConfig, data.get("retry", {})),
        telemetry=_build_sub_config(TelemetryConfig, data.get("telemetry", {})),
        log_level=data.get("log_level", "WARNING"),
        log_format=data.get("log_format", "text"),
    )
