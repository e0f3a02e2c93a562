"""
Fail-closed deployment configuration for a hub + ledger pair.

The YAML document looks like::

    schema: vaulthub/deployment/v1
    hub:
      address: hub
      admin: admin
      oracle: oracle
      factory: factory                  # optional
      report_freshness_seconds: 172800  # optional, default 2 days
      allow_disconnect_with_liability: false  # optional
    ledger:
      address: ledger
      deployer: admin                   # optional, defaults to hub.admin

Validation errors name the offending field path.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from ..core.vault_hub.types import REPORT_FRESHNESS_SECONDS, RegistryParams

CONFIG_SCHEMA = "vaulthub/deployment/v1"


@dataclass(frozen=True)
class ConfigError(Exception):
    message: str

    def __str__(self) -> str:  # pragma: no cover
        return self.message


@dataclass(frozen=True)
class HubConfig:
    address: str
    admin: str
    oracle: str
    factory: str | None = None
    report_freshness_seconds: int = REPORT_FRESHNESS_SECONDS
    allow_disconnect_with_liability: bool = False

    def registry_params(self) -> RegistryParams:
        return RegistryParams(
            report_freshness_seconds=self.report_freshness_seconds,
            allow_disconnect_with_liability=self.allow_disconnect_with_liability,
        )


@dataclass(frozen=True)
class LedgerConfig:
    address: str
    deployer: str


@dataclass(frozen=True)
class DeploymentConfig:
    hub: HubConfig
    ledger: LedgerConfig


def _require_mapping(obj: Any, *, name: str) -> dict[str, Any]:
    if not isinstance(obj, dict):
        raise ConfigError(f"{name} must be an object")
    return obj


def _require_str(obj: Any, *, name: str) -> str:
    if not isinstance(obj, str) or not obj.strip():
        raise ConfigError(f"{name} must be a non-empty string")
    return obj.strip()


def _optional_str(obj: Any, *, name: str) -> str | None:
    if obj is None:
        return None
    return _require_str(obj, name=name)


def _optional_positive_int(obj: Any, *, name: str, default: int) -> int:
    if obj is None:
        return default
    if not isinstance(obj, int) or isinstance(obj, bool) or obj <= 0:
        raise ConfigError(f"{name} must be a positive integer")
    return obj


def _optional_bool(obj: Any, *, name: str, default: bool) -> bool:
    if obj is None:
        return default
    if not isinstance(obj, bool):
        raise ConfigError(f"{name} must be a boolean")
    return obj


def _reject_unknown(obj: Mapping[str, Any], allowed: set[str], *, name: str) -> None:
    unknown = sorted(set(obj) - allowed)
    if unknown:
        raise ConfigError(f"{name} has unknown fields: {', '.join(unknown)}")


def parse_config(obj: Any) -> DeploymentConfig:
    root = _require_mapping(obj, name="config")
    _reject_unknown(root, {"schema", "hub", "ledger"}, name="config")

    schema = _require_str(root.get("schema"), name="config.schema")
    if schema != CONFIG_SCHEMA:
        raise ConfigError(f"unsupported config.schema: {schema}")

    hub_raw = _require_mapping(root.get("hub"), name="config.hub")
    _reject_unknown(
        hub_raw,
        {"address", "admin", "oracle", "factory", "report_freshness_seconds", "allow_disconnect_with_liability"},
        name="config.hub",
    )
    hub = HubConfig(
        address=_require_str(hub_raw.get("address"), name="config.hub.address"),
        admin=_require_str(hub_raw.get("admin"), name="config.hub.admin"),
        oracle=_require_str(hub_raw.get("oracle"), name="config.hub.oracle"),
        factory=_optional_str(hub_raw.get("factory"), name="config.hub.factory"),
        report_freshness_seconds=_optional_positive_int(
            hub_raw.get("report_freshness_seconds"),
            name="config.hub.report_freshness_seconds",
            default=REPORT_FRESHNESS_SECONDS,
        ),
        allow_disconnect_with_liability=_optional_bool(
            hub_raw.get("allow_disconnect_with_liability"),
            name="config.hub.allow_disconnect_with_liability",
            default=False,
        ),
    )

    ledger_raw = _require_mapping(root.get("ledger"), name="config.ledger")
    _reject_unknown(ledger_raw, {"address", "deployer"}, name="config.ledger")
    ledger = LedgerConfig(
        address=_require_str(ledger_raw.get("address"), name="config.ledger.address"),
        deployer=_optional_str(ledger_raw.get("deployer"), name="config.ledger.deployer") or hub.admin,
    )

    if hub.address == ledger.address:
        raise ConfigError("config.hub.address and config.ledger.address must differ")
    return DeploymentConfig(hub=hub, ledger=ledger)


def load_config(path: Path) -> DeploymentConfig:
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"cannot read config {path}: {exc}") from exc
    try:
        obj = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"config {path} is not valid YAML: {exc}") from exc
    return parse_config(obj)
