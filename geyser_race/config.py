from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
import types
import typing
from typing import Any, get_args, get_origin

import orjson

ENV_PREFIX = "GEYSER_RACE_"

ENDPOINT_KINDS = ("transactions", "dual_stream", "entries")
COMMITMENT_LEVELS = ("processed", "confirmed", "finalized")


class ConfigError(ValueError):
    pass


def _parse_bool(value: str) -> bool:
    val = str(value).strip().lower()
    if val in {"1", "true", "yes", "y", "on"}:
        return True
    if val in {"0", "false", "no", "n", "off"}:
        return False
    raise ValueError(f"invalid bool: {value}")


def _parse_number(value: str, target_type: type) -> Any:
    if target_type is int:
        return int(value)
    if target_type is float:
        return float(value)
    return value


def _unwrap_optional(field_type: Any) -> tuple[Any, bool]:
    origin = get_origin(field_type)
    union_type = getattr(types, "UnionType", None)
    if origin not in (typing.Union, union_type):
        if isinstance(field_type, str) and field_type.endswith(" | None"):
            return field_type[: -len(" | None")], True
        return field_type, False
    args = get_args(field_type)
    if args and type(None) in args and len(args) == 2:
        base = args[0] if args[1] is type(None) else args[1]
        return base, True
    return field_type, False


def _is_field_type(field_type: Any, expected: type, expected_name: str) -> bool:
    base_type, _is_optional = _unwrap_optional(field_type)
    if base_type is expected:
        return True
    if isinstance(base_type, str) and base_type == expected_name:
        return True
    return False


def _parse_optional(raw: str, target_type: Any) -> Any:
    text = str(raw).strip()
    if text == "":
        return None
    lower = text.lower()
    if lower in {"none", "null"}:
        return None
    if target_type in (bool, "bool"):
        return _parse_bool(text)
    if target_type in (int, "int"):
        return int(text)
    if target_type in (float, "float"):
        return float(text)
    return text


@dataclass(frozen=True)
class Endpoint:
    name: str
    url: str
    x_token: str | None = None
    kind: str = "transactions"


@dataclass(frozen=True)
class RunConfig:
    account: str
    transactions: int
    commitment: str


@dataclass
class Config:
    account: str = ""
    transactions: int = 100
    commitment: str = "processed"
    endpoints_file: str = "endpoints.json"
    race_required_endpoints: int = 1
    max_run_seconds: float | None = None
    grpc_connect_timeout_seconds: float = 10.0
    grpc_close_grace_seconds: float = 5.0
    grpc_max_message_bytes: int | None = 64 * 1024 * 1024
    grpc_user_agent: str = "geyser_race"
    runlog_enqueue_timeout_seconds: float = 1.0
    runlog_fsync_on_close: bool = False
    data_dir: str = "./data"

    def run_config(self) -> RunConfig:
        return RunConfig(
            account=self.account,
            transactions=int(self.transactions),
            commitment=self.commitment,
        )

    def validate(self) -> "Config":
        if not self.account:
            raise ConfigError("account is required")
        if int(self.transactions) <= 0:
            raise ConfigError("transactions must be >= 1")
        if self.commitment not in COMMITMENT_LEVELS:
            raise ConfigError(f"unknown commitment: {self.commitment}")
        if int(self.race_required_endpoints) <= 0:
            raise ConfigError("race_required_endpoints must be >= 1")
        if self.max_run_seconds is not None and self.max_run_seconds <= 0:
            raise ConfigError("max_run_seconds must be > 0")
        return self

    def apply_overrides(self, overrides: dict[str, Any]) -> "Config":
        for field in fields(self):
            name = field.name
            if name in overrides:
                value = overrides[name]
                if value is None:
                    _base_type, is_optional = _unwrap_optional(field.type)
                    if is_optional:
                        setattr(self, name, None)
                    continue
                setattr(self, name, value)
        return self

    @classmethod
    def from_env_and_cli(cls, cli_overrides: dict[str, Any], env: dict[str, str]) -> "Config":
        cfg = cls()
        for field in fields(cfg):
            env_key = ENV_PREFIX + field.name.upper()
            if env_key not in env:
                continue
            raw = env[env_key]
            base_type, is_optional = _unwrap_optional(field.type)
            if is_optional:
                value = _parse_optional(raw, base_type)
            elif _is_field_type(field.type, bool, "bool"):
                value = _parse_bool(raw)
            elif _is_field_type(field.type, int, "int"):
                value = _parse_number(raw, int)
            elif _is_field_type(field.type, float, "float"):
                value = _parse_number(raw, float)
            else:
                value = raw
            setattr(cfg, field.name, value)
        # CLI flags win over the environment.
        return cfg.apply_overrides(cli_overrides)


def parse_endpoints(payload: Any) -> list[Endpoint]:
    if isinstance(payload, dict):
        items = payload.get("endpoints")
    else:
        items = payload
    if not isinstance(items, list) or not items:
        raise ConfigError("endpoints must be a non-empty list")
    endpoints: list[Endpoint] = []
    seen: set[str] = set()
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            raise ConfigError(f"endpoint #{idx} must be an object")
        name = str(item.get("name") or "").strip()
        url = str(item.get("url") or "").strip()
        if not name:
            raise ConfigError(f"endpoint #{idx} is missing a name")
        if not url:
            raise ConfigError(f"endpoint {name} is missing a url")
        if name in seen:
            raise ConfigError(f"duplicate endpoint name: {name}")
        kind = str(item.get("kind") or "transactions")
        if kind not in ENDPOINT_KINDS:
            raise ConfigError(f"endpoint {name} has unknown kind: {kind}")
        token = item.get("x_token")
        seen.add(name)
        endpoints.append(
            Endpoint(
                name=name,
                url=url,
                x_token=str(token) if token else None,
                kind=kind,
            )
        )
    return endpoints


def load_endpoints(path: str | Path) -> list[Endpoint]:
    path = Path(path)
    try:
        payload = orjson.loads(path.read_bytes())
    except FileNotFoundError as exc:
        raise ConfigError(f"endpoints file not found: {path}") from exc
    except orjson.JSONDecodeError as exc:
        raise ConfigError(f"endpoints file is not valid JSON: {path}") from exc
    return parse_endpoints(payload)
