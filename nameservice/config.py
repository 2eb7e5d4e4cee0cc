# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Name service configuration.

Typed configuration for:
- The registrar (base domain, fee rate, duration and label bounds)
- The commit–reveal delay
- Credential keys served by the bundled resolvers
- Caller-side Gateway Executor timeout
- Logging level / format

Provides a dataclass with validation, loading from environment variables
(prefix configurable) and from a JSON or YAML file.
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import yaml

from .constants import (
    CONTROLLED_ACCOUNTS_KEY,
    DAY,
    MAX_LABEL_BYTES,
    MIN_COMMITMENT_AGE,
    STARS_KEY,
    YEAR,
)


@dataclass
class NameServiceConfig:
    """
    Registrar:
      - base_domain: parent namespace under which labels are sold
      - fee_per_second: price unit; fee = duration * fee_per_second
      - min_duration / max_duration: accepted lease lengths (seconds, inclusive)
      - min_label_length / max_label_length: accepted label lengths (characters)

    Commit–reveal:
      - min_commitment_age: seconds between commit and reveal

    Resolvers:
      - controlled_accounts_key / stars_key: base credential keys

    Dispatch:
      - gateway_timeout_s: timeout imposed around each Gateway Executor call
        (None = wait indefinitely)
    """

    base_domain: str = "ecs.eth"
    fee_per_second: int = 1
    min_duration: int = 28 * DAY
    max_duration: int = 10 * YEAR
    min_label_length: int = 3
    max_label_length: int = 63
    min_commitment_age: int = MIN_COMMITMENT_AGE

    controlled_accounts_key: str = CONTROLLED_ACCOUNTS_KEY
    stars_key: str = STARS_KEY

    gateway_timeout_s: Optional[float] = None

    log_level: str = "INFO"
    log_format: str = "json"

    def validate(self) -> None:
        if not self.base_domain or self.base_domain.startswith(".") or self.base_domain.endswith("."):
            raise ValueError("base_domain must be a non-empty dotted name")
        if self.fee_per_second < 0:
            raise ValueError("fee_per_second must be >= 0")
        if self.min_duration <= 0:
            raise ValueError("min_duration must be > 0")
        if self.max_duration < self.min_duration:
            raise ValueError("max_duration must be >= min_duration")
        if self.min_label_length < 1:
            raise ValueError("min_label_length must be >= 1")
        if not (self.min_label_length <= self.max_label_length <= MAX_LABEL_BYTES):
            raise ValueError(
                f"label lengths must satisfy 1 <= min <= max <= {MAX_LABEL_BYTES}"
            )
        if self.min_commitment_age < 0:
            raise ValueError("min_commitment_age must be >= 0")
        for name in ("controlled_accounts_key", "stars_key"):
            key = getattr(self, name)
            if not key or ":" in key:
                raise ValueError(f"{name} must be a non-empty base key without parameters")
        if self.gateway_timeout_s is not None and self.gateway_timeout_s <= 0:
            raise ValueError("gateway_timeout_s must be > 0 when set")
        if self.log_format not in {"json", "console"}:
            raise ValueError("log_format must be 'json' or 'console'")

    # -------------------------
    # Serialization helpers
    # -------------------------

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    # -------------------------
    # Loaders
    # -------------------------

    @staticmethod
    def from_env(prefix: str = "NAMESERVICE_") -> "NameServiceConfig":
        """
        Load configuration from environment variables. All variables are optional.

        Supported keys (examples):
          - NAMESERVICE_BASE_DOMAIN=ecs.eth
          - NAMESERVICE_FEE_PER_SECOND=1
          - NAMESERVICE_MIN_DURATION=2419200
          - NAMESERVICE_MAX_DURATION=315360000
          - NAMESERVICE_MIN_LABEL_LENGTH=3
          - NAMESERVICE_MAX_LABEL_LENGTH=63
          - NAMESERVICE_MIN_COMMITMENT_AGE=60
          - NAMESERVICE_CONTROLLED_ACCOUNTS_KEY=eth.ecs.controlled-accounts.accounts
          - NAMESERVICE_STARS_KEY=eth.ecs.name-stars.stars
          - NAMESERVICE_GATEWAY_TIMEOUT_S=10
          - NAMESERVICE_LOG_LEVEL=INFO
          - NAMESERVICE_LOG_FORMAT=json
        """
        d = NameServiceConfig()

        def _get(name: str, cast: Any, default: Any) -> Any:
            key = prefix + name
            raw = os.getenv(key)
            if raw is None:
                return default
            try:
                return cast(raw)
            except Exception as e:
                raise ValueError(f"Invalid value for {key}: {raw!r}") from e

        cfg = NameServiceConfig(
            base_domain=_get("BASE_DOMAIN", str, d.base_domain),
            fee_per_second=_get("FEE_PER_SECOND", int, d.fee_per_second),
            min_duration=_get("MIN_DURATION", int, d.min_duration),
            max_duration=_get("MAX_DURATION", int, d.max_duration),
            min_label_length=_get("MIN_LABEL_LENGTH", int, d.min_label_length),
            max_label_length=_get("MAX_LABEL_LENGTH", int, d.max_label_length),
            min_commitment_age=_get("MIN_COMMITMENT_AGE", int, d.min_commitment_age),
            controlled_accounts_key=_get(
                "CONTROLLED_ACCOUNTS_KEY", str, d.controlled_accounts_key
            ),
            stars_key=_get("STARS_KEY", str, d.stars_key),
            gateway_timeout_s=_get("GATEWAY_TIMEOUT_S", float, d.gateway_timeout_s),
            log_level=_get("LOG_LEVEL", str, d.log_level).upper(),
            log_format=_get("LOG_FORMAT", str, d.log_format).lower(),
        )
        cfg.validate()
        return cfg

    @staticmethod
    def from_file(path: str) -> "NameServiceConfig":
        """
        Load configuration from a JSON or YAML file. Keys mirror the dataclass
        fields; unknown keys are rejected. Example (YAML):

            base_domain: ecs.eth
            fee_per_second: 3
            min_commitment_age: 60
        """
        with open(path, "r", encoding="utf-8") as f:
            data = _parse_json_or_yaml(f.read(), path)
        if not isinstance(data, dict):
            raise ValueError(f"{path!r} must contain a mapping at the top level")
        known = set(NameServiceConfig.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown config keys in {path!r}: {', '.join(unknown)}")
        cfg = NameServiceConfig(**data)
        cfg.validate()
        return cfg


def _parse_json_or_yaml(text: str, path_hint: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass
    try:
        return yaml.safe_load(text) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse {path_hint!r} as JSON or YAML: {e}") from e


DEFAULT: NameServiceConfig = NameServiceConfig()


__all__ = ["NameServiceConfig", "DEFAULT"]
