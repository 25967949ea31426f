"""Runtime configuration for the lookup pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Sequence

from iprisk import get_version

DEFAULT_PROVIDERS: tuple[str, ...] = ("ip-api", "ipapi.co")
KNOWN_PROVIDERS: frozenset[str] = frozenset({"maxmind", "ip-api", "ipapi.co"})


def _coerce_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "f", "no", "n", "off"}:
        return False
    return default


def _coerce_int(value: str | None, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _coerce_float(value: str | None, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value.strip())
    except ValueError:
        return default


def _coerce_providers(value: str | Sequence[str] | None, default: Sequence[str]) -> tuple[str, ...]:
    if value is None:
        return tuple(default)
    items = value.split(",") if isinstance(value, str) else list(value)
    providers = tuple(item.strip().lower() for item in items if item and item.strip())
    return providers or tuple(default)


@dataclass(slots=True)
class LookupSettings:
    """Normalized configuration for providers, caching and rate limiting."""

    cache_dir: Path = Path.home() / ".cache" / "iprisk"
    cache_ttl_seconds: int = 86400
    enable_cache: bool = True
    request_timeout: float = 5.0
    rate_limit: float = 0.75
    rate_burst: int = 5
    max_retries: int = 2
    providers: tuple[str, ...] = DEFAULT_PROVIDERS
    maxmind_db_dir: Path | None = None
    reverse_dns: bool = False
    user_agent: str = f"iprisk/{get_version()}"

    def __post_init__(self) -> None:
        """Normalize paths and reject unknown provider names."""
        self.cache_dir = Path(self.cache_dir).expanduser()
        if self.maxmind_db_dir is not None:
            self.maxmind_db_dir = Path(self.maxmind_db_dir).expanduser()
        self.providers = _coerce_providers(self.providers, DEFAULT_PROVIDERS)
        unknown = [name for name in self.providers if name not in KNOWN_PROVIDERS]
        if unknown:
            raise ValueError(f"Unknown provider(s): {', '.join(unknown)}")
        if self.cache_ttl_seconds < 0:
            raise ValueError(f"cache_ttl_seconds must be >= 0, got {self.cache_ttl_seconds}")
        if self.rate_limit <= 0:
            raise ValueError(f"rate_limit must be positive, got {self.rate_limit}")

    @property
    def provider_chain(self) -> tuple[str, ...]:
        """Provider names in lookup order; MaxMind goes first when a database directory is set."""
        if self.maxmind_db_dir is not None and "maxmind" not in self.providers:
            return ("maxmind",) + self.providers
        return self.providers

    @classmethod
    def from_sources(
        cls,
        config: Mapping[str, Any] | None = None,
        env_prefix: str = "IPRISK_",
    ) -> "LookupSettings":
        """Build settings from defaults, optional config mapping, and environment variables.

        Precedence order (highest to lowest):
        1. Explicit config mapping values
        2. Environment variables
        3. Default values
        """
        defaults = cls()
        cfg: dict[str, Any] = {
            "cache_dir": defaults.cache_dir,
            "cache_ttl_seconds": defaults.cache_ttl_seconds,
            "enable_cache": defaults.enable_cache,
            "request_timeout": defaults.request_timeout,
            "rate_limit": defaults.rate_limit,
            "rate_burst": defaults.rate_burst,
            "max_retries": defaults.max_retries,
            "providers": defaults.providers,
            "maxmind_db_dir": defaults.maxmind_db_dir,
            "reverse_dns": defaults.reverse_dns,
            "user_agent": defaults.user_agent,
        }

        # Track which keys were explicitly provided in config
        config_keys: set[str] = set()
        if config:
            config_keys = {k for k, v in config.items() if v is not None and k in cfg}
            cfg.update({k: v for k, v in config.items() if v is not None and k in cfg})

        env = os.environ
        prefix = env_prefix.upper()

        # Only apply env overrides for keys not in config
        if "cache_dir" not in config_keys:
            cache_dir = env.get(f"{prefix}CACHE_DIR")
            if cache_dir:
                cfg["cache_dir"] = Path(cache_dir)

        if "cache_ttl_seconds" not in config_keys:
            cfg["cache_ttl_seconds"] = _coerce_int(env.get(f"{prefix}CACHE_TTL"), int(cfg["cache_ttl_seconds"]))

        if "enable_cache" not in config_keys:
            cfg["enable_cache"] = _coerce_bool(env.get(f"{prefix}ENABLE_CACHE"), bool(cfg["enable_cache"]))

        if "request_timeout" not in config_keys:
            cfg["request_timeout"] = _coerce_float(
                env.get(f"{prefix}REQUEST_TIMEOUT"), float(cfg["request_timeout"])
            )

        if "rate_limit" not in config_keys:
            cfg["rate_limit"] = _coerce_float(env.get(f"{prefix}RATE_LIMIT"), float(cfg["rate_limit"]))

        if "rate_burst" not in config_keys:
            cfg["rate_burst"] = _coerce_int(env.get(f"{prefix}RATE_BURST"), int(cfg["rate_burst"]))

        if "max_retries" not in config_keys:
            cfg["max_retries"] = _coerce_int(env.get(f"{prefix}MAX_RETRIES"), int(cfg["max_retries"]))

        if "providers" not in config_keys:
            cfg["providers"] = _coerce_providers(env.get(f"{prefix}PROVIDERS"), cfg["providers"])

        if "maxmind_db_dir" not in config_keys:
            maxmind_dir = env.get(f"{prefix}MAXMIND_DB_DIR")
            if maxmind_dir:
                cfg["maxmind_db_dir"] = Path(maxmind_dir)

        if "reverse_dns" not in config_keys:
            cfg["reverse_dns"] = _coerce_bool(env.get(f"{prefix}REVERSE_DNS"), bool(cfg["reverse_dns"]))

        return cls(**cfg)


__all__ = ["DEFAULT_PROVIDERS", "KNOWN_PROVIDERS", "LookupSettings"]
