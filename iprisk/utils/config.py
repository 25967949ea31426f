"""Configuration loading utilities for iprisk.toml."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Sequence

from iprisk.settings import LookupSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATHS: tuple[Path, ...] = (Path("config/iprisk.toml"), Path("iprisk.toml"))


def _find_config_file(candidates: Sequence[Path]) -> Path | None:
    for candidate in candidates:
        if candidate.exists():
            return candidate
    return None


def load_lookup_config(path: Path | None = None) -> dict[str, Any] | None:
    """Load the ``[lookup]`` table from iprisk.toml if available.

    Args:
        path: Explicit config file; when omitted ``config/iprisk.toml`` then ``iprisk.toml`` are tried

    Returns:
        Mapping of LookupSettings field names to values, or None if no usable file was found
    """
    config_file = path if path is not None else _find_config_file(DEFAULT_CONFIG_PATHS)
    if config_file is None or not config_file.exists():
        return None

    try:
        # Try tomllib first (Python 3.11+)
        try:
            import tomllib

            toml_loader = tomllib
        except ImportError:
            # Fall back to tomli for older Python versions
            import tomli

            toml_loader = tomli

        with config_file.open("rb") as handle:
            data = toml_loader.load(handle)
    except OSError as e:
        logger.debug(f"Could not read {config_file}: {e}")
        return None
    except ValueError as e:
        # TOMLDecodeError subclasses ValueError in both tomllib and tomli
        logger.warning(f"Failed to parse {config_file}: {e}. Using defaults.")
        return None

    lookup_config = data.get("lookup", {})
    if not isinstance(lookup_config, dict) or not lookup_config:
        return None

    config: dict[str, Any] = {}
    for key in (
        "cache_dir",
        "cache_ttl_seconds",
        "enable_cache",
        "request_timeout",
        "rate_limit",
        "rate_burst",
        "max_retries",
        "providers",
        "maxmind_db_dir",
        "reverse_dns",
        "user_agent",
    ):
        if key in lookup_config:
            config[key] = lookup_config[key]

    unknown = sorted(set(lookup_config) - set(config))
    if unknown:
        logger.warning(f"Ignoring unknown [lookup] keys in {config_file}: {', '.join(unknown)}")

    return config or None


def load_lookup_settings(
    overrides: dict[str, Any] | None = None,
    path: Path | None = None,
    env_prefix: str = "IPRISK_",
) -> LookupSettings:
    """Build LookupSettings from iprisk.toml, environment variables and explicit overrides.

    Explicit overrides win over TOML values, which win over environment variables.
    """
    config: dict[str, Any] = dict(load_lookup_config(path) or {})
    if overrides:
        config.update({k: v for k, v in overrides.items() if v is not None})
    return LookupSettings.from_sources(config=config or None, env_prefix=env_prefix)
