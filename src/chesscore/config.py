"""Engine configuration loaded from TOML with environment overrides."""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, TypeVar

from chesscore.engine.evaluation import EvalConfig
from chesscore.engine.search import SearchConfig

_LOGGER = logging.getLogger(__name__)

CONFIG_PATH_ENV = "CHESSCORE_CONFIG"
SEARCH_DEPTH_ENV = "CHESSCORE_SEARCH_DEPTH"
DEFAULT_CONFIG_PATH = "chesscore.toml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

_T = TypeVar("_T", SearchConfig, EvalConfig)


def _section(name: str, base: _T, raw: Any) -> _T:
    """Overlay the TOML table *raw* onto the dataclass *base*."""
    if not isinstance(raw, dict):
        raise ValueError(f"[{name}] must be a table, got {type(raw).__name__}")
    known = {f.name for f in fields(base)}
    updates: dict[str, Any] = {}
    for key, value in raw.items():
        if key not in known:
            _LOGGER.warning("Ignoring unknown config key %s.%s", name, key)
            continue
        default = getattr(base, key)
        if key == "max_workers" and value is not None:
            expected: type = int
        elif default is None:
            expected = object
        else:
            expected = type(default)
        # bool is an int subclass; keep the two apart.
        wrong_kind = isinstance(value, bool) != (expected is bool)
        if wrong_kind or not isinstance(value, expected):
            raise ValueError(
                f"{name}.{key} must be {expected.__name__}, got {value!r}"
            )
        updates[key] = value
    result = replace(base, **updates)
    result.validate()
    return result


@dataclass(frozen=True, slots=True)
class EngineConfig:
    """Search settings, evaluation weights and the package log level."""

    search: SearchConfig = field(default_factory=SearchConfig)
    evaluation: EvalConfig = field(default_factory=EvalConfig)
    log_level: str = "WARNING"

    @staticmethod
    def load_from_toml(
        path: str | os.PathLike[str] = DEFAULT_CONFIG_PATH,
    ) -> EngineConfig:
        """Read *path*; a missing file yields the defaults.

        ``CHESSCORE_SEARCH_DEPTH`` overrides ``search.max_depth`` either way.
        """
        cfg = EngineConfig()
        config_path = Path(path)
        if config_path.exists():
            with config_path.open("rb") as f:
                try:
                    raw = tomllib.load(f)
                except tomllib.TOMLDecodeError as exc:
                    raise ValueError(f"Invalid TOML in {config_path}: {exc}") from exc
            cfg = EngineConfig._from_mapping(raw)
        else:
            _LOGGER.debug("Config file %s not found; using defaults", config_path)
        return cfg._with_env_overrides()

    @staticmethod
    def from_env_file() -> EngineConfig:
        """Load the file named by ``CHESSCORE_CONFIG`` (default ``chesscore.toml``)."""
        return EngineConfig.load_from_toml(
            os.environ.get(CONFIG_PATH_ENV, DEFAULT_CONFIG_PATH)
        )

    @staticmethod
    def _from_mapping(raw: dict[str, Any]) -> EngineConfig:
        cfg = EngineConfig()
        for key in raw:
            if key not in ("search", "evaluation", "log_level"):
                _LOGGER.warning("Ignoring unknown config key %s", key)

        search = cfg.search
        if "search" in raw:
            search = _section("search", search, raw["search"])
        evaluation = cfg.evaluation
        if "evaluation" in raw:
            evaluation = _section("evaluation", evaluation, raw["evaluation"])
        log_level = cfg.log_level
        if "log_level" in raw:
            log_level = _normalise_level(raw["log_level"])
        return EngineConfig(search=search, evaluation=evaluation, log_level=log_level)

    def _with_env_overrides(self) -> EngineConfig:
        override_depth = os.environ.get(SEARCH_DEPTH_ENV)
        if not override_depth:
            return self
        try:
            depth = int(override_depth)
        except ValueError:
            raise ValueError(
                f"{SEARCH_DEPTH_ENV} must be an integer, got {override_depth!r}"
            ) from None
        search = replace(self.search, max_depth=depth)
        search.validate()
        return replace(self, search=search)


def _normalise_level(level: Any) -> str:
    if not isinstance(level, str) or level.upper() not in _LOG_LEVELS:
        raise ValueError(
            f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {level!r}"
        )
    return level.upper()


def configure_logging(level: str | int = "WARNING") -> None:
    """Set the ``chesscore`` package logger level; handlers are left to the app."""
    if isinstance(level, str):
        level = _normalise_level(level)
    logging.getLogger("chesscore").setLevel(level)
