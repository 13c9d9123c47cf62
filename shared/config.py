"""
Configuration Management
=========================

Dataclass-based configuration with TOML persistence.

A configuration file looks like::

    [global]
    log_level = "DEBUG"
    log_file = "undefsym.log"
    log_json = true

    [scan]
    keep_going = true
    include_dynsym = false
    write_back = false

Every key is optional; missing keys fall back to the dataclass defaults,
unknown keys are ignored and values of the wrong type are rejected.

References:
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional


# ---------------------------------------------------------------------------
# Default configuration file, looked up in the working directory
# ---------------------------------------------------------------------------
DEFAULT_CONFIG_NAME: str = "undefsym.toml"

_LOG_LEVELS: tuple[str, ...] = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Accepted TOML value types, keyed by the field annotation.
_VALUE_TYPES: dict[str, tuple[type, ...]] = {
    "bool": (bool,),
    "str": (str,),
    "Optional[str]": (str,),
}


# ========================== Section Configs ================================


@dataclass(frozen=False, slots=True)
class ScanConfig:
    """Scanner and batch-policy settings.

    Attributes:
        keep_going: Continue with the next file after a fatal error
            instead of halting the batch.  The exit status still reports
            the failure.
        include_dynsym: Also walk ``SHT_DYNSYM`` sections.
        write_back: Open files read/write and flush each mapping after a
            successful scan.
    """

    keep_going: bool = False
    include_dynsym: bool = False
    write_back: bool = False


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Logging and general settings."""

    log_level: str = "WARNING"
    log_file: Optional[str] = None
    log_json: bool = False
    debug: bool = False

    def __post_init__(self) -> None:
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(
                f"[global] log_level must be one of {', '.join(_LOG_LEVELS)}, "
                f"got {self.log_level!r}"
            )


# =========================== Master Config =================================


@dataclass(frozen=False, slots=True)
class ToolConfig:
    """Aggregates every configuration section.

    Usage:
        >>> config = ToolConfig.load()                  # ./undefsym.toml if present
        >>> config = ToolConfig.load("custom.toml")     # explicit file
        >>> config.scan.keep_going
        False
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)

    # ------------------------------------------------------------------ #
    #  TOML Loading
    # ------------------------------------------------------------------ #

    @classmethod
    def load(cls, path: str | Path | None = None) -> ToolConfig:
        """Load configuration from a TOML file.

        Args:
            path: TOML file to read.  Defaults to ``undefsym.toml`` in the
                  current working directory.

        Returns:
            A fully-populated :class:`ToolConfig` instance.

        Raises:
            FileNotFoundError: If *path* was given explicitly and does not
                exist.
            tomllib.TOMLDecodeError: If the file is not valid TOML.
            ValueError: If a section is not a table or a value has the
                wrong type.
        """
        config_path = Path(path) if path is not None else Path.cwd() / DEFAULT_CONFIG_NAME

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=cls._build_section(GlobalConfig, "global", raw.get("global", {})),
            scan=cls._build_section(ScanConfig, "scan", raw.get("scan", {})),
        )

    # ------------------------------------------------------------------ #
    #  Section helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _build_section(cls: type, name: str, data: Any) -> Any:
        """Instantiate dataclass *cls* from the keys it declares.

        Unknown keys are dropped; known keys must carry a value of the
        declared type.
        """
        if not isinstance(data, dict):
            raise ValueError(f"[{name}] must be a table, got {type(data).__name__}")

        fields = cls.__dataclass_fields__  # type: ignore[attr-defined]
        filtered: dict[str, Any] = {}
        for key, value in data.items():
            if key not in fields:
                continue
            expected = _VALUE_TYPES[str(fields[key].type)]
            if not isinstance(value, expected):
                raise ValueError(
                    f"[{name}] {key} must be {expected[0].__name__}, "
                    f"got {type(value).__name__}"
                )
            filtered[key] = value
        return cls(**filtered)
