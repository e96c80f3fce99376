"""
jinspect Configuration Management
==================================

Centralized configuration for the jinspect toolkit using Python
dataclasses and TOML-based persistence.

Configuration is kept separate from code: every tunable of the decoder
and of the ambient stack (logging, default input path) lives in a TOML
file whose missing keys fall back to the dataclass defaults below.

References:
    - Wiggins, A. (2011). The Twelve-Factor App. https://12factor.net/
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


# ---------------------------------------------------------------------------
# Default configuration file path relative to the project root
# ---------------------------------------------------------------------------
_DEFAULT_CONFIG_PATH: Path = Path(__file__).resolve().parent.parent / "config.toml"


# ========================== Tool-Specific Configs ==========================


@dataclass(frozen=False, slots=True)
class DecoderConfig:
    """Configuration for the class-file decoder.

    Controls magic-number enforcement, the attribute length policy,
    the resolution depth guard, and the input size limit.

    Reference:
        Lindholm, T., Yellin, F., Bracha, G., & Buckley, A. (2014).
        The Java Virtual Machine Specification, Java SE 8 Edition. Ch. 4.
    """

    validate_magic: bool = True
    strict_attribute_length: bool = False
    max_resolve_depth: int = 16
    max_file_size: int = 16_777_216  # 16 MiB
    default_path: str = "samples/App.class"


# =========================== Global Settings ===============================


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Global settings shared across the toolkit.

    Controls logging verbosity and the optional log file.
    """

    log_level: str = "INFO"
    log_file: str | None = None
    log_json: bool = False


# =========================== Master Config =================================


@dataclass(frozen=False, slots=True)
class InspectConfig:
    """Master configuration aggregating the global and decoder settings.

    Usage:
        >>> config = InspectConfig.load()                  # from default path
        >>> config = InspectConfig.load("custom.toml")     # from custom path
        >>> config.decoder.validate_magic
        True
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    decoder: DecoderConfig = field(default_factory=DecoderConfig)

    # ------------------------------------------------------------------ #
    #  TOML Loading
    # ------------------------------------------------------------------ #

    @classmethod
    def load(cls, path: str | Path | None = None) -> InspectConfig:
        """Load configuration from a TOML file.

        If *path* is ``None`` the loader looks for ``config.toml`` in the
        project root.  Missing keys fall back to dataclass defaults.

        Args:
            path: Filesystem path to a TOML configuration file.

        Returns:
            A fully-populated :class:`InspectConfig` instance.

        Raises:
            FileNotFoundError: If the specified path does not exist
                *and* was explicitly provided by the caller.
        """
        config_path = Path(path) if path is not None else _DEFAULT_CONFIG_PATH

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            decoder=cls._build_section(DecoderConfig, raw.get("decoder", {})),
        )

    # ------------------------------------------------------------------ #
    #  Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate a dataclass *cls* using only the keys it declares.

        Unknown keys in the TOML source are ignored.
        """
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)
