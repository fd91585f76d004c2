from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .enums import BrowserKind, OutputFormat

CONFIG_ENV_VAR = "CRUMBTIN_CONFIG"
DEFAULT_CONFIG_PATH = Path("~/.config/crumbtin/config.yml")


@dataclass(slots=True)
class LoggingConfig:
    """Logging configuration from config.yml."""

    level: str = "INFO"
    log_dir: Optional[Path] = None  # Console only when unset
    max_mb: int = 10
    backup_count: int = 3


@dataclass(slots=True)
class DefaultsConfig:
    """Defaults used by ``run_from_config`` when the caller doesn't specify them."""

    browsers: List[BrowserKind] = field(default_factory=lambda: [BrowserKind.FIREFOX])
    bypass_lock: bool = False
    output_format: OutputFormat = OutputFormat.NETSCAPE


@dataclass(slots=True)
class AppConfig:
    """Top-level configuration resolved from disk."""

    config_path: Optional[Path] = None
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    def to_json(self) -> str:
        """Serialize the configuration into a JSON string for diagnostics."""
        data = {
            "config_path": str(self.config_path) if self.config_path else None,
            "logging": {
                "level": self.logging.level,
                "log_dir": str(self.logging.log_dir) if self.logging.log_dir else None,
                "max_mb": self.logging.max_mb,
                "backup_count": self.logging.backup_count,
            },
            "defaults": {
                "browsers": [browser.value for browser in self.defaults.browsers],
                "bypass_lock": self.defaults.bypass_lock,
                "output_format": self.defaults.output_format.value,
            },
        }
        return json.dumps(data, indent=2, sort_keys=True)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        content = yaml.safe_load(handle) or {}
        if not isinstance(content, dict):
            raise ValueError(f"Config file {path} must contain a mapping at the top level.")
        return content


def default_config_path() -> Path:
    """``$CRUMBTIN_CONFIG`` if set, else ``~/.config/crumbtin/config.yml``."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return DEFAULT_CONFIG_PATH.expanduser()


def _parse_browsers(value: Any) -> List[BrowserKind]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        raise ValueError("defaults.browsers must be a browser name or a list of names")
    return [BrowserKind.parse(str(item)) for item in value]


def load_app_config(path: Optional[Union[str, Path]] = None) -> AppConfig:
    """Load application configuration from disk, providing sensible defaults."""

    config_path = Path(path).expanduser() if path is not None else default_config_path()
    config_overrides = _load_yaml(config_path)

    # Load logging configuration
    logging_cfg = config_overrides.get("logging") or {}
    log_dir = logging_cfg.get("log_dir")
    logging_config = LoggingConfig(
        level=str(logging_cfg.get("level", "INFO")).upper(),
        log_dir=Path(log_dir).expanduser() if log_dir else None,
        max_mb=int(logging_cfg.get("max_mb", 10)),
        backup_count=int(logging_cfg.get("backup_count", 3)),
    )

    # Load defaults
    defaults_cfg = config_overrides.get("defaults") or {}
    defaults_config = DefaultsConfig()
    if "browsers" in defaults_cfg:
        defaults_config.browsers = _parse_browsers(defaults_cfg["browsers"])
    if "bypass_lock" in defaults_cfg:
        defaults_config.bypass_lock = bool(defaults_cfg["bypass_lock"])
    if "output_format" in defaults_cfg:
        defaults_config.output_format = OutputFormat.parse(str(defaults_cfg["output_format"]))

    return AppConfig(
        config_path=config_path if config_path.exists() else None,
        logging=logging_config,
        defaults=defaults_config,
    )
