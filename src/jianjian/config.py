"""Configuration for jianjian.

Settings come from a YAML file (``~/.jianjian/config.yaml`` unless
``JIANJIAN_CONFIG`` or an explicit path says otherwise), with a couple of
environment overrides applied on top.  A missing file means defaults.

Example ``config.yaml``::

    data_dir: ~/letters
    weekly_ink_limit: 600
    typing_chars_per_second: 2.0
    timezone: Asia/Shanghai
    log_level: INFO
"""
from __future__ import annotations

import os
from datetime import tzinfo
from pathlib import Path
from typing import Any, Literal, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveFloat,
    ValidationError,
    field_validator,
)

from jianjian.errors import ConfigError

CONFIG_ENV_VAR = "JIANJIAN_CONFIG"
DATA_DIR_ENV_VAR = "JIANJIAN_DATA_DIR"
LOG_LEVEL_ENV_VAR = "JIANJIAN_LOG_LEVEL"

DEFAULT_DATA_DIR = Path("~/.jianjian")
DEFAULT_WEEKLY_INK_LIMIT = 600
DEFAULT_TYPING_CHARS_PER_SECOND = 2.0

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class JianjianConfig(BaseModel):
    """Runtime settings.

    Parameters
    ----------
    data_dir:
        Root folder for letters, the home flag and pending notifications.
    weekly_ink_limit:
        Characters a local author may write per week (Monday to Sunday).
    typing_chars_per_second:
        Refill rate of the typing throttle.
    timezone:
        IANA zone name for calendar arithmetic; ``None`` uses the system zone.
    log_level:
        Logging level name for the command-line tool.
    notification_title, notification_body:
        Text of the unlock reminder.
    """

    model_config = ConfigDict(extra="forbid")

    data_dir: Path = Field(default_factory=lambda: DEFAULT_DATA_DIR.expanduser())
    weekly_ink_limit: NonNegativeInt = Field(default=DEFAULT_WEEKLY_INK_LIMIT, strict=True)
    typing_chars_per_second: PositiveFloat = DEFAULT_TYPING_CHARS_PER_SECOND
    timezone: Optional[str] = None
    log_level: LogLevel = "WARNING"
    notification_title: str = "Your letter has arrived"
    notification_body: str = "This letter can now be opened at home."

    @field_validator("data_dir")
    @classmethod
    def _expand_data_dir(cls, value: Path) -> Path:
        return value.expanduser()

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @property
    def letters_dir(self) -> Path:
        return self.data_dir / "letters"

    @property
    def home_flag_path(self) -> Path:
        return self.data_dir / "home.json"

    @property
    def notifications_path(self) -> Path:
        return self.data_dir / "notifications.json"

    def zone(self) -> tzinfo | None:
        """Return the configured zone, or ``None`` for the system zone."""
        if self.timezone is None:
            return None
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            raise ConfigError("timezone", f"unknown time zone {self.timezone!r}") from None

    @classmethod
    def from_dict(cls, data: dict[str, Any], source: str = "<dict>") -> "JianjianConfig":
        """Build a config from a mapping.

        Raises
        ------
        ConfigError
            On unknown keys or values of the wrong type or range.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ConfigError(source, _describe(exc)) from exc


def _describe(exc: ValidationError) -> str:
    unknown: list[str] = []
    problems: list[str] = []
    for error in exc.errors():
        key = ".".join(str(part) for part in error["loc"])
        if error["type"] == "extra_forbidden":
            unknown.append(key)
        else:
            problems.append(f"{key}: {error['msg']}")
    if unknown:
        problems.insert(0, f"unknown key(s): {', '.join(sorted(unknown))}")
    return "; ".join(problems)


def default_config_path() -> Path:
    """Return the config path from ``JIANJIAN_CONFIG`` or the default location."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return (DEFAULT_DATA_DIR / "config.yaml").expanduser()


def load_config(path: str | Path | None = None) -> JianjianConfig:
    """Load settings from YAML, then apply environment overrides.

    Raises
    ------
    ConfigError
        If the file exists but is not a valid YAML mapping of known keys.
    """
    config_path = Path(path).expanduser() if path is not None else default_config_path()

    data: dict[str, Any] = {}
    if config_path.exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(str(config_path), str(exc)) from exc
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(str(config_path), "top level must be a mapping")
        data = loaded

    env_data_dir = os.environ.get(DATA_DIR_ENV_VAR)
    if env_data_dir:
        data["data_dir"] = env_data_dir
    env_log_level = os.environ.get(LOG_LEVEL_ENV_VAR)
    if env_log_level:
        data["log_level"] = env_log_level

    return JianjianConfig.from_dict(data, source=str(config_path))
