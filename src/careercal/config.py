"""Configuration management for careercal."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

CAREERCAL_HOME = Path(os.environ.get("CAREERCAL_HOME", Path.home() / "careercal"))
CONFIG_FILE = CAREERCAL_HOME / "config" / "careercal.conf"
DATA_DIR = CAREERCAL_HOME / "data"


@dataclass
class Config:
    """careercal configuration."""

    timezone: str = "UTC"
    events_file: str = ""
    user_id: str = "local"
    max_instances: int = 52
    min_confidence: int = 50
    reminder_window_minutes: int = 5
    reminder_check_minutes: int = 5
    work_hours: str = "09:00-17:00"
    claude_binary: str = "claude"
    claude_model: str = ""
    # Telegram reminder delivery
    telegram_bot_token: str = ""
    telegram_chat_ids: list[int] = field(default_factory=list)

    @property
    def events_path(self) -> Path:
        if self.events_file:
            return Path(self.events_file).expanduser()
        return DATA_DIR / "events.json"

    @property
    def work_hour_range(self) -> tuple[int, int]:
        """Work hours as (start hour, end hour), falling back to 9-17 when malformed."""
        try:
            start_str, end_str = self.work_hours.split("-")
            start, end = int(start_str.split(":")[0]), int(end_str.split(":")[0])
        except ValueError:
            logger.warning(f"Invalid WORK_HOURS value {self.work_hours!r}, using 09:00-17:00")
            return 9, 17
        if not 0 <= start < end <= 24:
            logger.warning(f"Invalid WORK_HOURS value {self.work_hours!r}, using 09:00-17:00")
            return 9, 17
        return start, end


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from unquoted values."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _positive_int(key: str, value: str, default: int) -> int:
    try:
        number = int(value)
    except ValueError:
        logger.warning(f"Invalid {key.upper()} value {value!r}, using {default}")
        return default
    if number < 1:
        logger.warning(f"{key.upper()} must be >= 1, using {default}")
        return default
    return number


def _percentage(key: str, value: str, default: int) -> int:
    try:
        number = int(value)
    except ValueError:
        logger.warning(f"Invalid {key.upper()} value {value!r}, using {default}")
        return default
    if not 0 <= number <= 100:
        logger.warning(f"{key.upper()} must be 0-100, using {default}")
        return default
    return number


def parse_config(text: str) -> Config:
    """Parse KEY=value lines into a Config. Unknown keys are ignored."""
    config = Config()

    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "timezone":
                config.timezone = value
            case "events_file":
                config.events_file = value
            case "user_id":
                config.user_id = value
            case "max_instances":
                config.max_instances = _positive_int(key, value, config.max_instances)
            case "min_confidence":
                config.min_confidence = _percentage(key, value, config.min_confidence)
            case "reminder_window_minutes":
                config.reminder_window_minutes = _positive_int(key, value, config.reminder_window_minutes)
            case "reminder_check_minutes":
                config.reminder_check_minutes = _positive_int(key, value, config.reminder_check_minutes)
            case "work_hours":
                config.work_hours = value
            case "claude_binary":
                config.claude_binary = value
            case "claude_model":
                config.claude_model = value
            case "telegram_bot_token":
                config.telegram_bot_token = value
            case "telegram_chat_ids":
                try:
                    config.telegram_chat_ids = [int(c.strip()) for c in value.split(",") if c.strip()]
                except ValueError:
                    logger.warning(f"Invalid TELEGRAM_CHAT_IDS value {value!r}, ignoring")

    return config


def load_config(path: Path | None = None) -> Config:
    """Load configuration from careercal.conf (defaults if the file is missing)."""
    path = path or CONFIG_FILE
    if not path.exists():
        return Config()
    return parse_config(path.read_text())
