from __future__ import annotations

import json
import os
import re
import tempfile
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, ValidationError

from .errors import ConfigError

CONFIG_FILE_NAME = ".gatorconfig.json"
CONFIG_ENV_VAR = "GATOR_CONFIG"

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)([a-zA-Z]+)")


class Settings(BaseModel):
    user_agent: str = "gator"
    timeout_s: float = 10
    log_level: str = "INFO"


class Preferences(BaseModel):
    db_url: str
    current_user_name: str = ""
    settings: Settings = Field(default_factory=Settings)

    def with_user(self, name: str) -> "Preferences":
        return self.model_copy(update={"current_user_name": name})


@dataclass(slots=True)
class PreferencesLoadResult:
    prefs: Preferences
    path: Path


def default_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / CONFIG_FILE_NAME


def load_preferences(path: str | Path | None = None) -> PreferencesLoadResult:
    cfg_path = Path(path).expanduser() if path else default_config_path()
    if not cfg_path.exists():
        raise ConfigError(f"Config file not found: {cfg_path}")
    try:
        data = yaml.safe_load(cfg_path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Unreadable config file {cfg_path}: {exc}") from exc
    try:
        prefs = Preferences.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config file {cfg_path}: {exc}") from exc
    return PreferencesLoadResult(prefs=prefs, path=cfg_path)


def save_preferences(prefs: Preferences, path: str | Path) -> None:
    """Replace the preferences file in one step so readers never see a partial write."""
    cfg_path = Path(path)
    payload = json.dumps(prefs.model_dump(mode="json"), indent=2)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{cfg_path.name}.", dir=cfg_path.parent)
    try:
        with os.fdopen(fd, "w") as handle:
            handle.write(payload)
        os.chmod(tmp_name, 0o600)
        os.replace(tmp_name, cfg_path)
    except OSError as exc:
        Path(tmp_name).unlink(missing_ok=True)
        raise ConfigError(f"Unable to write config file {cfg_path}: {exc}") from exc


def parse_duration(value: str) -> timedelta:
    raw = value.strip()
    if len(raw) < 2:
        raise ValueError("Duration format must be like '10s', '1m30s' or '1h'.")
    total = timedelta()
    pos = 0
    for match in _DURATION_PART.finditer(raw):
        if match.start() != pos:
            break
        amount, unit = match.groups()
        total += _duration_to_timedelta(float(amount), unit.lower())
        pos = match.end()
    if pos == 0:
        raise ValueError("Duration missing numeric value.")
    if pos != len(raw):
        raise ValueError(f"Unparseable duration: {value!r}")
    return total


def _duration_to_timedelta(amount: float, unit: str) -> timedelta:
    match unit:
        case "ms":
            return timedelta(milliseconds=amount)
        case "s" | "sec" | "secs":
            return timedelta(seconds=amount)
        case "m" | "min" | "mins":
            return timedelta(minutes=amount)
        case "h" | "hr" | "hrs" | "hour" | "hours":
            return timedelta(hours=amount)
        case "d" | "day" | "days":
            return timedelta(days=amount)
        case "w" | "week" | "weeks":
            return timedelta(weeks=amount)
        case _:
            raise ValueError(f"Unsupported duration unit: {unit}")


def format_duration(delta: timedelta) -> str:
    seconds = delta.total_seconds()
    if seconds < 1:
        return f"{int(seconds * 1000)}ms"
    whole = int(seconds)
    hours, rest = divmod(whole, 3600)
    minutes, secs = divmod(rest, 60)
    parts = []
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if secs or not parts:
        parts.append(f"{secs}s")
    return "".join(parts)
