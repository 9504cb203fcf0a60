"""Channel logging for the core: one toggleable channel per subsystem."""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Optional

from clicker.config import SETTINGS_PATH, read_settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

DEFAULT_CHANNELS = {
    "stage": True,
    "upgrades": True,
    "production": False,
    "boost": True,
    "save": True,
}


@dataclass
class LoggerConfig:
    """Level, channel switches and an optional log file."""

    level: int = logging.INFO
    channels: Dict[str, bool] = field(default_factory=DEFAULT_CHANNELS.copy)
    log_file: Optional[Path] = None

    @classmethod
    def from_settings(cls, settings_path: Path) -> "LoggerConfig":
        data = read_settings(settings_path)
        level_name = str(data.get("logLevel", "INFO")).upper()
        channels = DEFAULT_CHANNELS.copy()
        raw_channels = data.get("logChannels", {})
        if isinstance(raw_channels, dict):
            channels.update({str(k): bool(v) for k, v in raw_channels.items()})
        log_file = data.get("logFile")
        return cls(
            level=getattr(logging, level_name, logging.INFO),
            channels=channels,
            log_file=Path(log_file) if log_file else None,
        )


class ChannelLogger:
    """Wrapper that only emits records when the channel is enabled."""

    def __init__(self, name: str, logger: logging.Logger, enabled: bool) -> None:
        self._logger = logger
        self._enabled = enabled
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def enabled(self) -> bool:
        return self._enabled

    @enabled.setter
    def enabled(self, value: bool) -> None:
        self._enabled = value

    def debug(self, msg: str, *args, **kwargs) -> None:
        if self._enabled:
            self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs) -> None:
        if self._enabled:
            self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs) -> None:
        if self._enabled:
            self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs) -> None:
        if self._enabled:
            self._logger.error(msg, *args, **kwargs)


def null_channel(name: str) -> ChannelLogger:
    """Disabled channel for components built without a :class:`GameLogger`."""

    return ChannelLogger(name, logging.getLogger(f"clicker.{name}"), False)


class GameLogger:
    """Owns the ``clicker`` logger tree and hands out channels."""

    def __init__(self, config: LoggerConfig) -> None:
        logging.basicConfig(level=config.level, format=LOG_FORMAT, stream=sys.stdout)
        self._root = logging.getLogger("clicker")
        self._root.setLevel(config.level)
        if config.log_file:
            handler = logging.FileHandler(config.log_file, encoding="utf-8")
            handler.setFormatter(logging.Formatter(LOG_FORMAT))
            self._root.addHandler(handler)
        self._channels: Dict[str, ChannelLogger] = {}
        for name, enabled in config.channels.items():
            self._channels[name] = ChannelLogger(name, self._root.getChild(name), enabled)

    def channel(self, name: str) -> ChannelLogger:
        if name not in self._channels:
            # Channels missing from settings start muted.
            self._channels[name] = ChannelLogger(name, self._root.getChild(name), False)
        return self._channels[name]

    def set_enabled(self, name: str, enabled: bool) -> None:
        self.channel(name).enabled = enabled

    def channels(self) -> Iterable[str]:
        return self._channels.keys()


def init_logger(settings_path: Optional[Path] = None) -> GameLogger:
    """Build the logger tree from settings.json."""

    return GameLogger(LoggerConfig.from_settings(settings_path or SETTINGS_PATH))


__all__ = ["GameLogger", "LoggerConfig", "ChannelLogger", "init_logger", "null_channel", "DEFAULT_CHANNELS"]
