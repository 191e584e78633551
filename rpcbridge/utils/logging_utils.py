"""Loguru helpers for rpcbridge log sinks."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

_SINK_IDS: dict[str, int] = {}

_STDERR_FORMAT = "<dim>{time:HH:mm:ss.SSS}</dim> | <level>{level: <8}</level> | <level>{message}</level>"


def configure_logging(level: str = "INFO", *, enabled: bool = True) -> None:
    """Route rpcbridge logs to stderr at the given level, or silence them."""
    if not enabled:
        logger.disable("rpcbridge")
        return
    if "stderr" in _SINK_IDS:
        logger.remove(_SINK_IDS.pop("stderr"))
    _SINK_IDS["stderr"] = logger.add(sys.stderr, level=level.upper(), format=_STDERR_FORMAT)
    logger.enable("rpcbridge")


def ensure_rotating_log_file(name: str, level: str = "INFO", log_dir: Path | None = None) -> Path:
    """Ensure a rotating log sink for the given name."""
    directory = log_dir or Path.home() / ".rpcbridge" / "logs"
    log_path = directory / f"{name}.log"
    if name in _SINK_IDS:
        return log_path
    directory.mkdir(parents=True, exist_ok=True)
    sink_id = logger.add(
        str(log_path),
        level=level,
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        encoding="utf-8",
        backtrace=False,
        diagnose=False,
    )
    _SINK_IDS[name] = sink_id
    return log_path


def remove_log_sink(name: str) -> bool:
    """Remove a sink previously installed under name."""
    sink_id = _SINK_IDS.pop(name, None)
    if sink_id is None:
        return False
    logger.remove(sink_id)
    return True
