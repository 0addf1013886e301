# ==============================================================================
# Saikei Roads - Procedural Road Meshes for Blender
# Copyright (c) 2025 Michael Yoder / Desert Springs Civil Engineering PLLC
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
# You should have received a copy of the GNU General Public License along with
# this program. If not, see <https://www.gnu.org/licenses/>.
#
# Primary Author: Michael Yoder
# Company: Desert Springs Civil Engineering PLLC
# ==============================================================================

"""
Logging Configuration Module
=============================

All Saikei Roads loggers live under the "saikei.roads" namespace, next to
the other Saikei tools, and write to Blender's console (stdout).

Usage:
    from saikei_roads.core.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("Road rebuilt")
    logger.debug("Segment %d resolution: %d", index, resolution)

Log Levels:
    DEBUG    - Per-segment and per-terrain detail
    INFO     - Operation summaries (rebuild, match elevation, elevate terrain)
    WARNING  - Something unexpected but recoverable
    ERROR    - Operation failed but the add-on continues
"""

import logging
import sys
from typing import Optional, Union

LOGGER_PREFIX = "saikei"
PACKAGE_NAME = "saikei_roads"
NAMESPACE = f"{LOGGER_PREFIX}.roads"

DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
DETAILED_FORMAT = "[%(levelname)s] %(asctime)s - %(name)s:%(lineno)d - %(message)s"

# Marks the console handler installed by setup_logging()
_HANDLER_ATTR = "_saikei_roads_console"

_initialized = False


def _console_handlers(logger: logging.Logger):
    return [h for h in logger.handlers if getattr(h, _HANDLER_ATTR, False)]


def setup_logging(
    level: int = logging.INFO,
    detailed: bool = False,
    stream: Optional[object] = None
) -> logging.Logger:
    """Install the console handler on the "saikei" root logger.

    Calling it again replaces the previous console handler; handlers added
    by others (e.g. test capture) are left alone.

    Args:
        level: Logging level
        detailed: Include timestamps and line numbers
        stream: Output stream (defaults to sys.stdout for Blender console)

    Returns:
        The "saikei" root logger
    """
    global _initialized

    root_logger = logging.getLogger(LOGGER_PREFIX)
    for handler in _console_handlers(root_logger):
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(logging.Formatter(DETAILED_FORMAT if detailed else DEFAULT_FORMAT))
    setattr(handler, _HANDLER_ATTR, True)
    root_logger.addHandler(handler)

    # Blender's own root logger would print everything twice
    root_logger.propagate = False

    _initialized = True
    set_log_level(level)
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, moved into the saikei namespace.

    "saikei_roads.core.terrain" becomes "saikei.roads.core.terrain"; other
    names without the "saikei" prefix get it prepended.
    """
    if not _initialized:
        setup_logging()

    if name.startswith(PACKAGE_NAME):
        name = NAMESPACE + name[len(PACKAGE_NAME):]
    elif not name.startswith(LOGGER_PREFIX):
        name = f"{LOGGER_PREFIX}.{name}"

    return logging.getLogger(name)


def set_log_level(level: Union[int, str]) -> None:
    """Change the level of the root logger and its console handler.

    Args:
        level: Level number or name ("DEBUG", "info", ...)

    Raises:
        ValueError: If `level` is an unknown level name
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved

    root_logger = logging.getLogger(LOGGER_PREFIX)
    root_logger.setLevel(level)
    for handler in _console_handlers(root_logger):
        handler.setLevel(level)


def enable_debug() -> None:
    set_log_level(logging.DEBUG)


def disable_debug() -> None:
    set_log_level(logging.INFO)


def log_startup_banner(version: str) -> None:
    logger = get_logger("startup")
    logger.info("=" * 50)
    logger.info("Saikei Roads v%s - Loading...", version)
    logger.info("=" * 50)


def log_startup_complete() -> None:
    logger = get_logger("startup")
    logger.info("Saikei Roads loaded successfully!")
    logger.info("Operators: F3 search > Saikei")
    logger.info("=" * 50)


def log_shutdown() -> None:
    get_logger("startup").info("Saikei Roads unregistered")


__all__ = [
    "setup_logging",
    "get_logger",
    "set_log_level",
    "enable_debug",
    "disable_debug",
    "log_startup_banner",
    "log_startup_complete",
    "log_shutdown",
    "LOGGER_PREFIX",
]
