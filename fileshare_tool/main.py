"""High-level entrypoint for the fileshare tool."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from . import display
from .cli import parse_args
from .commands import about_command, delete_command, password_command, setup_command, upload_command
from .config import ConfigStore
from .errors import ConfigurationError, report_error

LOG_FILE_NAME = "fileshare.log"


def setup_logger(log_file: Path) -> logging.Logger:
    logger = logging.getLogger("fileshare")
    logger.setLevel(logging.INFO)
    logger.handlers.clear()
    logger.propagate = False
    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")

    # the terminal belongs to the interactive UI, so only the file gets log lines
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setFormatter(fmt)
    logger.addHandler(fh)
    return logger


def dispatch(command: str, store: ConfigStore) -> int:
    if command == "upload":
        return upload_command(store)
    if command == "delete":
        return delete_command(store)
    if command == "password":
        return password_command(store)
    if command == "setup":
        return setup_command(store)
    if command == "about":
        return about_command(store)
    raise ValueError(f"Unknown command: {command}")


def main(argv: Optional[List[str]] = None, store: Optional[ConfigStore] = None) -> int:
    args = parse_args(argv)
    logger = logging.getLogger("fileshare")

    try:
        store = (store or ConfigStore()).load()
        logger = setup_logger(store.config_dir / LOG_FILE_NAME)
        logger.info(f"[START] command={args.command} config={store.path}")
        return dispatch(args.command, store)
    except ConfigurationError as exc:
        logger.error(f"[CONFIG] {exc}")
        display.error(str(exc))
        return 1
    except KeyboardInterrupt:
        logger.warning("[INTERRUPT] cancelled by user")
        display.warning("Interrupted")
        return 130
    except Exception as exc:
        report_error(exc)
        return 1


__all__ = ["main", "dispatch", "setup_logger"]
