"""Error types and full error reporting for the fileshare tool."""

from __future__ import annotations

import logging
import traceback
from typing import Optional

from rich.console import Console

from . import display
from .config import ConfigStore

logger = logging.getLogger("fileshare")


class FileshareError(Exception):
    pass


class ConfigurationError(FileshareError):
    pass


def require_config(store: ConfigStore) -> None:
    if not store.is_configured():
        raise ConfigurationError(
            f"SSH key not found at {store.key_path()}. Please run: fileshare setup"
        )


def error_code(exc: BaseException) -> Optional[object]:
    for attr in ("errno", "code"):
        value = getattr(exc, attr, None)
        if value is not None:
            return value
    return None


def report_error(exc: BaseException, target: Optional[Console] = None) -> None:
    """Print everything known about ``exc``: type, code, message and the whole traceback.

    Nothing is shortened; the same report goes to the log file.
    """
    out = target or display.err_console
    out.print()
    out.print("[red]\\[ERROR][/]")
    out.print()
    out.print(f"[red]Error Type:[/] {type(exc).__name__}")
    code = error_code(exc)
    if code is not None:
        out.print(f"[red]Error Code:[/] {code}")
    out.print("[red]Message:[/] ", end="")
    out.print(str(exc) or repr(exc), markup=False)
    stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    out.print()
    out.print("[red]Stack Trace:[/]")
    out.print(stack, markup=False, soft_wrap=True, end="")
    out.print()
    logger.error(f"[ERROR] {type(exc).__name__}: {exc}\n{stack}")


__all__ = ["FileshareError", "ConfigurationError", "require_config", "error_code", "report_error"]
