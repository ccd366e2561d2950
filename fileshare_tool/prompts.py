"""Interactive prompts: lists, checklists, confirmations and text input."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Generic, List, Optional, Sequence, Tuple, TypeVar

from prompt_toolkit import prompt as pt_prompt
from prompt_toolkit.formatted_text import FormattedText
from prompt_toolkit.styles import Style as PtStyle
from prompt_toolkit.validation import ValidationError, Validator
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import display

T = TypeVar("T")

PAGE_SIZE = 15

# returns an error message, or None when the input is acceptable
Check = Callable[[str], Optional[str]]
Choice = Tuple[str, T]

PROMPT_STYLE = PtStyle.from_dict(
    {
        "qmark": "bold #A3BE8C",
        "question": "bold",
        "hint": "#4C566A",
    }
)


@dataclass(frozen=True)
class PromptResult(Generic[T]):
    """Outcome of a prompt. ``value`` is only meaningful when not ``cancelled``."""

    value: Optional[T] = None
    cancelled: bool = False

    @classmethod
    def of(cls, value: T) -> "PromptResult[T]":
        return cls(value=value, cancelled=False)

    @classmethod
    def cancel(cls) -> "PromptResult[T]":
        return cls(value=None, cancelled=True)


class CheckValidator(Validator):
    def __init__(self, check: Check):
        self.check = check

    def validate(self, document) -> None:
        problem = self.check(document.text)
        if problem:
            raise ValidationError(message=problem, cursor_position=len(document.text))


def not_empty(message: str = "Input cannot be empty") -> Check:
    def _check(text: str) -> Optional[str]:
        return None if text.strip() else message
    return _check


def parse_indexes(text: str, count: int) -> List[int]:
    """Parse ``"1,3 5-7"`` into sorted zero-based indexes below ``count``."""
    picked = set()
    tokens = text.replace(",", " ").split()
    if not tokens:
        raise ValueError("You must select at least one item")
    for token in tokens:
        if "-" in token:
            lo_text, hi_text = token.split("-", 1)
            try:
                lo, hi = int(lo_text), int(hi_text)
            except ValueError:
                raise ValueError(f"Invalid range: {token}") from None
            if lo > hi:
                lo, hi = hi, lo
            numbers = range(lo, hi + 1)
        else:
            try:
                numbers = [int(token)]
            except ValueError:
                raise ValueError(f"Not a number: {token}") from None
        for number in numbers:
            if number < 1 or number > count:
                raise ValueError(f"Choose numbers between 1 and {count}")
            picked.add(number - 1)
    return sorted(picked)


class Prompter:
    """Blocking prompts for the single interactive thread.

    ``ask`` has the signature of :func:`prompt_toolkit.prompt`; Ctrl-C or Ctrl-D
    inside it turns into a cancelled :class:`PromptResult`.
    """

    def __init__(self, ask: Optional[Callable[..., str]] = None, target: Optional[Console] = None, page_size: int = PAGE_SIZE):
        self.ask = ask or pt_prompt
        self.console = target or display.console
        self.page_size = max(1, page_size)

    def _message(self, question: str, hint: str = "") -> FormattedText:
        parts = [("class:qmark", "? "), ("class:question", question)]
        if hint:
            parts.append(("class:hint", f" {hint}"))
        parts.append(("", " "))
        return FormattedText(parts)

    def _ask(self, question: str, check: Optional[Check] = None, hint: str = "", **kwargs) -> Optional[str]:
        while True:
            try:
                answer = self.ask(
                    self._message(question, hint),
                    validator=CheckValidator(check) if check else None,
                    validate_while_typing=False,
                    style=PROMPT_STYLE,
                    **kwargs,
                )
            except (KeyboardInterrupt, EOFError):
                return None
            if answer is None:
                return None
            # CheckValidator only runs inside prompt_toolkit; an injected ask is checked here
            problem = check(answer) if check else None
            if not problem:
                return answer
            self.console.print(f"[red]>> {escape(problem)}[/]")

    def _choice_table(self, choices: Sequence[Choice], start: int, stop: int) -> Table:
        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column(justify="right", style="bold")
        table.add_column()
        for idx in range(start, stop):
            table.add_row(f"{idx + 1}.", escape(choices[idx][0]))
        return table

    def select(self, message: str, choices: Sequence[Choice]) -> PromptResult:
        if not choices:
            return PromptResult.cancel()
        total = len(choices)
        pages = math.ceil(total / self.page_size)
        page = 0

        def _check(text: str) -> Optional[str]:
            value = text.strip().lower()
            if value in ("q", "n", "p"):
                return None
            if value.isdigit() and 1 <= int(value) <= total:
                return None
            return f"Enter a number between 1 and {total}"

        while True:
            start = page * self.page_size
            stop = min(start + self.page_size, total)
            self.console.print(f"[bold]{escape(message)}[/]")
            self.console.print(self._choice_table(choices, start, stop))
            hint = "(q to cancel)"
            if pages > 1:
                hint = f"(page {page + 1}/{pages}, n/p to move, q to cancel)"
            answer = self._ask("Choice:", _check, hint)
            if answer is None:
                return PromptResult.cancel()
            answer = answer.strip().lower()
            if answer == "q":
                return PromptResult.cancel()
            if answer == "n":
                page = min(page + 1, pages - 1)
                continue
            if answer == "p":
                page = max(page - 1, 0)
                continue
            return PromptResult.of(choices[int(answer) - 1][1])

    def checklist(self, message: str, choices: Sequence[Choice]) -> PromptResult:
        if not choices:
            return PromptResult.cancel()
        total = len(choices)

        def _check(text: str) -> Optional[str]:
            if text.strip().lower() == "q":
                return None
            try:
                parse_indexes(text, total)
            except ValueError as exc:
                return str(exc)
            return None

        self.console.print(f"[bold]{escape(message)}[/]")
        self.console.print(self._choice_table(choices, 0, total))
        answer = self._ask("Items:", _check, "(e.g. 1,3,5-7; q to cancel)")
        if answer is None or answer.strip().lower() == "q":
            return PromptResult.cancel()
        return PromptResult.of([choices[i][1] for i in parse_indexes(answer, total)])

    def confirm(self, message: str, default: bool = False) -> bool:
        """Yes/no question; cancelling counts as "no"."""

        def _check(text: str) -> Optional[str]:
            if text.strip().lower() in ("", "y", "yes", "n", "no"):
                return None
            return "Please answer y or n"

        answer = self._ask(message, _check, "(Y/n)" if default else "(y/N)")
        if answer is None:
            return False
        value = answer.strip().lower()
        if not value:
            return default
        return value in ("y", "yes")

    def text(self, message: str, check: Optional[Check] = None) -> PromptResult:
        answer = self._ask(message, check or not_empty())
        if answer is None:
            return PromptResult.cancel()
        return PromptResult.of(answer.strip())

    def password(self, message: str) -> PromptResult:
        answer = self._ask(message, not_empty("Password cannot be empty"), is_password=True)
        if answer is None:
            return PromptResult.cancel()
        return PromptResult.of(answer)


__all__ = [
    "PAGE_SIZE",
    "PromptResult",
    "CheckValidator",
    "Prompter",
    "not_empty",
    "parse_indexes",
]
