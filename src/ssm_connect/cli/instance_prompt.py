"""Interactive instance selection UI for the CLI layer.

This module is responsible for:

* Rendering a numbered menu of resolved instances.
* Prompting the operator for a number via questionary.
* Returning the chosen :class:`InstanceRecord`.

All display-related logic lives here — no inventory queries, no
session handling.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from ssm_connect.cli.console import console, escape
from ssm_connect.core.models import InstanceRecord
from ssm_connect.exceptions import EnvironmentError, InputError


def _import_questionary() -> Any:
    """Import questionary lazily for interactive selection."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


# ---------------------------------------------------------------------------
# Presentation helpers (pure transforms — no I/O themselves)
# ---------------------------------------------------------------------------

def _build_menu_line(index: int, record: InstanceRecord) -> str:
    """Build one menu line: ``"1) i-0abc (web-1)"`` for *index* 0."""
    return f"{index + 1}) {record.label()}"


def _parse_choice(answer: str, count: int) -> int:
    """Convert the operator's answer into a zero-based index.

    Empty input selects the first entry.

    Raises
    ------
    InputError
        If *answer* is not a number in ``[1, count]``.
    """
    answer = answer.strip()
    if not answer:
        return 0
    try:
        choice = int(answer)
    except ValueError:
        raise InputError(
            f"Invalid selection {answer!r}.",
            hint=f"Enter a number between 1 and {count}.",
        ) from None
    if not 1 <= choice <= count:
        raise InputError(
            f"Selection {choice} is out of range.",
            hint=f"Enter a number between 1 and {count}.",
        )
    return choice - 1


# ---------------------------------------------------------------------------
# Public prompt function
# ---------------------------------------------------------------------------

def prompt_instance_selection(records: Sequence[InstanceRecord]) -> InstanceRecord:
    """Display *records* as a numbered menu and ask for one of them.

    There is a single attempt: an invalid answer fails rather than
    prompting again.

    Raises
    ------
    InputError
        If the answer is not a valid menu number, the list is empty, or
        the prompt was cancelled.
    """
    if not records:
        raise InputError("There are no instances to choose from.")

    questionary = _import_questionary()

    console.print()
    for i, record in enumerate(records):
        console.print(f"  {escape(_build_menu_line(i, record))}")
    console.print()

    answer: str | None = questionary.text(
        f"Select instance [1-{len(records)}] (default 1):",
        default="",
    ).ask()  # Returns None on Ctrl+C / Esc

    if answer is None:
        raise InputError("No instance selected.")

    return records[_parse_choice(answer, len(records))]
