"""
Interactive console prompts used to fill in missing credentials and confirm actions.

Every prompt converts Ctrl-C / Ctrl-D into PromptCancelled so scripts can
exit cleanly with a single handler around their main flow.
"""

import getpass
from typing import Any, List, Optional, Tuple

CANCELLED_MESSAGE = "\n👋 Cancelled by user"

YES_ANSWERS = {"y", "yes"}
NO_ANSWERS = {"n", "no"}


class PromptCancelled(Exception):
    """Raised when the user aborts an interactive prompt."""


def _read(reader, message: str) -> str:
    try:
        return reader(message)
    except (KeyboardInterrupt, EOFError) as e:
        raise PromptCancelled() from e


def ask_text(message: str, default: Optional[str] = None) -> str:
    """
    Ask for a line of text.

    Args:
        message: Question shown to the user
        default: Value returned when the answer is empty

    Returns:
        The stripped answer, or the default
    """
    suffix = f" ({default})" if default else ""

    while True:
        answer = _read(input, f"{message}{suffix} ").strip()
        if answer:
            return answer
        if default is not None:
            return default


def ask_secret(message: str) -> str:
    """Ask for a value without echoing it."""
    while True:
        answer = _read(getpass.getpass, f"{message} ").strip()
        if answer:
            return answer


def ask_confirm(message: str, default: bool = False) -> bool:
    """Ask a yes/no question."""
    suffix = "[Y/n]" if default else "[y/N]"

    while True:
        answer = _read(input, f"{message} {suffix} ").strip().lower()
        if not answer:
            return default
        if answer in YES_ANSWERS:
            return True
        if answer in NO_ANSWERS:
            return False
        print("Please answer y or n.")


def ask_select(message: str, choices: List[Tuple[str, Any]]) -> Any:
    """
    Ask the user to pick one entry from a numbered menu.

    Args:
        message: Question shown above the menu
        choices: List of (label, value) pairs

    Returns:
        The value of the chosen entry
    """
    if not choices:
        raise ValueError("ask_select needs at least one choice")

    print(message)
    for i, (label, _) in enumerate(choices, start=1):
        print(f"  {i}) {label}")

    while True:
        answer = _read(input, f"Choice [1-{len(choices)}]: ").strip()
        if answer.isdigit() and 1 <= int(answer) <= len(choices):
            return choices[int(answer) - 1][1]
        print(f"Please enter a number between 1 and {len(choices)}.")
