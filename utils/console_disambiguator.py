"""
Console disambiguator — lets the operator pick a vocabulary entry in the
terminal.

Candidates are listed with their index; the last index (when allowed) means
"none of these".  Invalid answers are rejected and the question repeated.
"""

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

NONE_OF_THESE = "Keine davon / aucun de ceux-ci (neu erstellen)"


class ConsoleDisambiguator:
    """
    Interactive Disambiguator on stdin/stdout.

    Args:
        read_line: Function that shows a prompt and returns the answer.
        write_line: Function that prints one line.
    """

    def __init__(
        self,
        read_line: Callable[[str], str] = input,
        write_line: Callable[[str], None] = print,
    ):
        self._read_line = read_line
        self._write_line = write_line

    def ask(
        self,
        prompt: str,
        candidates: list[Any],
        render_item: Callable[[Any], str],
        allow_none: bool = True,
    ) -> Any | None:
        options = [render_item(candidate) for candidate in candidates]
        if allow_none:
            options.append(NONE_OF_THESE)
        if not options:
            return None

        self._write_line(prompt)
        for index, option in enumerate(options):
            self._write_line(f"\t{index}) {option}")

        last = len(options) - 1
        while True:
            answer = self._read_line(f"Auswahl (0-{last}): ").strip()
            # isdigit() also accepts "²", which int() rejects
            if answer.isdecimal() and 0 <= int(answer) <= last:
                break
            self._write_line(
                f"Diese Antwort ist ungültig. Wähle eine Zahl zwischen 0 und {last}"
            )

        choice = int(answer)
        if allow_none and choice == last:
            logger.info(f"Operator chose none of {len(candidates)} candidates")
            return None
        logger.info(f"Operator chose '{options[choice]}'")
        return candidates[choice]
