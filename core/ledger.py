"""Per-character status ledger for a typing prompt."""

import logging
from dataclasses import dataclass
from typing import NamedTuple

from core.models import CharStatus
from core.validation import clamp_index

log = logging.getLogger("typesprint.ledger")


@dataclass
class Character:
    """One prompt position."""

    char: str
    status: CharStatus = CharStatus.PENDING


class SkipResult(NamedTuple):
    """Outcome of skipping the rest of a word."""

    new_index: int
    consumed: str


class CharacterLedger:
    """Tracks the status of every character of the prompt.

    Positions skipped with the space key stay incorrect on later full
    recomputes until the input is shortened back over them.
    """

    def __init__(self, text: str = ""):
        self.text = text
        self.characters: list[Character] = []
        self._skipped: set[int] = set()
        self.reset(text)

    def reset(self, text: str) -> None:
        """Rebuild the ledger for a new prompt, all positions pending."""
        self.text = text
        self.characters = [Character(char=c) for c in text]
        self._skipped.clear()

    def __len__(self) -> int:
        return len(self.characters)

    def apply_input(self, typed: str) -> None:
        """Recompute every position from the full input buffer.

        Positions covered by the input become correct or incorrect,
        positions past the end of the input go back to pending.

        Args:
            typed: Everything the user has typed so far
        """
        typed_len = len(typed)
        for i, character in enumerate(self.characters):
            if i < typed_len:
                if i in self._skipped:
                    character.status = CharStatus.INCORRECT
                elif typed[i] == self.text[i]:
                    character.status = CharStatus.CORRECT
                else:
                    character.status = CharStatus.INCORRECT
            else:
                character.status = CharStatus.PENDING
                self._skipped.discard(i)

    def apply_space_skip(self, from_index: int) -> SkipResult:
        """Skip the rest of the current word.

        Marks [from_index, next space) incorrect. If that boundary is a
        real space it is marked correct and consumed too.

        Args:
            from_index: Cursor position where space was pressed

        Returns:
            SkipResult with the new cursor and the prompt slice consumed
        """
        length = len(self.text)
        start = clamp_index(from_index, length)
        if start >= length - 1:
            return SkipResult(start, "")

        boundary = self.text.find(" ", start)
        if boundary == -1:
            boundary = length

        for i in range(start, boundary):
            self.characters[i].status = CharStatus.INCORRECT
            self._skipped.add(i)

        if boundary < length:
            self.characters[boundary].status = CharStatus.CORRECT
            boundary += 1

        log.debug(f"Skipped word at {start}, cursor now {boundary}")
        return SkipResult(boundary, self.text[start:boundary])

    def mark_missed(self) -> int:
        """Reclassify every pending position as missed.

        Returns:
            Number of positions marked
        """
        count = 0
        for character in self.characters:
            if character.status is CharStatus.PENDING:
                character.status = CharStatus.MISSED
                count += 1
        return count

    def counts(self) -> dict[CharStatus, int]:
        """Count positions per status."""
        result = {status: 0 for status in CharStatus}
        for character in self.characters:
            result[character.status] += 1
        return result

    def snapshot(self) -> tuple[Character, ...]:
        """Copy of the ledger that later mutations do not affect."""
        return tuple(Character(c.char, c.status) for c in self.characters)
