"""
sm2.rating
----------

This module defines the Rating class.

Classes:
    Rating: Enum representing the four possible ratings when reviewing a card.
"""

from __future__ import annotations
from collections.abc import Sequence
from enum import IntEnum
from typing_extensions import Self

_LABELS = {
    "again": 1,
    "fail": 1,
    "hard": 2,
    "good": 3,
    "pass": 3,
    "medium": 3,
    "easy": 4,
}


class Rating(IntEnum):
    """
    Enum representing the four possible ratings when reviewing a card,
    ordered from the weakest to the strongest recall.
    """

    Fail = 1
    Hard = 2
    Pass = 3
    Easy = 4

    @classmethod
    def from_label(cls, label: str | Sequence[str]) -> Self:
        """
        Maps a free-text rating label, such as the value of a note's
        frontmatter field, to a Rating.

        Matching is case-insensitive. If a list of labels is given, only the first one is used.

        Args:
            label: The label to map, e.g. "again", "Good" or ["medium"].

        Returns:
            The matching Rating.

        Raises:
            ValueError: If the label is not recognised.
        """

        if not isinstance(label, str):
            label = str(label[0]) if len(label) > 0 else ""

        key = label.strip().lower()
        if key not in _LABELS:
            raise ValueError(f"Unknown rating label: {label!r}")

        return cls(_LABELS[key])


__all__ = ["Rating"]
