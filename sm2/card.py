"""
sm2.card
--------

This module defines the Card class.

Classes:
    Card: Represents a memorized item in the SM-2 system.
    InvalidCardError: Raised when a Card does not satisfy the scheduler's preconditions.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timezone
import json
from typing import TypedDict
from uuid import uuid4
from typing_extensions import Self
from sm2.state import State


class InvalidCardError(ValueError):
    """
    Raised when a Card cannot be scheduled because it violates the record invariants,
    e.g. a learning step that does not exist in the scheduler's learning steps.
    """


class CardDict(TypedDict):
    """
    JSON-serializable dictionary representation of a Card object.
    """

    card_id: str
    state: int
    interval: int
    ease_factor: float | None
    step: int
    due: str


@dataclass(init=False)
class Card:
    """
    Represents a memorized item in the SM-2 system.

    Attributes:
        card_id: Opaque id of the card. Defaults to a random hex uuid.
        state: The card's current learning state.
        interval: The card's current interval in days. Only meaningful in the Retaining state.
        ease_factor: Multiplier controlling how fast the interval grows, or None until the card graduates
            with the scheduler's starting ease.
        step: The card's current learning step.
        due: The date and time when the card is due next.
    """

    card_id: str
    state: State
    interval: int
    ease_factor: float | None
    step: int
    due: datetime

    def __init__(
        self,
        card_id: str | None = None,
        state: State = State.New,
        interval: int = 0,
        ease_factor: float | None = None,
        step: int = 0,
        due: datetime | None = None,
    ) -> None:
        if card_id is None:
            card_id = uuid4().hex
        self.card_id = card_id

        self.state = state
        self.interval = interval
        self.ease_factor = ease_factor
        self.step = step

        if due is None:
            due = datetime.now(timezone.utc)
        self.due = due

    def to_dict(self) -> CardDict:
        """
        Returns a JSON-serializable dictionary representation of the Card object.

        This is the shape to persist and hand back to the scheduler later.

        Returns:
            A dictionary representation of the Card object.
        """

        return {
            "card_id": self.card_id,
            "state": self.state.value,
            "interval": self.interval,
            "ease_factor": self.ease_factor,
            "step": self.step,
            "due": self.due.isoformat(),
        }

    @classmethod
    def from_dict(cls, source_dict: CardDict) -> Self:
        """
        Creates a Card object from an existing dictionary.

        Args:
            source_dict: A dictionary representing an existing Card object.

        Returns:
            A Card object created from the provided dictionary.
        """

        return cls(
            card_id=str(source_dict["card_id"]),
            state=State(int(source_dict["state"])),
            interval=int(source_dict["interval"]),
            ease_factor=(
                float(source_dict["ease_factor"])
                if source_dict["ease_factor"] is not None
                else None
            ),
            step=int(source_dict["step"]),
            due=datetime.fromisoformat(source_dict["due"]),
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the Card object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the Card object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a Card object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing Card object.

        Returns:
            Self: A Card object created from the JSON string.
        """

        source_dict: CardDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)


__all__ = ["Card", "InvalidCardError"]
