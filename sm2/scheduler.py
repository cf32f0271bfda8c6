"""
sm2.scheduler
-------------

This module defines the Scheduler class as well as the default values of its settings.

Classes:
    Scheduler: The SM-2 spaced-repetition scheduler.
"""

from __future__ import annotations
from copy import copy
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import json
import logging
import math
from typing import TypedDict
from typing_extensions import Self
from sm2.card import Card, InvalidCardError
from sm2.rating import Rating
from sm2.review_log import ReviewLog
from sm2.state import State

logger = logging.getLogger(__name__)

DEFAULT_LEARNING_STEPS = (1, 10)
DEFAULT_GRADUATING_INTERVAL = 1
DEFAULT_EASY_INTERVAL = 4
DEFAULT_STARTING_EASE = 2.5
DEFAULT_MINIMUM_EASE = 1.3
DEFAULT_EASY_BONUS = 1.3
DEFAULT_HARD_INTERVAL_MULTIPLIER = 1.2
DEFAULT_MAXIMUM_INTERVAL = 36500

FAIL_EASE_PENALTY = 0.20
HARD_EASE_PENALTY = 0.15
EASY_EASE_BONUS = 0.15

LEARNING_STATES = (State.New, State.Acquiring, State.Relapsed)


class SchedulerDict(TypedDict):
    """
    JSON-serializable dictionary representation of a Scheduler object.
    """

    learning_steps: list[float]
    graduating_interval: int
    easy_interval: int
    starting_ease: float
    minimum_ease: float
    easy_bonus: float
    hard_interval_multiplier: float
    maximum_interval: int


@dataclass(frozen=True)
class Scheduler:
    """
    The SM-2 scheduler.

    Enables the reviewing and future scheduling of cards according to the SM-2 algorithm:
    new cards walk a ladder of short learning steps measured in minutes, then graduate
    to review intervals measured in days that grow by the card's ease factor.

    The scheduler holds no state besides its settings, which can't be changed after construction.

    Attributes:
        learning_steps: Minutes until a learning card is due again, one entry per learning step.
        graduating_interval: Days assigned to a card that passes its last learning step.
        easy_interval: Days assigned to a card rated Easy while learning.
        starting_ease: Ease factor given to a graduating card that has none yet.
        minimum_ease: Lowest value the ease factor can be decreased to.
        easy_bonus: Extra interval multiplier for review cards rated Easy.
        hard_interval_multiplier: Interval multiplier for review cards rated Hard.
        maximum_interval: The maximum number of days a card can be scheduled into the future.
    """

    learning_steps: tuple[float, ...] = DEFAULT_LEARNING_STEPS
    graduating_interval: int = DEFAULT_GRADUATING_INTERVAL
    easy_interval: int = DEFAULT_EASY_INTERVAL
    starting_ease: float = DEFAULT_STARTING_EASE
    minimum_ease: float = DEFAULT_MINIMUM_EASE
    easy_bonus: float = DEFAULT_EASY_BONUS
    hard_interval_multiplier: float = DEFAULT_HARD_INTERVAL_MULTIPLIER
    maximum_interval: int = DEFAULT_MAXIMUM_INTERVAL

    def __post_init__(self) -> None:
        # accept any sequence, but store an immutable one
        object.__setattr__(self, "learning_steps", tuple(self.learning_steps))
        self._validate_settings()

    def _validate_settings(self) -> None:
        error_messages = []

        if len(self.learning_steps) == 0:
            error_messages.append("learning_steps must contain at least one step")
        for index, learning_step in enumerate(self.learning_steps):
            if learning_step < 0:
                error_messages.append(
                    f"learning_steps[{index}] = {learning_step} must not be negative"
                )

        if self.graduating_interval < 0:
            error_messages.append(
                f"graduating_interval = {self.graduating_interval} must not be negative"
            )
        if self.easy_interval < 0:
            error_messages.append(
                f"easy_interval = {self.easy_interval} must not be negative"
            )
        if self.minimum_ease <= 0:
            error_messages.append(
                f"minimum_ease = {self.minimum_ease} must be positive"
            )
        if self.starting_ease < self.minimum_ease:
            error_messages.append(
                f"starting_ease = {self.starting_ease} is lower than minimum_ease = {self.minimum_ease}"
            )
        if self.easy_bonus <= 0:
            error_messages.append(f"easy_bonus = {self.easy_bonus} must be positive")
        if self.hard_interval_multiplier <= 0:
            error_messages.append(
                f"hard_interval_multiplier = {self.hard_interval_multiplier} must be positive"
            )
        if self.maximum_interval < 1:
            error_messages.append(
                f"maximum_interval = {self.maximum_interval} must be at least 1 day"
            )

        if len(error_messages) > 0:
            raise ValueError(
                "One or more scheduler settings are invalid:\n"
                + "\n".join(error_messages)
            )

    def schedule(
        self,
        card: Card,
        rating: Rating,
        now: datetime | None = None,
    ) -> Card:
        """
        Computes the next state of a card given a rating.

        The card passed in is left unmodified.

        Args:
            card: The card being rated.
            rating: The rating given to the card.
            now: The date and time the rating is applied. Defaults to the current time.

        Returns:
            Card: A new card holding the next state, interval, ease factor, step and due date.

        Raises:
            ValueError: If `now` is not timezone-aware and set to UTC.
            ValueError: If `rating` is not one of the four rating levels.
            InvalidCardError: If the card violates the record invariants.
        """

        if now is not None and ((now.tzinfo is None) or (now.tzinfo != timezone.utc)):
            raise ValueError("datetime must be timezone-aware and set to UTC")

        rating = Rating(rating)

        if now is None:
            now = datetime.now(timezone.utc)

        self._check_card(card=card)

        next_card = copy(card)

        match card.state:
            case State.New | State.Acquiring | State.Relapsed:
                self._learning_step(card=next_card, rating=rating, now=now)

            case State.Retaining:
                self._review_step(card=next_card, rating=rating, now=now)

        logger.debug(
            "Scheduled card %s rated %s: %s -> %s, due %s",
            card.card_id,
            rating.name,
            card.state.name,
            next_card.state.name,
            next_card.due.isoformat(),
        )

        return next_card

    def review_card(
        self,
        card: Card,
        rating: Rating,
        review_datetime: datetime | None = None,
        review_duration: int | None = None,
    ) -> tuple[Card, ReviewLog]:
        """
        Reviews a card with a given rating at a given time for a specified duration.

        Args:
            card: The card being reviewed.
            rating: The chosen rating for the card being reviewed.
            review_datetime: The date and time of the review.
            review_duration: The number of milliseconds it took to review the card or None if unspecified.

        Returns:
            tuple[Card,ReviewLog]: A tuple containing the updated, reviewed card and its corresponding review log.

        Raises:
            ValueError: If the `review_datetime` argument is not timezone-aware and set to UTC.
            InvalidCardError: If the card violates the record invariants.
        """

        rating = Rating(rating)

        if review_datetime is None:
            review_datetime = datetime.now(timezone.utc)

        next_card = self.schedule(card=card, rating=rating, now=review_datetime)

        review_log = ReviewLog(
            card_id=card.card_id,
            rating=rating,
            review_datetime=review_datetime,
            review_duration=review_duration,
        )

        return next_card, review_log

    def reschedule_card(self, card: Card, review_logs: list[ReviewLog]) -> Card:
        """
        Reschedules/updates the given card with the current scheduler provided that card's review logs.

        Useful after changing the scheduler's settings, to rebuild a card as if it
        had always been scheduled with the new ones.

        Args:
            card: The card to be rescheduled/updated.
            review_logs: A list of that card's review logs (order doesn't matter).

        Returns:
            Card: A new card that has been rescheduled/updated with this current scheduler.

        Raises:
            ValueError: If any of the review logs are for a card other than the one specified.
        """

        for review_log in review_logs:
            if review_log.card_id != card.card_id:
                raise ValueError(
                    f"ReviewLog card_id {review_log.card_id} does not match Card card_id {card.card_id}"
                )

        review_logs = sorted(review_logs, key=lambda log: log.review_datetime)

        rescheduled_card = Card(card_id=card.card_id, due=card.due)

        for review_log in review_logs:
            rescheduled_card = self.schedule(
                card=rescheduled_card,
                rating=review_log.rating,
                now=review_log.review_datetime,
            )

        return rescheduled_card

    def to_dict(self) -> SchedulerDict:
        """
        Returns a dictionary representation of the Scheduler object.

        Returns:
            SchedulerDict: A dictionary representation of the Scheduler object.
        """

        return {
            "learning_steps": list(self.learning_steps),
            "graduating_interval": self.graduating_interval,
            "easy_interval": self.easy_interval,
            "starting_ease": self.starting_ease,
            "minimum_ease": self.minimum_ease,
            "easy_bonus": self.easy_bonus,
            "hard_interval_multiplier": self.hard_interval_multiplier,
            "maximum_interval": self.maximum_interval,
        }

    @classmethod
    def from_dict(cls, source_dict: SchedulerDict) -> Self:
        """
        Creates a Scheduler object from an existing dictionary.

        Keys missing from the dictionary fall back to their defaults.

        Args:
            source_dict: A dictionary representing an existing Scheduler object.

        Returns:
            Self: A Scheduler object created from the provided dictionary.
        """

        return cls(
            learning_steps=source_dict.get("learning_steps", DEFAULT_LEARNING_STEPS),
            graduating_interval=source_dict.get(
                "graduating_interval", DEFAULT_GRADUATING_INTERVAL
            ),
            easy_interval=source_dict.get("easy_interval", DEFAULT_EASY_INTERVAL),
            starting_ease=source_dict.get("starting_ease", DEFAULT_STARTING_EASE),
            minimum_ease=source_dict.get("minimum_ease", DEFAULT_MINIMUM_EASE),
            easy_bonus=source_dict.get("easy_bonus", DEFAULT_EASY_BONUS),
            hard_interval_multiplier=source_dict.get(
                "hard_interval_multiplier", DEFAULT_HARD_INTERVAL_MULTIPLIER
            ),
            maximum_interval=source_dict.get(
                "maximum_interval", DEFAULT_MAXIMUM_INTERVAL
            ),
        )

    def to_json(self, indent: int | str | None = None) -> str:
        """
        Returns a JSON-serialized string of the Scheduler object.

        Args:
            indent: Equivalent argument to the indent in json.dumps()

        Returns:
            str: A JSON-serialized string of the Scheduler object.
        """

        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, source_json: str) -> Self:
        """
        Creates a Scheduler object from a JSON-serialized string.

        Args:
            source_json: A JSON-serialized string of an existing Scheduler object.

        Returns:
            Self: A Scheduler object created from the JSON string.
        """

        source_dict: SchedulerDict = json.loads(source_json)
        return cls.from_dict(source_dict=source_dict)

    def _check_card(self, *, card: Card) -> None:
        error_message = None

        if not isinstance(card.state, State):
            error_message = f"unknown state {card.state!r}"
        elif card.interval < 0:
            error_message = f"interval = {card.interval} is negative"
        elif card.ease_factor is not None and card.ease_factor <= 0:
            error_message = f"ease_factor = {card.ease_factor} is not positive"
        elif card.ease_factor is not None and card.ease_factor < self.minimum_ease:
            error_message = (
                f"ease_factor = {card.ease_factor} is lower than "
                f"minimum_ease = {self.minimum_ease}"
            )
        elif card.state in LEARNING_STATES and not (
            0 <= card.step < len(self.learning_steps)
        ):
            error_message = f"step = {card.step} is not one of the {len(self.learning_steps)} learning steps"
        elif card.state == State.Retaining and card.ease_factor is None:
            error_message = "Retaining card has no ease_factor"

        if error_message is not None:
            logger.warning(
                "Refusing to schedule card %s: %s", card.card_id, error_message
            )
            raise InvalidCardError(f"Invalid card {card.card_id}: {error_message}")

    def _learning_step(self, *, card: Card, rating: Rating, now: datetime) -> None:
        """
        Moves a New, Acquiring or Relapsed card along the learning steps.

        A Relapsed card keeps the ease factor it was given when it lapsed.
        """

        match rating:
            case Rating.Fail:
                card.step = 0
                card.due = self._due_in_minutes(now, self.learning_steps[card.step])

            case Rating.Hard:
                # card step stays the same
                card.due = self._due_in_minutes(now, self.learning_steps[card.step])

            case Rating.Pass:
                if card.step + 1 < len(self.learning_steps):
                    card.step += 1
                    card.state = State.Acquiring
                    card.due = self._due_in_minutes(
                        now, self.learning_steps[card.step]
                    )
                else:
                    self._graduate(
                        card=card, interval=self.graduating_interval, now=now
                    )

            case Rating.Easy:
                self._graduate(card=card, interval=self.easy_interval, now=now)

    def _graduate(self, *, card: Card, interval: int, now: datetime) -> None:
        card.state = State.Retaining
        card.interval = min(interval, self.maximum_interval)
        card.ease_factor = card.ease_factor or self.starting_ease
        card.due = self._due_in_days(now, card.interval)

    def _review_step(self, *, card: Card, rating: Rating, now: datetime) -> None:
        assert card.ease_factor is not None

        match rating:
            case Rating.Fail:
                # the day interval is kept as is while relearning
                card.state = State.Relapsed
                card.step = 0
                card.ease_factor = max(
                    self.minimum_ease, card.ease_factor - FAIL_EASE_PENALTY
                )
                card.due = self._due_in_minutes(now, self.learning_steps[0])

            case Rating.Hard:
                card.interval = self._next_interval(
                    card.interval * self.hard_interval_multiplier
                )
                card.ease_factor = max(
                    self.minimum_ease, card.ease_factor - HARD_EASE_PENALTY
                )
                card.due = self._due_in_days(now, card.interval)

            case Rating.Pass:
                card.interval = self._next_interval(card.interval * card.ease_factor)
                card.due = self._due_in_days(now, card.interval)

            case Rating.Easy:
                card.interval = self._next_interval(
                    card.interval * card.ease_factor * self.easy_bonus
                )
                card.ease_factor += EASY_EASE_BONUS
                card.due = self._due_in_days(now, card.interval)

    def _next_interval(self, interval: float) -> int:
        # intervals are full days
        return min(math.floor(interval), self.maximum_interval)

    @staticmethod
    def _due_in_minutes(now: datetime, minutes: float) -> datetime:
        return now + timedelta(minutes=minutes)

    @staticmethod
    def _due_in_days(now: datetime, days: int) -> datetime:
        return now + timedelta(days=days)


__all__ = ["Scheduler"]
