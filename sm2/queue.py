"""
sm2.queue
---------

Helpers for building a review queue and calendar from scheduled cards.

Days are calendar days in the given timezone, so a card due at 23:30 UTC can
fall on the next day for a reviewer east of Greenwich.
"""

from __future__ import annotations
from collections import Counter
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from sm2.card import Card
from sm2.rating import Rating
from sm2.review_log import ReviewLog


def is_due(card: Card, now: datetime | None = None) -> bool:
    """Returns whether the card is due at `now` (defaults to the current time)."""

    if now is None:
        now = datetime.now(timezone.utc)

    return card.due <= now


def review_queue(
    cards: Iterable[Card],
    now: datetime | None = None,
    tz: tzinfo = timezone.utc,
    day: date | None = None,
) -> list[Card]:
    """
    Returns the cards to review, soonest due first.

    Args:
        cards: The cards to choose from.
        now: The current date and time. Defaults to the current time.
        tz: The timezone whose calendar days are used.
        day: If given, only the cards due on that day are returned. Otherwise the
            cards due by the end of the current day are returned, including overdue ones.

    Returns:
        list[Card]: The selected cards sorted by their due date.
    """

    if day is not None:
        selected = [card for card in cards if _local_day(card.due, tz) == day]
    else:
        if now is None:
            now = datetime.now(timezone.utc)
        end_of_day = _end_of_day(now, tz)
        selected = [card for card in cards if card.due < end_of_day]

    return sorted(selected, key=lambda card: card.due)


def due_counts_by_day(
    cards: Iterable[Card], tz: tzinfo = timezone.utc
) -> dict[date, int]:
    """Counts the cards falling due on each calendar day."""

    return dict(Counter(_local_day(card.due, tz) for card in cards))


def review_counts_by_day(
    review_logs: Iterable[ReviewLog], tz: tzinfo = timezone.utc
) -> dict[date, int]:
    """
    Counts the successful reviews done on each calendar day.

    Reviews rated Fail are not counted.
    """

    return dict(
        Counter(
            _local_day(review_log.review_datetime, tz)
            for review_log in review_logs
            if review_log.rating != Rating.Fail
        )
    )


def _local_day(moment: datetime, tz: tzinfo) -> date:
    return moment.astimezone(tz).date()


def _end_of_day(moment: datetime, tz: tzinfo) -> datetime:
    # start of the next local day, so DST days of 23 or 25 hours are handled
    next_day = _local_day(moment, tz) + timedelta(days=1)
    return datetime.combine(next_day, time.min, tzinfo=tz)


__all__ = ["is_due", "review_queue", "due_counts_by_day", "review_counts_by_day"]
