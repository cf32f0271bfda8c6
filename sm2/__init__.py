"""
py-sm2
-------

Py-SM2 is a Python implementation of the SM-2 spaced repetition algorithm as used by Anki:
learning steps in minutes, followed by review intervals in days that grow with each card's ease factor.
"""

from sm2.scheduler import Scheduler
from sm2.state import State
from sm2.card import Card, InvalidCardError
from sm2.rating import Rating
from sm2.review_log import ReviewLog
from sm2.queue import is_due, review_queue, due_counts_by_day, review_counts_by_day

__all__ = [
    "Scheduler",
    "Card",
    "InvalidCardError",
    "Rating",
    "ReviewLog",
    "State",
    "is_due",
    "review_queue",
    "due_counts_by_day",
    "review_counts_by_day",
]
