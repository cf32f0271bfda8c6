from enum import IntEnum


class State(IntEnum):
    """
    Enum representing the learning state of a Card object.

    New, Acquiring and Relapsed cards walk the learning steps;
    Retaining cards are scheduled in days.
    """

    New = 0
    Acquiring = 1
    Retaining = 2
    Relapsed = 3


__all__ = ["State"]
