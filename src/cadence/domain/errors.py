"""Error taxonomy for the scheduler.

Every error here is caller-correctable input; none is retried internally.
"""


class SchedulerError(Exception):
    """Base class for all scheduler errors."""


class InvalidRating(SchedulerError, ValueError):
    """Rating outside Again/Hard/Good/Easy (1-4)."""

    def __init__(self, rating: object):
        self.rating = rating
        super().__init__(f"Rating must be 1, 2, 3 or 4, got {rating!r}")


class InvalidTimestamp(SchedulerError, ValueError):
    """Review time earlier than the card's last review, or without a timezone."""


class InvalidCard(SchedulerError, ValueError):
    """Card whose memory state contradicts its learning phase."""


class MalformedParameterSet(SchedulerError, ValueError):
    """Parameter set rejected when a Scheduler is constructed."""
