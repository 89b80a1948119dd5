"""
In-memory watermark separating already announced releases from new ones.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from release_watcher.release import utc_now

logger = logging.getLogger(__name__)


class Watermark:
    """
    Timestamp of the last completed check.

    A release is new when it was published after the watermark. The
    watermark starts at construction time and only moves forward.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        """
        Initialize the watermark at the current time.

        Parameters
        ----------
        clock : Callable[[], datetime]
            Returns the current time as an aware datetime.
        """
        self._clock = clock
        self.last_checked_at = clock()

    def is_newer(self, release_time: datetime) -> bool:
        """Return True if ``release_time`` is strictly after the watermark."""
        return release_time > self.last_checked_at

    def advance(self) -> None:
        """Move the watermark to the current time."""
        now = self._clock()
        if now < self.last_checked_at:
            logger.warning(
                "Clock went backwards (%s < %s), keeping watermark",
                now.isoformat(),
                self.last_checked_at.isoformat(),
            )
            return
        self.last_checked_at = now
        logger.debug("Watermark advanced to %s", now.isoformat())
