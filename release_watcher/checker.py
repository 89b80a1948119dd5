"""
Release checking loop.

Fetches releases, keeps the ones published since the last check,
and posts them to the notifier one at a time, oldest first.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from datetime import datetime

from release_watcher.config import CheckerConfig
from release_watcher.github import ReleaseSource
from release_watcher.notifier import Notifier
from release_watcher.release import MessageOptions, Release, utc_now
from release_watcher.watermark import Watermark

logger = logging.getLogger(__name__)


class ReleaseChecker:
    """
    Periodic release checker.

    Owns the watermark. A check advances it once, after every selected
    release has been posted; a failed fetch or post leaves it untouched
    so the next check picks the same releases up again.
    """

    def __init__(
        self,
        source: ReleaseSource,
        notifier: Notifier,
        options: MessageOptions,
        config: CheckerConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the checker.

        Parameters
        ----------
        source : ReleaseSource
            Where releases are listed from.
        notifier : Notifier
            Where release messages are posted.
        options : MessageOptions
            Settings used when building messages.
        config : CheckerConfig | None
            Polling settings, defaults when omitted.
        clock : Callable[[], datetime]
            Wall clock used for the watermark.
        sleep : Callable[[float], Awaitable[None]]
            Coroutine used to wait between checks.
        monotonic : Callable[[], float]
            Monotonic clock used to measure check durations.
        """
        self.source = source
        self.notifier = notifier
        self.options = options
        self.config = config or CheckerConfig()
        self._clock = clock
        self._sleep = sleep
        self._monotonic = monotonic
        self.watermark = Watermark(clock)
        self._lock = asyncio.Lock()
        self._running = False

    async def get_new_releases(self) -> list[Release]:
        """
        Fetch releases and select the ones to post.

        Returns
        -------
        list[Release]
            At most ``max_items`` of the most recent new releases,
            oldest first.
        """
        data = await self.source.list_releases()
        releases = [Release.from_github(item, self.options, self._clock) for item in data]

        if self.config.preview:
            # Post the newest listed release regardless of the watermark
            return releases[:1]

        new_releases = [r for r in releases if self.watermark.is_newer(r.time())]
        new_releases.sort(key=lambda r: r.time(), reverse=True)

        selected = new_releases[: self.config.max_items]
        if len(new_releases) > len(selected):
            logger.info(
                "Found %d new releases, only posting the %d most recent",
                len(new_releases),
                len(selected),
            )

        selected.reverse()
        return selected

    async def post_release(self, release: Release) -> None:
        """Post one release, raising if the notifier fails."""
        await self.notifier.send_message(release.to_message())

    async def check(self) -> bool:
        """
        Run one check.

        Returns
        -------
        bool
            False if the check was skipped because another one is running.

        Raises
        ------
        Exception
            Whatever the source or the notifier raised. The watermark is
            not advanced in that case.
        """
        if self._lock.locked():
            logger.warning("Previous release check still running, skipping")
            return False

        async with self._lock:
            logger.debug("Checking for new releases at %s", self._clock().isoformat())

            releases = await self.get_new_releases()
            for release in releases:
                logger.info("Posting release %s", release.title())
                # Awaited one by one so messages appear in release order
                await self.post_release(release)

            self.watermark.advance()

        return True

    async def run(self) -> None:
        """
        Check immediately, then every ``check_interval`` seconds.

        The interval is measured from the start of each check. A check
        that takes longer than the interval delays the next one instead
        of overlapping it.
        """
        interval = self.config.check_interval
        self._running = True
        logger.info("Checking for new releases every %d seconds", interval)

        while self._running:
            started = self._monotonic()
            try:
                await self.check()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error("Release check failed: %s", e)

            if not self._running:
                break

            elapsed = self._monotonic() - started
            if elapsed > interval:
                logger.warning(
                    "Release check took %.1fs, longer than the %ds interval",
                    elapsed,
                    interval,
                )
            await self._sleep(max(0.0, interval - elapsed))

    def stop(self) -> None:
        """Stop the loop after the current check or wait."""
        self._running = False
