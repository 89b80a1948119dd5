"""
Main entry point for Release Watcher.

Runs the async loop that checks for releases and posts notifications.
"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from urllib.parse import urlparse

import coloredlogs

from release_watcher.checker import ReleaseChecker
from release_watcher.config import load_config
from release_watcher.discord import DiscordWebhook
from release_watcher.github import GitHubClient
from release_watcher.release import MessageOptions

logger = logging.getLogger(__name__)


def redact_proxy_url(proxy_url: str) -> str:
    """
    Redact credentials from a proxy URL for safe logging.

    Parameters
    ----------
    proxy_url : str
        The proxy URL potentially containing credentials.

    Returns
    -------
    str
        The proxy URL with password redacted.
    """
    try:
        parsed = urlparse(proxy_url)
        if parsed.password:
            netloc = parsed.hostname or ""
            if parsed.port:
                netloc = f"{netloc}:{parsed.port}"
            if parsed.username:
                netloc = f"{parsed.username}:****@{netloc}"
            return f"{parsed.scheme}://{netloc}{parsed.path}"
        return proxy_url
    except ValueError:
        return "<proxy url>"


class ReleaseWatcher:
    """
    Main Release Watcher application.

    Wires the GitHub client, the Discord webhook and the checker together.
    """

    def __init__(self, config_path: str | Path):
        """
        Initialize the release watcher.

        Parameters
        ----------
        config_path : str | Path
            Path to the YAML configuration file.
        """
        self.config = load_config(config_path)
        self.source: GitHubClient | None = None
        self.notifier: DiscordWebhook | None = None
        self.checker: ReleaseChecker | None = None
        self._task: asyncio.Task | None = None

    async def start(self) -> None:
        """Start the release watcher."""
        logger.info(
            "Starting Release Watcher for %s/%s",
            self.config.github.owner,
            self.config.github.repo,
        )

        checker_config = self.config.checker
        proxy_url = checker_config.proxy
        if proxy_url:
            logger.info("Using proxy: %s", redact_proxy_url(proxy_url))

        self.source = GitHubClient(
            self.config.github,
            timeout=checker_config.request_timeout,
            max_retries=checker_config.max_retries,
            user_agent=checker_config.user_agent,
            proxy_url=proxy_url,
        )
        self.notifier = DiscordWebhook(
            self.config.discord,
            timeout=checker_config.request_timeout,
            user_agent=checker_config.user_agent,
            proxy_url=proxy_url,
        )

        if not await self.notifier.test_connection():
            logger.error("Failed to connect to Discord, exiting")
            await self.stop()
            sys.exit(1)

        self.checker = ReleaseChecker(
            self.source,
            self.notifier,
            MessageOptions.from_config(self.config),
            checker_config,
        )
        if checker_config.preview:
            logger.warning("Preview mode: the newest release is posted on every check")

        self._task = asyncio.create_task(self.checker.run())

        try:
            await self._task
        except asyncio.CancelledError:
            logger.info("Checker task cancelled")

    async def stop(self) -> None:
        """Stop the release watcher gracefully."""
        logger.info("Stopping Release Watcher")

        if self.checker:
            self.checker.stop()

        if self._task:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)

        if self.source:
            await self.source.close()
        if self.notifier:
            await self.notifier.close()

        logger.info("Release Watcher stopped")


def setup_logging(verbose: bool = False) -> None:
    """
    Configure application logging.

    Parameters
    ----------
    verbose : bool
        If True, set log level to DEBUG.
    """
    level = logging.DEBUG if verbose else logging.INFO

    coloredlogs.install(
        level=level,
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Reduce noise from third-party libraries
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("aiohttp_socks").setLevel(logging.WARNING)


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="GitHub release watcher with Discord notifications",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "-c",
        "--config",
        default="config.yaml",
        help="Path to configuration file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    args = parser.parse_args()

    setup_logging(args.verbose)

    config_path = Path(args.config)
    if not config_path.exists():
        logger.error("Configuration file not found: %s", config_path)
        sys.exit(1)

    watcher = ReleaseWatcher(config_path)
    if watcher.config.debug and not args.verbose:
        setup_logging(verbose=True)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    def signal_handler():
        logger.info("Received shutdown signal")
        asyncio.create_task(watcher.stop())

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, signal_handler)

    try:
        loop.run_until_complete(watcher.start())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    finally:
        loop.run_until_complete(watcher.stop())
        loop.close()


if __name__ == "__main__":
    main()
