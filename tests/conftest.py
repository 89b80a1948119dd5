"""
Shared fixtures for Release Watcher tests.

Provides common test fixtures for use across all test modules.
"""

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from release_watcher.config import DiscordConfig, GitHubConfig
from release_watcher.release import MessageOptions, Release

# Path to test fixtures directory
FIXTURES_DIR = Path(__file__).parent / "fixtures"

REPO_URL = "https://github.com/example-org/example-project"
WEBHOOK_URL = "https://discord.com/api/webhooks/123456/abcdef"

START_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced wall clock."""

    def __init__(self, now: datetime = START_TIME):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def tick(self, seconds: float) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def fixtures_dir() -> Path:
    """Return path to fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def sample_config_path(fixtures_dir: Path) -> Path:
    """Return path to sample config file."""
    return fixtures_dir / "sample_config.yaml"


@pytest.fixture
def clock() -> FakeClock:
    """Return a fake clock starting at START_TIME."""
    return FakeClock()


@pytest.fixture
def message_options() -> MessageOptions:
    """Create message options without role mentions."""
    return MessageOptions(repo_url=REPO_URL)


@pytest.fixture
def role_message_options() -> MessageOptions:
    """Create message options with both role mentions configured."""
    return MessageOptions(
        repo_url=REPO_URL,
        release_role_id="111",
        prerelease_role_id="222",
    )


def make_release_data(
    name: str | None = "v1.0.0",
    published_at: str | None = "2024-01-01T12:00:00Z",
    body: str | None = "Bug fixes",
    prerelease: bool = False,
    tag: str = "v1.0.0",
) -> dict[str, Any]:
    """
    Build a GitHub API release object.

    Returns
    -------
    dict
        A dictionary mimicking one item of the "list releases" response.
    """
    return {
        "name": name,
        "tag_name": tag,
        "published_at": published_at,
        "html_url": f"{REPO_URL}/releases/tag/{tag}",
        "body": body,
        "prerelease": prerelease,
        "author": {
            "login": "octocat",
            "avatar_url": "https://avatars.githubusercontent.com/u/583231",
        },
    }


@pytest.fixture
def release_factory() -> Callable[..., dict[str, Any]]:
    """Return the GitHub release object builder."""
    return make_release_data


@pytest.fixture
def release_data() -> dict[str, Any]:
    """Create a sample GitHub release object."""
    return make_release_data()


@pytest.fixture
def sample_release(release_data: dict[str, Any], message_options: MessageOptions) -> Release:
    """Create a sample stable release."""
    return Release.from_github(release_data, message_options)


@pytest.fixture
def minimal_github_config() -> GitHubConfig:
    """Create a minimal valid GitHub configuration."""
    return GitHubConfig(owner="example-org", repo="example-project")


@pytest.fixture
def minimal_discord_config() -> DiscordConfig:
    """Create a minimal valid Discord configuration."""
    return DiscordConfig(webhook_url=WEBHOOK_URL)


@pytest.fixture
def minimal_config_dict() -> dict[str, Any]:
    """
    Create a minimal valid configuration dictionary.

    Returns
    -------
    dict
        Configuration dictionary that can be used to create AppConfig.
    """
    return {
        "github": {"owner": "example-org", "repo": "example-project"},
        "discord": {"webhook_url": WEBHOOK_URL},
    }


@pytest.fixture
def mock_source() -> MagicMock:
    """
    Create a mock release source.

    Returns
    -------
    MagicMock
        A source whose ``list_releases`` returns no releases.
    """
    source = MagicMock()
    source.list_releases = AsyncMock(return_value=[])
    return source


@pytest.fixture
def mock_notifier() -> MagicMock:
    """
    Create a mock notifier.

    Returns
    -------
    MagicMock
        A notifier with common methods mocked.
    """
    notifier = MagicMock()
    notifier.send_message = AsyncMock()
    notifier.test_connection = AsyncMock(return_value=True)
    notifier.close = AsyncMock()
    return notifier
