"""
GitHub release records and their Discord message representation.

A release is wrapped once, right after it is fetched, and every
presentation field is computed from the stored attributes on demand.
"""

import enum
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from release_watcher.config import AppConfig

logger = logging.getLogger(__name__)

# Discord rejects embed descriptions longer than this
MAX_DESCRIPTION_LENGTH = 4096

NAME_PLACEHOLDER = "Release name not provided"
BODY_PLACEHOLDER = "Release body not provided"
AUTHOR_PLACEHOLDER = "ghost"

STABLE_COLOUR = 0x0072F7
PRERELEASE_COLOUR = 0xFFB11A

ELLIPSIS = "…"

_PULL_REQUEST_RE = re.compile(r"#(\d+)")
_USERNAME_RE = re.compile(r"@([a-zA-Z0-9-]+)")
_COMMIT_RE = re.compile(r"[a-f0-9]{40}")
_NEWLINES_RE = re.compile(r"\n+")

CREDITS_MARKER = "Credits"


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class ReleaseKind(enum.Enum):
    """Classification of a release, drives message tone and colour."""

    STABLE = "stable"
    PRERELEASE = "prerelease"


@dataclass(frozen=True)
class ReleaseAuthor:
    """
    Account that published a release.

    Attributes
    ----------
    username : str
        GitHub login.
    avatar_url : str | None
        URL of the account's avatar image.
    """

    username: str = AUTHOR_PLACEHOLDER
    avatar_url: str | None = None


@dataclass(frozen=True)
class MessageOptions:
    """
    Static settings the message layout depends on.

    Attributes
    ----------
    repo_url : str
        Web URL of the repository, used for pull request and commit links.
    release_role_id : str | None
        Discord role mentioned for stable releases.
    prerelease_role_id : str | None
        Discord role mentioned for prereleases.
    """

    repo_url: str
    release_role_id: str | None = None
    prerelease_role_id: str | None = None

    @classmethod
    def from_config(cls, config: AppConfig) -> "MessageOptions":
        """Build message options from the application configuration."""
        return cls(
            repo_url=config.github.html_url,
            release_role_id=config.discord.release_role_id,
            prerelease_role_id=config.discord.prerelease_role_id,
        )

    def role_for(self, kind: ReleaseKind) -> str | None:
        """Return the role to mention for a release kind, if any."""
        if kind is ReleaseKind.PRERELEASE:
            return self.prerelease_role_id
        return self.release_role_id


def message_content(kind: ReleaseKind, name: str, role_id: str | None) -> str:
    """
    Build the plain text line posted above the embed.

    Parameters
    ----------
    kind : ReleaseKind
        Whether the release is stable or a prerelease.
    name : str
        Release name.
    role_id : str | None
        Role to mention, if one is configured for this kind.

    Returns
    -------
    str
        The message content.
    """
    if role_id:
        return f"<@&{role_id}>: {name}"
    if kind is ReleaseKind.PRERELEASE:
        return f"New prerelease: {name}"
    return f"New release: {name}"


def embed_title(kind: ReleaseKind, name: str) -> str:
    """Return the embed title, prefixed with an emoji for the kind."""
    if kind is ReleaseKind.PRERELEASE:
        return f"\U0001f6a7 {name}"
    return f"\U0001f4e6 {name}"


def embed_colour(kind: ReleaseKind) -> int:
    """Return the embed colour for a release kind."""
    return PRERELEASE_COLOUR if kind is ReleaseKind.PRERELEASE else STABLE_COLOUR


def format_body(body: str, repo_url: str) -> str:
    """
    Turn raw release notes into link-annotated Discord markdown.

    Pull request numbers become links to the pull request, usernames
    in the credits section become profile links, full commit hashes
    become short commit links, and blank lines are removed.

    Parameters
    ----------
    body : str
        Raw release notes.
    repo_url : str
        Web URL of the repository.

    Returns
    -------
    str
        The transformed text.
    """
    text = _PULL_REQUEST_RE.sub(rf"[#\1]({repo_url}/pull/\1)", body)

    # Only the section right after the first "Credits" holds handles
    segments = text.split(CREDITS_MARKER)
    if len(segments) > 1:
        segments[1] = _USERNAME_RE.sub(r"[@\1](https://github.com/\1)", segments[1])
    text = CREDITS_MARKER.join(segments)

    text = _COMMIT_RE.sub(
        lambda m: f"[{m.group(0)[:7]}]({repo_url}/commit/{m.group(0)})",
        text,
    )

    return _NEWLINES_RE.sub("\n", text)


def release_footer(url: str) -> str:
    """Return the line linking back to the release page."""
    # Embed footers cannot hold links, so this goes in the description
    return f"\n**[View the release note on GitHub]({url})**"


def truncate_description(markdown: str, footer: str) -> str:
    """
    Join body and footer without exceeding the description limit.

    The footer is always kept whole; the body is cut and ends with an
    ellipsis when both would not fit.

    Parameters
    ----------
    markdown : str
        Transformed release notes.
    footer : str
        Footer line to append.

    Returns
    -------
    str
        Description of at most ``MAX_DESCRIPTION_LENGTH`` characters.
    """
    body_max_length = MAX_DESCRIPTION_LENGTH - len(footer)
    if len(markdown) > body_max_length:
        return f"{markdown[: body_max_length - 1]}{ELLIPSIS}{footer}"
    return markdown + footer


def _parse_timestamp(value: Any) -> datetime | None:
    """Parse a GitHub ISO 8601 timestamp, returning None if unusable."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.warning("Ignoring unparseable release timestamp: %s", value)
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _text_field(value: Any, placeholder: str, field_name: str) -> str:
    """Return ``value`` if it is a string, the placeholder otherwise."""
    if isinstance(value, str):
        return value
    if value is not None:
        logger.warning("Ignoring non-text release %s: %r", field_name, value)
    return placeholder


@dataclass(frozen=True)
class Release:
    """
    Normalized GitHub release.

    Attributes
    ----------
    name : str
        Release title.
    published_at : datetime
        Publication time, or the time the release was first fetched
        when GitHub did not provide one.
    url : str
        Release page URL.
    body : str
        Raw release notes.
    is_prerelease : bool
        Whether GitHub flags the release as a prerelease.
    author : ReleaseAuthor
        Account that published the release.
    options : MessageOptions
        Settings used when building the message.
    """

    name: str
    published_at: datetime
    url: str
    body: str
    is_prerelease: bool
    options: MessageOptions
    author: ReleaseAuthor = field(default_factory=ReleaseAuthor)

    @classmethod
    def from_github(
        cls,
        data: dict[str, Any],
        options: MessageOptions,
        clock: Callable[[], datetime] = utc_now,
    ) -> "Release":
        """
        Create a Release from a GitHub API release object.

        Parameters
        ----------
        data : dict[str, Any]
            One item of the "list releases" response.
        options : MessageOptions
            Settings used when building the message.
        clock : Callable[[], datetime]
            Source of "now" for releases without a publication time.

        Returns
        -------
        Release
            Normalized release instance.
        """
        published_at = _parse_timestamp(data.get("published_at"))
        if published_at is None:
            published_at = clock()

        author_data = data.get("author")
        if isinstance(author_data, dict):
            author = ReleaseAuthor(
                username=_text_field(author_data.get("login"), AUTHOR_PLACEHOLDER, "author.login")
                or AUTHOR_PLACEHOLDER,
                avatar_url=_text_field(author_data.get("avatar_url"), "", "author.avatar_url")
                or None,
            )
        else:
            if author_data is not None:
                logger.warning("Ignoring malformed release author: %r", author_data)
            author = ReleaseAuthor()

        return cls(
            name=_text_field(data.get("name"), NAME_PLACEHOLDER, "name"),
            published_at=published_at,
            url=_text_field(data.get("html_url"), "", "html_url"),
            body=_text_field(data.get("body"), BODY_PLACEHOLDER, "body"),
            is_prerelease=bool(data.get("prerelease")),
            options=options,
            author=author,
        )

    @property
    def kind(self) -> ReleaseKind:
        """Stable or prerelease."""
        return ReleaseKind.PRERELEASE if self.is_prerelease else ReleaseKind.STABLE

    def title(self) -> str:
        """Return the release name."""
        return self.name

    def time(self) -> datetime:
        """Return the publication time."""
        return self.published_at

    def description(self) -> str:
        """Return the embed description: formatted notes plus footer link."""
        markdown = format_body(self.body, self.options.repo_url)
        return truncate_description(markdown, release_footer(self.url))

    def to_message(self) -> dict[str, Any]:
        """
        Build the Discord webhook payload for this release.

        Returns
        -------
        dict[str, Any]
            JSON-serializable payload with ``content`` and one embed.
        """
        footer: dict[str, str] = {"text": f"Released by @{self.author.username}"}
        if self.author.avatar_url:
            footer["icon_url"] = self.author.avatar_url

        embed = {
            "title": embed_title(self.kind, self.name),
            "url": self.url,
            "description": self.description(),
            "color": embed_colour(self.kind),
            "footer": footer,
            "timestamp": self.published_at.isoformat(),
        }

        return {
            "content": message_content(
                self.kind, self.name, self.options.role_for(self.kind)
            ),
            "embeds": [embed],
        }
