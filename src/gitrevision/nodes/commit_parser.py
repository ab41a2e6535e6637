"""Extraction of author, committer and message from a raw commit body."""

import re
from datetime import datetime, timezone
from typing import List, Optional

from gitrevision.models.base import Identity, Lookup, ParsedCommit

IDENTITY_PATTERN = re.compile(r"([^<]+)<([^>]+)> ([0-9]+)( [^ ]+)?")
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_timestamp(timestamp: int, tz_suffix: Optional[str] = None) -> str:
    """Render a unix timestamp (UTC) and append the raw timezone suffix, if any."""
    date = datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime(DATE_FORMAT)
    return date + tz_suffix if tz_suffix else date


def parse_identity(value: str) -> Optional[Identity]:
    """Parse ``Name <email> <timestamp> [<tz>]``.

    Returns None when the value does not match or the timestamp cannot be
    represented as a date.
    """
    match = IDENTITY_PATTERN.search(value)
    if not match:
        return None
    name, email, timestamp, tz_suffix = match.groups()
    try:
        date = format_timestamp(int(timestamp), tz_suffix)
    except (OverflowError, ValueError, OSError):
        return None
    return Identity(name=name.strip(), email=email.strip(), date=date)


def parse_commit(lines: List[str]) -> Lookup[ParsedCommit]:
    """Parse the lines of a commit object.

    Header lines run up to the first blank line; everything after it is the
    message, joined with single spaces.
    """
    author: Optional[Identity] = None
    committer: Optional[Identity] = None

    remaining = list(lines)
    while remaining:
        line = remaining.pop(0)
        if line == "":
            break

        line_type, _, value = line.partition(" ")
        if line_type == "author":
            author = parse_identity(value)
        elif line_type == "committer":
            committer = parse_identity(value)

    if author is None or committer is None:
        return Lookup.miss("commit has no usable author or committer")

    message = " ".join(remaining).strip()
    return Lookup.hit(ParsedCommit(author=author, committer=committer, message=message))
