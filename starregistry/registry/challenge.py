"""
Ownership challenge messages.

Format: "<address>:<unixSeconds>:starRegistry"

The registry keeps no record of issued challenges; freshness is checked
by reading the timestamp back out of the submitted message.
"""

import re

from ..exceptions import MalformedMessage

CHALLENGE_SUFFIX = "starRegistry"
CHALLENGE_WINDOW_SECONDS = 300  # 5 minutes
CHALLENGE_SEPARATOR = ":"

_DIGITS_RE = re.compile(r'[0-9]+')


def build_challenge(address: str, timestamp: int) -> str:
    """Build the message a wallet must sign to claim a star."""
    return CHALLENGE_SEPARATOR.join([address, str(int(timestamp)), CHALLENGE_SUFFIX])


def parse_challenge_time(message: str) -> int:
    """
    Read the issue time out of a challenge message.

    Args:
        message: Challenge message as submitted

    Returns:
        Seconds since the epoch from the second segment

    Raises:
        MalformedMessage: If the segment is missing or not an integer
    """
    if not isinstance(message, str):
        raise MalformedMessage("Challenge message must be a string")

    segments = message.split(CHALLENGE_SEPARATOR)
    if len(segments) < 2:
        raise MalformedMessage(f"Challenge message has no timestamp: {message!r}")

    raw_time = segments[1]
    if not _DIGITS_RE.fullmatch(raw_time):
        raise MalformedMessage(f"Challenge timestamp is not an integer: {raw_time!r}")
    return int(raw_time)
