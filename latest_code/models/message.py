"""
Message Models - Value types passed between pipeline stages

All of these live only for the duration of one request.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class MessageSummary:
    """One inbox entry as returned by enumeration"""

    identifier: int  # IMAP UID, only meaningful inside the session that produced it


@dataclass(frozen=True)
class RawMessage:
    """Unparsed RFC 822 bytes of a single message"""

    identifier: int
    body: bytes


@dataclass(frozen=True)
class DecodedMessage:
    """Best-effort text and HTML content of a message"""

    text_content: str = ""
    html_content: str = ""
