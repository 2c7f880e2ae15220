"""
Message Decoder - Recover text and HTML content from a raw message

Parsing is best-effort: a missing or broken part contributes an empty
string instead of failing the request. Only input the email parser cannot
handle at all raises DecodeError.
"""

import logging
from email import message_from_bytes, message_from_string, policy
from email.message import EmailMessage
from html.parser import HTMLParser
from typing import List, Union

from latest_code.core.exceptions import DecodeError
from latest_code.models.message import DecodedMessage, RawMessage

logger = logging.getLogger(__name__)

_SKIPPED_TAGS = {"script", "style", "head", "title"}
_BREAK_TAGS = {"br", "p", "div", "tr", "li", "td", "h1", "h2", "h3", "h4", "h5", "h6"}


class _HtmlTextExtractor(HTMLParser):
    """Collect visible text, separating block elements with whitespace"""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self._parts: List[str] = []
        self._skip_depth = 0

    def handle_starttag(self, tag, attrs):
        if tag in _SKIPPED_TAGS:
            self._skip_depth += 1
        elif tag in _BREAK_TAGS:
            self._parts.append("\n")

    def handle_endtag(self, tag):
        if tag in _SKIPPED_TAGS and self._skip_depth:
            self._skip_depth -= 1
        elif tag in _BREAK_TAGS:
            self._parts.append("\n")

    def handle_data(self, data):
        if not self._skip_depth:
            self._parts.append(data)

    def get_text(self) -> str:
        lines = (" ".join(line.split()) for line in "".join(self._parts).splitlines())
        return "\n".join(line for line in lines if line)


def html_to_text(html: str) -> str:
    """Strip markup from an HTML fragment, keeping visible text"""
    parser = _HtmlTextExtractor()
    parser.feed(html)
    parser.close()
    return parser.get_text()


def _part_content(part: EmailMessage) -> str:
    try:
        content = part.get_content()
    except (LookupError, UnicodeError) as e:
        # Unknown or lying charset: fall back to raw bytes as UTF-8
        logger.debug(f"Falling back to UTF-8 for {part.get_content_type()} part: {e}")
        payload = part.get_payload(decode=True)
        return payload.decode("utf-8", errors="replace") if payload else ""
    if isinstance(content, bytes):
        return content.decode("utf-8", errors="replace")
    return content if isinstance(content, str) else ""


def decode(raw: Union[RawMessage, bytes, str]) -> DecodedMessage:
    """
    Parse a raw message into plain text and HTML content

    Args:
        raw: The fetched message, or its bytes

    Returns:
        DecodedMessage: Joined text/plain and text/html parts; HTML-only
        messages also get a text rendering of their HTML

    Raises:
        DecodeError: If the input is not a message at all
    """
    body = raw.body if isinstance(raw, RawMessage) else raw
    try:
        if isinstance(body, (bytes, bytearray)):
            message = message_from_bytes(bytes(body), policy=policy.default)
        elif isinstance(body, str):
            message = message_from_string(body, policy=policy.default)
        else:
            raise DecodeError(f"Unsupported message body type: {type(body).__name__}")
    except DecodeError:
        raise
    except Exception as e:
        raise DecodeError(f"Cannot parse message: {e}") from e

    text_parts: List[str] = []
    html_parts: List[str] = []
    try:
        for part in message.walk():
            if part.is_multipart() or part.is_attachment():
                continue
            content_type = part.get_content_type()
            if content_type == "text/plain":
                text_parts.append(_part_content(part))
            elif content_type == "text/html":
                html_parts.append(_part_content(part))
    except Exception as e:
        raise DecodeError(f"Cannot walk message parts: {e}") from e

    text_content = "\n".join(p for p in text_parts if p)
    html_content = "\n".join(p for p in html_parts if p)

    if not text_content and html_content:
        try:
            text_content = html_to_text(html_content)
        except Exception as e:
            logger.warning(f"HTML to text conversion failed: {e}")

    return DecodedMessage(text_content=text_content, html_content=html_content)
