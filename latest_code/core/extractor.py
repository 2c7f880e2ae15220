"""
Code Extractor - Find the first six-digit code in a decoded message
"""

import re
from typing import Optional

from latest_code.models.message import DecodedMessage

# Exactly six ASCII digits between word boundaries; a longer run never matches
CODE_PATTERN = re.compile(r"\b(\d{6})\b", re.ASCII)


def build_search_text(decoded: DecodedMessage) -> str:
    return f"{decoded.text_content}\n{decoded.html_content}"


def extract(decoded: DecodedMessage) -> Optional[str]:
    """Return the first six-digit run (text before HTML), or None"""
    match = CODE_PATTERN.search(build_search_text(decoded))
    return match.group(1) if match else None
