"""
Response Models - Outcome of a latest-code request

A request ends in exactly one of two shapes:
- Success: a six-digit code was found (HTTP 200)
- Failure: one of the ErrorKind values, each with a fixed status and message
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union


class ErrorKind(str, Enum):
    """Failure classification"""

    FORBIDDEN = "forbidden"  # API key mismatch
    CONFIG_MISSING = "config_missing"  # Deployment misconfiguration
    NO_MESSAGES = "no_messages"  # Empty inbox
    MESSAGE_NOT_FOUND = "message_not_found"  # Latest message vanished before fetch
    CODE_NOT_FOUND = "code_not_found"  # No six-digit run in the latest message
    SERVER_ERROR = "server_error"  # Connection, protocol, parse or unexpected failure

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_STATUS_CODES = {
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.CONFIG_MISSING: 500,
    ErrorKind.NO_MESSAGES: 404,
    ErrorKind.MESSAGE_NOT_FOUND: 404,
    ErrorKind.CODE_NOT_FOUND: 404,
    ErrorKind.SERVER_ERROR: 500,
}

_MESSAGES = {
    ErrorKind.FORBIDDEN: "Forbidden",
    ErrorKind.CONFIG_MISSING: "IMAP configuration missing",
    ErrorKind.NO_MESSAGES: "No messages",
    ErrorKind.MESSAGE_NOT_FOUND: "Latest message not found",
    ErrorKind.CODE_NOT_FOUND: "No 6-digit code found",
    ErrorKind.SERVER_ERROR: "Server error",
}


@dataclass(frozen=True)
class Success:
    """A code was extracted from the latest message"""

    code: str

    def __post_init__(self) -> None:
        if not self.code:
            raise ValueError("Success requires a non-empty code")

    @property
    def status_code(self) -> int:
        return 200

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code}


@dataclass(frozen=True)
class Failure:
    """The request ended without a code"""

    kind: ErrorKind
    detail: Optional[str] = None

    @property
    def status_code(self) -> int:
        return self.kind.status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON error body; ``details`` only when present"""
        response: Dict[str, Any] = {"error": self.kind.message}
        if self.detail:
            response["details"] = self.detail
        return response


ResponsePayload = Union[Success, Failure]
