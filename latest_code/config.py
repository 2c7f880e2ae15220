"""
Configuration - Mailbox settings read from the environment

Settings are read once per request and turned into an immutable
MailboxConfig that is passed down the pipeline explicitly.
"""

import hmac
import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from latest_code.core.exceptions import ConfigMissingError

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"

DEFAULT_IMAP_PORT = 993
DEFAULT_AUTH_TIMEOUT_MS = 3000

_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if not value:
        return default
    return value not in _FALSE_VALUES


def _parse_positive_int(raw: Optional[str], default: int) -> Optional[int]:
    """Parse a positive integer setting; None when malformed or not positive"""
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value > 0 else None


@dataclass(frozen=True)
class MailboxConfig:
    """Connection parameters for one mailbox session"""

    host: str
    user: str
    secret: str = field(repr=False)
    port: int = DEFAULT_IMAP_PORT
    use_tls: bool = True
    auth_timeout_ms: int = DEFAULT_AUTH_TIMEOUT_MS

    @property
    def timeout_seconds(self) -> float:
        return self.auth_timeout_ms / 1000.0


@dataclass
class Settings:
    """
    Raw deployment settings

    Fields left as None are filled from the environment mapping given as
    ``environ`` (``os.environ`` by default).
    """

    imap_host: Optional[str] = None
    imap_port: Optional[str] = None
    imap_user: Optional[str] = None
    imap_pass: Optional[str] = field(default=None, repr=False)
    imap_tls: Optional[str] = None
    imap_auth_timeout_ms: Optional[str] = None
    api_key: Optional[str] = field(default=None, repr=False)
    environ: Optional[Mapping[str, str]] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        env = os.environ if self.environ is None else self.environ
        self.imap_host = self.imap_host or env.get("IMAP_HOST", "")
        self.imap_port = self.imap_port or env.get("IMAP_PORT", "")
        self.imap_user = self.imap_user or env.get("IMAP_USER", "")
        self.imap_pass = self.imap_pass or env.get("IMAP_PASS", "")
        self.imap_tls = self.imap_tls or env.get("IMAP_TLS", "")
        self.imap_auth_timeout_ms = self.imap_auth_timeout_ms or env.get("IMAP_AUTH_TIMEOUT_MS", "")
        self.api_key = self.api_key or env.get("MY_API_KEY", "")

    @property
    def auth_enabled(self) -> bool:
        return bool(self.api_key)

    def is_authorized(self, provided_key: Optional[str]) -> bool:
        """
        Check a caller-supplied API key

        Args:
            provided_key: Value of the ``x-api-key`` header, if any

        Returns:
            bool: True when no key is configured or the keys match
        """
        if not self.auth_enabled:
            return True
        if not provided_key:
            return False
        return hmac.compare_digest(provided_key.encode(), self.api_key.encode())

    @property
    def mailbox_configured(self) -> bool:
        return bool(self.imap_host and self.imap_user and self.imap_pass)

    def mailbox_config(self) -> MailboxConfig:
        """
        Build the mailbox configuration

        Returns:
            MailboxConfig: Immutable connection parameters

        Raises:
            ConfigMissingError: If credentials are absent or a number is malformed
        """
        missing: List[str] = [
            name
            for name, value in (
                ("IMAP_HOST", self.imap_host),
                ("IMAP_USER", self.imap_user),
                ("IMAP_PASS", self.imap_pass),
            )
            if not value
        ]

        port = _parse_positive_int(self.imap_port, DEFAULT_IMAP_PORT)
        if port is None:
            missing.append("IMAP_PORT")
        timeout_ms = _parse_positive_int(self.imap_auth_timeout_ms, DEFAULT_AUTH_TIMEOUT_MS)
        if timeout_ms is None:
            missing.append("IMAP_AUTH_TIMEOUT_MS")

        if missing:
            logger.error(f"IMAP configuration incomplete: {', '.join(missing)}")
            raise ConfigMissingError(missing)

        return MailboxConfig(
            host=self.imap_host,
            user=self.imap_user,
            secret=self.imap_pass,
            port=port,
            use_tls=_parse_bool(self.imap_tls, default=True),
            auth_timeout_ms=timeout_ms,
        )
