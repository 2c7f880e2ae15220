"""
Mail Session - One authenticated IMAP session per request

Wraps imaplib with the handful of operations the pipeline needs:
- open a TLS session and log in
- select the inbox read-only
- enumerate message UIDs
- fetch one raw message by UID without marking it seen
- close, swallowing any teardown failure
"""

import imaplib
import logging
import ssl
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from latest_code.config import MailboxConfig
from latest_code.core.exceptions import FetchError, MailConnectionError
from latest_code.models.message import MessageSummary, RawMessage

logger = logging.getLogger(__name__)

INBOX = "INBOX"

IMAPError = imaplib.IMAP4.error


class MailSession:
    """
    Authenticated IMAP session

    Instances are created with ``MailSession.open`` and must be closed; use
    ``open_session`` to get that guarantee.
    """

    def __init__(self, client: imaplib.IMAP4, host: str):
        self._client = client
        self._host = host
        self._selected = False
        self._closed = False

    @classmethod
    def open(cls, config: MailboxConfig) -> "MailSession":
        """
        Connect and log in

        Args:
            config: Mailbox connection parameters

        Returns:
            MailSession: Logged-in session

        Raises:
            MailConnectionError: On network, TLS or authentication failure
        """
        logger.info(f"Connecting to {config.host}:{config.port} (tls={config.use_tls})")
        try:
            if config.use_tls:
                client = imaplib.IMAP4_SSL(
                    config.host,
                    config.port,
                    ssl_context=ssl.create_default_context(),
                    timeout=config.timeout_seconds,
                )
            else:
                client = imaplib.IMAP4(config.host, config.port, timeout=config.timeout_seconds)
        except (OSError, IMAPError) as e:
            logger.warning(f"Connection to {config.host}:{config.port} failed: {e}")
            raise MailConnectionError(f"Cannot connect to mail server: {e}") from e

        session = cls(client, config.host)
        try:
            client.login(config.user, config.secret)
        except (OSError, IMAPError) as e:
            session.close()
            raise MailConnectionError(f"Login failed: {e}") from e

        return session

    def select_inbox(self) -> None:
        """Select INBOX read-only so fetching leaves flags untouched"""
        try:
            status, data = self._client.select(INBOX, readonly=True)
        except (OSError, IMAPError) as e:
            raise MailConnectionError(f"Cannot select {INBOX}: {e}") from e
        if status != "OK":
            raise MailConnectionError(f"Cannot select {INBOX}: {_describe(data)}")
        self._selected = True

    def enumerate(self) -> List[MessageSummary]:
        """
        List every message in the selected inbox

        Returns:
            List[MessageSummary]: One entry per UID, in server order (may be empty)
        """
        try:
            status, data = self._client.uid("SEARCH", None, "ALL")
        except (OSError, IMAPError) as e:
            raise MailConnectionError(f"UID SEARCH failed: {e}") from e
        if status != "OK":
            raise MailConnectionError(f"UID SEARCH failed: {_describe(data)}")

        if not data or not data[0]:
            return []
        return [MessageSummary(identifier=int(uid)) for uid in data[0].split()]

    def fetch_body(self, identifier: int) -> RawMessage:
        """
        Fetch the full RFC 822 source of one message

        Args:
            identifier: UID returned by ``enumerate``

        Returns:
            RawMessage: The unparsed message

        Raises:
            FetchError: If the UID no longer resolves to a message
            MailConnectionError: On protocol failure
        """
        try:
            status, data = self._client.uid("FETCH", str(identifier), "(BODY.PEEK[])")
        except (OSError, IMAPError) as e:
            raise MailConnectionError(f"UID FETCH {identifier} failed: {e}") from e
        if status != "OK":
            raise FetchError(f"UID {identifier} could not be fetched: {_describe(data)}")

        # A fetched literal comes back as (envelope, bytes); anything else is noise
        for item in data or []:
            if isinstance(item, tuple) and len(item) >= 2 and item[1] is not None:
                return RawMessage(identifier=identifier, body=item[1])

        raise FetchError(f"UID {identifier} no longer exists")

    def close(self) -> None:
        """Close the mailbox and log out; failures are discarded"""
        if self._closed:
            return
        self._closed = True

        if self._selected:
            try:
                self._client.close()
            except Exception as e:
                logger.debug(f"Ignoring CLOSE failure on {self._host}: {e}")
        try:
            self._client.logout()
        except Exception as e:
            logger.debug(f"Ignoring LOGOUT failure on {self._host}: {e}")


def _describe(data: Optional[list]) -> str:
    if not data:
        return "no response"
    first = data[0]
    if isinstance(first, bytes):
        return first.decode(errors="replace")
    return str(first)


@contextmanager
def open_session(
    config: MailboxConfig,
    opener: Optional[Callable[[MailboxConfig], MailSession]] = None,
) -> Iterator[MailSession]:
    """
    Open a session that is closed on every exit path

    Args:
        config: Mailbox connection parameters
        opener: Session factory, ``MailSession.open`` by default
    """
    session = (opener or MailSession.open)(config)
    try:
        yield session
    finally:
        try:
            session.close()
        except Exception as e:
            logger.debug(f"Ignoring session close failure: {e}")
