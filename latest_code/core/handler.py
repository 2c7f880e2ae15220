"""
Request Handler - Fetch the latest six-digit code from the mailbox

Runs the whole pipeline for one request:

    auth check -> config check -> open session -> select inbox -> enumerate
    -> resolve latest -> fetch body -> decode -> extract -> respond

Every outcome, including unexpected exceptions, becomes a ResponsePayload.
The mail session is closed on every path once it has been opened.
"""

import logging
from typing import Callable, Mapping, Optional

from latest_code.config import MailboxConfig, Settings
from latest_code.core import decoder, extractor
from latest_code.core.exceptions import (
    ConfigMissingError,
    DecodeError,
    FetchError,
    MailConnectionError,
)
from latest_code.core.mail_session import MailSession, open_session
from latest_code.core.resolver import resolve_latest
from latest_code.models.response import ErrorKind, Failure, ResponsePayload, Success

logger = logging.getLogger(__name__)

SessionOpener = Callable[[MailboxConfig], MailSession]


def handle_request(
    api_key: Optional[str],
    environ: Optional[Mapping[str, str]] = None,
    opener: Optional[SessionOpener] = None,
) -> ResponsePayload:
    """
    Handle one latest-code request

    Args:
        api_key: Value of the caller's ``x-api-key`` header, if sent
        environ: Environment mapping to read settings from (``os.environ`` by default)
        opener: Session factory, ``MailSession.open`` by default

    Returns:
        ResponsePayload: Success with the code, or a classified Failure
    """
    settings = Settings(environ=environ)

    if not settings.is_authorized(api_key):
        logger.warning("Rejected request with missing or invalid API key")
        return Failure(ErrorKind.FORBIDDEN)

    try:
        config = settings.mailbox_config()
    except ConfigMissingError:
        return Failure(ErrorKind.CONFIG_MISSING)

    try:
        with open_session(config, opener) as session:
            return _fetch_latest_code(session)
    except (MailConnectionError, DecodeError) as e:
        logger.error(f"Mailbox pipeline failed: {e}")
        return Failure(ErrorKind.SERVER_ERROR, detail=str(e))
    except Exception as e:
        logger.exception(f"Unexpected error while reading mailbox: {e}")
        return Failure(ErrorKind.SERVER_ERROR, detail=str(e) or type(e).__name__)


def _fetch_latest_code(session: MailSession) -> ResponsePayload:
    session.select_inbox()

    summaries = session.enumerate()
    latest = resolve_latest(summaries)
    if latest is None:
        logger.info("Inbox is empty")
        return Failure(ErrorKind.NO_MESSAGES)

    logger.info(f"Latest of {len(summaries)} message(s) is UID {latest}")

    try:
        raw = session.fetch_body(latest)
    except FetchError as e:
        logger.warning(f"Latest message disappeared: {e}")
        return Failure(ErrorKind.MESSAGE_NOT_FOUND)

    decoded = decoder.decode(raw)
    code = extractor.extract(decoded)
    if code is None:
        logger.info(f"No six-digit code in UID {latest}")
        return Failure(ErrorKind.CODE_NOT_FOUND)

    return Success(code=code)
