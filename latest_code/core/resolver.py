"""
Latest-Message Resolver

IMAP does not promise that SEARCH results come back in arrival order. The
message with the largest UID is taken as the newest. UIDs are assigned in
increasing order as messages are appended to a mailbox, so this matches
arrival order on common servers, but it is an approximation: a message
copied or moved in later carries a fresh UID regardless of when it was
originally received.
"""

from typing import Iterable, Optional

from latest_code.models.message import MessageSummary


def resolve_latest(summaries: Iterable[MessageSummary]) -> Optional[int]:
    """
    Pick the most recently added message

    Args:
        summaries: Every message listed in the inbox

    Returns:
        Optional[int]: Largest UID, or None for an empty inbox
    """
    identifiers = [summary.identifier for summary in summaries]
    if not identifiers:
        return None
    return max(identifiers)
