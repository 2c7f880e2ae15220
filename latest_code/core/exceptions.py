"""
Exceptions - Failure types raised by the mailbox pipeline

The request handler catches every one of these at its boundary and turns it
into a typed failure response.
"""


class LatestCodeError(Exception):
    """Base class for pipeline failures"""


class ConfigMissingError(LatestCodeError):
    """Required mailbox settings are absent or malformed"""

    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Missing or invalid settings: {', '.join(self.missing)}")


class MailConnectionError(LatestCodeError):
    """Connecting, authenticating or selecting the inbox failed"""


class FetchError(LatestCodeError):
    """A message identifier no longer resolves to a message"""


class DecodeError(LatestCodeError):
    """A raw message could not be parsed at all"""
