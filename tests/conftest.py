"""
Shared fixtures: an in-memory IMAP server stand-in and message builders
"""

import imaplib
from email.message import EmailMessage
from typing import Dict, Optional

import pytest

IMAPError = imaplib.IMAP4.error
IMAPAbort = imaplib.IMAP4.abort


class FakeMailbox:
    """Messages keyed by UID plus a log of every IMAP call made against them"""

    def __init__(self, messages: Optional[Dict[int, bytes]] = None):
        self.messages: Dict[int, bytes] = dict(messages or {})
        self.calls = []
        self.vanished = set()
        self.ssl_contexts = []
        self.fail_connect = False
        self.fail_login = False
        self.fail_select = False
        self.fail_close = False
        self.fail_logout = False

    def connect(self, host, port, ssl_context=None, timeout=None):
        self.calls.append(("init", host, port, timeout))
        self.ssl_contexts.append(ssl_context)
        if self.fail_connect:
            raise ConnectionRefusedError("connection refused")
        return FakeIMAP(self)

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)


class FakeIMAP:
    def __init__(self, mailbox: FakeMailbox):
        self.mailbox = mailbox

    def login(self, user, password):
        self.mailbox.calls.append(("login", user, password))
        if self.mailbox.fail_login:
            raise IMAPError("[AUTHENTICATIONFAILED] Invalid credentials")
        return "OK", [b"LOGIN completed"]

    def select(self, mailbox="INBOX", readonly=False):
        self.mailbox.calls.append(("select", mailbox, readonly))
        if self.mailbox.fail_select:
            return "NO", [b"Mailbox does not exist"]
        return "OK", [str(len(self.mailbox.messages)).encode()]

    def uid(self, command, *args):
        self.mailbox.calls.append(("uid", command.upper()) + args)
        if command.upper() == "SEARCH":
            uids = " ".join(str(uid) for uid in self.mailbox.messages)
            return "OK", [uids.encode()]
        if command.upper() == "FETCH":
            uid = int(args[0])
            body = self.mailbox.messages.get(uid)
            if body is None or uid in self.mailbox.vanished:
                return "OK", [None]
            envelope = f"1 (UID {uid} BODY[] {{{len(body)}}}".encode()
            return "OK", [(envelope, body), b")"]
        return "BAD", [b"unsupported"]

    def close(self):
        self.mailbox.calls.append(("close",))
        if self.mailbox.fail_close:
            raise IMAPAbort("socket error: EOF")
        return "OK", [b"CLOSE completed"]

    def logout(self):
        self.mailbox.calls.append(("logout",))
        if self.mailbox.fail_logout:
            raise OSError("connection reset")
        return "BYE", [b"LOGOUT completed"]


def make_message(text=None, html=None, subject="Your verification code") -> bytes:
    """Build RFC 822 bytes with an optional plain and/or HTML body"""
    message = EmailMessage()
    message["From"] = "no-reply@example.com"
    message["To"] = "me@example.com"
    message["Subject"] = subject
    if text is not None:
        message.set_content(text)
        if html is not None:
            message.add_alternative(html, subtype="html")
    elif html is not None:
        message.set_content(html, subtype="html")
    return message.as_bytes()


@pytest.fixture
def build_message():
    """Message builder"""
    return make_message


@pytest.fixture
def fake_mailbox(monkeypatch):
    """Empty fake mailbox wired into imaplib"""
    mailbox = FakeMailbox()
    monkeypatch.setattr("imaplib.IMAP4_SSL", mailbox.connect)
    return mailbox


@pytest.fixture
def imap_env():
    """Complete environment with auth disabled"""
    return {
        "IMAP_HOST": "imap.example.com",
        "IMAP_USER": "me@example.com",
        "IMAP_PASS": "app-password",
    }
