"""Shared pytest fixtures.

Provides reusable test fixtures for:
- In-memory SQLite engine and sessions (StaticPool, tables created per test)
- Vendor and solicitation factories
- A scripted LLM provider standing in for OpenAI/Anthropic
- A fake IMAP connection standing in for imaplib.IMAP4_SSL
- Raw vendor reply messages

Usage:
    def test_something(db_session, make_vendor, fake_llm):
        vendor = make_vendor("Acme", "sales@acme.test")
"""

import imaplib
import sys
import threading
from email.message import EmailMessage
from pathlib import Path
from typing import Callable, Optional, Union

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from rfpflow.ai.ports import LLMCompletionResult, LLMProviderPort
from rfpflow.database import build_session_factory, init_db, session_scope
from rfpflow.extraction import ExtractionClient, ExtractionService
from rfpflow.models import Solicitation, SolicitationStatus, Vendor


LAPTOP_EXTRACTION = (
    '{"pricing":{"laptops":{"quantity":20,"unitPrice":1200,"total":24000}},'
    '"deliveryTime":"30 days","paymentTerms":"net 30","warranty":"1 year","completeness":90}'
)


class FakeLLMProvider(LLMProviderPort):
    """Scripted LLMProviderPort.

    responses may be strings (returned in order, the last one repeats) or a
    callable taking the user prompt. Set `error` to make every call raise.
    """

    name = "fake"

    def __init__(
        self,
        responses: Optional[list[Union[str, Callable[[str], str]]]] = None,
        error: Optional[Exception] = None,
    ):
        self.responses = list(responses or [])
        self.error = error
        self.calls: list[dict] = []
        self._lock = threading.Lock()

    def complete(self, system_prompt, user_prompt, temperature, json_mode=True):
        with self._lock:
            self.calls.append({
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "temperature": temperature,
                "json_mode": json_mode,
            })
            if self.error is not None:
                raise self.error
            if not self.responses:
                response = ""
            elif len(self.responses) > 1:
                response = self.responses.pop(0)
            else:
                response = self.responses[0]

        raw = response(user_prompt) if callable(response) else response
        return LLMCompletionResult(
            raw_output=raw,
            provider=self.name,
            model="fake-model",
            tokens_in=10,
            tokens_out=20,
            latency_ms=1,
        )


class FakeIMAPConnection:
    """In-memory stand-in for imaplib.IMAP4_SSL.

    Messages are numbered from 1; fetching one marks it seen.
    """

    def __init__(self, host, port, messages=None, fail_login=False, fail_search=False):
        self.host = host
        self.port = port
        self.messages = {i: raw for i, raw in enumerate(messages or [], start=1)}
        self.seen: set[int] = set()
        self.fail_login = fail_login
        self.fail_search = fail_search
        self.state = "NONAUTH"
        self.selected: Optional[str] = None
        self.logged_out = False

    def login(self, user, password):
        if self.fail_login:
            raise imaplib.IMAP4.error("[AUTHENTICATIONFAILED] Invalid credentials")
        self.state = "AUTH"
        return "OK", [b"Logged in"]

    def select(self, mailbox="INBOX"):
        self.state = "SELECTED"
        self.selected = mailbox
        return "OK", [str(len(self.messages)).encode()]

    def search(self, charset, criterion):
        if self.fail_search:
            raise imaplib.IMAP4.abort("socket error: EOF")
        unseen = [str(i).encode() for i in self.messages if i not in self.seen]
        return "OK", [b" ".join(unseen)]

    def fetch(self, msg_id, parts):
        i = int(msg_id)
        self.seen.add(i)
        raw = self.messages[i]
        return "OK", [(f"{i} (RFC822 {{{len(raw)}}}".encode(), raw), b")"]

    def logout(self):
        self.state = "LOGOUT"
        self.logged_out = True
        return "BYE", [b"Logging out"]


class FakeIMAPFactory:
    """connection_factory for MailboxClient that records each connection."""

    def __init__(self, messages=None, fail_login=False):
        self.messages = list(messages or [])
        self.fail_login = fail_login
        self.connections: list[FakeIMAPConnection] = []

    def __call__(self, host, port):
        conn = FakeIMAPConnection(host, port, messages=self.messages, fail_login=self.fail_login)
        self.connections.append(conn)
        return conn


def build_reply(
    sender: str = "v@x.com",
    subject: str = "Re: RFP: Laptops Q3",
    body: str = "20 units at $1200 each, 30 day delivery, net 30, 1yr warranty",
    html: Optional[str] = None,
) -> bytes:
    """Raw RFC 822 bytes of a vendor reply."""
    msg = EmailMessage()
    msg["From"] = f"Vendor Sales <{sender}>"
    msg["To"] = "procurement@example.com"
    msg["Subject"] = subject
    msg["Message-ID"] = "<reply-1@vendor.test>"
    if body is not None:
        msg.set_content(body)
        if html is not None:
            msg.add_alternative(html, subtype="html")
    elif html is not None:
        msg.set_content(html, subtype="html")
    return bytes(msg)


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db_session(session_factory):
    """Session for direct repository/model tests."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_vendor(session_factory):
    """Create and commit a vendor."""
    def _make(name: str = "Acme Supplies", email: str = "v@x.com", **fields) -> Vendor:
        with session_scope(session_factory) as session:
            vendor = Vendor(name=name, email=email, **fields)
            session.add(vendor)
            session.flush()
        return vendor
    return _make


@pytest.fixture
def make_solicitation(session_factory):
    """Create and commit a solicitation (status `sent` by default)."""
    def _make(
        title: str = "Laptops Q3",
        status: SolicitationStatus = SolicitationStatus.SENT,
        **fields,
    ) -> Solicitation:
        fields.setdefault("description", f"{title} procurement")
        fields.setdefault("requirements", [{"item": "laptops", "quantity": 20, "specifications": {"RAM": "16GB"}}])
        with session_scope(session_factory) as session:
            solicitation = Solicitation(title=title, status=status, **fields)
            session.add(solicitation)
            session.flush()
        return solicitation
    return _make


@pytest.fixture
def fake_llm():
    return FakeLLMProvider(responses=[LAPTOP_EXTRACTION])


@pytest.fixture
def extraction_service(fake_llm):
    return ExtractionService(ExtractionClient(fake_llm))


@pytest.fixture
def fake_imap_factory():
    return FakeIMAPFactory()
