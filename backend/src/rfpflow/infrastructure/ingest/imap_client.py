"""IMAP mailbox client with an explicit connection state machine.

States:
    disconnected -> connecting -> ready -> polling -> ready
    connecting -> disconnected      (auth/network failure)
    ready | polling -> disconnected (connection lost)

Polling is only reachable from `ready`. The handle is not thread-safe; a
single watcher thread drives every transition.
"""

import imaplib
import logging
from enum import Enum
from typing import Callable, Optional

from ...errors import InvalidStateTransition, MailboxConnectionError
from ...observability.metrics import mailbox_connections_total

logger = logging.getLogger(__name__)

# imaplib raises IMAP4.error (and its abort subclass) for protocol failures
# and OSError (including ssl.SSLError and socket timeouts) for network ones.
_CONNECTION_ERRORS = (imaplib.IMAP4.error, OSError)


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    READY = "ready"
    POLLING = "polling"


ALLOWED_TRANSITIONS = {
    ConnectionState.DISCONNECTED: [ConnectionState.CONNECTING],
    ConnectionState.CONNECTING: [ConnectionState.READY, ConnectionState.DISCONNECTED],
    ConnectionState.READY: [ConnectionState.POLLING, ConnectionState.DISCONNECTED],
    ConnectionState.POLLING: [ConnectionState.READY, ConnectionState.DISCONNECTED],
}

# IMAP protocol states in which the session is authenticated
_AUTHENTICATED_IMAP_STATES = ("AUTH", "SELECTED")


class MailboxClient:
    """Single long-lived connection to the inbound mailbox.

    Usage:
        client = MailboxClient(host, 993, user, password)
        client.connect()
        for raw in client.fetch_unseen():
            ...
    """

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        mailbox: str = "INBOX",
        connection_factory: Callable[[str, int], imaplib.IMAP4] = imaplib.IMAP4_SSL,
    ):
        """Initialize mailbox client.

        Args:
            host: IMAP server host
            port: IMAP server port (993 for IMAPS)
            user: Login name
            password: Login password or app password
            mailbox: Folder to poll
            connection_factory: Builds the protocol handle (tests inject a fake)
        """
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.mailbox = mailbox
        self.connection_factory = connection_factory
        self._conn: Optional[imaplib.IMAP4] = None
        self._state = ConnectionState.DISCONNECTED

    @property
    def state(self) -> ConnectionState:
        return self._state

    def _transition(self, new_state: ConnectionState) -> None:
        if new_state not in ALLOWED_TRANSITIONS[self._state]:
            raise InvalidStateTransition(
                f"Invalid mailbox connection transition: {self._state.value} -> {new_state.value}"
            )
        logger.debug(f"Mailbox connection {self._state.value} -> {new_state.value}")
        self._state = new_state

    def is_ready(self) -> bool:
        """True when the handle is in `ready` and still authenticated."""
        if self._state != ConnectionState.READY or self._conn is None:
            return False
        return getattr(self._conn, "state", None) in _AUTHENTICATED_IMAP_STATES

    def connect(self) -> None:
        """Open a fresh connection and authenticate.

        Any previous handle is dropped first.

        Raises:
            MailboxConnectionError: Network or authentication failure
        """
        if self._state != ConnectionState.DISCONNECTED:
            self.disconnect()

        self._transition(ConnectionState.CONNECTING)
        try:
            conn = self.connection_factory(self.host, self.port)
            conn.login(self.user, self.password)
        except _CONNECTION_ERRORS as e:
            self._conn = None
            self._transition(ConnectionState.DISCONNECTED)
            mailbox_connections_total.labels(result="error").inc()
            raise MailboxConnectionError(f"Cannot connect to {self.host}:{self.port}: {e}") from e

        self._conn = conn
        self._transition(ConnectionState.READY)
        mailbox_connections_total.labels(result="success").inc()
        logger.info(f"IMAP connection ready: {self.host}:{self.port}")

    def fetch_unseen(self) -> list[bytes]:
        """Select the mailbox, search UNSEEN and fetch full messages.

        Fetching RFC822 sets the \\Seen flag, so a message is handed out once.
        Messages whose individual fetch fails are skipped.

        Returns:
            Raw RFC 822 bytes per unseen message

        Raises:
            InvalidStateTransition: Called while not `ready`
            MailboxConnectionError: The connection failed mid-cycle
        """
        if not self.is_ready():
            raise InvalidStateTransition(f"Cannot poll mailbox in state {self._state.value}")

        self._transition(ConnectionState.POLLING)
        try:
            messages = self._fetch_unseen()
        except _CONNECTION_ERRORS as e:
            self._drop_connection()
            raise MailboxConnectionError(f"Mailbox poll failed: {e}") from e

        self._transition(ConnectionState.READY)
        return messages

    def _fetch_unseen(self) -> list[bytes]:
        status, _ = self._conn.select(self.mailbox)
        if status != "OK":
            raise imaplib.IMAP4.error(f"Unable to select IMAP folder {self.mailbox}")

        status, data = self._conn.search(None, "UNSEEN")
        if status != "OK":
            raise imaplib.IMAP4.error("IMAP search failed")

        ids = data[0].split() if data and data[0] else []
        if not ids:
            logger.info("No new emails found")
            return []

        logger.info(f"Found {len(ids)} new email(s)")
        messages: list[bytes] = []
        for msg_id in ids:
            status, msg_data = self._conn.fetch(msg_id, "(RFC822)")
            if status != "OK":
                logger.warning(f"Fetch of message {msg_id!r} returned {status}, skipping")
                continue
            for part in msg_data:
                if isinstance(part, tuple) and len(part) > 1:
                    messages.append(part[1])
                    break
        return messages

    def _drop_connection(self) -> None:
        conn, self._conn = self._conn, None
        self._transition(ConnectionState.DISCONNECTED)
        if conn is None:
            return
        try:
            conn.logout()
        except _CONNECTION_ERRORS as e:
            logger.debug(f"IMAP logout failed: {e}")

    def disconnect(self) -> None:
        """Log out and return to `disconnected`. Safe to call in any state."""
        if self._state == ConnectionState.DISCONNECTED:
            return
        if self._state == ConnectionState.CONNECTING:
            self._conn = None
            self._transition(ConnectionState.DISCONNECTED)
            return
        self._drop_connection()
        logger.info("IMAP connection ended")
