import asyncio
import logging

from OpenSSL import SSL

from tlsio.errors import (
    CryptoError, CryptoHandshakeError, IoError, SessionClosedError, SessionTimeoutError
)
from tlsio.log import SessionLogger
from tlsio.session.base import Session, timeout_seconds
from .crypto import error_text


_LOGGER = logging.getLogger(__name__)

# largest TLS record payload
RECORD_SIZE = 1 << 14


class TlsSession(Session):
    """Encrypted session over a plain session.

    The OpenSSL connection works on memory buffers: records it produces
    are written to the plain session and bytes read from the plain session
    are fed back to it.

    Attributes:
    :connection: The per-connection ``OpenSSL.SSL.Connection``.
    :session: The wrapped plain session, owned by this session.
    :timeout: The handshake timeout, in milliseconds.
    """

    def __init__(self, connection, session, timeout):
        assert connection is not None
        assert session is not None

        if session.is_closed:
            raise SessionClosedError("session {0} is closed".format(session.name))

        self._connection = connection
        self._session = session
        self._timeout = timeout
        self._handshake_done = False
        self._handshake_lock = asyncio.Lock()
        self._closed = False
        self._logger = SessionLogger(_LOGGER, session.name)

    @property
    def name(self):
        return self._session.name

    @property
    def connection(self):
        return self._connection

    @property
    def session(self):
        return self._session

    @property
    def timeout(self):
        return self._timeout

    @property
    def is_closed(self):
        return self._closed or self._session.is_closed

    @property
    def handshake_done(self):
        return self._handshake_done

    @property
    def alpn_protocol(self):
        """The protocol chosen with ALPN, None if none was negotiated."""
        protocol = self._connection.get_alpn_proto_negotiated()
        return protocol.decode("ascii") if protocol else None

    @property
    def protocol_version(self):
        return self._connection.get_protocol_version_name()

    def _check_open(self):
        if self.is_closed:
            raise SessionClosedError("session {0} is closed".format(self.name))

    #------------------------------#
    # Memory buffers <-> transport #
    #------------------------------#

    async def _flush(self):
        """Send the records produced by OpenSSL to the peer."""
        while True:
            try:
                data = self._connection.bio_read(RECORD_SIZE)
            except SSL.WantReadError:
                return

            await self._session.write(data)

    async def _fill(self):
        """Feed bytes from the peer to OpenSSL, returns False at EOF."""
        data = await self._session.read(RECORD_SIZE)

        if not data:
            self._connection.bio_shutdown()
            return False

        self._connection.bio_write(data)
        return True

    #-----------#
    # Handshake #
    #-----------#

    async def _handshake(self):
        while True:
            try:
                self._connection.do_handshake()
            except SSL.WantReadError:
                await self._flush()

                if not await self._fill():
                    raise SessionClosedError(
                        "{0} closed the connection during TLS handshake".format(self.name)
                    )
            except SSL.Error as error:
                await self._flush_alert()
                raise CryptoHandshakeError("TLS handshake failed", error_text(error)) from error
            else:
                break

        await self._flush()

    async def _flush_alert(self):
        """Send the alert OpenSSL queued for a failed handshake, the peer
        may already be gone.
        """
        try:
            await self._flush()
        except IoError as error:
            self._logger.debug("unable to send TLS alert: %s", error)

    async def handshake(self):
        """Perform the server handshake, if not done yet.

        Concurrent callers wait for the same handshake. Raises
        ``SessionTimeoutError`` when it does not complete within the
        session timeout.
        """
        if self._handshake_done:
            return

        async with self._handshake_lock:
            if self._handshake_done:
                return

            self._check_open()

            try:
                await asyncio.wait_for(self._handshake(), timeout_seconds(self._timeout))
            except asyncio.TimeoutError as error:
                raise SessionTimeoutError(
                    "TLS handshake with {0} timed out after {1}ms".format(self.name, self._timeout)
                ) from error

            self._handshake_done = True
            self._logger.debug(
                "TLS handshake complete (%s, alpn: %s)",
                self.protocol_version, self.alpn_protocol
            )

    #-----#
    # I/O #
    #-----#

    async def read(self, size):
        self._check_open()
        await self.handshake()

        while True:
            try:
                return self._connection.recv(size)
            except SSL.WantReadError:
                await self._flush()

                if not await self._fill():
                    return b""
            except SSL.ZeroReturnError:
                return b""
            except SSL.Error as error:
                raise CryptoError("TLS read failed", error_text(error)) from error

    async def write(self, data):
        self._check_open()
        await self.handshake()

        offset = 0
        while offset < len(data):
            try:
                offset += self._connection.send(data[offset:offset + RECORD_SIZE])
            except SSL.Error as error:
                raise CryptoError("TLS write failed", error_text(error)) from error

            await self._flush()

    async def shutdown(self):
        """Send the TLS close notification, then close the session."""
        try:
            if self._handshake_done and not self.is_closed:
                try:
                    self._connection.shutdown()
                except SSL.Error as error:
                    raise CryptoError("TLS shutdown failed", error_text(error)) from error

                await self._flush()
        finally:
            self.close()

    def close(self):
        if self._closed:
            return

        self._closed = True
        self._session.close()
        self._logger.debug("TLS session closed")

    def __repr__(self):
        return "TlsSession({0}, timeout={1})".format(self.name, self._timeout)
