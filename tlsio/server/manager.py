"""
This module defines the ``Listener`` class that accepts socket
connections, passes them through a ``Server`` driver and dispatches the
resulting sessions to a connection callback.
"""

import logging

from tlsio.errors import IoError
from tlsio.session import SocketSession
from tlsio.stream import start_server


_LOGGER = logging.getLogger(__name__)

# milliseconds
DEFAULT_TIMEOUT = 30000


class Listener:
    """This class listens to client connections and hands them to the
    server driver, then to the connection callback.

    Attributes:
    :server: The ``Server`` driver wrapping each accepted connection.
    :connections: A mapping of peer names to active sessions.
    """

    def __init__(self, server, connection_callback, *, timeout=DEFAULT_TIMEOUT, limit=None):
        """Initializes the listener.

        Arguments:
        :server: Any ``Server`` implementation.
        :connection_callback: A coroutine function called with each
            session, the session is closed when it returns.
        :timeout: The plain sessions timeout, in milliseconds.
        :limit: The read buffer limit of each connection.
        """
        self._server = server
        self._connection_callback = connection_callback
        self._timeout = timeout
        self._limit = limit
        self._connections = {}
        self._listener = None

    @property
    def server(self):
        return self._server

    @property
    def connections(self):
        return self._connections

    @property
    def sockets(self):
        if self._listener is None:
            return ()

        return self._listener.sockets

    async def create_connection(self, reader, writer):
        """Wrap a new connection and run the connection callback.

        This coroutine is called each time a new client connects. A
        connection the driver refuses is closed without affecting the
        other ones.
        """
        peername = writer.get_extra_info("peername")
        plain_session = SocketSession(reader, writer, peername, self._timeout)

        try:
            session = self._server.accept(plain_session)
        except IoError as error:
            _LOGGER.warning(
                "%s unable to accept %s: %s",
                self._server.name, plain_session.name, error
            )
            plain_session.close()
            return

        _LOGGER.debug("%s accepted %s", self._server.name, session.name)
        self._connections[session.name] = session

        try:
            await self._connection_callback(session)
        except IoError as error:
            _LOGGER.info("%s session %s failed: %s", self._server.name, session.name, error)
        except Exception:
            _LOGGER.exception("%s connection callback failed for %s", self._server.name, session.name)
        finally:
            try:
                await session.shutdown()
            except IoError as error:
                _LOGGER.debug("%s unclean shutdown of %s: %s", self._server.name, session.name, error)
            finally:
                session.close()
                del self._connections[session.name]

    async def listen(self, host="localhost", port=8443):
        """Start listening on given port, binded to given host."""
        self._listener = await start_server(
            self.create_connection,
            host=host,
            port=port,
            limit=self._limit
        )

        _LOGGER.info("%r listening on %s:%d", self._server, host, port)

    def close(self):
        if self._listener is not None:
            self._listener.close()

        for session in list(self._connections.values()):
            session.close()

    async def wait_closed(self):
        if self._listener is not None:
            await self._listener.wait_closed()
