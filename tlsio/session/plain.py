import asyncio
import logging

from tlsio.errors import SessionClosedError, SessionTimeoutError
from tlsio.log import SessionLogger
from .base import Session, timeout_seconds


_LOGGER = logging.getLogger(__name__)


def format_peername(peername):
    """Render a socket peer name as ``host:port``."""
    if isinstance(peername, tuple) and len(peername) >= 2:
        return "{0[0]}:{0[1]}".format(peername)

    return str(peername)


class SocketSession(Session):
    """Unencrypted session over a ``tlsio.stream`` reader and writer.

    Attributes:
    :reader: The stream for reading data from the remote peer.
    :writer: The stream for sending data to the remote peer.
    :timeout: Bound of each read and drain, in milliseconds.
    """

    def __init__(self, reader, writer, peername, timeout):
        self._reader = reader
        self._writer = writer
        self._name = format_peername(peername)
        self._timeout = timeout
        self._closed = False
        self._logger = SessionLogger(_LOGGER, self._name)

    @property
    def name(self):
        return self._name

    @property
    def reader(self):
        return self._reader

    @property
    def writer(self):
        return self._writer

    @property
    def timeout(self):
        return self._timeout

    @property
    def is_closed(self):
        return self._closed

    def _check_open(self):
        if self._closed:
            raise SessionClosedError("session {0} is closed".format(self._name))

    async def _bounded(self, coroutine, operation):
        try:
            return await asyncio.wait_for(coroutine, timeout_seconds(self._timeout))
        except asyncio.TimeoutError as error:
            raise SessionTimeoutError(
                "timeout after {0}ms waiting for {1} on {2}".format(
                    self._timeout, operation, self._name
                )
            ) from error

    async def read(self, size):
        self._check_open()
        return await self._bounded(self._reader.read(size), "read")

    async def write(self, data):
        self._check_open()

        if self._writer.is_closing():
            raise SessionClosedError("connection to {0} lost".format(self._name))

        self._writer.write(data)
        await self._bounded(self._writer.drain(), "write")

    def close(self):
        if self._closed:
            return

        self._closed = True
        self._writer.close()
        self._logger.debug("session closed")

    def __repr__(self):
        return "SocketSession({0}, timeout={1})".format(self._name, self._timeout)
