def timeout_seconds(timeout):
    """Convert a millisecond timeout to the seconds expected by asyncio,
    ``0`` or ``None`` meaning no timeout.
    """
    if not timeout:
        return None

    return timeout / 1000


class Session:
    """Interface for sessions accepted by a ``Server``.

    A session is a bidirectional byte stream to one remote peer, whatever
    the transport below it.

    Attributes:
    :name: The remote peer identity, used in logs.
    :is_closed: True once the session has been closed.
    """

    @property
    def name(self):
        raise NotImplementedError

    @property
    def is_closed(self):
        raise NotImplementedError

    async def read(self, size):
        """Read up to ``size`` bytes, returns ``b""`` when the peer closed
        the session.
        """
        raise NotImplementedError

    async def write(self, data):
        """Send all of ``data`` to the peer."""
        raise NotImplementedError

    async def shutdown(self):
        """Gracefully end the session, then close it."""
        self.close()

    def close(self):
        """Close the session. Closing twice has no effect."""
        raise NotImplementedError

    def __str__(self):
        return self.name
