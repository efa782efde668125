import logging

from .base import Server


_LOGGER = logging.getLogger(__name__)


class SocketServer(Server):
    """Plaintext driver, sessions are used as accepted."""

    def __init__(self, host, timeout):
        assert host

        self._host = host
        self._timeout = timeout

        _LOGGER.debug("plaintext server created %s", self)

    @property
    def name(self):
        return self._host

    @property
    def timeout(self):
        return self._timeout

    def accept(self, session):
        assert session is not None
        return session

    def close(self):
        pass

    def __str__(self):
        return "{{host: {0}, timeout: {1}}}".format(self._host, self._timeout)
