class Server:
    """Interface implemented by every transport driver.

    Upper layers only hold a ``Server`` and never know whether sessions
    are plaintext or encrypted.

    Attributes:
    :name: The server identity, as given at construction.
    """

    @property
    def name(self):
        raise NotImplementedError

    def accept(self, session):
        """Wrap an accepted plain session and return the session callers
        should use from now on.

        Raises an ``IoError`` subclass when the session cannot be wrapped.
        """
        raise NotImplementedError

    def __str__(self):
        """The log representation of the server."""
        raise NotImplementedError

    def __repr__(self):
        return "{0}({1})".format(type(self).__name__, self)
