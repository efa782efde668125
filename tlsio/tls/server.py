"""TLS server driver.

The driver builds one TLS context from a certificate and private key and
shares it, read-only, with every connection it accepts. Each accepted
plain session gets its own OpenSSL connection object bound to that
context and is wrapped into a ``TlsSession``; the handshake itself runs
later, on the first use of the session.
"""

import logging
import weakref

from OpenSSL import SSL

from tlsio.errors import (
    ConfigError, CredentialLoadError, CryptoHandshakeInitError,
    CryptoInitError, ServerClosedError
)
from tlsio.server.base import Server
from tlsio.stats import NullStats, TLS_STAT_CONTEXT_FREE, TLS_STAT_SERVER, TLS_STAT_SESSION
from .crypto import PROTOCOL_VERSIONS, crypto_error, crypto_errors, crypto_init, tls_method
from .session import TlsSession


_LOGGER = logging.getLogger(__name__)

# Handshake deadline of accepted sessions, in milliseconds. It does not
# follow the server timeout.
HANDSHAKE_TIMEOUT = 5000


def _free_context(holder, host, stats):
    """Release the TLS context, run once by the server finalizer."""
    _LOGGER.debug("%s: free TLS context", host)

    holder.clear()
    stats.increment(TLS_STAT_CONTEXT_FREE)


def _protocol_version(name):
    try:
        return PROTOCOL_VERSIONS[name]
    except KeyError:
        raise ConfigError(
            "unknown TLS protocol {0!r}, expected one of {1}".format(
                name, ", ".join(PROTOCOL_VERSIONS)
            )
        ) from None


def _alpn_selector(protocols):
    preferred = tuple(protocol.encode("ascii") for protocol in protocols)

    def select(connection, offered):
        for protocol in preferred:
            if protocol in offered:
                return protocol

        return SSL.NO_OVERLAPPING_PROTOCOLS

    return select


class TlsServer(Server):
    """Server driver terminating TLS on accepted sessions.

    Attributes:
    :name: The server host identity, used for diagnostics only.
    :timeout: The I/O timeout of the server, in milliseconds.
    :context: The shared ``OpenSSL.SSL.Context``.
    :closed: True once the context has been released.
    """

    def __init__(
            self,
            host,
            key_file,
            cert_file,
            timeout,
            *,
            stats=None,
            min_protocol=None,
            max_protocol=None,
            alpn_protocols=None):
        """Load the credentials and build the TLS context.

        Arguments:
        :host: The server identity.
        :key_file: Path of the PEM private key.
        :cert_file: Path of the PEM certificate.
        :timeout: The I/O timeout in milliseconds.
        :stats: A collector with an ``increment(name)`` method.
        :min_protocol: Lowest accepted protocol version name, for instance
            ``"TLSv1.2"``. None leaves the bound unrestricted.
        :max_protocol: Highest accepted protocol version name.
        :alpn_protocols: The protocols supported over TLS by this server,
            ordered by preference.

        Raises ``CryptoInitError`` when the context cannot be created and
        ``CredentialLoadError`` when the certificate or key cannot be
        loaded. No server is returned in both cases.
        """
        assert host
        assert key_file
        assert cert_file

        if timeout < 0:
            raise ConfigError("timeout must not be negative, got {0}".format(timeout))

        self._host = host
        self._timeout = timeout
        self._stats = stats or NullStats()
        self._alpn_protocols = tuple(alpn_protocols or ())

        _LOGGER.debug(
            "create TLS server (host: %s, key: %s, cert: %s, timeout: %d)",
            host, key_file, cert_file, timeout
        )

        crypto_init()

        method = tls_method()

        with crypto_errors(CryptoInitError, "unable to create TLS context"):
            context = SSL.Context(method)

        crypto_error(context is None, CryptoInitError, "unable to create TLS context")

        # the finalizer must not reference the server
        self._holder = [context]
        self._finalizer = weakref.finalize(self, _free_context, self._holder, host, self._stats)

        try:
            self._configure(context, key_file, cert_file, min_protocol, max_protocol)
        except BaseException:
            self._finalizer()
            raise

        self._stats.increment(TLS_STAT_SERVER)

    def _configure(self, context, key_file, cert_file, min_protocol, max_protocol):
        # certificate first, the key is checked against it
        with crypto_errors(CredentialLoadError, "unable to load server certificate"):
            context.use_certificate_file(cert_file)

        with crypto_errors(CredentialLoadError, "unable to load server private key"):
            context.use_privatekey_file(key_file)

        with crypto_errors(CredentialLoadError, "server private key does not match certificate"):
            context.check_privatekey()

        if min_protocol is None and max_protocol is None:
            _LOGGER.debug("%s: TLS protocol versions are not restricted", self._host)

        if min_protocol is not None:
            context.set_min_proto_version(_protocol_version(min_protocol))

        if max_protocol is not None:
            context.set_max_proto_version(_protocol_version(max_protocol))

        if self._alpn_protocols:
            context.set_alpn_select_callback(_alpn_selector(self._alpn_protocols))

    @property
    def name(self):
        return self._host

    @property
    def timeout(self):
        return self._timeout

    @property
    def alpn_protocols(self):
        return self._alpn_protocols

    @property
    def closed(self):
        return not self._finalizer.alive

    @property
    def context(self):
        if not self._holder:
            raise ServerClosedError("TLS server {0} is closed".format(self._host))

        return self._holder[0]

    def accept(self, session):
        """Wrap ``session`` into a new ``TlsSession``.

        The returned session owns ``session``, which must not be used
        directly anymore. The handshake is performed on first use of the
        returned session, bounded by ``HANDSHAKE_TIMEOUT``.
        """
        assert session is not None

        context = self.context

        with crypto_errors(CryptoHandshakeInitError, "unable to create TLS connection"):
            connection = SSL.Connection(context, None)

        crypto_error(connection is None, CryptoHandshakeInitError, "unable to create TLS connection")

        connection.set_accept_state()

        result = TlsSession(connection, session, HANDSHAKE_TIMEOUT)

        self._stats.increment(TLS_STAT_SESSION)
        _LOGGER.debug("%s: TLS session created for %s", self._host, session.name)

        return result

    def close(self):
        """Release the TLS context. Sessions already accepted keep
        working, closing again has no effect.
        """
        self._finalizer()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def __str__(self):
        return "{{host: {0}, timeout: {1}}}".format(self._host, self._timeout)
