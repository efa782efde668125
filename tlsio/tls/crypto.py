"""Process-wide crypto runtime shared by the TLS drivers.

The TLS layer is built on pyOpenSSL, which exposes the OpenSSL context,
the per-connection objects and the error queue. This module initializes
the runtime once and translates OpenSSL errors into the tlsio error
model.
"""

import logging
import threading

from contextlib import contextmanager

from OpenSSL import SSL

from tlsio.errors import CryptoInitError


_LOGGER = logging.getLogger(__name__)

_INIT_LOCK = threading.Lock()
_initialized = False

PROTOCOL_VERSIONS = {
    "TLSv1": SSL.TLS1_VERSION,
    "TLSv1.1": SSL.TLS1_1_VERSION,
    "TLSv1.2": SSL.TLS1_2_VERSION,
    "TLSv1.3": SSL.TLS1_3_VERSION,
}


def crypto_init():
    """Initialize the crypto runtime.

    May be called any number of times, from any thread. Returns True only
    for the call that did the initialization.
    """
    global _initialized

    with _INIT_LOCK:
        if _initialized:
            return False

        version = SSL.OpenSSL_version(SSL.OPENSSL_VERSION)
        _LOGGER.debug("crypto runtime initialized with %s", version.decode("ascii", "replace"))

        _initialized = True
        return True


def tls_method():
    """Returns the version-flexible negotiation method."""
    method = getattr(SSL, "TLS_METHOD", None)
    crypto_error(method is None, CryptoInitError, "unable to load TLS method")

    return method


def error_text(error):
    """Render the OpenSSL error queue carried by ``error`` as text."""
    queue = error.args[0] if error.args else None

    if isinstance(queue, list) and queue:
        entries = []
        for entry in queue:
            if isinstance(entry, tuple) and len(entry) == 3:
                library, function, reason = entry
                entries.append("[{0}] {1}".format(library, reason or function or "error"))
            else:
                entries.append(str(entry))

        return "; ".join(entries)

    return str(error) or type(error).__name__


def crypto_error(failed, error_type, message):
    """Raise ``error_type(message)`` when ``failed`` is true."""
    if failed:
        raise error_type(message)


@contextmanager
def crypto_errors(error_type, message):
    """Translate crypto library errors raised in the block into
    ``error_type``, carrying the library error text.
    """
    try:
        yield
    except (SSL.Error, OSError) as error:
        raise error_type(message, error_text(error)) from error
