"""TLS termination for tlsio servers.

    server = TlsServer("db1", "key.pem", "cert.pem", timeout=30000)
    session = server.accept(plain_session)
    data = await session.read(4096)

The server context is built once; every accepted session runs its own
handshake on first use.
"""

from .crypto import PROTOCOL_VERSIONS, crypto_init
from .server import HANDSHAKE_TIMEOUT, TlsServer
from .session import TlsSession
