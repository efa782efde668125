"""This module defines the server drivers and the listener feeding them.

Echo server set up over TLS:

    async def echo(session):
        while True:
            data = await session.read(4096)
            if not data:
                break
            await session.write(data)

    server = TlsServer("db1", "key.pem", "cert.pem", timeout=30000)
    listener = Listener(server, echo)
    await listener.listen(port=8443)

    ...

    listener.close()
    await listener.wait_closed()
    server.close()

Replacing ``TlsServer`` with ``SocketServer("db1", timeout=30000)``
serves the same callback in plaintext.
"""

from .base import Server
from .manager import Listener
from .plain import SocketServer
