"""Sessions are the connected byte streams handed out by servers.

``SocketSession`` is the plain transport accepted from a socket; drivers
such as the TLS server wrap it into another ``Session``.
"""

from .base import Session
from .plain import SocketSession
