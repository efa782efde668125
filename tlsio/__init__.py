"""tlsio, an asyncio I/O layer that accepts connections through
interchangeable server drivers.

A driver takes an already accepted plain session and returns the session
callers should use: the plaintext driver hands it back as is, the TLS
driver wraps it into an encrypted session.
"""

__version__ = "0.1.0"
