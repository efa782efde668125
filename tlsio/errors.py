class IoError(Exception):
    pass


class ConfigError(IoError, ValueError):
    pass


class ServerClosedError(IoError):
    pass


class SessionClosedError(IoError, ConnectionError):
    pass


class SessionTimeoutError(IoError, TimeoutError):
    pass


class CryptoError(IoError):
    """Raised when a call to the crypto library fails.

    Attributes:
    :error_text: The text of the underlying crypto library error, if any.
    """

    def __init__(self, message, error_text=None):
        if error_text:
            message = "{0}: {1}".format(message, error_text)

        super().__init__(message)
        self.error_text = error_text


class CryptoInitError(CryptoError):
    pass


class CredentialLoadError(CryptoError):
    pass


class CryptoHandshakeInitError(CryptoError):
    pass


class CryptoHandshakeError(CryptoError):
    pass
