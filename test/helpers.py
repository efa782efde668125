import asyncio
import datetime
import os
import ssl

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from tlsio.errors import SessionClosedError
from tlsio.session import Session


def write_key(path):
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)

    with open(path, "wb") as f:
        f.write(key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.TraditionalOpenSSL,
            encryption_algorithm=serialization.NoEncryption(),
        ))

    return key


def write_credentials(directory, common_name="localhost"):
    """Write a self-signed ``cert.pem`` and its ``key.pem`` in
    ``directory``, returns the (key_path, cert_path) tuple.
    """
    key_path = os.path.join(directory, "key.pem")
    cert_path = os.path.join(directory, "cert.pem")

    key = write_key(key_path)

    subject = issuer = x509.Name([
        x509.NameAttribute(NameOID.COMMON_NAME, common_name),
    ])
    now = datetime.datetime.now(datetime.timezone.utc)

    cert = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(minutes=5))
        .not_valid_after(now + datetime.timedelta(days=1))
        .add_extension(
            x509.SubjectAlternativeName([x509.DNSName(common_name)]),
            critical=False,
        )
        .sign(key, hashes.SHA256())
    )

    with open(cert_path, "wb") as f:
        f.write(cert.public_bytes(serialization.Encoding.PEM))

    return key_path, cert_path


def client_context(alpn_protocols=None):
    """A client context trusting any server certificate."""
    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE

    if alpn_protocols:
        context.set_alpn_protocols(alpn_protocols)

    return context


class MemorySession(Session):
    """Plain session fed by the test through the ``incoming`` queue,
    bytes written to it are appended to ``outgoing``.
    """

    def __init__(self, name="127.0.0.1:50000"):
        self._name = name
        self._closed = False
        self.incoming = asyncio.Queue()
        self.outgoing = bytearray()

    @property
    def name(self):
        return self._name

    @property
    def is_closed(self):
        return self._closed

    async def read(self, size):
        if self._closed:
            raise SessionClosedError(self._name)

        return await self.incoming.get()

    async def write(self, data):
        if self._closed:
            raise SessionClosedError(self._name)

        self.outgoing.extend(data)

    def close(self):
        self._closed = True
