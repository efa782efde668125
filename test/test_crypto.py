import unittest

from unittest import mock

from OpenSSL import SSL

from tlsio.errors import CredentialLoadError, CryptoInitError
from tlsio.tls import crypto


class CryptoTestCase(unittest.TestCase):
    def test_init_is_idempotent(self):
        with mock.patch.object(crypto, "_initialized", False):
            self.assertTrue(crypto.crypto_init())
            self.assertFalse(crypto.crypto_init())
            self.assertFalse(crypto.crypto_init())

    def test_tls_method(self):
        self.assertEqual(crypto.tls_method(), SSL.TLS_METHOD)

    def test_tls_method_unavailable(self):
        with mock.patch.object(crypto.SSL, "TLS_METHOD", None):
            with self.assertRaises(CryptoInitError) as context:
                crypto.tls_method()

        self.assertEqual(str(context.exception), "unable to load TLS method")

    def test_error_text(self):
        error = SSL.Error([
            ("system library", "", ""),
            ("PEM routines", "get_name", "no start line"),
        ])
        self.assertEqual(
            crypto.error_text(error),
            "[system library] error; [PEM routines] no start line"
        )

    def test_error_text_without_queue(self):
        self.assertEqual(crypto.error_text(OSError("boom")), "boom")
        self.assertEqual(crypto.error_text(SSL.Error()), "Error")

    def test_crypto_error(self):
        crypto.crypto_error(False, CryptoInitError, "not raised")

        with self.assertRaises(CryptoInitError):
            crypto.crypto_error(True, CryptoInitError, "raised")

    def test_crypto_errors_translation(self):
        cause = SSL.Error([("SSL routines", "", "no certificate assigned")])

        with self.assertRaises(CredentialLoadError) as context:
            with crypto.crypto_errors(CredentialLoadError, "unable to load"):
                raise cause

        error = context.exception
        self.assertIs(error.__cause__, cause)
        self.assertEqual(error.error_text, "[SSL routines] no certificate assigned")
        self.assertEqual(str(error), "unable to load: [SSL routines] no certificate assigned")

    def test_crypto_errors_other_exceptions(self):
        with self.assertRaises(KeyError):
            with crypto.crypto_errors(CredentialLoadError, "unable to load"):
                raise KeyError("unrelated")

    def test_protocol_versions(self):
        self.assertEqual(crypto.PROTOCOL_VERSIONS["TLSv1.2"], SSL.TLS1_2_VERSION)
        self.assertEqual(crypto.PROTOCOL_VERSIONS["TLSv1.3"], SSL.TLS1_3_VERSION)
