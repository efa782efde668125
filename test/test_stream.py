import asyncio
import logging
import unittest

from unittest import mock

from helpers import MemorySession
from tlsio.errors import SessionClosedError, SessionTimeoutError
from tlsio.log import SessionLogger
from tlsio.session import SocketSession
from tlsio.session.base import timeout_seconds
from tlsio.stream import StreamReader, StreamWriter


def new_transport():
    transport = mock.Mock()
    transport.is_closing.return_value = False
    return transport


class StreamReaderTestCase(unittest.IsolatedAsyncioTestCase):
    async def test_read_available(self):
        reader = StreamReader(new_transport())
        reader.feed(b"hello world")

        self.assertEqual(await reader.read(5), b"hello")
        self.assertEqual(await reader.read(100), b" world")

    async def test_read_waits_for_data(self):
        reader = StreamReader(new_transport())
        task = asyncio.ensure_future(reader.read(10))

        await asyncio.sleep(0)
        self.assertFalse(task.done())

        reader.feed(b"data")
        self.assertEqual(await task, b"data")

    async def test_read_at_eof(self):
        reader = StreamReader(new_transport())
        reader.feed(b"end")
        reader.feed_eof()

        self.assertEqual(await reader.read(10), b"end")
        self.assertEqual(await reader.read(10), b"")
        self.assertTrue(reader.at_eof)

    async def test_eof_releases_pending_read(self):
        reader = StreamReader(new_transport())
        task = asyncio.ensure_future(reader.read(10))

        await asyncio.sleep(0)
        reader.feed_eof()

        self.assertEqual(await task, b"")

    async def test_exception(self):
        reader = StreamReader(new_transport())
        task = asyncio.ensure_future(reader.read(10))

        await asyncio.sleep(0)
        reader.set_exception(ConnectionResetError())

        with self.assertRaises(ConnectionResetError):
            await task

    async def test_pause_and_resume(self):
        transport = new_transport()
        reader = StreamReader(transport, limit=4)

        reader.feed(b"0123456789")
        transport.pause_reading.assert_called_once_with()

        await reader.read(8)
        transport.resume_reading.assert_called_once_with()

    async def test_concurrent_reads(self):
        reader = StreamReader(new_transport())
        task = asyncio.ensure_future(reader.read(10))
        await asyncio.sleep(0)

        with self.assertRaises(RuntimeError):
            await reader.read(10)

        task.cancel()


class StreamWriterTestCase(unittest.IsolatedAsyncioTestCase):
    async def test_drain_waits_for_resume(self):
        writer = StreamWriter(new_transport())
        writer.pause()

        task = asyncio.ensure_future(writer.drain())
        await asyncio.sleep(0)
        self.assertFalse(task.done())

        writer.resume()
        await task

    async def test_close(self):
        transport = new_transport()
        writer = StreamWriter(transport)

        writer.close()
        transport.close.assert_called_once_with()


class SocketSessionTestCase(unittest.IsolatedAsyncioTestCase):
    def new_session(self, timeout=1000):
        transport = new_transport()
        reader = StreamReader(transport)
        writer = StreamWriter(transport)
        return SocketSession(reader, writer, ("127.0.0.1", 4242), timeout), transport

    async def test_name(self):
        session, _ = self.new_session()

        self.assertEqual(session.name, "127.0.0.1:4242")
        self.assertEqual(str(session), "127.0.0.1:4242")
        self.assertEqual(repr(session), "SocketSession(127.0.0.1:4242, timeout=1000)")

    async def test_read_write(self):
        session, transport = self.new_session()
        session.reader.feed(b"query")

        self.assertEqual(await session.read(100), b"query")

        await session.write(b"reply")
        transport.write.assert_called_once_with(b"reply")

    async def test_read_timeout(self):
        session, _ = self.new_session(timeout=20)

        with self.assertRaises(SessionTimeoutError):
            await session.read(100)

    async def test_close(self):
        session, transport = self.new_session()

        session.close()
        session.close()

        self.assertTrue(session.is_closed)
        transport.close.assert_called_once_with()

        with self.assertRaises(SessionClosedError):
            await session.read(100)

        with self.assertRaises(SessionClosedError):
            await session.write(b"reply")

    async def test_shutdown(self):
        session = MemorySession()
        await session.shutdown()
        self.assertTrue(session.is_closed)


class HelpersTestCase(unittest.TestCase):
    def test_timeout_seconds(self):
        self.assertEqual(timeout_seconds(5000), 5)
        self.assertEqual(timeout_seconds(250), 0.25)
        self.assertIsNone(timeout_seconds(0))
        self.assertIsNone(timeout_seconds(None))

    def test_session_logger(self):
        logger = SessionLogger(logging.getLogger("tlsio.test"), "127.0.0.1:4242")
        message, kwargs = logger.process("connected", {})

        self.assertEqual(message, "@127.0.0.1:4242\nconnected")
        self.assertEqual(kwargs, {})
