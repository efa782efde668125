"""This module mimics ``asyncio.streams`` for the server side of tlsio.

Differences with asyncio:
- ``StreamReader.read`` returns as soon as some bytes are buffered,
  which is what record based protocols like TLS need.
- Only one read call and one drain call may be pending at a time.
"""

import asyncio


# internal StreamReader buffer maximum size
DEFAULT_READ_BUFFER_LIMIT = 1 << 16


async def start_server(connection_callback, host=None, port=None, limit=None, **kwargs):
    """Start listening connections.

    ``connection_callback(reader, writer)`` is a coroutine function,
    scheduled as a task for each new connection. Keyword arguments are
    passed to ``EventLoop.create_server``.
    """
    loop = asyncio.get_running_loop()

    server = await loop.create_server(
        lambda: StreamingProtocol(connection_callback, limit=limit),
        host, port,
        **kwargs
    )

    return server


class StreamReader:

    def __init__(self, transport, limit=None):
        self._transport = transport
        self._buffer = bytearray()
        self._eof = False
        self._pending = None
        self._limit = limit or DEFAULT_READ_BUFFER_LIMIT
        self._paused = False
        self._exception = None

    @property
    def at_eof(self):
        return (self._eof and not self._buffer)

    async def _wait(self):
        if self._pending is not None and not self._pending.done():
            raise RuntimeError("another read call already pending")

        event = asyncio.get_running_loop().create_future()
        self._pending = event

        try:
            await event
        finally:
            self._pending = None

    def _wakeup(self, exception=None):
        event = self._pending
        if event is not None and not event.done():
            if exception is None:
                event.set_result(None)
            else:
                event.set_exception(exception)

    def _maybe_pause(self):
        if not self._paused and len(self._buffer) > self._limit:
            try:
                self._transport.pause_reading()
            except NotImplementedError:
                raise RuntimeError("transport cannot be paused")

            self._paused = True

    def _maybe_resume(self):
        if self._paused and len(self._buffer) < self._limit:
            try:
                self._transport.resume_reading()
            except NotImplementedError:
                raise RuntimeError("transport cannot be resumed")

            self._paused = False

    def set_exception(self, exception):
        assert isinstance(exception, Exception)

        self._exception = exception
        self._wakeup(exception)

    def feed(self, data):
        assert isinstance(data, bytes)
        assert not self._eof

        if not data:
            return

        self._buffer.extend(data)
        self._wakeup()
        self._maybe_pause()

    def feed_eof(self):
        self._eof = True
        self._wakeup()

    async def read(self, size):
        """Read up to ``size`` bytes.

        Waits until at least one byte is available, returns ``b""`` when
        EOF is reached.
        """
        assert isinstance(size, int)
        assert size >= 0

        if size == 0:
            return b""

        if not self._buffer and self._exception is not None:
            raise self._exception

        if not self._buffer and not self._eof:
            await self._wait()

        data = bytes(self._buffer[:size])
        del self._buffer[:size]

        self._maybe_resume()

        return data


class StreamWriter:
    def __init__(self, transport):
        assert transport

        self._transport = transport
        self._pending = None
        self._paused = False

    def is_closing(self):
        return self._transport.is_closing()

    def get_extra_info(self, name, default=None):
        return self._transport.get_extra_info(name, default)

    def pause(self):
        self._paused = True

    def resume(self):
        self._paused = False

        pending = self._pending
        if pending is not None:
            self._pending = None
            if not pending.done():
                pending.set_result(None)

    def write(self, data):
        assert not self.is_closing()
        self._transport.write(data)

    async def drain(self):
        """Waits until the transport write buffer goes below its high
        water mark.

        Intended to be used like this:

            w.write(data)
            await w.drain()
        """
        if not self._paused:
            return

        if self._pending is not None and not self._pending.done():
            raise RuntimeError("another drain call pending")

        event = asyncio.get_running_loop().create_future()
        self._pending = event

        try:
            await event
        finally:
            self._pending = None

    def close(self):
        if not self.is_closing():
            self._transport.close()


class StreamingProtocol(asyncio.Protocol):
    def __init__(self, connection_callback=None, limit=None):
        self._connection_callback = connection_callback
        self._limit = limit

        self._transport = None
        self._task = None
        self.reader = None
        self.writer = None

    def connection_made(self, transport):
        self._transport = transport

        self.reader = StreamReader(transport, limit=self._limit)
        self.writer = StreamWriter(transport)

        if self._connection_callback is not None:
            coroutine = self._connection_callback(self.reader, self.writer)
            self._task = asyncio.get_running_loop().create_task(coroutine)

    def data_received(self, chunk):
        self.reader.feed(chunk)

    def eof_received(self):
        self.reader.feed_eof()
        return None

    def connection_lost(self, exception):
        if exception is None:
            self.reader.feed_eof()
        else:
            self.reader.set_exception(exception)

        # release a writer blocked in drain
        self.writer.resume()

    def pause_writing(self):
        self.writer.pause()

    def resume_writing(self):
        self.writer.resume()
