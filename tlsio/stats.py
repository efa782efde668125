"""Statistics collectors.

Drivers never touch global counters, they receive a collector exposing an
``increment(name)`` method. ``NullStats`` is used when none is given.
"""

import threading

from collections import Counter


TLS_STAT_SERVER = "tls.server"
TLS_STAT_SESSION = "tls.session"
TLS_STAT_CONTEXT_FREE = "tls.context.free"


class NullStats:
    """Collector that drops every increment."""

    def increment(self, name):
        pass


class Stats:
    """Thread-safe named counters."""

    def __init__(self):
        self._lock = threading.Lock()
        self._counters = Counter()

    def increment(self, name):
        with self._lock:
            self._counters[name] += 1

    def get(self, name):
        with self._lock:
            return self._counters[name]

    def snapshot(self):
        with self._lock:
            return dict(self._counters)

    def __repr__(self):
        return "Stats({0!r})".format(self.snapshot())
