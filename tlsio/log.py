import logging
import sys

LOG_FORMAT = "#%(levelname)s %(name)s %(asctime)s,%(msecs)03d\n%(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def configure(level=logging.INFO, stream=sys.stdout):
    """Configure the root logger with the tlsio format."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    logging.basicConfig(
        stream=stream,
        level=level,
        datefmt=LOG_DATE_FORMAT,
        format=LOG_FORMAT
    )


class SessionLogger(logging.LoggerAdapter):
    """A logging adapter used to log messages associated with a session
    peer name.
    """
    def __init__(self, logger, peername):
        super().__init__(logger, {"peername": peername})

    def process(self, msg, kwargs):
        tmp = "@{0}\n{1}".format(self.extra["peername"], msg)
        return tmp, kwargs
