"""Run an echo service over a tlsio server driver.

    python -m tlsio --host db1 --key key.pem --cert cert.pem --port 8443
"""

import argparse
import asyncio
import logging

from tlsio import log
from tlsio.config import ServerConfig, new_server
from tlsio.errors import IoError
from tlsio.server import Listener
from tlsio.stats import Stats


_LOGGER = logging.getLogger("tlsio")


async def echo(session):
    while True:
        data = await session.read(4096)
        if not data:
            break

        await session.write(data)


async def serve(server, address, port, timeout):
    listener = Listener(server, echo, timeout=timeout)
    await listener.listen(address, port)

    try:
        await asyncio.Event().wait()
    finally:
        listener.close()
        await listener.wait_closed()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="tlsio", description="tlsio echo server")
    parser.add_argument("--host", default="localhost", help="Server identity used in logs")
    parser.add_argument("--address", default="0.0.0.0", help="Bind address")
    parser.add_argument("--port", type=int, default=8443, help="Listening port")
    parser.add_argument("--key", dest="key_file", help="Private key PEM file")
    parser.add_argument("--cert", dest="cert_file", help="Certificate PEM file")
    parser.add_argument("--timeout", type=int, default=30000, help="I/O timeout in milliseconds")
    parser.add_argument("--min-protocol", help="Lowest accepted TLS version, e.g. TLSv1.2")
    parser.add_argument("--max-protocol", help="Highest accepted TLS version")
    parser.add_argument("--alpn", default="", help="Comma separated ALPN protocols, by preference")
    parser.add_argument("--plain", action="store_true", help="Serve without TLS")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    log.configure(args.log_level)

    stats = Stats()

    try:
        config = ServerConfig.from_mapping({
            "host": args.host,
            "port": args.port,
            "tls": not args.plain,
            "key_file": args.key_file,
            "cert_file": args.cert_file,
            "timeout": args.timeout,
            "min_protocol": args.min_protocol,
            "max_protocol": args.max_protocol,
            "alpn_protocols": args.alpn,
        })
        server = new_server(config, stats)
    except IoError as error:
        _LOGGER.error("%s", error)
        return 1

    try:
        asyncio.run(serve(server, args.address, config.port, config.timeout))
    except KeyboardInterrupt:
        pass
    finally:
        server.close()
        _LOGGER.info("statistics: %r", stats)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
