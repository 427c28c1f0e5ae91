import argparse
import logging
import sys

import structlog

from barehttp.client import Client
from barehttp.config import ClientConfig
from barehttp.errors import HttpError
from barehttp.header import parse_header_line
from barehttp.method import Method
from barehttp.request import Request


def configure_logging(verbose: bool):
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if verbose else logging.WARNING),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="barehttp", description="Send one HTTP/1.1 request and print the response")
    parser.add_argument("url", help="http:// or https:// URL")
    parser.add_argument("--method", "-X", default="GET", type=str.upper, choices=[m.name for m in Method], help="HTTP method")
    parser.add_argument("--header", "-H", action="append", default=[], help="Additional header, \"Name: value\" (repeatable)")
    parser.add_argument("--data", "-d", default=None, help="Request body")
    parser.add_argument("--content-type", default="application/json", help="Content-Type of the request body")
    parser.add_argument("--content-encoding", default=None, help="Content-Encoding of the request body")
    parser.add_argument("--buffer-size", type=int, default=0, help="Read chunk size in bytes (0 = default)")
    parser.add_argument("--timeout", type=float, default=None, help="Connect and read timeout in seconds")
    parser.add_argument("--insecure", "-k", action="store_true", help="Do not verify the server certificate")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log every connection step")

    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        headers = [parse_header_line(line) for line in args.header]
    except ValueError as e:
        print(f"[!] {e}", file=sys.stderr)
        return 2

    request = Request(
        url=args.url,
        method=Method[args.method],
        content=args.data,
        content_type=args.content_type if args.data is not None else None,
        content_encoding=args.content_encoding,
        additional_headers=headers,
        buffer_size=args.buffer_size,
        ssl_verification_optional=args.insecure,
    )

    try:
        overrides = {}
        if args.timeout is not None:
            overrides = {"connect_timeout": args.timeout, "read_timeout": args.timeout}
        client = Client(ClientConfig.from_env(**overrides))
        print(f"[*] {args.method} {args.url}")
        response = client.submit(request)

    except HttpError as e:
        print(f"[!] Request failed: {e}", file=sys.stderr)
        return 1

    except ValueError as e:
        print(f"[!] Invalid configuration: {e}", file=sys.stderr)
        return 2

    print(f"[+] Status: {response.status_code}")
    for header in response.headers:
        print(f"  {header.type}: {header.value}")
    print()
    print(response.text)

    return 0 if 200 <= response.status_code < 300 else 1


if __name__ == "__main__":
    sys.exit(main())
