# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""relaypipe CLI: send one request to an ad-hoc destination through the pipeline."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from typing import Any

from ..config import load_client_settings
from ..connector import insecure_ssl_context
from ..destination import HostSettings
from ..errors import (
    ConnectorSetupError,
    ConnectorSetupTimeout,
    DestinationUnavailableError,
    error_category_to_reason,
)
from ..http.models import HttpRequest, HttpResponse
from ..log import setup_logging
from ..pipeline.models import Pipeline
from ..pipeline.transformers import add_request_header
from ..runtime import RelayPipe

CLI_TEXT_TRUNCATION_BYTES = 4096
CLI_DESTINATION = "cli"

EXIT_OK = 0
EXIT_UNSUCCESSFUL = 1
EXIT_SETUP_FAILED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send one HTTP request through a relaypipe destination")
    parser.add_argument("url", help="Endpoint URI of the destination")
    parser.add_argument("--method", "-X", default="GET", help="HTTP method (default: GET)")
    parser.add_argument(
        "--header",
        "-H",
        action="append",
        default=[],
        metavar="NAME:VALUE",
        help="Header added by the request pipeline (repeatable)",
    )
    parser.add_argument("--data", "-d", default=None, help="Request body")
    parser.add_argument(
        "--connect-timeout",
        type=float,
        default=None,
        help="Seconds to wait for connector setup (default: RELAYPIPE_CONNECT_TIMEOUT)",
    )
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification (useful for lab/self-signed targets)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON instead of the raw body",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: RELAYPIPE_LOG_LEVEL)")
    return parser


def _parse_header(raw: str) -> tuple[str, str]:
    name, sep, value = raw.partition(":")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"Invalid header {raw!r}; expected NAME:VALUE")
    return name.strip(), value.strip()


def _truncate_text_bytes(text: str, max_bytes: int) -> str:
    raw = text.encode("utf-8")
    if len(raw) <= max_bytes:
        return text
    suffix = "...[truncated]"
    keep = max_bytes - len(suffix.encode("utf-8"))
    if keep <= 0:
        return suffix
    return raw[:keep].decode("utf-8", errors="ignore") + suffix


def _response_payload(response: HttpResponse) -> dict[str, Any]:
    return {
        "ok": response.ok,
        "status_code": response.status_code,
        "headers": dict(response.headers),
        "body": _truncate_text_bytes(response.text, CLI_TEXT_TRUNCATION_BYTES),
        "url": response.url,
        "error_message": response.error_message,
        "error_type": response.error_type,
    }


def _print_response(response: HttpResponse, as_json: bool) -> None:
    if as_json:
        json.dump(_response_payload(response), sys.stdout, indent=2, sort_keys=True)
        sys.stdout.write("\n")
        return
    if response.status_code is None:
        print(f"[relaypipe] Request failed: {response.error_message or 'no response'}", file=sys.stderr)
        return
    print(f"[relaypipe] Status: {response.status_code}", file=sys.stderr)
    sys.stdout.write(response.text)
    if response.text and not response.text.endswith("\n"):
        sys.stdout.write("\n")


async def _run(args: argparse.Namespace) -> int:
    settings = load_client_settings()
    host_settings = HostSettings.from_client_settings(settings)
    if args.connect_timeout is not None:
        host_settings = replace(
            host_settings,
            connection_settings=replace(host_settings.connection_settings, connecting_timeout=args.connect_timeout),
        )
    headers = [_parse_header(raw) for raw in args.header]
    pipeline = Pipeline.of(requests=[add_request_header(name, value) for name, value in headers])

    async with RelayPipe(settings=settings) as relay:
        relay.register(
            CLI_DESTINATION,
            args.url,
            pipeline=pipeline,
            ssl_context=insecure_ssl_context() if args.ignore_ssl_errors else None,
            host_settings=host_settings,
        )
        try:
            response = await relay.request(
                CLI_DESTINATION,
                HttpRequest(url="", method=args.method.upper(), body=args.data),
            )
        except DestinationUnavailableError as exc:
            print(f"[relaypipe] {exc}", file=sys.stderr)
            return EXIT_SETUP_FAILED
        except (ConnectorSetupTimeout, ConnectorSetupError) as exc:
            print(f"[relaypipe] {error_category_to_reason(exc.category)}: {exc}", file=sys.stderr)
            return EXIT_SETUP_FAILED

    _print_response(response, args.json)
    return EXIT_OK if response.is_success else EXIT_UNSUCCESSFUL


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)
    try:
        return asyncio.run(_run(args))
    except argparse.ArgumentTypeError as exc:
        parser.error(str(exc))
        return EXIT_SETUP_FAILED


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
