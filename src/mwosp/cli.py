"""Command-line interface for the mwosp server.

Provides the main entry point for serving the protocol and for printing
the draw commands of a synthetic session, which is handy when working on
the layout without a device at hand.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="mwosp",
        description="Remote-UI protocol server for thin display clients",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/mwosp.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the WebSocket/HTTP server")
    serve_parser.add_argument("--host", type=str, default=None, help="Override server.host")
    serve_parser.add_argument("--port", type=int, default=None, help="Override server.port")

    render_parser = subparsers.add_parser(
        "render",
        help="Print the draw commands for a synthetic session",
    )
    render_parser.add_argument("--state", type=str, default="home", help="View state to render")
    render_parser.add_argument("--width", type=int, default=None, help="Screen width")
    render_parser.add_argument("--height", type=int, default=None, help="Screen height")
    render_parser.add_argument("--domain", type=str, default=None, help="Current domain")
    render_parser.add_argument("--username", type=str, default="", help="Username for the greeting")
    render_parser.add_argument(
        "--visited", type=str, action="append", default=[],
        help="Visited domain to list (repeatable)",
    )

    return parser.parse_args(argv)


def _render_preview(settings, args) -> list[str]:
    """Build a session from the CLI arguments and encode its full render."""
    from mwosp.core.render import render
    from mwosp.domain.models import Session
    from mwosp.protocol.codec import encode_command

    session = Session(
        screen_width=args.width or settings.session.default_width,
        screen_height=args.height or settings.session.default_height,
        view_state=args.state,
        username=args.username,
        current_domain=args.domain,
        current_port=settings.session.default_port if args.domain else None,
        storage={domain: "" for domain in args.visited},
    )
    return [encode_command(cmd) for cmd in render(session)]


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the mwosp CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from mwosp.config.settings import load_settings
    from mwosp.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "serve":
        if args.host:
            settings.server.host = args.host
        if args.port:
            settings.server.port = args.port
        logger.info("Starting MWOSP server on %s:%d", settings.server.host, settings.server.port)
        from mwosp.server.app import create_app
        import uvicorn
        uvicorn.run(
            create_app(settings),
            host=settings.server.host,
            port=settings.server.port,
        )

    elif args.command == "render":
        for line in _render_preview(settings, args):
            print(line)


if __name__ == "__main__":
    main()
