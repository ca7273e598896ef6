"""Entry point for doc-archive MCP server."""

import argparse
import asyncio
import logging
import sys

from doc_archive import __version__
from doc_archive.config import get_settings
from doc_archive.server import create_server, initialize_services, shutdown_services


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="doc-archive",
        description="doc-archive - Archive export/import for categories, documents and attachments via MCP",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser.parse_args()


async def main() -> None:
    """Main entry point for the MCP server."""
    settings = get_settings()

    # stdout carries the stdio transport
    logging.basicConfig(
        level=settings.log_level.upper(),
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    await initialize_services(settings)
    mcp = create_server()

    try:
        await mcp.run_stdio_async()
    finally:
        await shutdown_services()


def cli() -> None:
    """CLI entry point."""
    # Parse args first (handles --help and --version)
    parse_args()

    asyncio.run(main())


if __name__ == "__main__":
    cli()
