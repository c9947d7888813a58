"""Entry point for the Storefront MCP server."""

import asyncio
import sys


def main() -> None:
    """Run the MCP server over stdio."""
    from .server import main as server_main

    try:
        asyncio.run(server_main())
    except KeyboardInterrupt:
        print("\nShutting down...", file=sys.stderr)
        sys.exit(0)


if __name__ == "__main__":
    main()
