"""Entry point - launches the game server via CLI args.

Usage:
    python main.py                     # Serve on localhost:8765
    python main.py 0.0.0.0             # Serve on a custom host
    python main.py 0.0.0.0 9000        # Serve on a custom host/port
"""

import sys
import asyncio

from shared.constants import DEFAULT_HOST, DEFAULT_PORT


async def main():
    args = sys.argv[1:]
    if args and args[0] in ("-h", "--help"):
        print(__doc__)
        sys.exit(0)
    host = args[0] if len(args) > 0 else DEFAULT_HOST
    try:
        port = int(args[1]) if len(args) > 1 else DEFAULT_PORT
    except ValueError:
        print(__doc__)
        sys.exit(1)

    from engine.server import main as server_main
    print(f"Starting hex cascade server on {host}:{port}")
    await server_main(host, port)


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
