"""Entry point for running icalfeed as a module.

Usage:
    python -m icalfeed render fixture.json RESOURCE_ID [--per-day] [--output FILE]
    python -m icalfeed serve [--host HOST] [--port PORT]
"""

import argparse
import logging
import sys


def _render(args) -> int:
    from icalfeed.config.settings import load_config
    from icalfeed.exceptions.errors import FeedError
    from icalfeed.service import FeedService
    from icalfeed.storage.memory import InMemoryDataSource

    try:
        config = load_config(args.env_file)
        source = InMemoryDataSource.from_json_file(args.fixture)
        feed = FeedService(source, config).availability_feed(
            args.resource_id, per_day=args.per_day
        )
    except (FeedError, OSError, ValueError) as e:
        logging.getLogger(__name__).error("Could not render feed: %s", e)
        return 1

    if args.output:
        with open(args.output, "w", encoding="utf-8", newline="") as f:
            f.write(feed.body)
    else:
        sys.stdout.write(feed.body)
    return 0


def _serve(args) -> int:
    import uvicorn

    uvicorn.run("icalfeed.api:app", host=args.host, port=args.port, log_level="info")
    return 0


def main(argv=None):
    """Main entry point for the command line."""
    # Configure logging
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr,
    )

    parser = argparse.ArgumentParser(prog="icalfeed")
    parser.add_argument("--env-file", default=None, help="optional .env file")
    commands = parser.add_subparsers(dest="command", required=True)

    render = commands.add_parser("render", help="render a feed from a JSON fixture")
    render.add_argument("fixture")
    render.add_argument("resource_id")
    render.add_argument("--per-day", action="store_true")
    render.add_argument("--output", "-o")
    render.set_defaults(func=_render)

    serve = commands.add_parser("serve", help="run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    serve.set_defaults(func=_serve)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
