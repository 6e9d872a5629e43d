"""CLI tool for unfurl: print a page's metadata as JSON.

Usage:
    python -m unfurl.cli https://example.com
    python -m unfurl.cli https://example.com --no-oembed
    python -m unfurl.cli https://example.com --timeout 5 --follow 3 --size 2000000
    python -m unfurl.cli https://example.com --agent "Mozilla/5.0" -v
"""

import argparse
import asyncio
import json
import logging
import sys


def _setup_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


async def _cmd_unfurl(args) -> int:
    from unfurl import UnfurlError, unfurl
    from unfurl.utils.json_sanitize import json_sanitize

    options = {
        "oembed": not args.no_oembed,
        "timeout": int(args.timeout * 1000),
        "compress": not args.no_compress,
        "size": args.size,
        "first_title_only": not args.last_title,
    }
    if args.follow is not None:
        options["follow"] = args.follow
    if args.agent:
        options["agent"] = args.agent

    try:
        result = await unfurl(args.url, options)
    except UnfurlError as e:
        print(json.dumps(e.to_dict(), indent=2, ensure_ascii=False), file=sys.stderr)
        return 1

    print(json.dumps(json_sanitize(result), indent=2, ensure_ascii=False))
    return 0


def main():
    parser = argparse.ArgumentParser(
        prog="unfurl",
        description="unfurl: extract Open Graph, Twitter Card and oEmbed metadata from a URL",
    )
    parser.add_argument("url", help="URL to unfurl")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--no-oembed", action="store_true", help="Skip oEmbed discovery")
    parser.add_argument(
        "--timeout", type=float, default=0,
        help="Per-request timeout in seconds (default: 0, unbounded)",
    )
    parser.add_argument(
        "--follow", type=int, default=None,
        help="Maximum redirects to follow, 0 for none (default: 50)",
    )
    parser.add_argument("--no-compress", action="store_true", help="Disable gzip/deflate")
    parser.add_argument(
        "--size", type=int, default=0,
        help="Maximum response body size in bytes (default: 0, unbounded)",
    )
    parser.add_argument("--agent", default=None, help="User-Agent header to send")
    parser.add_argument(
        "--last-title", action="store_true",
        help="Keep the last <title> element instead of the first",
    )

    args = parser.parse_args()

    _setup_logging(args.verbose)

    sys.exit(asyncio.run(_cmd_unfurl(args)))


if __name__ == "__main__":
    main()
