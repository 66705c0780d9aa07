# src/main.py - v3
"""CLI entry point: generate, options and cache commands.

Usage:
    scgen generate <organization> <transaction> <category> [--custom k=v ...] [--usage]
    scgen options [--org ORG] [--tx TX]
    scgen cache {sweep,clear}
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from scgen.version import __version__

logger = logging.getLogger(__name__)

EXIT_INVALID_REQUEST = 2


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scgen",
        description=f"scgen v{__version__}: smart contract generation engine",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- generate ---
    p_gen = subparsers.add_parser("generate", help="Generate a contract")
    p_gen.add_argument("organization", help="Organization type, e.g. LLP")
    p_gen.add_argument("transaction", help="Transaction pattern, e.g. B2B")
    p_gen.add_argument("category", help="Artifact category, e.g. 'Profit Sharing Agreement'")
    p_gen.add_argument(
        "-c", "--custom", action="append", default=[], metavar="KEY=VALUE",
        help="Customization (repeatable). Values are parsed as JSON when possible",
    )
    p_gen.add_argument(
        "--json", action="store_true",
        help="Print the full response body as JSON",
    )
    p_gen.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Write the generated contract to this file",
    )
    p_gen.add_argument(
        "--usage", action="store_true",
        help="Report provider calls, tokens and estimated cost",
    )
    p_gen.add_argument(
        "--attempt-log", type=Path, default=None, metavar="PATH",
        help="Write provider attempts to a JSON Lines file",
    )
    p_gen.set_defaults(func=_cmd_generate)

    # --- options ---
    p_opt = subparsers.add_parser("options", help="List valid catalog values")
    p_opt.add_argument("--org", default=None, help="Organization type")
    p_opt.add_argument("--tx", default=None, help="Transaction pattern")
    p_opt.set_defaults(func=_cmd_options)

    # --- cache ---
    p_cache = subparsers.add_parser("cache", help="Maintain the result cache")
    p_cache.add_argument(
        "action", choices=["sweep", "clear"],
        help="sweep: evict stale entries; clear: remove every entry",
    )
    p_cache.set_defaults(func=_cmd_cache)

    return parser


async def _cmd_generate(args: argparse.Namespace) -> int:
    from scgen.api import facade
    from scgen.config.settings import load_settings

    settings = load_settings()
    _setup_logging(settings, args.verbose)

    try:
        customizations = parse_customizations(args.custom)
    except ValueError as e:
        logger.error("%s", e)
        return EXIT_INVALID_REQUEST

    payload = {
        "organizationType": args.organization,
        "transactionPattern": args.transaction,
        "artifactCategory": args.category,
        "customizations": customizations,
    }
    try:
        status, body = await facade.generate(payload, settings=settings)

        if status != 200:
            print(f"Error: {body['error']}", file=sys.stderr)
            valid = (body.get("details") or {}).get("validOptions")
            if valid:
                print(f"Valid options: {', '.join(valid)}", file=sys.stderr)
            return EXIT_INVALID_REQUEST

        if args.output is not None:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(body["data"]["code"], encoding="utf-8")
            logger.info("Contract written to %s", args.output)

        usage_data = None
        if args.usage:
            _, usage_body = facade.usage(facade.get_orchestrator(settings))
            usage_data = usage_body["data"]

        if args.attempt_log is not None:
            count = facade.get_orchestrator(settings).attempt_log.save(args.attempt_log)
            logger.info("Wrote %d attempt records to %s", count, args.attempt_log)

        if args.json:
            if usage_data is not None:
                body = {**body, "usage": usage_data}
            print(json.dumps(body, indent=2))
        else:
            _print_summary(body)
            if usage_data is not None:
                _print_usage(usage_data)
        return 0
    finally:
        await facade.shutdown()


async def _cmd_options(args: argparse.Namespace) -> int:
    from scgen.api.facade import options

    status, body = options(args.org, args.tx)
    if status != 200:
        print(f"Error: {body['error']}", file=sys.stderr)
        return EXIT_INVALID_REQUEST
    for value in body["data"]:
        print(value)
    return 0


async def _cmd_cache(args: argparse.Namespace) -> int:
    from scgen.api import facade
    from scgen.config.settings import load_settings

    settings = load_settings()
    _setup_logging(settings, args.verbose)

    try:
        cache = facade.get_orchestrator(settings).cache
        if cache is None:
            print("Cache is disabled (CACHE_ENABLED=false)", file=sys.stderr)
            return 1
        if args.action == "sweep":
            evicted = await cache.sweep()
            print(f"Evicted {evicted} stale entries")
        else:
            await cache.clear()
            print("Cache cleared")
        return 0
    finally:
        await facade.shutdown()


def parse_customizations(items: list[str]) -> dict[str, Any]:
    """Parse repeated KEY=VALUE flags. JSON values are decoded, else kept as str."""
    out: dict[str, Any] = {}
    for item in items:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise ValueError(f"Invalid customization {item!r}, expected KEY=VALUE")
        try:
            out[key.strip()] = json.loads(value)
        except json.JSONDecodeError:
            out[key.strip()] = value
    return out


def _print_summary(body: dict[str, Any]) -> None:
    data = body["data"]
    degraded = [pid for pid, flag in body.get("degraded", {}).items() if flag]
    print(data["code"])
    print("\nGeneration complete:")
    print(f"  Time:        {body['processingTime']}ms")
    print(f"  From cache:  {body['fromCache']}")
    print(f"  Degraded:    {', '.join(degraded) if degraded else 'none'}")
    print(f"  Findings:    {len(data['security']['vulnerabilities'])}")
    for vuln in data["security"]["vulnerabilities"]:
        print(f"    - {vuln}")
    print(f"  Functions:   {len(data['gasAnalysis'])}")


def _print_usage(data: dict[str, Any]) -> None:
    print("\nProvider usage:")
    print(f"  Calls:       {data['totalCalls']}")
    print(f"  Tokens:      {data['inputTokens']} in / {data['outputTokens']} out")
    print(f"  Est. cost:   ${data['estimatedCostUsd']:.4f}")
    for provider_id, stats in data["providers"].items():
        print(
            f"    - {provider_id}: {stats['calls']} calls, "
            f"{stats['successes']} ok, {stats['failures']} failed"
        )


def _setup_logging(settings: Any, verbose: bool) -> None:
    from scgen.logging.logger import setup_logging

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=str(settings.log_file) if settings.log_file else None,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
