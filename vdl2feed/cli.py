"""Command line entry point for vdl2feed.

Usage examples:
    vdl2feed serve
    vdl2feed tail --url ws://localhost:8080 --brief
    vdl2feed summary --url http://localhost:3000
    vdl2feed timeline --minutes 30 --json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

import httpx
import uvicorn

from vdl2feed.config import settings
from vdl2feed.subscriber import FeedSubscriber, SubscriberStatus

logger = logging.getLogger("vdl2feed.cli")


def _default_http_url() -> str:
    return f"http://localhost:{settings.http_port}"


def _default_ws_url() -> str:
    return f"ws://localhost:{settings.ws_port}"


async def _serve(runtime) -> None:
    from vdl2feed.main import create_app, create_feed_app

    log_level = settings.log_level.lower()
    servers = [
        uvicorn.Server(
            uvicorn.Config(
                create_app(runtime),
                host=settings.bind_host,
                port=settings.http_port,
                log_level=log_level,
            )
        ),
        uvicorn.Server(
            uvicorn.Config(
                create_feed_app(runtime),
                host=settings.bind_host,
                port=settings.ws_port,
                log_level=log_level,
                lifespan="off",
            )
        ),
    ]
    tasks = [asyncio.create_task(server.serve()) for server in servers]
    _, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
    for server in servers:
        server.should_exit = True
    if pending:
        await asyncio.gather(*pending)


def cmd_serve(args) -> None:
    from vdl2feed.main import load_runtime

    runtime = load_runtime(settings)
    logger.info(
        "Serving UDP %s, HTTP %s, WebSocket %s",
        settings.udp_port,
        settings.http_port,
        settings.ws_port,
    )
    try:
        asyncio.run(_serve(runtime))
    except KeyboardInterrupt:
        pass


def describe_message(message: dict[str, Any]) -> str:
    """One-line rendering of an enriched message for terminal output."""

    vdl2 = message.get("vdl2") if isinstance(message.get("vdl2"), dict) else {}
    avlc = vdl2.get("avlc") if isinstance(vdl2.get("avlc"), dict) else {}
    src = avlc.get("src") if isinstance(avlc.get("src"), dict) else {}
    acars = avlc.get("acars") if isinstance(avlc.get("acars"), dict) else {}
    db = message.get("db") or {}
    return " ".join(
        [
            str(message.get("timestamp_iso", "")),
            str(src.get("addr") or "------"),
            db.get("reg") or "-",
            db.get("icaotype") or "-",
            acars.get("flight") or "-",
            db.get("ownop") or "",
        ]
    ).rstrip()


def cmd_tail(args) -> None:
    def on_message(message: dict[str, Any]) -> None:
        line = describe_message(message) if args.brief else json.dumps(message)
        try:
            print(line, flush=True)
        except BrokenPipeError:
            subscriber.stop()

    def on_status(status: SubscriberStatus, delay: float | None) -> None:
        if status is SubscriberStatus.RECONNECTING:
            sys.stderr.write(f"Disconnected, reconnecting in {delay:.0f}s\n")
        elif status is SubscriberStatus.CONNECTED:
            sys.stderr.write(f"Connected to {args.url}\n")

    subscriber = FeedSubscriber(args.url, on_message=on_message, on_status=on_status)
    try:
        asyncio.run(subscriber.run())
    except KeyboardInterrupt:
        pass


def _fetch(url: str, params: dict | None = None) -> Any:
    try:
        response = httpx.get(url, params=params, timeout=10.0)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        sys.stderr.write(f"Query failed: HTTP {exc.response.status_code}\n")
        raise SystemExit(1) from exc
    except httpx.RequestError as exc:
        sys.stderr.write(f"Query failed: {exc}\n")
        raise SystemExit(1) from exc
    return response.json()


def cmd_summary(args) -> None:
    summary = _fetch(f"{args.url.rstrip('/')}/api/events/summary")
    if args.json:
        print(json.dumps(summary, indent=2))
        return

    print(f"packets: {summary['totalPackets']}")
    print(f"aircraft: {summary['uniqueAircraft']}")
    print(f"flights: {summary['uniqueFlights']}")
    print("top owners:")
    for item in summary["topOwners"]:
        print(f"  {item['count']:>8}  {item['owner']}")
    print("top types:")
    for item in summary["topModels"]:
        print(f"  {item['count']:>8}  {item['model']}")


def cmd_timeline(args) -> None:
    buckets = _fetch(
        f"{args.url.rstrip('/')}/api/events/timeline", params={"minutes": args.minutes}
    )
    if args.json:
        print(json.dumps(buckets, indent=2))
        return
    if not buckets:
        print("No messages yet.")
        return
    for bucket in buckets:
        print(f"{bucket['time']}  {bucket['count']}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="vdl2feed", description="VDL2 enrichment feed")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the ingestion pipeline and servers")
    serve.set_defaults(func=cmd_serve)

    tail = sub.add_parser("tail", help="Print messages from the live feed")
    tail.add_argument("--url", default=_default_ws_url())
    tail.add_argument("--brief", action="store_true", help="One line per message")
    tail.set_defaults(func=cmd_tail)

    summary = sub.add_parser("summary", help="Show running totals")
    summary.add_argument("--url", default=_default_http_url())
    summary.add_argument("--json", action="store_true")
    summary.set_defaults(func=cmd_summary)

    timeline = sub.add_parser("timeline", help="Show per-minute message counts")
    timeline.add_argument("--url", default=_default_http_url())
    timeline.add_argument("--minutes", type=int, default=120)
    timeline.add_argument("--json", action="store_true")
    timeline.set_defaults(func=cmd_timeline)

    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
