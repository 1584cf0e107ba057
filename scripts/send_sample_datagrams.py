#!/usr/bin/env python
"""
Send synthetic decoder output to a running vdl2feed instance.

This script will:
  * Build VDL2 JSON documents shaped like the decoder's UDP output
  * Send them to the configured UDP port at a fixed rate
  * Log a summary line for each datagram so you can match it in the feed

Usage (from repo root, with `vdl2feed serve` running):

    python scripts/send_sample_datagrams.py --count 20 --rate 5
    python scripts/send_sample_datagrams.py --addr A12345 --flight AC0123
"""

from __future__ import annotations

import argparse
import json
import logging
import random
import socket
import time

from vdl2feed.config import settings

logger = logging.getLogger("vdl2feed.scripts.send_sample_datagrams")

_SAMPLE_ADDRESSES = ["A12345", "AE1234", "4CA2D1", "C0FFEE", "ABC"]
_SAMPLE_FLIGHTS = ["AC0123", "UA0456", "DL0789", ""]


def build_datagram(addr: str, flight: str, now: float) -> dict:
    avlc = {"src": {"addr": addr, "type": "Aircraft"}, "dst": {"addr": "10A3C1", "type": "Ground station"}}
    if flight:
        avlc["acars"] = {"flight": flight, "label": "H1", "msg_text": "SAMPLE"}
    return {
        "vdl2": {
            "app": {"name": "dumpvdl2", "ver": "2.3.0"},
            "freq": 136975000,
            "t": {"sec": int(now), "usec": int((now % 1) * 1_000_000)},
            "avlc": avlc,
        }
    }


def main() -> None:
    parser = argparse.ArgumentParser(description="Send sample VDL2 datagrams")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=settings.udp_port)
    parser.add_argument("--count", type=int, default=10)
    parser.add_argument("--rate", type=float, default=2.0, help="Datagrams per second")
    parser.add_argument("--addr", help="Fixed source address")
    parser.add_argument("--flight", help="Fixed flight identifier")
    args = parser.parse_args()

    logging.basicConfig(level="INFO", format="%(asctime)s %(levelname)s %(name)s - %(message)s")

    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        for _ in range(args.count):
            addr = args.addr or random.choice(_SAMPLE_ADDRESSES)
            flight = args.flight if args.flight is not None else random.choice(_SAMPLE_FLIGHTS)
            payload = build_datagram(addr, flight, time.time())
            sock.sendto(json.dumps(payload).encode(), (args.host, args.port))
            logger.info("Sent addr=%s flight=%s to %s:%s", addr, flight or "-", args.host, args.port)
            time.sleep(1.0 / args.rate if args.rate > 0 else 0)


if __name__ == "__main__":
    main()
