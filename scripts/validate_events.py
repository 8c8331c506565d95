#!/usr/bin/env python3
"""Validate a file of raw relay messages offline.

Each input line is one wire message, e.g. ``["EVENT", {...}]``. One JSON line
is printed per message, followed by a summary of outcome counts.

Usage:
    python scripts/validate_events.py captured.jsonl --reject-future-seconds 900
    cat captured.jsonl | python scripts/validate_events.py -

    from scripts.validate_events import run
    report = run(lines, RelaySettings(reject_future_seconds=900))
"""
from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict, Iterable, List, Optional

from relaygate.ingress import EventIngress
from relaygate.settings import RelaySettings, load_settings
from relaygate.validation import Clock


def run(lines: Iterable[str], settings: RelaySettings | None = None, clock: Optional[Clock] = None) -> Dict[str, Any]:
    """Process messages and return ``{"results": [...], "summary": {...}}``.

    Blank lines are skipped but still advance the line counter.
    """
    ingress = EventIngress(settings=settings, clock=clock)
    results: List[Dict[str, Any]] = []
    for n, line in enumerate(lines, start=1):
        line = line.strip()
        if not line:
            continue
        outcome = ingress.process(line)
        row: Dict[str, Any] = {"line": n, "status": outcome.status.value}
        if outcome.event is not None:
            row["id"] = outcome.event.id
        if outcome.reason is not None:
            row["reason"] = outcome.reason.value
        results.append(row)
    return {"results": results, "summary": ingress.stats()}


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Validate newline-delimited relay EVENT messages")
    ap.add_argument("input", nargs="?", default="-", help="input file, '-' for stdin")
    ap.add_argument(
        "--reject-future-seconds",
        type=int,
        default=None,
        help="reject events dated further ahead than this (default: RELAYGATE_REJECT_FUTURE_SECONDS)",
    )
    args = ap.parse_args(argv)

    if args.reject_future_seconds is not None:
        if args.reject_future_seconds < 0:
            ap.error("--reject-future-seconds must be >= 0")
        settings = RelaySettings(reject_future_seconds=args.reject_future_seconds)
    else:
        settings = load_settings()

    if args.input == "-":
        # raw non-UTF-8 bytes become lone surrogates and fail as ordinary rejections
        sys.stdin.reconfigure(errors="surrogateescape")
        report = run(sys.stdin, settings)
    else:
        with open(args.input, "r", encoding="utf-8", errors="surrogateescape") as fh:
            report = run(fh, settings)

    for row in report["results"]:
        print(json.dumps(row))
    print(json.dumps({"summary": report["summary"]}))
    return 0 if report["summary"]["accepted"] == len(report["results"]) else 1


if __name__ == "__main__":
    sys.exit(main())
