#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List

from pgantt.codec import encode
from pgantt.macro import new_block_text, wrap_macro
from pgantt.schema import model_from_wire
from pgantt.util.dates import parse_iso_date
from pgantt.validate import payload_errors


def _die(msg: str, rc: int = 2) -> int:
    print(f"[pgantt-build-block] ERROR: {msg}", file=sys.stderr)
    return rc


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="pgantt-build-block",
        description="Build block macro text from a chart JSON file, or a fresh default chart with --new.",
    )
    src = ap.add_mutually_exclusive_group(required=True)
    src.add_argument("--in", dest="in_path", default=None, help="Chart JSON (wire form)")
    src.add_argument("--new", choices=["day", "week"], default=None, help="Fresh default chart in this time scale")
    ap.add_argument("--today", default=None, help="YYYY-MM-DD used as 'today' for --new")
    ap.add_argument("--out", default=None, help="Write macro text here instead of stdout")
    ns = ap.parse_args(argv)

    if ns.new:
        try:
            today = parse_iso_date(ns.today) if ns.today else None
        except ValueError as e:
            return _die(str(e))
        text = new_block_text(ns.new, today=today)
    else:
        p = Path(ns.in_path)
        if not p.exists():
            return _die(f"Missing JSON file: {p}")
        try:
            payload = json.loads(p.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, RecursionError) as e:
            return _die(f"invalid JSON in {p} ({e})")
        errs = payload_errors(payload)
        if errs:
            print("[pgantt-build-block] FAIL", file=sys.stderr)
            for e in errs:
                print(f"  - {e}", file=sys.stderr)
            return 3
        try:
            text = wrap_macro(encode(model_from_wire(payload)))
        except (ValueError, OverflowError, RecursionError) as e:
            return _die(str(e))

    if ns.out:
        outp = Path(ns.out)
        outp.parent.mkdir(parents=True, exist_ok=True)
        outp.write_text(text + "\n", encoding="utf-8", newline="\n")
        print(f"[pgantt-build-block] OK: wrote {outp}")
    else:
        sys.stdout.write(text + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
