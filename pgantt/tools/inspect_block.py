#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List

from pgantt.codec import decode_payload, to_json
from pgantt.macro import extract_macro
from pgantt.schema import model_from_wire
from pgantt.validate import payload_errors, sanitize


def _die(msg: str, rc: int = 2) -> int:
    print(f"[pgantt-inspect-block] ERROR: {msg}", file=sys.stderr)
    return rc


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(
        prog="pgantt-inspect-block",
        description=(
            "Decode the chart stored in a block (or a bare transport string) and print its JSON.\n"
            "Exit codes: 0 ok, 2 unreadable input, 3 payload problems."
        ),
    )
    ap.add_argument("--in", dest="in_path", required=True, help="File holding block text or a bare payload")
    ap.add_argument("--out", default=None, help="Write JSON here instead of stdout")
    ap.add_argument("--sanitize", action="store_true", help="Drop out-of-range entities before printing")
    ns = ap.parse_args(argv)

    p = Path(ns.in_path)
    if not p.exists():
        return _die(f"Missing input file: {p}")
    text = p.read_text(encoding="utf-8", errors="replace")

    m = extract_macro(text)
    if m is not None:
        if not m.is_gantt:
            return _die(f"macro belongs to renderer {m.renderer_type!r}")
        encoded = m.payload
    else:
        encoded = text.strip()
    if not encoded:
        return _die("no payload found")

    try:
        variant, payload = decode_payload(encoded)
        model = model_from_wire(payload)
    except (ValueError, OverflowError, RecursionError) as e:
        return _die(f"cannot decode payload ({e})")

    errs = payload_errors(payload)
    if ns.sanitize:
        model = sanitize(model)

    doc = json.dumps(json.loads(to_json(model)), ensure_ascii=False, indent=2, sort_keys=True) + "\n"
    if ns.out:
        outp = Path(ns.out)
        outp.parent.mkdir(parents=True, exist_ok=True)
        outp.write_text(doc, encoding="utf-8", newline="\n")
    else:
        sys.stdout.write(doc)

    if errs:
        print("[pgantt-inspect-block] FAIL", file=sys.stderr)
        for e in errs:
            print(f"  - {e}", file=sys.stderr)
        return 3

    stages = sum(len(pr.stages) for pr in model.projects)
    print(
        f"[pgantt-inspect-block] OK: format={variant} projects={len(model.projects)} "
        f"stages={stages} sprints={len(model.sprints)}",
        file=sys.stderr,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
