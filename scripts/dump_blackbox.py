#!/usr/bin/env python3
"""Dump records from an ecusentinel black-box store.

Usage
-----
::

    python scripts/dump_blackbox.py --db blackbox.db
    python scripts/dump_blackbox.py --sensor 0x186A --faults-only
    python scripts/dump_blackbox.py --json --limit 500 --output dump.json

Options::

    --db PATH          Black-box SQLite path (default: $ECU_SENTINEL_DB_PATH or blackbox.db)
    --limit N          Newest N records (default: 50)
    --sensor ID        Only this CAN id (decimal or 0x-prefixed hex)
    --faults-only      Only records carrying a trouble code
    --json             Output as machine-readable JSON
    --output FILE      Write output to FILE instead of stdout
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections import Counter
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from ecusentinel import LogRecord, SentinelConfig, SqliteLogSink  # noqa: E402
from ecusentinel._constants import format_can_id  # noqa: E402


def _section(title: str) -> str:
    line = "=" * 60
    return f"\n{line}\n  {title}\n{line}"


def _format_record(record: LogRecord) -> str:
    marker = "!" if record.is_fault else " "
    return f"{marker} #{record.id:<6} {record.timestamp:%Y-%m-%d %H:%M:%S} {record.can_id:>8}  {record.message}"


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dump ecusentinel black-box records.")
    parser.add_argument("--db", dest="db_path", help="Black-box SQLite path")
    parser.add_argument("--limit", type=int, default=50, help="Newest N records")
    parser.add_argument("--sensor", type=lambda v: int(v, 0), help="Only this CAN id")
    parser.add_argument("--faults-only", action="store_true", help="Only trouble-code records")
    parser.add_argument("--json", dest="json_mode", action="store_true", help="Output JSON")
    parser.add_argument("--output", help="Write output to FILE")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging")
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = SentinelConfig.from_env(**({"db_path": args.db_path} if args.db_path else {}))
    if not Path(config.db_path).exists():
        print(f"No black-box store at {config.db_path}", file=sys.stderr)
        sys.exit(1)

    with SqliteLogSink(config.db_path) as sink:
        total = sink.count(sensor_id=args.sensor)
        records = sink.recent(args.limit, sensor_id=args.sensor)

    if args.faults_only:
        records = [r for r in records if r.is_fault]

    if args.json_mode:
        payload = json.dumps(
            {
                "db_path": config.db_path,
                "total": total,
                "records": [r.model_dump(mode="json") for r in records],
            },
            indent=2,
            ensure_ascii=False,
        )
        if args.output:
            Path(args.output).write_text(payload, encoding="utf-8")
            print(f"JSON written to {args.output}", file=sys.stderr)
        else:
            print(payload)
        return

    out: list[str] = [_section(f"black box {config.db_path}")]
    out.append(f"  records   : {total}")
    out.append(f"  showing   : {len(records)}")
    faults = Counter(r.can_id for r in records if r.is_fault)
    for can_id, n in sorted(faults.items()):
        out.append(f"  faults    : {can_id} x{n}")
    if args.sensor is not None:
        out.append(f"  sensor    : {format_can_id(args.sensor)}")
    out.append(_section("RECORDS"))
    out.extend(_format_record(r) for r in records)

    text = "\n".join(out)
    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        print(f"Output written to {args.output}")
    else:
        print(text)


if __name__ == "__main__":
    main()
