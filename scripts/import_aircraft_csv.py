"""Build or refresh the aircraft reference database from a CSV export.

Usage examples:
    python scripts/import_aircraft_csv.py aircraft.csv --db aircraft.db
    python scripts/import_aircraft_csv.py aircraft.csv --db aircraft.db --replace
    python scripts/import_aircraft_csv.py --db aircraft.db --show a12345

The CSV needs a header row; ``icao`` is required, the other recognised
columns are reg, icaotype, year, manufacturer, model, ownop, faa_pia,
faa_ladd, short_type and mil. Unknown columns are ignored.
"""

from __future__ import annotations

import argparse
import csv
import json
import sys

from sqlalchemy.orm import Session

from vdl2feed.db import init_reference_schema
from vdl2feed.db_models import Aircraft
from vdl2feed.models.aircraft import AircraftRecord
from vdl2feed.services.address import is_absent, normalize_address

_COLUMNS = [
    "reg",
    "icaotype",
    "year",
    "manufacturer",
    "model",
    "ownop",
    "faa_pia",
    "faa_ladd",
    "short_type",
    "mil",
]
_FLAGS = {"faa_pia", "faa_ladd", "mil"}


def _row_values(row: dict[str, str]) -> dict:
    values = {}
    for column in _COLUMNS:
        raw = (row.get(column) or "").strip()
        if column in _FLAGS:
            values[column] = 1 if raw.lower() in {"1", "true", "yes", "y", "t"} else 0
        else:
            values[column] = raw or None
    return values


def cmd_import(args) -> None:
    engine = init_reference_schema(args.db)
    imported = skipped = 0
    with Session(engine) as session, open(args.csv, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames or "icao" not in reader.fieldnames:
            sys.stderr.write("CSV must have a header row with an 'icao' column.\n")
            raise SystemExit(1)

        if args.replace:
            session.query(Aircraft).delete()

        for row in reader:
            key = normalize_address(row.get("icao"))
            if is_absent(key):
                skipped += 1
                continue
            session.merge(Aircraft(icao=key, **_row_values(row)))
            imported += 1
        session.commit()

    print(f"Imported {imported} aircraft into {args.db} ({skipped} rows skipped)")


def cmd_show(args) -> None:
    engine = init_reference_schema(args.db)
    key = normalize_address(args.show)
    with Session(engine) as session:
        row = session.get(Aircraft, key)
        if row is None:
            print(f"{key}: not found")
            raise SystemExit(1)
        print(json.dumps({"icao": key, **AircraftRecord.from_row(row).model_dump()}, indent=2))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("csv", nargs="?", help="CSV file to import")
    parser.add_argument("--db", default="aircraft.db", help="Reference database path")
    parser.add_argument("--replace", action="store_true", help="Delete existing rows first")
    parser.add_argument("--show", metavar="ICAO", help="Print one stored record and exit")
    args = parser.parse_args(argv)

    if args.show:
        cmd_show(args)
    elif args.csv:
        cmd_import(args)
    else:
        parser.error("either a CSV file or --show is required")


if __name__ == "__main__":
    main()
