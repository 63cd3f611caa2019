#!/usr/bin/env python3
"""
Quick inspector for the gallery's JSON data files.

- Lists the data files
- Shows record counts per file
- Breaks records down by status where they have one
- Prints a few sample records from each file
"""

import os
import sys
from collections import Counter
from pathlib import Path
from textwrap import shorten

from store import DATA_FILES, data_path, load_records

DATA_DIR = Path(os.environ.get("GALLERY_DATA_DIR", Path(__file__).resolve().parent / "data"))
SAMPLE_LIMIT = 10  # how many records to preview per file

COLUMNS = {
    "submissions": ["id", "user_id", "title", "type", "period", "status", "created_at"],
    "users": ["id", "full_name", "email", "role", "status"],
    "categories": ["id", "name", "created_at"],
    "reports": ["id", "artwork_id", "user_id", "reason", "status"],
}

def status_breakdown(records: list) -> Counter:
    return Counter(r.get("status", "pending") for r in records if isinstance(r, dict))

def preview_line(record: dict, cols: list[str]) -> str:
    line = []
    for c in cols:
        val = record.get(c)
        if isinstance(val, str):
            val = shorten(val, width=80, placeholder="…")
        line.append(f"{c}={val}")
    return "  - " + " | ".join(line)

def print_section(title: str):
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)

def main(data_dir: Path = DATA_DIR) -> int:
    data_dir = Path(data_dir)
    print_section(f"Data directory: {data_dir}")
    if not data_dir.is_dir():
        print("Directory not found. Start the server once so it can seed the data files.")
        return 1

    for name in DATA_FILES:
        path = data_path(data_dir, name)
        print_section(f"File: {path.name}")
        if not path.exists():
            print("(missing) this file does not exist yet.")
            continue

        records = load_records(path)
        print(f"Record count: {len(records)}")

        statuses = status_breakdown(records)
        if name in ("submissions", "reports") and statuses:
            print("By status: " + ", ".join(f"{s}={n}" for s, n in sorted(statuses.items())))

        if records:
            print(f"\nLast {min(SAMPLE_LIMIT, len(records))} records:")
            for record in records[-SAMPLE_LIMIT:][::-1]:
                if isinstance(record, dict):
                    print(preview_line(record, COLUMNS[name]))
        else:
            print("No data to preview.")

    print_section("Done")
    return 0

if __name__ == "__main__":
    sys.exit(main(Path(sys.argv[1]) if len(sys.argv) > 1 else DATA_DIR))
