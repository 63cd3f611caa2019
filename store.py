"""
Flat-file JSON store for the gallery.

Every collection (submissions, users, categories, reports) lives in its own
JSON file and is read and rewritten wholesale. There is no locking.
"""

import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

DATA_FILES = {
    "submissions": "submissions.json",
    "users": "users.json",
    "categories": "categories.json",
    "reports": "reports.json",
}

# Older exports wrap the list in an object, e.g. {"submissions": [...]}
WRAPPER_KEYS = ("submissions", "users", "artworks", "categories", "reports")


class DataUnavailable(Exception):
    """Raised when a data file is missing or cannot be decoded."""

    def __init__(self, path, reason):
        super().__init__(f"{path}: {reason}")
        self.path = Path(path)
        self.reason = reason


def data_path(data_dir, name: str) -> Path:
    return Path(data_dir) / DATA_FILES[name]


def _unwrap(data):
    if isinstance(data, dict):
        for key in WRAPPER_KEYS:
            if isinstance(data.get(key), list):
                return data[key]
        return []
    if isinstance(data, list):
        return data
    return []


def load_records(path, strict: bool = False) -> list:
    """
    Read every record from a JSON file.

    With strict=False a missing or corrupt file is logged and treated as an
    empty collection. With strict=True it raises DataUnavailable instead.
    """
    path = Path(path)
    if not path.exists():
        if strict:
            raise DataUnavailable(path, "file not found")
        logger.warning("File not found: %s", path)
        return []
    try:
        with path.open(encoding="utf-8") as fh:
            data = json.load(fh)
    except (OSError, ValueError) as e:
        if strict:
            raise DataUnavailable(path, str(e)) from e
        logger.warning("JSON decode error in %s: %s", path, e)
        return []
    return _unwrap(data)


def save_records(path, records: list) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as fh:
        json.dump(records, fh, indent=4, ensure_ascii=False)
        fh.write("\n")


def same_id(a, b) -> bool:
    # ids may come back from JSON as "3" or 3
    return a is not None and b is not None and str(a) == str(b)


def find_record(records: list, record_id):
    for record in records:
        if same_id(record.get("id"), record_id):
            return record
    return None


def next_id(records: list) -> int:
    ids = []
    for record in records:
        try:
            ids.append(int(record.get("id", 0)))
        except (TypeError, ValueError):
            continue
    return max(ids) + 1 if ids else 1
