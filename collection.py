"""
Public artwork listing: filter -> sort -> paginate over a snapshot of records.

Everything here is a pure function of (records, query). Nothing is read from
disk and nothing is mutated.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone

APPROVED = "approved"

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 8

# Region bucket -> keywords looked for in location_notes
REGION_KEYWORDS = {
    "nsw": ("sydney", "nsw"),
    "sa": ("adelaide", "south australia", "sa"),
    "wa": ("perth", "western australia", "wa"),
}

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

SENSITIVE_AREA_RADIUS_M = 50_000


def _text(value) -> str:
    return value.strip().lower() if isinstance(value, str) else ""


def _to_int(value, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class ListingQuery:
    search: str = ""
    type: str = ""
    period: str = ""
    location: str = ""
    sort: str = ""
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_args(cls, args) -> "ListingQuery":
        """Build a query from request args; bad numbers fall back to defaults."""
        limit = _to_int(args.get("limit"), DEFAULT_LIMIT)
        if limit < 1:
            limit = DEFAULT_LIMIT
        sort = args.get("sort")
        return cls(
            search=_text(args.get("search")),
            type=_text(args.get("type")),
            period=_text(args.get("period")),
            location=_text(args.get("location")),
            sort=sort.strip() if isinstance(sort, str) else "",
            page=_to_int(args.get("page"), DEFAULT_PAGE),
            limit=limit,
        )


# ---------------------------------------------------------------------------
# Filter
# ---------------------------------------------------------------------------
def _field(record: dict, name: str) -> str:
    value = record.get(name)
    return value.lower() if isinstance(value, str) else ""


def build_predicate(query: ListingQuery, regions=REGION_KEYWORDS):
    """
    Compose the active filters into a single predicate.

    Status is always checked. Every other filter only takes part when its
    parameter is non-empty.
    """
    checks = [lambda r: r.get("status") == APPROVED]

    if query.search:
        term = query.search
        checks.append(lambda r: any(
            term in _field(r, name) for name in ("title", "description", "artist_name")
        ))
    if query.type:
        checks.append(lambda r: query.type in _field(r, "type"))
    if query.period:
        checks.append(lambda r: _field(r, "period") == query.period)
    if query.location:
        keywords = tuple(regions.get(query.location, ()))
        # an unmapped region yields no matches
        checks.append(lambda r: any(k in _field(r, "location_notes") for k in keywords))

    return lambda record: all(check(record) for check in checks)


def filter_records(records, query: ListingQuery, regions=REGION_KEYWORDS) -> list:
    predicate = build_predicate(query, regions)
    return [r for r in records if isinstance(r, dict) and predicate(r)]


# ---------------------------------------------------------------------------
# Sort
# ---------------------------------------------------------------------------
def parse_created_at(value) -> datetime:
    """Parse a created_at string; missing or unparseable values give the epoch."""
    if not isinstance(value, str) or not value.strip():
        return EPOCH
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _title(record: dict) -> str:
    title = record.get("title")
    return title if isinstance(title, str) else ""


def _created_at(record: dict) -> datetime:
    return parse_created_at(record.get("created_at"))


# sort value -> (key function, descending)
SORT_KEYS = {
    "title-asc": (_title, False),
    "title-desc": (_title, True),
    "date-newest": (_created_at, True),
    "date-oldest": (_created_at, False),
}


def sort_records(records: list, sort: str) -> list:
    """Stable sort by one of SORT_KEYS. Titles compare case-sensitively."""
    if sort not in SORT_KEYS:
        return list(records)
    key, descending = SORT_KEYS[sort]
    return sorted(records, key=key, reverse=descending)


# ---------------------------------------------------------------------------
# Paginate
# ---------------------------------------------------------------------------
def paginate(records: list, page: int, limit: int):
    """Return (page_items, total_pages, current_page) with page clamped."""
    total = len(records)
    total_pages = math.ceil(total / limit) if total else 0
    page = max(page, 1)
    if total_pages:
        page = min(page, total_pages)
    offset = (page - 1) * limit
    return records[offset:offset + limit], total_pages, page


def list_artworks(records, query: ListingQuery, regions=REGION_KEYWORDS) -> dict:
    matched = filter_records(records, query, regions)
    ordered = sort_records(matched, query.sort)
    items, total_pages, page = paginate(ordered, query.page, query.limit)
    return {
        "total": len(ordered),
        "total_pages": total_pages,
        "current_page": page,
        "limit": query.limit,
        "artworks": items,
    }


# ---------------------------------------------------------------------------
# Map markers
# ---------------------------------------------------------------------------
def parse_location(value):
    """Parse "lat,lng" into a (lat, lng) float pair, or None."""
    if not isinstance(value, str) or "," not in value:
        return None
    # extra fields such as altitude are ignored
    lat, lng = value.split(",")[:2]
    try:
        coords = float(lat.strip()), float(lng.strip())
    except ValueError:
        return None
    if not all(math.isfinite(c) for c in coords):
        return None
    return coords


def map_markers(records) -> list:
    """
    Markers for approved artworks that carry coordinates.

    Sensitive locations are published as a wide circle around the point,
    and only when the artwork has location_notes to describe the area.
    """
    markers = []
    for art in records:
        if not isinstance(art, dict) or art.get("status") != APPROVED:
            continue
        coords = parse_location(art.get("location"))
        if coords is None:
            continue
        lat, lng = coords
        if not art.get("location_sensitive"):
            markers.append({
                "kind": "pin",
                "id": art.get("id"),
                "title": art.get("title"),
                "type": art.get("type"),
                "image_url": art.get("image_url"),
                "lat": lat,
                "lng": lng,
            })
        elif art.get("location_notes"):
            markers.append({
                "kind": "area",
                "id": art.get("id"),
                "title": art.get("title"),
                "lat": lat,
                "lng": lng,
                "radius_m": SENSITIVE_AREA_RADIUS_M,
                "location_notes": art.get("location_notes"),
            })
    return markers
