# src/flow_tasks/tasks/dates.py

from __future__ import annotations

from datetime import date

from ..errors import ValidationError


def validate_iso_date(value: str) -> str:
    """Return `value` unchanged if it is a real YYYY-MM-DD date."""
    try:
        parsed = date.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"invalid date: {value!r} (expected YYYY-MM-DD)") from e
    # fromisoformat also accepts forms like 20250101; store only the canonical one.
    if parsed.isoformat() != value:
        raise ValidationError(f"invalid date: {value!r} (expected YYYY-MM-DD)")
    return value


def parse_date_input(raw: str, *, today: date | None = None) -> str:
    """
    Parse a user-typed date into canonical YYYY-MM-DD.

    Accepted forms (separator "-" or "/"):
    - YYYY-MM-DD
    - MM-DD  (current year)
    - DD     (current year and month)

    Month and day may be given without zero padding.
    """
    today = today or date.today()
    text = (raw or "").strip().replace("/", "-")
    if not text:
        raise ValidationError("day is required")

    parts = [p.strip() for p in text.split("-")]
    if len(parts) > 3 or any(not p.isdigit() for p in parts):
        raise ValidationError(f"invalid date: {raw!r}")

    if len(parts) == 1:
        yyyy, mm, dd = f"{today.year:04d}", f"{today.month:02d}", parts[0]
    elif len(parts) == 2:
        yyyy, (mm, dd) = f"{today.year:04d}", parts
    else:
        yyyy, mm, dd = parts

    candidate = f"{yyyy}-{mm.zfill(2)}-{dd.zfill(2)}"
    return validate_iso_date(candidate)
