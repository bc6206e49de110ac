# staffing_api/common/validation.py
"""
Field-level body validation shared by the blueprints.

Each helper reads one key from a JSON dict, records a message in `errors`
when the value is unusable, and returns the cleaned value (or None).
Blueprints call `raise_if(errors)` once all fields were read so a single
400 lists every problem at once.
"""
from __future__ import annotations

import re
from datetime import date, datetime

from staffing_api.common.errors import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_MISSING = object()


def parse_date_any(s) -> date | None:
    """
    Accepts:
      - 'YYYY-MM-DD'            (canonical)
      - full ISO datetime       ('2025-10-01T00:00:00.000Z' from JS clients)
      - 'DD-MM-YYYY'            (legacy support)
    """
    if s in (None, ""):
        return None
    if isinstance(s, datetime):
        return s.date()
    if isinstance(s, date):
        return s
    if not isinstance(s, str):
        return None
    raw = s.strip()
    try:
        return datetime.fromisoformat(raw.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for f in ("%Y-%m-%d", "%d-%m-%Y"):
        try:
            return datetime.strptime(raw, f).date()
        except ValueError:
            pass
    return None


def raise_if(errors: dict):
    if errors:
        raise ValidationError("Validation failed", errors=errors)


def reject_unknown(d: dict, allowed, errors: dict):
    for key in d:
        if key not in allowed:
            errors[key] = "field is not allowed"


def _get(d, key, required, errors):
    val = d.get(key, _MISSING)
    if val is _MISSING or val is None:
        if required:
            errors[key] = "is required"
        return _MISSING
    return val


def string(d: dict, key: str, errors: dict, required=True, min_len=1):
    val = _get(d, key, required, errors)
    if val is _MISSING:
        return None
    if not isinstance(val, str):
        errors[key] = "must be a string"
        return None
    val = val.strip()
    if len(val) < min_len:
        errors[key] = "is required" if min_len == 1 else f"must be at least {min_len} characters"
        return None
    return val


def email(d: dict, key: str, errors: dict, required=True):
    val = string(d, key, errors, required=required)
    if val is None:
        return None
    if not _EMAIL_RE.match(val):
        errors[key] = "must be a valid email"
        return None
    return val.lower()


def integer(d: dict, key: str, errors: dict, required=True, minimum=None, maximum=None):
    val = _get(d, key, required, errors)
    if val is _MISSING:
        return None
    # bool is an int subclass; reject it explicitly
    if (isinstance(val, bool) or not isinstance(val, (int, float))
            or (isinstance(val, float) and not val.is_integer())):
        errors[key] = "must be an integer"
        return None
    val = int(val)
    if minimum is not None and val < minimum:
        errors[key] = f"must be >= {minimum}"
        return None
    if maximum is not None and val > maximum:
        errors[key] = f"must be <= {maximum}"
        return None
    return val


def choice(d: dict, key: str, options, errors: dict, required=True):
    val = _get(d, key, required, errors)
    if val is _MISSING:
        return None
    if val not in options:
        errors[key] = f"must be one of: {', '.join(options)}"
        return None
    return val


def string_list(d: dict, key: str, errors: dict, required=True):
    val = _get(d, key, required, errors)
    if val is _MISSING:
        return None
    if not isinstance(val, list) or not all(isinstance(x, str) for x in val):
        errors[key] = "must be a list of strings"
        return None
    out = []
    for x in (v.strip() for v in val):
        if x and x not in out:
            out.append(x)
    return out


def date_field(d: dict, key: str, errors: dict, required=True):
    val = _get(d, key, required, errors)
    if val is _MISSING:
        return None
    parsed = parse_date_any(val)
    if parsed is None:
        errors[key] = "must be a date (YYYY-MM-DD)"
    return parsed


def date_order(start: date | None, end: date | None, errors: dict, end_key="endDate"):
    if start and end and end < start:
        errors[end_key] = "must not be before startDate"


def csv_arg(raw: str | None) -> list[str]:
    """?skills=python, react  ->  ['python', 'react']"""
    if not raw:
        return []
    return [p.strip() for p in raw.split(",") if p.strip()]
