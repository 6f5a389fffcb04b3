"""Utility functions for fluxez.

Shared helpers used by the query builder, the transport and the services.
"""

import random
import string
import time
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence

from .exceptions import InvalidValueError

# ===========================================================================
# Core utilities
# ===========================================================================


def chunk_iter(seq: Sequence[Any], size: int) -> Iterator[Sequence[Any]]:
    """Yield successive chunks from a sequence."""
    if size <= 0:
        yield seq
        return
    for i in range(0, len(seq), size):
        yield seq[i : i + size]


def drop_none(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a copy of `data` without keys whose value is None."""
    return {k: v for k, v in data.items() if v is not None}


def as_list(value: Any) -> List[Any]:
    """Wrap a single value in a list; pass lists and tuples through as lists."""
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


# ===========================================================================
# Wire values
# ===========================================================================


def normalize_value(value: Any, *, path: str = "value") -> Any:
    """Coerce a Python value into the closed set the wire format accepts.

    Accepted: None, bool, int, float, str, sequences and mappings of these.
    `datetime`/`date` become ISO-8601 strings, tuples and sets become lists.

    Raises:
        InvalidValueError: For any other type (checked recursively)
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Mapping):
        out: Dict[str, Any] = {}
        for k, v in value.items():
            if not isinstance(k, str):
                raise InvalidValueError("Mapping keys must be strings", path=path, key=k)
            out[k] = normalize_value(v, path=f"{path}.{k}")
        return out
    if isinstance(value, (list, tuple, set, frozenset)):
        return [normalize_value(v, path=f"{path}[{i}]") for i, v in enumerate(value)]
    raise InvalidValueError(
        "Unsupported value type",
        path=path,
        type=type(value).__name__,
    )


def normalize_rows(data: Any) -> Any:
    """Validate insert/update payloads: one mapping or a sequence of mappings."""
    if isinstance(data, Mapping):
        return normalize_value(data, path="data")
    if isinstance(data, (list, tuple)) and data and all(isinstance(row, Mapping) for row in data):
        return [normalize_value(row, path=f"data[{i}]") for i, row in enumerate(data)]
    raise InvalidValueError(
        "Data must be a mapping or a non-empty sequence of mappings",
        type=type(data).__name__,
    )


# ===========================================================================
# Response helpers
# ===========================================================================


def extract_rows(body: Any) -> List[Dict[str, Any]]:
    """Pull result rows out of a query response body.

    Looks at `rows`, then `data`, then accepts a bare list.
    """
    if isinstance(body, list):
        return body
    if isinstance(body, dict):
        for key in ("rows", "data"):
            rows = body.get(key)
            if isinstance(rows, list):
                return rows
    return []


def extract_count(body: Any) -> Optional[int]:
    """Pull a server-reported row count out of a query response body."""
    if not isinstance(body, dict):
        return None
    for key in ("rowCount", "count"):
        value = body.get(key)
        if value is None or isinstance(value, bool):
            continue
        try:
            return int(value)
        except (TypeError, ValueError):
            continue
    return None


def envelope_error(body: Any, default: str = "Request failed") -> Optional[str]:
    """Return the failure message of a `{success: false, ...}` body, else None."""
    if not isinstance(body, dict) or "success" not in body or body["success"]:
        return None
    message = body.get("message") or body.get("error") or default
    return str(message)


# ===========================================================================
# Identifiers
# ===========================================================================


def generate_session_id() -> str:
    """Return an analytics session id of the form `session_<millis>_<random>`."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"session_{int(time.time() * 1000)}_{suffix}"


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()
