"""Centralized canonical JSON serialization.

One function for every report written to disk or stdout, so the same
union description or decode report is byte-identical across runs.
"""

import json
from typing import Any


def canonical_dumps(obj: Any, indent: int | None = None) -> str:
    """
    Canonical JSON serialization for reports.

    Rules:
    - Sorted keys
    - Stable separators ("," and ":") when not indented
    - UTF-8 output (no ASCII escaping)
    - Lists are emitted as given; callers sort sets before calling

    Args:
        obj: Python object to serialize
        indent: Pretty-print indent for human-facing output

    Returns:
        Canonical JSON string
    """
    return json.dumps(
        obj,
        sort_keys=True,
        indent=indent,
        separators=(",", ":") if indent is None else (",", ": "),
        ensure_ascii=False
    )
