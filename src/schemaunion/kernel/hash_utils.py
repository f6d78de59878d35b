"""Canonicalization and hashing for fingerprints and union values.

Rules:
- Object keys sorted recursively
- Arrays preserve order (unless hashed as a set)
- Strings normalized to NFC
- Floats rejected unless explicitly allowed; allowed floats collapse -0.0 to 0.0
- Non-JSON types forbidden
"""

import json
import hashlib
import math
import unicodedata
from typing import Any, Iterable


class CanonicalizationError(ValueError):
    """Raised when an object cannot be canonicalized."""
    pass


def _normalize_string(s: str) -> str:
    return unicodedata.normalize('NFC', s)


def _validate_json_type(obj: Any, path: str = "", allow_floats: bool = False) -> None:
    """Validate that an object holds only JSON-compatible values.

    None is a legitimate value; missing keys are simply absent and are
    never treated as None.
    """
    if obj is None or isinstance(obj, (bool, int, str)):
        return
    elif isinstance(obj, float):
        if not allow_floats:
            raise CanonicalizationError(
                f"Floats are not allowed (at {path or '<root>'})"
            )
        if math.isnan(obj) or math.isinf(obj):
            raise CanonicalizationError(
                f"Invalid number at {path or '<root>'}: NaN or Inf not allowed"
            )
    elif isinstance(obj, dict):
        for key, value in obj.items():
            if not isinstance(key, str):
                raise CanonicalizationError(
                    f"Dictionary keys must be strings at {path}, got {type(key).__name__}"
                )
            _validate_json_type(value, f"{path}.{key}" if path else key, allow_floats)
    elif isinstance(obj, (list, tuple)):
        for i, item in enumerate(obj):
            _validate_json_type(item, f"{path}[{i}]" if path else f"[{i}]", allow_floats)
    else:
        raise CanonicalizationError(
            f"Non-JSON type at {path or '<root>'}: {type(obj).__name__}"
        )


def _canonicalize_value(obj: Any) -> Any:
    if isinstance(obj, str):
        return _normalize_string(obj)
    elif isinstance(obj, float):
        return 0.0 if obj == 0 else obj
    elif isinstance(obj, dict):
        return {
            _normalize_string(k): _canonicalize_value(v)
            for k, v in sorted(obj.items())
        }
    elif isinstance(obj, (list, tuple)):
        return [_canonicalize_value(item) for item in obj]
    return obj


def canonicalize_json(obj: Any, allow_floats: bool = False) -> str:
    """Canonicalize a JSON-compatible object to a stable string.

    Args:
        obj: The object to canonicalize
        allow_floats: Accept finite floats (payload hashing); field-name
            fingerprints never need them

    Returns:
        Canonical JSON string

    Raises:
        CanonicalizationError: If the object contains non-JSON values
    """
    _validate_json_type(obj, allow_floats=allow_floats)
    canonicalized = _canonicalize_value(obj)
    return json.dumps(canonicalized, sort_keys=True, ensure_ascii=False, separators=(',', ':'))


def _sha256(canonical_str: str) -> str:
    digest = hashlib.sha256(canonical_str.encode('utf-8')).hexdigest()
    return f"sha256:{digest}"


def hash_fingerprint(required: Iterable[str], optional: Iterable[str]) -> str:
    """Compute the SHA256 digest of a variant's (required, optional) field sets.

    The sets are sorted before hashing, so the digest does not depend on
    declaration order of the properties.

    Returns:
        SHA256 hash as hex string (prefixed with "sha256:")
    """
    return _sha256(canonicalize_json({
        "optional": sorted(set(optional)),
        "required": sorted(set(required)),
    }))


def _equality_form(obj: Any) -> Any:
    """Collapse values Python compares equal onto one JSON form.

    ``True == 1 == 1.0`` holds for payload equality, so the hash must not
    tell them apart. Non-finite floats become string tokens.
    """
    if isinstance(obj, bool):
        return int(obj)
    elif isinstance(obj, float):
        if math.isnan(obj):
            return "NaN"
        if math.isinf(obj):
            return "Infinity" if obj > 0 else "-Infinity"
        return int(obj) if obj.is_integer() else obj
    elif isinstance(obj, dict):
        return {k: _equality_form(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [_equality_form(item) for item in obj]
    return obj


def hash_json_value(value: Any) -> str:
    """Compute the SHA256 digest of an arbitrary JSON value (floats allowed).

    Values that compare equal in Python (``1``, ``1.0``, ``True``) share a
    digest.
    """
    return _sha256(canonicalize_json(_equality_form(value), allow_floats=True))
