"""Result code constants for schemaunion dispatch.

These constants prevent stringly-typed outcome checks in client code.
"""

from enum import Enum


class DispatchCode(str, Enum):
    """Outcome of decoding one input map against a union."""

    MATCHED = "MATCHED"
    NO_MATCH = "NO_MATCH"  # Normal outcome, not an exception
    DECODE_ERROR = "DECODE_ERROR"  # Matched by shape, rejected by the variant type


class RejectionCode(str, Enum):
    """Why a single variant was passed over."""

    MISSING_REQUIRED = "MISSING_REQUIRED"
    EXTRA_FIELDS = "EXTRA_FIELDS"
