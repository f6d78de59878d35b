"""Public report models for schemaunion (stable, JSON-serializable)."""

from typing import Any, List, Optional
from pydantic import BaseModel, Field


class VariantDescription(BaseModel):
    """One variant of a generated union."""
    tag: str  # Enum member name, e.g. "DOG"
    type_name: str  # Generated class name, e.g. "Dog"
    required_fields: List[str]  # sorted
    optional_fields: List[str]  # sorted
    fingerprint: str  # "sha256:..." over (required, optional)
    source: Optional[str] = None  # schema location the variant was compiled from


class UnionDescription(BaseModel):
    """A generated union, variants in dispatch-priority order."""
    name: str
    source: Optional[str] = None
    variants: List[VariantDescription]
    overlapping: List[List[str]] = Field(
        default_factory=list,
        description="Pairs of tags whose field sets admit a common input; the earlier tag always wins"
    )


class RejectionReport(BaseModel):
    """Why one variant was passed over."""
    tag: str
    code: str  # "MISSING_REQUIRED" | "EXTRA_FIELDS"
    missing: List[str] = Field(default_factory=list)
    extra: List[str] = Field(default_factory=list)


class DecodeReport(BaseModel):
    """Outcome of decoding one input map."""
    ok: bool
    code: str  # "MATCHED" | "NO_MATCH" | "DECODE_ERROR"
    union: str
    keys: List[str]
    tag: Optional[str] = None
    type_name: Optional[str] = None
    value: Optional[Any] = None  # payload in wire form when matched
    errors: List[str] = Field(default_factory=list)
    rejections: List[RejectionReport] = Field(default_factory=list)


class CheckSummary(BaseModel):
    """Outcome of decoding a batch of input maps."""
    ok: bool
    union: str
    total: int
    matched: int
    no_match: int
    decode_errors: int
    tag_counts: dict[str, int]  # tag -> count, tags in declaration order
    failures: List[DecodeReport] = Field(default_factory=list)  # indexed by position in input
    failure_indices: List[int] = Field(default_factory=list)
