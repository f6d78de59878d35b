"""Variant descriptors: the structural fingerprint of one oneOf branch."""

import re
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from .hash_utils import hash_fingerprint
from .type_compiler import field_specs

# Runs of upper, lower, digit or other characters; an upper followed by
# lowers stays one token (camelCase -> camel, Case)
_CAMEL_TOKENS = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+|[^A-Za-z0-9]+")
_SEPARATORS_ONLY = re.compile(r"^[^A-Za-z0-9]+$")


class VariantDescriptor(BaseModel):
    """One variant of a union: its tag, type and (required, optional) field sets.

    Frozen: descriptors are shared by every concurrent decode call.
    """
    tag_name: str
    type_name: str
    type_handle: Any = Field(..., exclude=True, description="Compiled pydantic model for the variant")
    required_fields: tuple[str, ...] = Field(..., description="Sorted, deduplicated required wire names")
    optional_fields: tuple[str, ...] = Field(..., description="Sorted, deduplicated optional wire names")
    source: Optional[str] = Field(None, description="Schema location the variant was compiled from")

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @field_validator('required_fields', 'optional_fields', mode='before')
    @classmethod
    def canonicalize_fields(cls, v: Iterable[str]) -> tuple[str, ...]:
        """Deduplicate and sort field names (lexicographic, deterministic)."""
        return tuple(sorted(set(v)))

    @field_validator('tag_name')
    @classmethod
    def validate_tag_name(cls, v: str) -> str:
        if not v.isidentifier():
            raise ValueError(f"Tag '{v}' is not a valid identifier")
        return v

    @computed_field
    @property
    def fingerprint(self) -> str:
        """SHA256 digest over the (required, optional) field sets."""
        return hash_fingerprint(self.required_fields, self.optional_fields)

    @property
    def all_fields(self) -> frozenset:
        return frozenset(self.required_fields) | frozenset(self.optional_fields)

    def overlaps(self, other: "VariantDescriptor") -> bool:
        """True if some key set satisfies both variants' fingerprints.

        When this holds, whichever variant is declared first shadows the
        other for those inputs.
        """
        return (
            set(other.required_fields) <= self.all_fields
            and set(self.required_fields) <= other.all_fields
        )

    def missing_from(self, keys: Iterable[str]) -> List[str]:
        """Required fields absent from ``keys``."""
        present = set(keys)
        return [f for f in self.required_fields if f not in present]

    def extra_in(self, keys: Iterable[str]) -> List[str]:
        """Keys that are neither required nor optional for this variant."""
        known = self.all_fields
        return sorted(k for k in set(keys) if k not in known)


def split_camel_case(name: str) -> List[str]:
    """Split by character type: 'PetDog_2' -> ['Pet', 'Dog', '_', '2']."""
    return _CAMEL_TOKENS.findall(name)


def constant_name(type_name: str, empty_tag: str = "EMPTY_TAG") -> str:
    """Enum tag for a variant type name.

    Tokens made only of separator characters are dropped, the rest joined
    with '_' and upper-cased. Two names that differ only in separators
    (Dog, Dog_) yield the same tag.
    """
    tokens = [t for t in split_camel_case(type_name) if not _SEPARATORS_ONLY.match(t)]
    tag = "_".join(tokens).upper()
    if not tag:
        return empty_tag
    if tag[0].isdigit():
        tag = "_" + tag
    return tag


def build_descriptor(
    type_name: str,
    type_handle: type,
    source: Optional[str] = None,
    empty_tag: str = "EMPTY_TAG",
) -> VariantDescriptor:
    """Fingerprint a compiled type using its own per-field required markers."""
    required = []
    optional = []
    for wire_name, is_required in field_specs(type_handle):
        (required if is_required else optional).append(wire_name)
    return VariantDescriptor(
        tag_name=constant_name(type_name, empty_tag),
        type_name=type_name,
        type_handle=type_handle,
        required_fields=required,
        optional_fields=optional,
        source=source,
    )
