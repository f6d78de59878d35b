"""Generation configuration."""

from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class GenerationConfig(BaseModel):
    """Engine-level switches for one generation run.

    Frozen so a config shared between runs cannot drift mid-run.
    """
    class_name_prefix: Optional[str] = Field(None, description="Prepended to every generated wrapper name")
    class_name_suffix: Optional[str] = Field(None, description="Appended to every generated wrapper name")
    property_word_delimiters: str = Field(
        "-_",
        description="Characters treated as word breaks when normalizing names (my-dog -> MyDog)"
    )
    unique_separator: str = Field("_", description="Appended to a colliding type name until it is unique")
    include_hashcode_and_equals: bool = Field(
        True,
        description="Give union wrappers structural equality and hashing over (tag, payload)"
    )
    hash_strategy: Literal["canonical_json", "native"] = Field(
        "canonical_json",
        description="canonical_json hashes the payload's canonical JSON form; "
                    "native freezes payload models and hashes them directly"
    )
    empty_tag: str = "EMPTY_TAG"

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator('unique_separator')
    @classmethod
    def validate_unique_separator(cls, v: str) -> str:
        """Separator must be exactly one legal identifier character."""
        if len(v) != 1 or not (v.isalnum() or v == "_"):
            raise ValueError(f"unique_separator must be a single identifier character, got '{v}'")
        return v

    @field_validator('empty_tag')
    @classmethod
    def validate_empty_tag(cls, v: str) -> str:
        if not v.isidentifier():
            raise ValueError(f"empty_tag must be a valid identifier, got '{v}'")
        return v

    @property
    def frozen_payloads(self) -> bool:
        """Payload models must be frozen for the native hash strategy."""
        return self.include_hashcode_and_equals and self.hash_strategy == "native"

    @classmethod
    def from_json_bytes(cls, data: bytes) -> "GenerationConfig":
        """Load a config from JSON bytes (pure, no I/O)."""
        import json
        payload = json.loads(data)
        return cls(**payload)
