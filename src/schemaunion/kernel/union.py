"""Sum types generated from oneOf: the tag enumeration and the value wrapper."""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Tuple

from pydantic_core import core_schema

from .config import GenerationConfig
from .descriptor import VariantDescriptor
from .dispatch import DispatchResult, dispatch
from .errors import DecodeError, DuplicateVariantError, NoMatchError, TagCollisionError
from .hash_utils import hash_json_value


class VariantTag(Enum):
    """Base of every generated tag enumeration.

    Member names are the variant tags; member values are the frozen
    VariantDescriptors. ``str(member)`` is the variant's type name.
    """

    @property
    def descriptor(self) -> VariantDescriptor:
        return self.value

    @property
    def type_name(self) -> str:
        return self.value.type_name

    @property
    def type_handle(self) -> type:
        return self.value.type_handle

    @property
    def required_fields(self) -> Tuple[str, ...]:
        return self.value.required_fields

    @property
    def optional_fields(self) -> Tuple[str, ...]:
        return self.value.optional_fields

    def __str__(self) -> str:
        return self.value.type_name

    @classmethod
    def from_type_name(cls, type_name: str) -> "VariantTag":
        """Look a member up by its display string (the variant's type name)."""
        for member in cls:
            if member.value.type_name == type_name:
                return member
        raise KeyError(type_name)


class UnionValue:
    """One decoded value of a union: ``(tag, payload)``, immutable.

    The payload is the externally visible representation: the wrapper
    serializes as its payload, never as a two-field record.
    """

    __slots__ = ("_tag", "_payload")
    __union__: ClassVar[Optional["UnionType"]] = None
    Tag: ClassVar[type] = VariantTag

    def __init__(self, tag: VariantTag, payload: Any):
        if tag is None or payload is None:
            raise TypeError(f"{type(self).__name__} requires both a tag and a payload")
        if not isinstance(tag, self.Tag):
            raise TypeError(f"{tag!r} is not a {type(self).__name__} tag")
        if not isinstance(payload, tag.type_handle):
            raise TypeError(
                f"Payload for {tag.name} must be {tag.type_handle.__name__}, got {type(payload).__name__}"
            )
        object.__setattr__(self, "_tag", tag)
        object.__setattr__(self, "_payload", payload)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    @property
    def tag(self) -> VariantTag:
        return self._tag

    @property
    def value(self) -> Any:
        """The decoded payload."""
        return self._payload

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._tag.name}, {self._payload!r})"

    def to_json_value(self) -> Any:
        """JSON-ready form of the payload (wire names, unset optionals omitted)."""
        return self._payload.model_dump(mode="json", by_alias=True, exclude_unset=True)

    @classmethod
    def from_value(cls, input_fields: Mapping) -> DispatchResult:
        return dispatch(cls.__union__, input_fields)

    @classmethod
    def decode(cls, input_fields: Mapping) -> "UnionValue":
        return dispatch(cls.__union__, input_fields).unwrap()

    @classmethod
    def _coerce(cls, value: Any) -> "UnionValue":
        if isinstance(value, cls):
            return value
        if not isinstance(value, Mapping):
            raise ValueError(f"{cls.__name__} expects an object, got {type(value).__name__}")
        try:
            return cls.decode(value)
        except (NoMatchError, DecodeError) as e:
            raise ValueError(str(e)) from e

    @classmethod
    def __get_pydantic_core_schema__(cls, source: Any, handler: Any) -> core_schema.CoreSchema:
        """Let generated unions appear as fields of compiled models."""
        return core_schema.no_info_plain_validator_function(
            cls._coerce,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda v: v.to_json_value(), info_arg=False
            ),
        )


def _structural_eq(self: UnionValue, other: Any) -> bool:
    if other is self:
        return True
    if type(other) is not type(self):
        return NotImplemented
    return self._tag is other._tag and self._payload == other._payload


def _canonical_json_hash(self: UnionValue) -> int:
    # Hash the full dump: payload equality ignores which fields were set
    dumped = self._payload.model_dump(mode="json", by_alias=True)
    return hash((self._tag.name, hash_json_value(dumped)))


def _native_hash(self: UnionValue) -> int:
    return hash((self._tag, self._payload))


@dataclass(frozen=True, eq=False)
class UnionType:
    """A generated sum type: declaration-ordered variants, tag enum and wrapper."""
    name: str
    tag_enum: type
    wrapper: type
    variants: Tuple[VariantDescriptor, ...]
    source: Optional[str] = None

    @property
    def tags(self) -> List[VariantTag]:
        return list(self.tag_enum)

    def tag(self, name: str) -> VariantTag:
        """Member by tag name (DOG) or by type name (Dog)."""
        try:
            return self.tag_enum[name]
        except KeyError:
            return self.tag_enum.from_type_name(name)

    def from_value(self, input_fields: Mapping) -> DispatchResult:
        return dispatch(self, input_fields)

    def decode(self, input_fields: Mapping) -> UnionValue:
        return dispatch(self, input_fields).unwrap()

    def wrap(self, tag: VariantTag, payload: Any) -> UnionValue:
        return self.wrapper(tag, payload)


def build_union_type(
    name: str,
    descriptors: Sequence[VariantDescriptor],
    config: Optional[GenerationConfig] = None,
    module: str = "schemaunion.generated",
    source: Optional[str] = None,
) -> UnionType:
    """Assemble the tag enumeration and wrapper class for a union.

    Raises:
        DuplicateVariantError: If two variants share a type name
        TagCollisionError: If two variant names normalize to one tag
    """
    config = config or GenerationConfig()

    seen_types: Dict[str, str] = {}
    seen_tags: Dict[str, str] = {}
    for descriptor in descriptors:
        if descriptor.type_name in seen_types:
            raise DuplicateVariantError(name, descriptor.type_name)
        seen_types[descriptor.type_name] = descriptor.tag_name
        if descriptor.tag_name in seen_tags:
            raise TagCollisionError(
                descriptor.tag_name, [seen_tags[descriptor.tag_name], descriptor.type_name]
            )
        seen_tags[descriptor.tag_name] = descriptor.type_name

    tag_enum = VariantTag(
        "Tag",
        [(d.tag_name, d) for d in descriptors],
        module=module,
        qualname=f"{name}.Tag",
    )

    namespace: Dict[str, Any] = {
        "__module__": module,
        "__qualname__": name,
        "__slots__": (),
        "__doc__": f"oneOf union of {', '.join(d.type_name for d in descriptors)}.",
        "Tag": tag_enum,
    }
    if config.include_hashcode_and_equals:
        namespace["__eq__"] = _structural_eq
        namespace["__hash__"] = (
            _native_hash if config.hash_strategy == "native" else _canonical_json_hash
        )
    wrapper = type(name, (UnionValue,), namespace)

    union = UnionType(
        name=name,
        tag_enum=tag_enum,
        wrapper=wrapper,
        variants=tuple(descriptors),
        source=source,
    )
    wrapper.__union__ = union
    return union
