"""schemaunion: JSON Schema oneOf unions with structural runtime dispatch."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("schemaunion")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from schemaunion.api import (
    generate_union,
    generate_unions,
    describe_union,
    decode,
    check,
)
from schemaunion.codes import DispatchCode, RejectionCode
from schemaunion.contracts import DecodeReport, UnionDescription, VariantDescription
from schemaunion.kernel.config import GenerationConfig
from schemaunion.kernel.dispatch import DispatchResult
from schemaunion.kernel.errors import (
    SchemaUnionError,
    GenerationError,
    SchemaReferenceError,
    UnresolvableReferenceError,
    CyclicReferenceError,
    DuplicateVariantError,
    TagCollisionError,
    NonObjectVariantError,
    DecodeError,
    NoMatchError,
)
from schemaunion.kernel.union import UnionType, UnionValue

__all__ = [
    "__version__",
    "generate_union",
    "generate_unions",
    "describe_union",
    "decode",
    "check",
    "DispatchCode",
    "RejectionCode",
    "DecodeReport",
    "UnionDescription",
    "VariantDescription",
    "GenerationConfig",
    "DispatchResult",
    "SchemaUnionError",
    "GenerationError",
    "SchemaReferenceError",
    "UnresolvableReferenceError",
    "CyclicReferenceError",
    "DuplicateVariantError",
    "TagCollisionError",
    "NonObjectVariantError",
    "DecodeError",
    "NoMatchError",
    "UnionType",
    "UnionValue",
]
