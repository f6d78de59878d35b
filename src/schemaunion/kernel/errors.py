"""Exception hierarchy for union generation and decoding.

Generation-time errors abort the whole generation pass. Decode-time errors
are per call and never touch the generated union metadata.
"""

from typing import Any, List, Optional, Sequence


class SchemaUnionError(Exception):
    """Base exception for schemaunion."""
    pass


class GenerationError(SchemaUnionError):
    """Raised when a union type cannot be generated (fatal for the pass)."""
    pass


class CompileError(GenerationError):
    """Raised by the type compiler when a schema fragment cannot become a type."""
    pass


class NonObjectVariantError(CompileError):
    """Raised when a oneOf branch does not resolve to an object schema."""
    def __init__(self, location: str, content: Any):
        self.location = location
        self.content = content
        super().__init__(
            f"Only object type supported, '{location}' cannot be used as a oneOf option "
            f"(got {content!r})"
        )


class DuplicateVariantError(GenerationError):
    """Raised when two branches of one union end up with the same type name."""
    def __init__(self, union_name: str, type_name: str):
        self.union_name = union_name
        self.type_name = type_name
        super().__init__(f"Duplicate oneOf option '{type_name}' in '{union_name}'")


class TagCollisionError(GenerationError):
    """Raised when two distinct variant names normalize to the same tag."""
    def __init__(self, tag_name: str, names: Sequence[str]):
        self.tag_name = tag_name
        self.names = list(names)
        joined = ", ".join(self.names)
        super().__init__(f"Variants {joined} all normalize to tag '{tag_name}'")


class SchemaReferenceError(GenerationError):
    """Base exception for $ref resolution failures."""
    pass


class UnresolvableReferenceError(SchemaReferenceError):
    """Raised when a $ref target document or fragment cannot be located."""
    def __init__(self, ref: str, base: Optional[str] = None, reason: Optional[str] = None):
        self.ref = ref
        self.base = base
        self.reason = reason
        msg = f"Cannot resolve $ref '{ref}'"
        if base:
            msg += f" from '{base}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class CyclicReferenceError(SchemaReferenceError):
    """Raised when a chain of $ref hops revisits a location."""
    def __init__(self, chain: List[str]):
        self.chain = chain
        super().__init__("Circular $ref chain: " + " -> ".join(chain))


class DecodeError(SchemaUnionError):
    """Raised (or reported) when a matched variant cannot be materialized."""
    def __init__(self, type_name: str, errors: List[dict]):
        self.type_name = type_name
        self.errors = errors
        details = "; ".join(
            f"{'.'.join(str(p) for p in e.get('loc', ())) or '<root>'}: {e.get('msg', '')}"
            for e in errors
        )
        super().__init__(f"Cannot decode value as '{type_name}': {details}")


class NoMatchError(SchemaUnionError):
    """Raised by the raising decode form when no variant matches the input keys."""
    def __init__(self, union_name: str, keys: Sequence[str]):
        self.union_name = union_name
        self.keys = sorted(keys)
        super().__init__(f"No '{union_name}' variant matches fields {self.keys}")
