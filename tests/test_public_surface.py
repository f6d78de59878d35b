"""Test public API surface - ensure imports work and exports are stable."""

import types


def test_api_exports_core_functions():
    """schemaunion.api exposes generation, description and decoding."""
    from schemaunion.api import generate_union, generate_unions, describe_union, decode, check

    for func in (generate_union, generate_unions, describe_union, decode, check):
        assert isinstance(func, types.FunctionType)


def test_root_all_is_importable():
    import schemaunion

    for name in schemaunion.__all__:
        assert hasattr(schemaunion, name), name


def test_root_exports_match_api():
    import schemaunion
    import schemaunion.api

    assert schemaunion.generate_union is schemaunion.api.generate_union
    assert schemaunion.decode is schemaunion.api.decode


def test_error_hierarchy():
    from schemaunion import (
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

    for error in (SchemaReferenceError, DuplicateVariantError, TagCollisionError, NonObjectVariantError):
        assert issubclass(error, GenerationError)
    assert issubclass(UnresolvableReferenceError, SchemaReferenceError)
    assert issubclass(CyclicReferenceError, SchemaReferenceError)
    assert not issubclass(DecodeError, GenerationError)
    assert not issubclass(NoMatchError, GenerationError)
    assert issubclass(GenerationError, SchemaUnionError)
    assert issubclass(DecodeError, SchemaUnionError)


def test_codes_are_strings():
    from schemaunion import DispatchCode, RejectionCode

    assert DispatchCode.MATCHED == "MATCHED"
    assert [c.value for c in DispatchCode] == ["MATCHED", "NO_MATCH", "DECODE_ERROR"]
    assert RejectionCode.EXTRA_FIELDS == "EXTRA_FIELDS"


def test_internal_not_exported():
    import schemaunion

    assert not any(name.startswith("_internal") for name in schemaunion.__all__)
