"""Tests for schemaunion public API.

Tests that the public API (schemaunion.api) works on path and dict inputs
and returns the stable report models.
"""

import json
from pathlib import Path

import pytest

from schemaunion.api import (
    build_decode_report,
    check,
    decode,
    describe_union,
    generate_union,
    generate_unions,
    load_schema,
    overlapping_tags,
)
from schemaunion.codes import DispatchCode
from schemaunion.contracts import CheckSummary, DecodeReport, UnionDescription
from schemaunion.kernel.config import GenerationConfig
from schemaunion.kernel.schema import DEFAULT_DOCUMENT_URI
from schemaunion.kernel.type_compiler import TypeNamespace


HERE = Path(__file__).resolve().parent
FIXTURES = HERE.parent / "fixtures"


def test_generate_with_path_input(animal_schema_path):
    union = generate_union(animal_schema_path)
    assert union.name == "Animal"
    assert [t.name for t in union.tags] == ["DOG", "CAT"]


def test_generate_with_str_path_input(animal_schema_path):
    union = generate_union(str(animal_schema_path))
    assert union.name == "Animal"


def test_generate_with_dict_input(animal_schema):
    union = generate_union(animal_schema)
    assert union.name == "Animal"
    assert union.source == f"{DEFAULT_DOCUMENT_URI}#"


def test_explicit_name_wins(animal_schema):
    assert generate_union(animal_schema, name="pet").name == "Pet"


def test_name_from_file_stem(tmp_path, animal_schema):
    schema = {k: v for k, v in animal_schema.items() if k != "title"}
    path = tmp_path / "creature.json"
    path.write_text(json.dumps(schema), encoding="utf-8")
    assert generate_union(path).name == "Creature"


def test_load_schema_registers_file_uri(animal_schema_path):
    store, document = load_schema(animal_schema_path)
    assert document.uri.startswith("file://")
    assert store.get_document(document.uri) is document


def test_generate_unions_finds_property_unions():
    unions = generate_unions(FIXTURES / "refs" / "owner.json")
    assert [u.name for u in unions] == ["Pet"]


def test_caller_namespace_receives_types(animal_schema):
    namespace = TypeNamespace()
    first = generate_union(animal_schema, name="pet", namespace=namespace)
    second = generate_union(animal_schema, name="pet", namespace=namespace)
    assert (first.name, second.name) == ("Pet", "Pet_")
    assert namespace.names() == ["Pet", "Dog", "Cat", "Pet_"]
    assert namespace


def test_generate_unions_fills_caller_namespace():
    namespace = TypeNamespace()
    generate_unions(FIXTURES / "refs" / "owner.json", namespace=namespace)
    assert namespace.get("Pet") is not None


def test_config_from_file():
    from schemaunion._internal.io.schema_files import load_config_from_path

    config = load_config_from_path(FIXTURES / "config_native.json")
    assert config.hash_strategy == "native"
    union = generate_union(FIXTURES / "animal" / "oneOfAsRoot.json", config=config)
    assert union.name == "AnimalUnion"
    value = union.decode({"name": "Rex", "gender": "M"})
    assert hash(value) == hash(union.decode({"gender": "M", "name": "Rex"}))


def test_describe_union(animal):
    description = describe_union(animal)
    assert isinstance(description, UnionDescription)
    assert description.name == "Animal"
    dog, cat = description.variants
    assert (dog.tag, dog.type_name) == ("DOG", "Dog")
    assert dog.required_fields == ["gender", "name"]
    assert dog.optional_fields == ["bark"]
    assert cat.optional_fields == ["meow"]
    assert dog.fingerprint.startswith("sha256:")
    assert dog.fingerprint != cat.fingerprint
    assert dog.source.endswith("#/definitions/dog")
    assert description.overlapping == [["DOG", "CAT"]]


def test_describe_is_deterministic(animal_schema_path):
    first = describe_union(generate_union(animal_schema_path)).model_dump()
    second = describe_union(generate_union(animal_schema_path)).model_dump()
    assert first == second


def test_overlapping_tags_disjoint():
    union = generate_union(FIXTURES / "refs" / "owner.json", pointer="/properties/pet")
    assert overlapping_tags(union) == []


def test_decode_never_raises_for_no_match(animal):
    result = decode(animal, {"wings": 2})
    assert result.code == DispatchCode.NO_MATCH


def test_decode_report_matched(animal):
    report = build_decode_report(decode(animal, {"name": "Rex", "gender": "M", "bark": True}))
    assert isinstance(report, DecodeReport)
    assert report.ok is True
    assert report.code == "MATCHED"
    assert report.tag == "DOG"
    assert report.type_name == "Dog"
    assert report.value == {"name": "Rex", "gender": "M", "bark": True}
    assert report.keys == ["bark", "gender", "name"]


def test_decode_report_no_match(animal):
    report = build_decode_report(decode(animal, {"name": "Rex"}))
    assert report.ok is False
    assert report.code == "NO_MATCH"
    assert report.tag is None
    assert [r.tag for r in report.rejections] == ["DOG", "CAT"]
    assert report.rejections[0].missing == ["gender"]


def test_decode_report_decode_error(animal):
    report = build_decode_report(decode(animal, {"name": "Rex", "gender": "X"}))
    assert report.ok is False
    assert report.code == "DECODE_ERROR"
    assert report.tag == "DOG"
    assert report.type_name == "Dog"
    assert len(report.errors) == 1
    assert "gender" in report.errors[0]


def test_decode_report_is_json_ready(animal):
    report = build_decode_report(decode(animal, {"name": "Rex", "gender": "M"}))
    json.dumps(report.model_dump())


def test_check_summary(animal):
    with open(FIXTURES / "animal" / "inputs.json", 'r', encoding='utf-8') as f:
        items = json.load(f)
    summary = check(animal, items)
    assert isinstance(summary, CheckSummary)
    assert summary.ok is False
    assert summary.total == 4
    assert summary.matched == 3
    assert summary.no_match == 1
    assert summary.decode_errors == 0
    assert summary.tag_counts == {"DOG": 2, "CAT": 1}
    assert list(summary.tag_counts) == ["DOG", "CAT"]
    assert summary.failure_indices == [3]
    assert summary.failures[0].code == "NO_MATCH"


def test_check_counts_decode_errors(animal):
    summary = check(animal, [{"name": "Rex", "gender": "X"}, {"name": "Tom", "gender": "F"}])
    assert summary.decode_errors == 1
    assert summary.matched == 1
    assert summary.failure_indices == [0]


def test_check_non_object_item(animal):
    summary = check(animal, ["dog"])
    assert summary.no_match == 1
    assert "not an object" in summary.failures[0].errors[0]


def test_check_all_matched(animal):
    summary = check(animal, [{"name": "Rex", "gender": "M"}])
    assert summary.ok is True
    assert summary.failures == []


def test_invalid_config_rejected():
    with pytest.raises(ValueError):
        GenerationConfig(unique_separator="--")
    with pytest.raises(ValueError):
        GenerationConfig(hash_strategy="md5")
    with pytest.raises(ValueError):
        GenerationConfig(unknown_switch=True)
