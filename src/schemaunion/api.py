"""Public API for the schemaunion package.

High-level functions that take schema documents (paths or dicts) and
return generated unions and stable, JSON-ready result models.
"""

import os
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from schemaunion.codes import DispatchCode
from schemaunion.contracts import (
    CheckSummary,
    DecodeReport,
    RejectionReport,
    UnionDescription,
    VariantDescription,
)
from schemaunion.kernel.config import GenerationConfig
from schemaunion.kernel.dispatch import DispatchResult
from schemaunion.kernel.generator import GenerationContext, OneOfGenerator
from schemaunion.kernel.schema import (
    DEFAULT_DOCUMENT_URI,
    ONE_OF,
    SchemaDocument,
    SchemaNode,
    SchemaStore,
    split_pointer,
)
from schemaunion.kernel.type_compiler import TypeNamespace
from schemaunion.kernel.union import UnionType
from schemaunion._internal.io.schema_files import load_json_from_path, path_to_uri

SchemaSource = Union[str, os.PathLike, Path, Dict[str, Any]]


def _normalize_path(path: Union[str, os.PathLike, Path]) -> Path:
    """Normalize path input to Path object."""
    return Path(path) if not isinstance(path, Path) else path


def load_schema(
    schema: SchemaSource,
    loader: Optional[Callable[[str], Any]] = None,
    store: Optional[SchemaStore] = None,
) -> Tuple[SchemaStore, SchemaDocument]:
    """Register a schema document (file path or already-parsed dict) in a store."""
    store = store or SchemaStore(loader=loader)
    if isinstance(schema, dict):
        return store, store.add(schema, DEFAULT_DOCUMENT_URI)
    path = _normalize_path(schema)
    return store, store.add(load_json_from_path(path), path_to_uri(path))


def _default_name(document: SchemaDocument, pointer: str) -> str:
    segments = [s for s in split_pointer(pointer) if not s.isdigit() and s not in ("properties", ONE_OF)]
    if segments:
        return segments[-1]
    title = document.root.get("title") if isinstance(document.root, dict) else None
    if isinstance(title, str) and title:
        return title
    stem = Path(document.uri.rsplit("/", 1)[-1]).stem
    if stem and stem != "schema":
        return stem
    return "OneOf"


def generate_union(
    schema: SchemaSource,
    *,
    name: Optional[str] = None,
    pointer: str = "",
    config: Optional[GenerationConfig] = None,
    namespace: Optional[TypeNamespace] = None,
    loader: Optional[Callable[[str], Any]] = None,
) -> UnionType:
    """Generate the union for the oneOf node at ``pointer`` in ``schema``.

    Args:
        schema: Path to a JSON schema file, or the parsed schema dict
        name: Field name the union is generated for (defaults to the last
            pointer segment, then the schema title, then the file name)
        pointer: JSON pointer to the oneOf node ("" for the root)
        config: Generation switches
        namespace: Destination namespace shared with earlier generations
        loader: Fetches documents for non-file $ref URIs

    Raises:
        GenerationError: If the union cannot be generated
    """
    store, document = load_schema(schema, loader=loader)
    context = GenerationContext(
        store=store,
        namespace=namespace if namespace is not None else TypeNamespace(),
        config=config or GenerationConfig(),
    )
    node = document.node(pointer)
    return OneOfGenerator(context).generate(name or _default_name(document, pointer), node)


def _find_one_of(node: SchemaNode, field_name: str) -> Iterable[Tuple[str, SchemaNode]]:
    """Every oneOf node reachable through properties and definitions, parents first."""
    if not isinstance(node.content, dict):
        return
    if node.has_one_of:
        yield field_name, node
    for prop_name, child in node.properties.items():
        yield from _find_one_of(child, prop_name)
    for container in ("definitions", "$defs"):
        defs = node.get(container)
        if isinstance(defs, dict):
            for def_name in defs:
                yield from _find_one_of(node.child(container, def_name), def_name)


def generate_unions(
    schema: SchemaSource,
    *,
    config: Optional[GenerationConfig] = None,
    namespace: Optional[TypeNamespace] = None,
    loader: Optional[Callable[[str], Any]] = None,
) -> List[UnionType]:
    """Generate a union for every oneOf node in a document, in one run.

    All unions share one namespace and one name registry, so anonymous
    branch counters and uniquified names are consistent across the document.
    """
    store, document = load_schema(schema, loader=loader)
    context = GenerationContext(
        store=store,
        namespace=namespace if namespace is not None else TypeNamespace(),
        config=config or GenerationConfig(),
    )
    generator = OneOfGenerator(context)
    root_name = _default_name(document, "")
    for field_name, node in _find_one_of(document.root_node, root_name):
        generator.generate(field_name, node)
    return generator.unions


def overlapping_tags(union: UnionType) -> List[List[str]]:
    """Pairs [earlier, later] of tags where the earlier variant shadows some inputs of the later."""
    pairs = []
    variants = list(union.tag_enum)
    for i, first in enumerate(variants):
        for second in variants[i + 1:]:
            if first.value.overlaps(second.value):
                pairs.append([first.name, second.name])
    return pairs


def describe_union(union: UnionType) -> UnionDescription:
    """Stable description of a generated union."""
    return UnionDescription(
        name=union.name,
        source=union.source,
        variants=[
            VariantDescription(
                tag=tag.name,
                type_name=tag.type_name,
                required_fields=list(tag.required_fields),
                optional_fields=list(tag.optional_fields),
                fingerprint=tag.value.fingerprint,
                source=tag.value.source,
            )
            for tag in union.tag_enum
        ],
        overlapping=overlapping_tags(union),
    )


def decode(union: UnionType, data: Mapping[str, Any]) -> DispatchResult:
    """Structurally match ``data`` against ``union`` (never raises for NO_MATCH)."""
    return union.from_value(data)


def build_decode_report(result: DispatchResult) -> DecodeReport:
    """Convert a DispatchResult into its JSON-ready report."""
    report = DecodeReport(
        ok=result.matched,
        code=result.code.value,
        union=result.union_name,
        keys=list(result.keys),
        rejections=[
            RejectionReport(
                tag=r.tag,
                code=r.code.value,
                missing=list(r.missing),
                extra=list(r.extra),
            )
            for r in result.rejections
        ],
    )
    if result.code == DispatchCode.MATCHED:
        report.tag = result.value.tag.name
        report.type_name = result.value.tag.type_name
        report.value = result.value.to_json_value()
    elif result.code == DispatchCode.DECODE_ERROR:
        report.tag = result.error_tag
        report.type_name = result.error.type_name
        report.errors = [str(result.error)]
    return report


def check(union: UnionType, items: Iterable[Any]) -> CheckSummary:
    """Decode a batch of input maps and summarize which tags they landed on."""
    tag_counts = {tag.name: 0 for tag in union.tag_enum}
    failures: List[DecodeReport] = []
    failure_indices: List[int] = []
    total = matched = no_match = decode_errors = 0
    for index, item in enumerate(items):
        total += 1
        if not isinstance(item, Mapping):
            no_match += 1
            failure_indices.append(index)
            failures.append(DecodeReport(
                ok=False,
                code=DispatchCode.NO_MATCH.value,
                union=union.name,
                keys=[],
                errors=[f"Item is {type(item).__name__}, not an object"],
            ))
            continue
        result = union.from_value(item)
        if result.matched:
            matched += 1
            tag_counts[result.value.tag.name] += 1
            continue
        if result.code == DispatchCode.DECODE_ERROR:
            decode_errors += 1
        else:
            no_match += 1
        failure_indices.append(index)
        failures.append(build_decode_report(result))
    return CheckSummary(
        ok=not failures,
        union=union.name,
        total=total,
        matched=matched,
        no_match=no_match,
        decode_errors=decode_errors,
        tag_counts=tag_counts,
        failures=failures,
        failure_indices=failure_indices,
    )
