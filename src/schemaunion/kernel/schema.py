"""Read-only schema views, the document store and $ref resolution."""

import posixpath
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
from urllib.parse import unquote, urldefrag, urljoin, urlparse

from .errors import CyclicReferenceError, UnresolvableReferenceError

DEFAULT_DOCUMENT_URI = "memory:///schema.json"

REF = "$ref"
ONE_OF = "oneOf"


def escape_pointer_segment(segment: str) -> str:
    """Escape one JSON pointer segment (RFC 6901)."""
    return segment.replace("~", "~0").replace("/", "~1")


def unescape_pointer_segment(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")


def split_pointer(pointer: str) -> List[str]:
    """Split a JSON pointer into unescaped segments ("" is the document root)."""
    if pointer in ("", "/"):
        return []
    if not pointer.startswith("/"):
        pointer = "/" + pointer
    return [unescape_pointer_segment(s) for s in pointer[1:].split("/")]


def schema_types(content: Mapping[str, Any]) -> Tuple[str, ...]:
    """Declared JSON types of a schema fragment, as a tuple."""
    node_type = content.get("type")
    if isinstance(node_type, list):
        return tuple(value for value in node_type if isinstance(value, str))
    if isinstance(node_type, str):
        return (node_type,)
    return ()


@dataclass(frozen=True, eq=False)
class SchemaNode:
    """Immutable view over one schema fragment and where it lives."""
    content: Any
    document_uri: str
    pointer: str = ""

    @property
    def location(self) -> str:
        return f"{self.document_uri}#{self.pointer}"

    @property
    def ref(self) -> Optional[str]:
        if isinstance(self.content, Mapping):
            value = self.content.get(REF)
            if isinstance(value, str):
                return value
        return None

    @property
    def types(self) -> Tuple[str, ...]:
        if not isinstance(self.content, Mapping):
            return ()
        return schema_types(self.content)

    @property
    def is_object(self) -> bool:
        """True for "type": "object" (alone or in a type list), or untyped with properties."""
        if not isinstance(self.content, Mapping):
            return False
        types = self.types
        return "object" in types or (not types and "properties" in self.content)

    @property
    def has_one_of(self) -> bool:
        return isinstance(self.content, Mapping) and ONE_OF in self.content

    @property
    def one_of(self) -> List["SchemaNode"]:
        """The oneOf branches, in declaration order."""
        branches = self.content.get(ONE_OF) if isinstance(self.content, Mapping) else None
        if not isinstance(branches, list):
            return []
        return [self.child(ONE_OF, str(i)) for i in range(len(branches))]

    @property
    def properties(self) -> Dict[str, "SchemaNode"]:
        props = self.content.get("properties") if isinstance(self.content, Mapping) else None
        if not isinstance(props, Mapping):
            return {}
        return {name: self.child("properties", name) for name in props}

    def child(self, *segments: str) -> "SchemaNode":
        """View of a nested fragment; segments are unescaped keys or list indices."""
        value = self.content
        pointer = self.pointer
        for segment in segments:
            if isinstance(value, list):
                value = value[int(segment)]
            else:
                value = value[segment]
            pointer = f"{pointer}/{escape_pointer_segment(segment)}"
        return SchemaNode(content=value, document_uri=self.document_uri, pointer=pointer)

    def get(self, key: str, default: Any = None) -> Any:
        if isinstance(self.content, Mapping):
            return self.content.get(key, default)
        return default


@dataclass(frozen=True, eq=False)
class SchemaDocument:
    """A whole schema document, addressed by URI."""
    uri: str
    root: Any

    @property
    def root_node(self) -> SchemaNode:
        return SchemaNode(content=self.root, document_uri=self.uri, pointer="")

    def node(self, pointer: str) -> SchemaNode:
        """Look up a fragment by JSON pointer.

        Raises:
            UnresolvableReferenceError: If a pointer segment does not exist
        """
        segments = split_pointer(pointer)
        try:
            return self.root_node.child(*segments)
        except (KeyError, IndexError, ValueError, TypeError) as e:
            raise UnresolvableReferenceError(
                f"#{pointer}", base=self.uri, reason=f"no fragment at segment {e}"
            ) from e


def _join_uri(base: str, ref: str) -> str:
    """Resolve a document reference against the referring document's URI."""
    if urlparse(ref).scheme:
        return ref
    joined = urljoin(base, ref)
    if urlparse(joined).scheme:
        return joined
    # urljoin only understands schemes it knows (memory: is not one of them)
    parsed = urlparse(base)
    path = posixpath.normpath(posixpath.join(posixpath.dirname(parsed.path) or "/", ref))
    return f"{parsed.scheme}://{parsed.netloc}{path}"


@dataclass
class SchemaStore:
    """Caches schema documents by URI and resolves single $ref hops.

    Documents other than those added explicitly are fetched through
    ``loader`` (default: file: URIs from disk).
    """
    loader: Optional[Callable[[str], Any]] = None
    _documents: Dict[str, SchemaDocument] = field(default_factory=dict)

    def add(self, content: Any, uri: str = DEFAULT_DOCUMENT_URI) -> SchemaDocument:
        document = SchemaDocument(uri=uri, root=content)
        self._documents[uri] = document
        return document

    def get_document(self, uri: str) -> SchemaDocument:
        """Return a cached document, loading it on first use.

        Raises:
            UnresolvableReferenceError: If the document cannot be loaded
        """
        document = self._documents.get(uri)
        if document is not None:
            return document
        if self.loader is not None:
            load = self.loader
        else:
            from schemaunion._internal.io.schema_files import load_json_from_uri
            load = load_json_from_uri
        try:
            content = load(uri)
        except (OSError, ValueError) as e:
            raise UnresolvableReferenceError(uri, reason=str(e)) from e
        return self.add(content, uri)

    def resolve_ref(self, ref: str, base: SchemaNode) -> SchemaNode:
        """Resolve one $ref hop relative to the node that carries it."""
        document_part, fragment = urldefrag(ref)
        if document_part:
            uri = _join_uri(base.document_uri, document_part)
        else:
            uri = base.document_uri
        try:
            document = self.get_document(uri)
        except UnresolvableReferenceError as e:
            raise UnresolvableReferenceError(ref, base=base.location, reason=e.reason) from e
        pointer = unquote(fragment)
        try:
            return document.node(pointer)
        except UnresolvableReferenceError as e:
            raise UnresolvableReferenceError(ref, base=base.location, reason=e.reason) from e


@dataclass(frozen=True, eq=False)
class ReferenceChain:
    """The locations visited while following $ref hops, and where they ended."""
    hops: Tuple[str, ...]
    target: SchemaNode

    @property
    def is_reference(self) -> bool:
        return len(self.hops) > 1


def resolve_chain(node: SchemaNode, store: SchemaStore) -> ReferenceChain:
    """Follow $ref hops from ``node`` until a node without $ref is reached.

    Raises:
        UnresolvableReferenceError: If a hop cannot be resolved
        CyclicReferenceError: If a hop revisits a location already on the chain
    """
    hops = [node.location]
    current = node
    while current.ref is not None:
        target = store.resolve_ref(current.ref, current)
        if target.location in hops:
            raise CyclicReferenceError(hops + [target.location])
        hops.append(target.location)
        current = target
    return ReferenceChain(hops=tuple(hops), target=current)


def resolve(node: SchemaNode, store: SchemaStore) -> SchemaNode:
    """Dereference ``node`` to its final non-$ref target."""
    return resolve_chain(node, store).target
