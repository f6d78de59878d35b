"""Compile object schema fragments into pydantic models.

Each compiled model is a type handle: its ``model_fields`` carry the
per-field required marker and wire name (alias) that variant fingerprints
are built from, and ``model_validate`` is the materialization step used at
decode time.
"""

import keyword
import logging
import re
from typing import Any, Callable, Dict, List, Literal, Optional, Set, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model

from .config import GenerationConfig
from .errors import DecodeError, GenerationError, NonObjectVariantError
from .naming import NamingPolicy, make_unique, ref_type_name
from .schema import SchemaNode, SchemaStore, resolve_chain

logger = logging.getLogger(__name__)

_PRIMITIVES: Dict[str, Any] = {
    "string": str,
    "integer": int,
    "number": float,
    "boolean": bool,
    "null": type(None),
}


class TypeNamespace:
    """Destination namespace: every type declared by one generation target.

    Name lookups are case-insensitive, matching how generated names are
    uniquified. Compiled fragments are cached by location and content, so a
    fragment that is referenced twice compiles to one type while an unrelated
    document loaded under the same URI does not pick it up.
    """

    def __init__(self, module: str = "schemaunion.generated"):
        self.module = module
        self._types: Dict[str, Any] = {}
        self._by_location: Dict[str, Tuple[Any, Any]] = {}

    def names(self) -> List[str]:
        return list(self._types)

    def __contains__(self, name: str) -> bool:
        lowered = name.lower()
        return any(n.lower() == lowered for n in self._types)

    def __len__(self) -> int:
        return len(self._types)

    def __bool__(self) -> bool:
        # An empty namespace is still a destination
        return True

    def get(self, name: str) -> Optional[Any]:
        return self._types.get(name)

    def declare(self, name: str, handle: Any, node: Optional[SchemaNode] = None) -> None:
        if name in self:
            raise GenerationError(f"Type '{name}' is already declared in '{self.module}'")
        self._types[name] = handle
        if node is not None:
            self._by_location[node.location] = (node.content, handle)

    def reserve(self, name: str) -> None:
        """Claim a name before its type exists (filled in by ``fill``)."""
        self.declare(name, None)

    def fill(self, name: str, handle: Any, node: Optional[SchemaNode] = None) -> None:
        if name not in self._types or self._types[name] is not None:
            raise GenerationError(f"Type '{name}' was not reserved in '{self.module}'")
        self._types[name] = handle
        if node is not None:
            self._by_location[node.location] = (node.content, handle)

    def for_node(self, node: SchemaNode) -> Optional[Any]:
        """The type already compiled from this fragment, if any."""
        entry = self._by_location.get(node.location)
        if entry is not None and entry[0] == node.content:
            return entry[1]
        return None

    def types(self) -> Dict[str, Any]:
        return dict(self._types)

    def snapshot(self) -> Tuple[Dict[str, Any], Dict[str, Tuple[Any, Any]]]:
        return dict(self._types), dict(self._by_location)

    def restore(self, snapshot: Tuple[Dict[str, Any], Dict[str, Tuple[Any, Any]]]) -> None:
        self._types, self._by_location = dict(snapshot[0]), dict(snapshot[1])


def attribute_name(wire_name: str, taken: Set[str]) -> str:
    """Python attribute name for a JSON property name.

    Names that are not usable as pydantic fields (keywords, leading
    underscore, pydantic's model_ namespace, illegal characters) are
    rewritten; the original name survives as the field alias.
    """
    name = re.sub(r"\W", "_", wire_name).lstrip("_")
    if not name or name[0].isdigit():
        name = f"field_{name}"
    if keyword.iskeyword(name) or name.startswith("model_"):
        name = name + "_"
    while name in taken:
        name = name + "_"
    return name


class TypeCompiler:
    """Turns resolved object schemas into pydantic models declared in a namespace."""

    def __init__(
        self,
        store: SchemaStore,
        namespace: TypeNamespace,
        config: Optional[GenerationConfig] = None,
        policy: Optional[NamingPolicy] = None,
    ):
        self.store = store
        self.namespace = namespace
        self.config = config or GenerationConfig()
        self.policy = policy or NamingPolicy.from_config(self.config)
        # Hook for properties that are themselves oneOf unions (set by the generator)
        self.one_of_builder: Optional[Callable[[str, SchemaNode], Any]] = None
        self._pending: Dict[str, str] = {}
        self._session: List[type] = []
        self._session_forward = False

    def compile(self, name: str, node: SchemaNode) -> type:
        """Compile an object schema into a model named ``name``.

        Args:
            name: Already-unique class name for the model
            node: Resolved (non-$ref) schema node

        Returns:
            The pydantic model class (the type handle)

        Raises:
            NonObjectVariantError: If the node is not object-typed
        """
        if not node.is_object:
            raise NonObjectVariantError(node.location, node.content)
        cached = self.namespace.for_node(node)
        if cached is not None:
            return cached

        outermost = not self._pending
        if outermost:
            self._session = []
            self._session_forward = False
        self._pending[node.location] = name
        try:
            model = self._build_model(name, node)
        finally:
            del self._pending[node.location]
        self.namespace.declare(name, model, node)
        self._session.append(model)
        logger.debug("Compiled %s from %s", name, node.location)

        if outermost and self._session_forward:
            # Recursive schemas: resolve forward references, innermost models first
            types_namespace = self.namespace.types()
            for session_model in self._session:
                session_model.model_rebuild(force=True, _types_namespace=types_namespace)
        return model

    def _build_model(self, name: str, node: SchemaNode) -> type:
        required_list = node.get("required")
        required_names = set(required_list) if isinstance(required_list, list) else set()

        definitions: Dict[str, Any] = {}
        taken: Set[str] = set()
        for wire_name, child in node.properties.items():
            annotation, is_forward = self._annotation(wire_name, child)
            if is_forward:
                self._session_forward = True
            # draft-03 marks required on the property itself
            required = wire_name in required_names or child.get("required") is True
            attr = attribute_name(wire_name, taken)
            taken.add(attr)
            alias = wire_name if attr != wire_name else None
            description = child.get("description") if isinstance(child.get("description"), str) else None
            if required:
                info = Field(..., alias=alias, description=description)
            else:
                annotation = Optional[annotation]
                info = Field(None, alias=alias, description=description)
            definitions[attr] = (annotation, info)

        model = create_model(
            name,
            __config__=ConfigDict(
                extra="forbid",
                populate_by_name=True,
                frozen=self.config.frozen_payloads,
                allow_inf_nan=False,
            ),
            __doc__=node.get("description") if isinstance(node.get("description"), str) else None,
            __module__=self.namespace.module,
            **definitions,
        )
        return model

    def _annotation(self, wire_name: str, node: SchemaNode) -> Tuple[Any, bool]:
        """Annotation for one property schema, and whether it is a forward reference."""
        chain = resolve_chain(node, self.store)
        target = chain.target

        pending = self._pending.get(target.location)
        if pending is not None:
            return pending, True
        cached = self.namespace.for_node(target)
        if cached is not None:
            return cached, False

        if target.has_one_of:
            if self.one_of_builder is None:
                return Any, False
            return self.one_of_builder(wire_name, target), False

        enum = target.get("enum")
        if isinstance(enum, list) and enum and all(
            v is None or isinstance(v, (str, int, bool)) for v in enum
        ):
            return Literal[tuple(enum)], False

        types = target.types
        if not types:
            if not target.is_object:
                return Any, False
            types = ("object",)

        options = []
        forward = False
        for json_type in types:
            if json_type == "object":
                if target.properties:
                    raw = ref_type_name(node.ref) if chain.is_reference and node.ref else wire_name
                    nested_name = make_unique(
                        self.policy.class_name(raw), self.namespace.names(), self.config.unique_separator
                    )
                    options.append(self.compile(nested_name, target))
                else:
                    options.append(Dict[str, Any])
            elif json_type == "array":
                item, item_forward = self._items_annotation(wire_name, target)
                forward = forward or item_forward
                options.append(Tuple[item, ...] if self.config.frozen_payloads else List[item])
            elif json_type in _PRIMITIVES:
                options.append(_PRIMITIVES[json_type])
            else:
                options.append(Any)

        if len(options) == 1:
            return options[0], forward
        return Union[tuple(options)], forward

    def _items_annotation(self, wire_name: str, node: SchemaNode) -> Tuple[Any, bool]:
        items = node.get("items")
        if not isinstance(items, dict):
            return Any, False
        return self._annotation(wire_name, node.child("items"))


def field_specs(handle: type) -> List[Tuple[str, bool]]:
    """(wire name, required) for every declared field of a compiled type."""
    return [
        (info.alias or attr, info.is_required())
        for attr, info in handle.model_fields.items()
    ]


def materialize(handle: type, data: Any) -> BaseModel:
    """Decode ``data`` into an instance of ``handle``.

    Raises:
        DecodeError: If pydantic rejects the data
    """
    try:
        return handle.model_validate(data)
    except ValidationError as e:
        raise DecodeError(handle.__name__, e.errors(include_url=False)) from e
