"""Generate union types from oneOf schema nodes."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Set

from .config import GenerationConfig
from .descriptor import VariantDescriptor, build_descriptor
from .errors import GenerationError, NonObjectVariantError
from .naming import NameRegistry, NamingPolicy, VariantNamer
from .schema import ONE_OF, SchemaNode, SchemaStore, resolve
from .type_compiler import TypeCompiler, TypeNamespace
from .union import UnionType, build_union_type

logger = logging.getLogger(__name__)


@dataclass
class GenerationContext:
    """Everything one generation run reads and writes.

    The name registry lives here rather than in module state, so runs over
    unrelated schemas never share anonymous-branch counters.
    """
    store: SchemaStore
    namespace: TypeNamespace = field(default_factory=TypeNamespace)
    config: GenerationConfig = field(default_factory=GenerationConfig)
    registry: NameRegistry = field(default_factory=NameRegistry)


class OneOfGenerator:
    """Compiles oneOf nodes into UnionTypes declared in the context's namespace."""

    def __init__(self, context: GenerationContext):
        self.context = context
        self.policy = NamingPolicy.from_config(context.config)
        self.namer = VariantNamer(
            policy=self.policy,
            registry=context.registry,
            separator=context.config.unique_separator,
        )
        self.compiler = TypeCompiler(
            store=context.store,
            namespace=context.namespace,
            config=context.config,
            policy=self.policy,
        )
        self.compiler.one_of_builder = self._nested_union
        self._unions: Dict[str, UnionType] = {}
        self._in_progress: Set[str] = set()

    @property
    def unions(self) -> List[UnionType]:
        return list(self._unions.values())

    def generate(self, node_name: str, node: SchemaNode) -> UnionType:
        """Generate the union for a oneOf node.

        On any GenerationError the namespace and the anonymous-name
        counters are rolled back: no partial union or variant type
        survives a failed pass.

        Args:
            node_name: Field (or root) name the union is generated for
            node: Schema node holding the oneOf array, or a $ref to one

        Raises:
            GenerationError: If any branch cannot be compiled or named
        """
        namespace = self.context.namespace
        snapshot = namespace.snapshot()
        counters = self.context.registry.snapshot()
        unions_before = dict(self._unions)
        try:
            return self._generate(node_name, node)
        except GenerationError:
            namespace.restore(snapshot)
            self.context.registry.restore(counters)
            self._unions = unions_before
            self._in_progress.clear()
            raise

    def _nested_union(self, wire_name: str, node: SchemaNode) -> type:
        return self._generate(wire_name, node).wrapper

    def _generate(self, node_name: str, node: SchemaNode) -> UnionType:
        store = self.context.store
        namespace = self.context.namespace
        node = resolve(node, store)

        cached = self._unions.get(node.location)
        if cached is not None:
            return cached
        if node.location in self._in_progress:
            raise GenerationError(f"Recursive oneOf at '{node.location}' is not supported")

        branches_raw = node.get(ONE_OF)
        if not isinstance(branches_raw, list) or not branches_raw:
            raise GenerationError(f"'{node.location}' has no oneOf branches")

        self._in_progress.add(node.location)
        wrapper_name = self.namer.wrapper_name(node_name, namespace.names())
        namespace.reserve(wrapper_name)
        logger.debug("Generating %s with %d oneOf options", wrapper_name, len(branches_raw))

        descriptors: List[VariantDescriptor] = []
        for branch in node.one_of:
            descriptors.append(self._variant(node_name, branch))

        union = build_union_type(
            wrapper_name,
            descriptors,
            config=self.context.config,
            module=namespace.module,
            source=node.location,
        )
        namespace.fill(wrapper_name, union.wrapper, node)
        self._in_progress.discard(node.location)
        self._unions[node.location] = union
        return union

    def _variant(self, node_name: str, branch: SchemaNode) -> VariantDescriptor:
        store = self.context.store
        namespace = self.context.namespace
        config = self.context.config

        target = resolve(branch, store) if branch.ref is not None else branch
        if not target.is_object:
            raise NonObjectVariantError(target.location, target.content)

        handle = namespace.for_node(target)
        if handle is not None:
            type_name = handle.__name__
        else:
            if branch.ref is not None:
                type_name = self.namer.name_for_ref(branch.ref, namespace.names())
            else:
                type_name = self.namer.name_for_inline(node_name, namespace.names())
            handle = self.compiler.compile(type_name, target)

        logger.debug("oneOf option %s compiled from %s", type_name, target.location)
        return build_descriptor(type_name, handle, source=target.location, empty_tag=config.empty_tag)
