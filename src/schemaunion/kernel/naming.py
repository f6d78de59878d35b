"""Type-name synthesis: naming policy, per-run counters and uniquification."""

import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Dict, Iterable, Optional
from urllib.parse import unquote, urldefrag

from .config import GenerationConfig
from .schema import unescape_pointer_segment

_ILLEGAL_CHARACTERS = re.compile(r"[^A-Za-z0-9_]")


@dataclass(frozen=True)
class NamingPolicy:
    """Turns raw schema names into legal Python class names."""
    prefix: Optional[str] = None
    suffix: Optional[str] = None
    word_delimiters: str = "-_"

    @classmethod
    def from_config(cls, config: GenerationConfig) -> "NamingPolicy":
        return cls(
            prefix=config.class_name_prefix,
            suffix=config.class_name_suffix,
            word_delimiters=config.property_word_delimiters,
        )

    def sanitize(self, name: str) -> str:
        """Replace every character that cannot appear in an identifier with '_'."""
        return _ILLEGAL_CHARACTERS.sub("_", name)

    def apply_prefix_suffix(self, name: str) -> str:
        return f"{self.prefix or ''}{name}{self.suffix or ''}"

    def normalize(self, name: str) -> str:
        """Drop word delimiters, capitalizing the word after each one (my-dog -> MyDog)."""
        if self.word_delimiters:
            pattern = "[" + re.escape(self.word_delimiters) + "]+"
            words = [w for w in re.split(pattern, name) if w]
            if words:
                name = "".join(w[0].upper() + w[1:] for w in words)
        return name

    def class_name(self, raw: str, with_affixes: bool = False) -> str:
        """Legal class name for a raw schema name.

        Delimiters are normalized before illegal characters are replaced, so
        a delimiter such as '-' still acts as a word break.
        """
        name = raw[:1].upper() + raw[1:]
        if with_affixes:
            name = self.apply_prefix_suffix(name)
        name = self.sanitize(self.normalize(name))
        if not name:
            name = "_"
        if name[0].isdigit():
            name = "_" + name
        return name


class NameRegistry:
    """Counters for anonymous branch names, scoped to one generation run."""

    def __init__(self):
        self._counters: Dict[str, int] = {}

    def next_index(self, base: str) -> int:
        """Return the next 1-based index for ``base``."""
        index = self._counters.get(base, 0) + 1
        self._counters[base] = index
        return index

    def current(self, base: str) -> int:
        return self._counters.get(base, 0)

    def snapshot(self) -> Dict[str, int]:
        return dict(self._counters)

    def restore(self, snapshot: Dict[str, int]) -> None:
        self._counters = dict(snapshot)


def make_unique(name: str, declared: Iterable[str], separator: str = "_") -> str:
    """Append ``separator`` to ``name`` until it collides with nothing declared.

    Collisions are case-insensitive. Each retry lengthens the candidate, so
    this terminates for any finite namespace.
    """
    taken = {d.lower() for d in declared}
    while name.lower() in taken:
        name = name + separator
    return name


def ref_type_name(ref: str) -> str:
    """Raw type name for a $ref: the last segment of its target.

    '#/definitions/dog' -> 'dog', 'pets.json' -> 'pets',
    'pets.json#/definitions/cat' -> 'cat'.
    """
    document_part, fragment = urldefrag(ref)
    fragment = unquote(fragment).rstrip("/")
    if fragment:
        return unescape_pointer_segment(fragment.rsplit("/", 1)[-1])
    if document_part:
        return PurePosixPath(unquote(document_part)).stem
    return ""


@dataclass
class VariantNamer:
    """Produces unique type names for the branches and wrapper of a union."""
    policy: NamingPolicy
    registry: NameRegistry = field(default_factory=NameRegistry)
    separator: str = "_"

    def name_for_ref(self, ref: str, declared: Iterable[str]) -> str:
        raw = ref_type_name(ref) or "Root"
        return make_unique(self.policy.class_name(raw), declared, self.separator)

    def name_for_inline(self, field_name: str, declared: Iterable[str]) -> str:
        index = self.registry.next_index(field_name)
        return make_unique(self.policy.class_name(f"{field_name}{index}"), declared, self.separator)

    def wrapper_name(self, field_name: str, declared: Iterable[str]) -> str:
        candidate = self.policy.class_name(field_name, with_affixes=True)
        return make_unique(candidate, declared, self.separator)
