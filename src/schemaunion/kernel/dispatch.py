"""Decode-time structural matching: pick the first variant whose field set fits."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Optional, Tuple

from schemaunion.codes import DispatchCode, RejectionCode

from .errors import DecodeError, NoMatchError
from .type_compiler import materialize

if TYPE_CHECKING:
    from .union import UnionType, UnionValue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariantRejection:
    """Why one variant did not match an input."""
    tag: str
    code: RejectionCode
    missing: Tuple[str, ...] = ()
    extra: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of one ``from_value`` call.

    Exactly one of ``value`` (MATCHED) or ``error`` (DECODE_ERROR) is set,
    or neither (NO_MATCH). ``rejections`` lists every variant tried and
    rejected before the outcome, in declaration order.
    """
    code: DispatchCode
    union_name: str
    keys: Tuple[str, ...]
    value: Optional["UnionValue"] = None
    error: Optional[DecodeError] = None
    error_tag: Optional[str] = None
    rejections: Tuple[VariantRejection, ...] = field(default_factory=tuple)

    @property
    def matched(self) -> bool:
        return self.code == DispatchCode.MATCHED

    @property
    def tag(self):
        """Tag of the matched variant, if any."""
        if self.value is not None:
            return self.value.tag
        return None

    def unwrap(self) -> "UnionValue":
        """Return the matched value or raise the failure.

        Raises:
            NoMatchError: If no variant matched
            DecodeError: If the matched variant could not be materialized
        """
        if self.code == DispatchCode.MATCHED:
            return self.value
        if self.code == DispatchCode.DECODE_ERROR:
            raise self.error
        raise NoMatchError(self.union_name, self.keys)


def dispatch(union: "UnionType", input_fields: Any) -> DispatchResult:
    """Select a variant of ``union`` for ``input_fields`` and decode it.

    Variants are tried in declaration order. A variant matches when every
    required field is present and no key falls outside required | optional.
    The first match wins even if a later variant fits more tightly.
    """
    if not isinstance(input_fields, Mapping):
        raise TypeError(
            f"{union.name}.from_value expects a mapping, got {type(input_fields).__name__}"
        )
    keys = tuple(sorted(input_fields.keys()))
    logger.debug("Invoke oneOf factory for %s with %d options: %s", union.name, len(union.variants), keys)

    rejections: List[VariantRejection] = []
    for tag in union.tag_enum:
        descriptor = tag.value
        logger.debug("%s required: %s optional: %s", tag.name, descriptor.required_fields, descriptor.optional_fields)

        missing = descriptor.missing_from(keys)
        if missing:
            rejections.append(VariantRejection(
                tag=tag.name, code=RejectionCode.MISSING_REQUIRED, missing=tuple(missing)
            ))
            continue

        extra = descriptor.extra_in(keys)
        logger.debug("%s delta: %s", tag.name, extra)
        if extra:
            rejections.append(VariantRejection(
                tag=tag.name, code=RejectionCode.EXTRA_FIELDS, extra=tuple(extra)
            ))
            continue

        try:
            payload = materialize(descriptor.type_handle, dict(input_fields))
        except DecodeError as e:
            return DispatchResult(
                code=DispatchCode.DECODE_ERROR,
                union_name=union.name,
                keys=keys,
                error=e,
                error_tag=tag.name,
                rejections=tuple(rejections),
            )
        return DispatchResult(
            code=DispatchCode.MATCHED,
            union_name=union.name,
            keys=keys,
            value=union.wrapper(tag, payload),
            rejections=tuple(rejections),
        )

    return DispatchResult(
        code=DispatchCode.NO_MATCH,
        union_name=union.name,
        keys=keys,
        rejections=tuple(rejections),
    )
