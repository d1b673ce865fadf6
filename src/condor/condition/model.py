# topmark:header:start
#
#   project      : Condor
#   file         : model.py
#   file_relpath : src/condor/condition/model.py
#   license      : MIT
#   copyright    : (c) 2025 Olivier Biot
#
# topmark:header:end

"""Core condition types: severities, the condition taxonomy, and the condition record.

Sections:
    * Severity: the four built-in severities (error, warning, message, interrupt).
    * ConditionType: a tagged variant (severity + custom subtype tags) with an explicit
      subtype-or-self ``matches`` predicate.
    * Condition: the immutable record describing one signaled event.

Taxonomy:
    Every condition type hangs off the root ``CONDITION`` type. Below the root sit the four
    built-in severities, with ``interrupt`` chained under ``error``. Custom subtypes are
    declared under a built-in severity with `ConditionType.subtype` and may themselves be
    subtyped further (single inheritance)::

        condition
        ├── error ── error/parse ── error/parse/toml
        │   └── interrupt
        ├── warning ── warning/deprecation
        └── message

    A handler registered for a type matches every condition whose type is that type or one
    of its descendants, so a generic "all warnings" handler also catches
    ``warning/deprecation``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from condor.core.enum_mixins import KeyedStrEnum

if TYPE_CHECKING:
    from collections.abc import Mapping

    from condor.condition.call_site import CallSite

TYPE_SEPARATOR: str = "/"
ROOT_TYPE_NAME: str = "condition"


class Severity(KeyedStrEnum):
    """Built-in condition severities.

    ``ERROR`` and ``INTERRUPT`` are terminal by default: when nothing handles them, the
    current top-level unit is aborted. ``WARNING`` and ``MESSAGE`` are recoverable: when
    unhandled they are reported and execution continues at the signal site.
    """

    ERROR = ("error", "Error")
    WARNING = ("warning", "Warning", ("warn",))
    MESSAGE = ("message", "Message", ("info",))
    INTERRUPT = ("interrupt", "Interrupt")

    @property
    def is_terminal(self) -> bool:
        """Return True if an unhandled condition of this severity aborts the unit."""
        return self in (Severity.ERROR, Severity.INTERRUPT)

    @property
    def supertype(self) -> Severity | None:
        """Return the built-in severity directly above this one, if any.

        Severities form a chain: an interrupt is an error-class condition, so handlers
        for ``error`` also see interrupts unless an ``interrupt`` handler takes them first.
        """
        return Severity.ERROR if self is Severity.INTERRUPT else None


@dataclass(frozen=True, slots=True)
class ConditionType:
    """A node of the condition taxonomy.

    Attributes:
        severity (Severity | None): Built-in severity; None only for the root type.
        tags (tuple[str, ...]): Custom subtype tags, most general first.
    """

    severity: Severity | None = None
    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.severity is None and self.tags:
            raise ValueError("Custom condition subtypes must derive from a built-in severity")
        for tag in self.tags:
            if not tag or TYPE_SEPARATOR in tag or tag != tag.strip():
                raise ValueError(f"Invalid condition subtype tag: {tag!r}")

    @classmethod
    def of(cls, spec: ConditionType | Severity) -> ConditionType:
        """Normalize a severity or condition type to a `ConditionType`."""
        if isinstance(spec, ConditionType):
            return spec
        if isinstance(spec, Severity):
            return cls(spec)
        raise TypeError(f"Expected a ConditionType or Severity, got {type(spec).__name__}")

    @classmethod
    def parse(cls, name: str) -> ConditionType:
        """Parse a rendered type name such as ``"warning/deprecation"``.

        Raises:
            ValueError: If the leading component is not a known severity.
        """
        head, *tags = name.strip().split(TYPE_SEPARATOR)
        if head.lower() == ROOT_TYPE_NAME and not tags:
            return cls()
        severity: Severity | None = Severity.parse(head)
        if severity is None:
            raise ValueError(f"Unknown condition severity in {name!r}")
        return cls(severity, tuple(tags))

    @property
    def is_root(self) -> bool:
        """Return True for the root ``condition`` type."""
        return self.severity is None

    @property
    def name(self) -> str:
        """Render the type path, e.g. ``"error/parse"``."""
        if self.severity is None:
            return ROOT_TYPE_NAME
        return TYPE_SEPARATOR.join((self.severity.key, *self.tags))

    @property
    def parent(self) -> ConditionType | None:
        """Return the direct supertype, or None for the root."""
        if self.severity is None:
            return None
        if self.tags:
            return ConditionType(self.severity, self.tags[:-1])
        if self.severity.supertype is not None:
            return ConditionType(self.severity.supertype)
        return CONDITION

    def lineage(self) -> tuple[ConditionType, ...]:
        """Return this type and all its supertypes, most specific first."""
        out: list[ConditionType] = []
        node: ConditionType | None = self
        while node is not None:
            out.append(node)
            node = node.parent
        return tuple(out)

    def subtype(self, tag: str) -> ConditionType:
        """Derive a custom subtype below this type.

        Raises:
            ValueError: When called on the root type or with an invalid tag.
        """
        if self.severity is None:
            raise ValueError("Custom condition subtypes must derive from a built-in severity")
        return ConditionType(self.severity, (*self.tags, tag))

    def matches(self, other: ConditionType | Severity | Condition) -> bool:
        """Return True if ``other`` is this type or one of its subtypes.

        Args:
            other (ConditionType | Severity | Condition): The type (or the condition)
                to test against this handler-side type.

        Returns:
            bool: True on subtype-or-self.
        """
        target: ConditionType = (
            other.kind if isinstance(other, Condition) else ConditionType.of(other)
        )
        if self.severity is None:
            return True
        if self.severity is target.severity:
            return target.tags[: len(self.tags)] == self.tags
        # A plain severity also matches the severities chained below it.
        return (
            not self.tags
            and target.severity is not None
            and target.severity.supertype is self.severity
        )

    def __str__(self) -> str:
        """Return the rendered type path."""
        return self.name


CONDITION: ConditionType = ConditionType()
ERROR: ConditionType = ConditionType(Severity.ERROR)
WARNING: ConditionType = ConditionType(Severity.WARNING)
MESSAGE: ConditionType = ConditionType(Severity.MESSAGE)
INTERRUPT: ConditionType = ConditionType(Severity.INTERRUPT)


def _empty_extra() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True, slots=True, eq=False)
class Condition:
    """Immutable record describing one signaled event.

    Conditions compare by identity: two signals with the same text are still distinct
    events. Handlers read them through the accessor methods.

    Attributes:
        kind (ConditionType): The condition's type (never the root type).
        text (str): The human-readable message.
        site (CallSite | None): Where the condition was signaled, if known.
        data (Mapping[str, Any]): Read-only extra payload.
    """

    kind: ConditionType
    text: str
    site: CallSite | None = None
    data: Mapping[str, Any] = field(default_factory=_empty_extra)

    def __post_init__(self) -> None:
        if self.kind.severity is None:
            raise ValueError("A condition must have a built-in severity")
        if not isinstance(self.data, MappingProxyType):
            object.__setattr__(self, "data", MappingProxyType(dict(self.data)))

    @classmethod
    def create(
        cls,
        kind: ConditionType | Severity,
        message: str,
        *,
        call_site: CallSite | None = None,
        **extra: Any,
    ) -> Condition:
        """Build a condition of the given type with an optional extra payload."""
        return cls(ConditionType.of(kind), str(message), call_site, MappingProxyType(extra))

    @classmethod
    def from_exception(cls, exc: BaseException, *, call_site: CallSite | None = None) -> Condition:
        """Wrap a native Python exception as a condition.

        A `KeyboardInterrupt` becomes an interrupt; anything else becomes an error. The
        exception itself is kept in ``extra("exception")``.
        """
        kind: ConditionType = INTERRUPT if isinstance(exc, KeyboardInterrupt) else ERROR
        text: str = str(exc) or type(exc).__name__
        return cls.create(
            kind,
            text,
            call_site=call_site,
            exception=exc,
            exception_type=type(exc).__name__,
        )

    # --- Accessor surface exposed to handlers ---

    def severity(self) -> Severity:
        """Return the built-in severity at the root of this condition's type."""
        assert self.kind.severity is not None
        return self.kind.severity

    def condition_type(self) -> ConditionType:
        """Return the full condition type (severity plus subtype tags)."""
        return self.kind

    def message(self) -> str:
        """Return the human-readable message."""
        return self.text

    def call_site(self) -> CallSite | None:
        """Return the call site, or None when absent."""
        return self.site

    def extra(self, key: str, default: Any = None) -> Any:
        """Return an extra payload value, or ``default`` if the key is absent."""
        return self.data.get(key, default)

    # --- Helpers ---

    def is_a(self, kind: ConditionType | Severity) -> bool:
        """Return True if this condition is of ``kind`` or one of its subtypes."""
        return ConditionType.of(kind).matches(self.kind)

    def derive(
        self,
        *,
        kind: ConditionType | Severity | None = None,
        message: str | None = None,
        **extra: Any,
    ) -> Condition:
        """Return a new condition based on this one; the original is never changed."""
        merged: dict[str, Any] = dict(self.data)
        merged.update(extra)
        return replace(
            self,
            kind=self.kind if kind is None else ConditionType.of(kind),
            text=self.text if message is None else message,
            data=MappingProxyType(merged),
        )

    def __str__(self) -> str:
        """Return the message text."""
        return self.text

    def __repr__(self) -> str:
        """Return a debugging representation."""
        return f"<Condition {self.kind.name}: {self.text!r}>"
