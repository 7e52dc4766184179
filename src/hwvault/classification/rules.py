"""
Ordered rule tables for heuristic classification.

A ``RuleTable`` is a fixed, ordered tuple of ``Rule(value, predicate, code)``
entries evaluated top to bottom; the first rule whose predicate matches wins.
Predicates receive a ``RuleInput``: the lower-cased text fields of the record
being classified plus their concatenation.
"""

import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple


class SourceTier(str, Enum):
    """Which classification stage produced a value."""
    DATASET_EXACT = "dataset-exact"
    DATASET_PARTIAL = "dataset-partial"
    HEURISTIC = "heuristic"
    FALLBACK_DEFAULT = "fallback-default"

    def __str__(self):
        return self.value


@dataclass(frozen=True)
class ClassifiedAttribute:
    """Canonical value for one category plus the tier that produced it."""
    category: str
    value: str
    tier: SourceTier
    code: Optional[str] = None

    def __post_init__(self):
        if not self.value:
            raise ValueError(f"classified value for '{self.category}' must not be empty")

    def __str__(self):
        return self.value


class RuleInput:
    """Lower-cased named text fields; ``text`` joins every non-empty field."""

    __slots__ = ("fields", "text")

    def __init__(self, **fields: Any):
        cleaned = {}
        for name, value in fields.items():
            cleaned[name] = str(value).lower() if value is not None else ""
        self.fields: Mapping[str, str] = MappingProxyType(cleaned)
        self.text = " ".join(value for value in cleaned.values() if value)

    def get(self, name: str) -> str:
        return self.fields.get(name, "")

    def __repr__(self) -> str:
        return f"RuleInput({dict(self.fields)!r})"


Predicate = Callable[[RuleInput], bool]


@dataclass(frozen=True)
class Rule:
    value: str
    predicate: Predicate
    code: Optional[str] = None


class RuleTable:
    """An auditable, ordered list of heuristic rules for one category."""

    def __init__(self, category: str, rules: Iterable[Rule]):
        self.category = category
        self.rules: Tuple[Rule, ...] = tuple(rules)

    def __len__(self) -> int:
        return len(self.rules)

    def match(self, inp: RuleInput) -> Optional[Rule]:
        for rule in self.rules:
            if rule.predicate(inp):
                return rule
        return None

    def classify(self, inp: RuleInput) -> Optional[ClassifiedAttribute]:
        rule = self.match(inp)
        if rule is None:
            return None
        return ClassifiedAttribute(self.category, rule.value, SourceTier.HEURISTIC, rule.code)


# ============================================================================
# PREDICATE BUILDERS
# ============================================================================

def _source(inp: RuleInput, field: Optional[str]) -> str:
    return inp.text if field is None else inp.get(field)


def contains_any(*keywords: str, field: Optional[str] = None) -> Predicate:
    """Any keyword is a substring of ``field`` (or of the joined text)."""
    lowered = tuple(k.lower() for k in keywords)

    def predicate(inp: RuleInput) -> bool:
        source = _source(inp, field)
        return any(k in source for k in lowered)
    return predicate


def starts_with_any(*prefixes: str, field: Optional[str] = None) -> Predicate:
    lowered = tuple(p.lower() for p in prefixes)

    def predicate(inp: RuleInput) -> bool:
        return _source(inp, field).startswith(lowered)
    return predicate


def whole_word(*words: str, field: Optional[str] = None) -> Predicate:
    """Any of ``words`` appears as a whole word (so "ati" does not match "corporation")."""
    pattern = re.compile(r"\b(?:" + "|".join(re.escape(w.lower()) for w in words) + r")\b")

    def predicate(inp: RuleInput) -> bool:
        return pattern.search(_source(inp, field)) is not None
    return predicate


def field_in(field: str, *values: str) -> Predicate:
    """The field equals one of ``values`` (case-insensitive)."""
    lowered = frozenset(v.lower() for v in values)

    def predicate(inp: RuleInput) -> bool:
        return inp.get(field) in lowered
    return predicate


def all_of(*predicates: Predicate) -> Predicate:
    def predicate(inp: RuleInput) -> bool:
        return all(p(inp) for p in predicates)
    return predicate


def any_of(*predicates: Predicate) -> Predicate:
    def predicate(inp: RuleInput) -> bool:
        return any(p(inp) for p in predicates)
    return predicate


def not_(inner: Predicate) -> Predicate:
    def predicate(inp: RuleInput) -> bool:
        return not inner(inp)
    return predicate
