"""Label selector parsing and matching.

Supports the equality- and set-based selector syntax used by kubectl:

    app=web,tier!=cache,env in (prod,staging),!legacy,owner

The same selectors are applied to Service labels (label filter), Service
annotations (annotation filter) and Pod labels (service selectors).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Mapping

from svc2dns.errors import SelectorError

_KEY = r"[A-Za-z0-9](?:[A-Za-z0-9._/-]*[A-Za-z0-9])?"
_VALUE = r"(?:[A-Za-z0-9](?:[A-Za-z0-9._-]*[A-Za-z0-9])?)?"

_SET_RE = re.compile(rf"^(?P<key>{_KEY})\s+(?P<op>in|notin)\s*\((?P<values>[^()]*)\)$")
_NOT_EXISTS_RE = re.compile(rf"^!\s*(?P<key>{_KEY})$")
_EQUALITY_RE = re.compile(rf"^(?P<key>{_KEY})\s*(?P<op>==|!=|=)\s*(?P<value>{_VALUE})$")
_EXISTS_RE = re.compile(rf"^(?P<key>{_KEY})$")
_VALUE_RE = re.compile(rf"^{_VALUE}$")

OP_EQUALS = "="
OP_NOT_EQUALS = "!="
OP_IN = "in"
OP_NOT_IN = "notin"
OP_EXISTS = "exists"
OP_DOES_NOT_EXIST = "!"


@dataclass(frozen=True)
class Requirement:
    """A single selector term: a key, an operator and its values."""

    key: str
    operator: str
    values: tuple[str, ...] = ()

    def matches(self, labels: Mapping[str, str]) -> bool:
        present = self.key in labels
        if self.operator == OP_EXISTS:
            return present
        if self.operator == OP_DOES_NOT_EXIST:
            return not present
        if self.operator in (OP_EQUALS, OP_IN):
            return present and labels[self.key] in self.values
        # != and notin also match when the key is absent
        return not present or labels[self.key] not in self.values

    def __str__(self) -> str:
        if self.operator == OP_EXISTS:
            return self.key
        if self.operator == OP_DOES_NOT_EXIST:
            return f"!{self.key}"
        if self.operator in (OP_IN, OP_NOT_IN):
            return f"{self.key} {self.operator} ({','.join(self.values)})"
        return f"{self.key}{self.operator}{self.values[0]}"


@dataclass(frozen=True)
class Selector:
    """A conjunction of requirements. The empty selector matches everything."""

    requirements: tuple[Requirement, ...] = ()

    @classmethod
    def parse(cls, expression: str) -> Selector:
        """Parse a selector expression.

        >>> str(Selector.parse('app = web, env in (prod, dev)'))
        'app=web,env in (dev,prod)'
        >>> Selector.parse('').empty
        True

        Raises:
            SelectorError: If any term is malformed.
        """
        requirements = []
        for term in _split_terms(expression):
            requirements.append(_parse_requirement(term))
        return cls(requirements=tuple(requirements))

    @classmethod
    def from_labels(cls, labels: Mapping[str, str]) -> Selector:
        """Build an equality selector from a label map (e.g. a Service selector).

        >>> Selector.from_labels({'app': 'web'}).matches({'app': 'web', 'x': 'y'})
        True
        """
        return cls(requirements=tuple(
            Requirement(key=key, operator=OP_EQUALS, values=(value,))
            for key, value in sorted(labels.items())
        ))

    @property
    def empty(self) -> bool:
        return not self.requirements

    def matches(self, labels: Mapping[str, str]) -> bool:
        return all(r.matches(labels) for r in self.requirements)

    def __str__(self) -> str:
        return ",".join(str(r) for r in self.requirements)


EVERYTHING = Selector()


def _split_terms(expression: str) -> list[str]:
    """Split on commas that are not inside a parenthesised value list."""
    terms: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in expression:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth < 0:
                raise SelectorError(f"unbalanced parentheses in selector {expression!r}")
        if ch == "," and depth == 0:
            terms.append("".join(current))
            current = []
            continue
        current.append(ch)
    if depth != 0:
        raise SelectorError(f"unbalanced parentheses in selector {expression!r}")
    terms.append("".join(current))

    stripped = [t.strip() for t in terms]
    if stripped == [""]:
        return []
    if any(not t for t in stripped):
        raise SelectorError(f"empty term in selector {expression!r}")
    return stripped


def _parse_requirement(term: str) -> Requirement:
    m = _SET_RE.match(term)
    if m:
        values = [v.strip() for v in m.group("values").split(",")]
        for value in values:
            if not _VALUE_RE.match(value):
                raise SelectorError(f"invalid value {value!r} in selector term {term!r}")
        return Requirement(
            key=m.group("key"),
            operator=m.group("op"),
            values=tuple(sorted(set(values))),
        )

    m = _NOT_EXISTS_RE.match(term)
    if m:
        return Requirement(key=m.group("key"), operator=OP_DOES_NOT_EXIST)

    m = _EQUALITY_RE.match(term)
    if m:
        op = OP_NOT_EQUALS if m.group("op") == "!=" else OP_EQUALS
        return Requirement(key=m.group("key"), operator=op, values=(m.group("value"),))

    m = _EXISTS_RE.match(term)
    if m:
        return Requirement(key=m.group("key"), operator=OP_EXISTS)

    raise SelectorError(f"invalid selector term {term!r}")
