"""
Structural predicates evaluated against a single MarkupNode.

Predicates form a closed, tagged set of frozen models. The ``kind`` field is the
discriminator, which lets rule catalogs be stored as JSON and validated back
into predicate trees.
"""
from typing import TYPE_CHECKING, Annotated, Any, FrozenSet, Iterable, Literal, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from .core import MarkupNode


class PredicateBase(BaseModel):
    """Common base for all predicate variants. Predicates never mutate the node."""
    model_config = ConfigDict(frozen=True)

    def matches(self, node: "MarkupNode") -> bool:
        raise NotImplementedError


class HasAttribute(PredicateBase):
    """True if the attribute is present, whatever its value."""
    kind: Literal["has_attribute"] = "has_attribute"
    name: str

    def matches(self, node: "MarkupNode") -> bool:
        return self.name in node.attrs


class AttributeEquals(PredicateBase):
    """True if the attribute is present and equals ``value`` exactly (case-sensitive)."""
    kind: Literal["attribute_equals"] = "attribute_equals"
    name: str
    value: str

    def matches(self, node: "MarkupNode") -> bool:
        return self.name in node.attrs and node.attrs[self.name] == self.value


class AttributeStartsWith(PredicateBase):
    """True if the attribute is present and its value starts with the literal ``prefix``."""
    kind: Literal["attribute_starts_with"] = "attribute_starts_with"
    name: str
    prefix: str

    def matches(self, node: "MarkupNode") -> bool:
        value = node.attrs.get(self.name)
        return value is not None and value.startswith(self.prefix)


class TagIn(PredicateBase):
    """True if the node's tag name is one of ``tags``, ignoring case."""
    kind: Literal["tag_in"] = "tag_in"
    tags: FrozenSet[str]

    @field_validator("tags", mode="before")
    @classmethod
    def normalize_tags(cls, v: Any) -> FrozenSet[str]:
        if isinstance(v, str):
            v = [v]
        return frozenset(t.lower() for t in v)

    def matches(self, node: "MarkupNode") -> bool:
        return node.tag.lower() in self.tags


class IsEmpty(PredicateBase):
    """True if the node has no children and no non-whitespace text."""
    kind: Literal["is_empty"] = "is_empty"

    def matches(self, node: "MarkupNode") -> bool:
        return node.is_empty


class Not(PredicateBase):
    kind: Literal["not"] = "not"
    operand: "Predicate"

    def matches(self, node: "MarkupNode") -> bool:
        return not self.operand.matches(node)


class And(PredicateBase):
    kind: Literal["and"] = "and"
    operands: Tuple["Predicate", ...] = Field(min_length=2)

    def matches(self, node: "MarkupNode") -> bool:
        return all(p.matches(node) for p in self.operands)


class Or(PredicateBase):
    kind: Literal["or"] = "or"
    operands: Tuple["Predicate", ...] = Field(min_length=2)

    def matches(self, node: "MarkupNode") -> bool:
        return any(p.matches(node) for p in self.operands)


Predicate = Annotated[
    Union[HasAttribute, AttributeEquals, AttributeStartsWith, TagIn, IsEmpty, Not, And, Or],
    Field(discriminator="kind"),
]

Not.model_rebuild()
And.model_rebuild()
Or.model_rebuild()


def matches(predicate: PredicateBase, node: "MarkupNode") -> bool:
    """Evaluates ``predicate`` against ``node``. Deterministic and side-effect free."""
    return predicate.matches(node)


# --- Factories ---

def has_attr(name: str) -> HasAttribute:
    return HasAttribute(name=name)


def attr_equals(name: str, value: str) -> AttributeEquals:
    return AttributeEquals(name=name, value=value)


def attr_starts_with(name: str, prefix: str) -> AttributeStartsWith:
    return AttributeStartsWith(name=name, prefix=prefix)


def tag_in(*tags: str) -> TagIn:
    return TagIn(tags=tags)


def is_empty() -> IsEmpty:
    return IsEmpty()


def not_(operand: PredicateBase) -> Not:
    return Not(operand=operand)


def all_of(*operands: PredicateBase) -> PredicateBase:
    """And-combines the operands. A single operand is returned unchanged."""
    return _combine(And, operands)


def any_of(*operands: PredicateBase) -> PredicateBase:
    """Or-combines the operands. A single operand is returned unchanged."""
    return _combine(Or, operands)


def missing_or_empty(name: str) -> Or:
    """Attribute absent, or present with an empty string value."""
    return Or(operands=(Not(operand=HasAttribute(name=name)), AttributeEquals(name=name, value="")))


def _combine(combinator, operands: Iterable[PredicateBase]) -> PredicateBase:
    operands = tuple(operands)
    if not operands:
        raise ValueError(f"{combinator.__name__} needs at least one operand")
    if len(operands) == 1:
        return operands[0]
    return combinator(operands=operands)
