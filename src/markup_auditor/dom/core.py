import re
import weakref
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from .selectors import Predicate


class MarkupNode(BaseModel):
    """
    Base data model representing one element in the analyzed markup tree.

    ``text`` holds the element's own (direct) text only. The parent link is a weak
    back-reference used for lookups; it never owns the parent and is not serialized.
    """
    tag: str
    attrs: Dict[str, str] = Field(default_factory=dict)
    text: str = ""
    children: List['MarkupNode'] = Field(default_factory=list)

    _parent: Optional[weakref.ReferenceType] = PrivateAttr(default=None)

    def model_post_init(self, __context: Any) -> None:
        for child in self.children:
            child._parent = weakref.ref(self)

    def __eq__(self, other: Any) -> bool:
        # Compare content only; the parent link would recurse back up the tree
        if not isinstance(other, MarkupNode):
            return NotImplemented
        pairs = [(self, other)]
        seen = set()
        while pairs:
            left, right = pairs.pop()
            if left is right or (id(left), id(right)) in seen:
                continue
            seen.add((id(left), id(right)))
            if (
                left.tag != right.tag or
                left.attrs != right.attrs or
                left.text != right.text or
                len(left.children) != len(right.children)
            ):
                return False
            pairs.extend(zip(left.children, right.children))
        return True

    __hash__ = None

    def __getstate__(self) -> Dict[str, Any]:
        # Weak references cannot be pickled; the link is restored by the parent
        state = super().__getstate__()
        state["__pydantic_private__"] = {**(state.get("__pydantic_private__") or {}), "_parent": None}
        return state

    def __setstate__(self, state: Dict[str, Any]) -> None:
        super().__setstate__(state)
        for child in self.children:
            child._parent = weakref.ref(self)

    @property
    def parent(self) -> Optional['MarkupNode']:
        return self._parent() if self._parent is not None else None

    @property
    def is_empty(self) -> bool:
        """Returns True if the element has no children and no non-whitespace text."""
        return not self.children and not self.text.strip()

    def has_attr(self, name: str) -> bool:
        return name in self.attrs

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attrs.get(name, default)

    def append_child(self, child: 'MarkupNode') -> 'MarkupNode':
        """Appends ``child`` and points its parent link at this node."""
        self.children.append(child)
        child._parent = weakref.ref(self)
        return child

    def iter_nodes(self) -> Iterator['MarkupNode']:
        """Yields this node and all descendants in document (pre-)order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def count_nodes(self) -> int:
        return sum(1 for _ in self.iter_nodes())

    @property
    def path(self) -> str:
        """
        CSS-like location of this node, e.g. ``html > body > ul > li:nth-child(2)``.
        The synthetic ``#document`` root is left out.
        """
        segments = []
        node = self
        while node is not None:
            if node.tag.startswith("#"):
                break
            parent = node.parent
            segment = node.tag
            if parent is not None and len(parent.children) > 1:
                # Identity lookup: equal-looking siblings must not collapse
                index = next(i for i, c in enumerate(parent.children) if c is node)
                segment = f"{node.tag}:nth-child({index + 1})"
            segments.append(segment)
            node = parent
        return " > ".join(reversed(segments))


class Severity(str, Enum):
    """Ordered finding severity. Both levels are informational, never fatal."""
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return list(Severity).index(self)

    # str already defines all four comparisons, so functools.total_ordering would
    # leave them in place and order by value ("warning" > "error")
    def __lt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank


# {name} placeholders, where name is an attribute name (may contain '-', ':' or '.')
_PLACEHOLDER = re.compile(r"\{([^{}\s]+)\}")


class Rule(BaseModel):
    """
    A named diagnostic check: predicate + severity + message template.

    Placeholders in ``message`` (e.g. ``{href}``) are replaced with the matched
    node's attribute value; missing attributes render as an empty string.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    message: str
    severity: Severity
    predicate: Predicate
    category: str = "HTML"

    def applies_to(self, node: MarkupNode) -> bool:
        return self.predicate.matches(node)

    def render(self, node: MarkupNode) -> str:
        return _PLACEHOLDER.sub(lambda m: node.attrs.get(m.group(1), ""), self.message)


class Diagnostic(BaseModel):
    """
    One finding emitted during a traversal. The node is shared with the caller's
    tree, not copied, and is left out of repr() and serialization.
    """
    model_config = ConfigDict(frozen=True)

    node: MarkupNode = Field(repr=False, exclude=True)
    rule_id: str
    severity: Severity
    message: str
    path: str = ""
    category: str = "HTML"

    @classmethod
    def from_match(cls, rule: Rule, node: MarkupNode) -> 'Diagnostic':
        return cls(
            node=node,
            rule_id=rule.id,
            severity=rule.severity,
            message=rule.render(node),
            path=node.path,
            category=rule.category
        )

    def __hash__(self) -> int:
        # The node itself is unhashable; equal diagnostics share these fields
        return hash((self.rule_id, self.severity, self.message, self.path, self.category))

    def to_record(self) -> Dict[str, Any]:
        """Flat, JSON-friendly representation (severity as its string value)."""
        return self.model_dump(mode="json")
