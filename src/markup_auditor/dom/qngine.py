import logging
from collections import Counter
from collections.abc import Sequence
from typing import Any, Dict, Iterator, List, Optional, Set

from ..exceptions import AnalysisBudgetError, MalformedTreeError
from ..managers.config_manager import config_manager
from .core import Diagnostic, MarkupNode, Severity
from .registry import RuleRegistry

logger = logging.getLogger(__name__)


class DiagnosticCollector(Sequence):
    """
    Append-only, ordered sequence of findings from one analysis pass.

    No deduplication: a node matching two rules yields two diagnostics.
    """

    def __init__(self):
        self._items: List[Diagnostic] = []

    def append(self, diagnostic: Diagnostic) -> None:
        self._items.append(diagnostic)

    def __getitem__(self, index):
        return self._items[index]

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"DiagnosticCollector({len(self)} diagnostics)"

    def by_severity(self, severity: Severity) -> List[Diagnostic]:
        return [d for d in self._items if d.severity == severity]

    def by_rule(self, rule_id: str) -> List[Diagnostic]:
        return [d for d in self._items if d.rule_id == rule_id]

    def rule_ids(self) -> List[str]:
        return [d.rule_id for d in self._items]

    def counts(self) -> Counter:
        """Number of findings per rule id."""
        return Counter(d.rule_id for d in self._items)

    def max_severity(self) -> Optional[Severity]:
        return max((d.severity for d in self._items), default=None)

    def to_records(self) -> List[Dict[str, Any]]:
        return [d.to_record() for d in self._items]


def iter_diagnostics(
        root: MarkupNode,
        registry: RuleRegistry,
        max_nodes: Optional[int] = None,
        max_depth: Optional[int] = None
) -> Iterator[Diagnostic]:
    """
    Lazily yields the diagnostics for the tree rooted at ``root``.

    Depth-first pre-order: a node's findings come before its children's, and the
    findings of one node follow rule registration order. Every node is visited
    exactly once, whether it matches anything or not.

    Raises:
        MalformedTreeError: If a node is reached twice (cycle or shared subtree).
        AnalysisBudgetError: If ``max_nodes`` or ``max_depth`` is exceeded.
    """
    visited: Set[int] = set()
    # Explicit stack keeps very deep documents clear of the recursion limit
    stack = [(root, 0)]

    while stack:
        node, depth = stack.pop()

        if id(node) in visited:
            raise MalformedTreeError(f"Node <{node.tag}> reached twice; the markup graph is not a tree")
        visited.add(id(node))

        if max_nodes is not None and len(visited) > max_nodes:
            raise AnalysisBudgetError(f"Document exceeds the node budget of {max_nodes}")
        if max_depth is not None and depth > max_depth:
            raise AnalysisBudgetError(f"Document exceeds the depth budget of {max_depth}")

        for rule in registry.rules_for(node):
            yield Diagnostic.from_match(rule, node)

        # Reversed so the first child is popped first
        for child in reversed(node.children):
            stack.append((child, depth + 1))


def analyze(
        root: MarkupNode,
        registry: RuleRegistry,
        max_nodes: Optional[int] = None,
        max_depth: Optional[int] = None
) -> DiagnosticCollector:
    """
    Runs every rule in ``registry`` against the tree rooted at ``root``.

    Returns:
        DiagnosticCollector: The findings, in document pre-order.
    """
    collector = DiagnosticCollector()
    for diagnostic in iter_diagnostics(root, registry, max_nodes=max_nodes, max_depth=max_depth):
        collector.append(diagnostic)
    return collector


class QNGINE:
    """
    Quality Engine (QNGINE) for auditing markup trees.

    Holds a rule registry and applies it to documents. Node and depth budgets
    default to the 'analysis.max_nodes' and 'analysis.max_depth' settings.
    """

    def __init__(
            self,
            registry: Optional[RuleRegistry] = None,
            max_nodes: Optional[int] = None,
            max_depth: Optional[int] = None
    ):
        if registry is None:
            registry = RuleRegistry.default(disabled=config_manager.disabled_rules())
        self.registry = registry

        default_nodes, default_depth = config_manager.analysis_limits()
        self.max_nodes = max_nodes if max_nodes is not None else default_nodes
        self.max_depth = max_depth if max_depth is not None else default_depth

    def run_audit(self, root: MarkupNode) -> DiagnosticCollector:
        """
        Runs the full rule set on a markup tree.

        Args:
            root (MarkupNode): Root of the tree to audit (usually a '#document' node).

        Returns:
            DiagnosticCollector: Findings in document order.
        """
        findings = analyze(root, self.registry, max_nodes=self.max_nodes, max_depth=self.max_depth)
        logger.debug(
            "Audit finished: %d findings (%d errors, %d warnings)",
            len(findings),
            len(findings.by_severity(Severity.ERROR)),
            len(findings.by_severity(Severity.WARNING))
        )
        return findings
