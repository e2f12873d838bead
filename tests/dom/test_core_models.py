# tests/dom/test_core_models.py
import pickle

import pytest

from markup_auditor.dom.core import Diagnostic, MarkupNode, Rule, Severity
from markup_auditor.dom.selectors import has_attr, tag_in


@pytest.fixture
def tree():
    """<ul><li>a</li><li></li></ul> onder een #document root."""
    first = MarkupNode(tag="li", text="a")
    second = MarkupNode(tag="li")
    ul = MarkupNode(tag="ul", children=[first, second])
    root = MarkupNode(tag="#document", children=[ul])
    return root, ul, first, second


def test_children_get_weak_parent_links(tree):
    root, ul, first, second = tree
    assert first.parent is ul
    assert ul.parent is root
    assert root.parent is None


def test_append_child_sets_parent():
    parent = MarkupNode(tag="div")
    child = parent.append_child(MarkupNode(tag="span"))
    assert child.parent is parent
    assert parent.children == [child]


def test_iter_nodes_is_pre_order(tree):
    root, ul, first, second = tree
    assert [n for n in root.iter_nodes()] == [root, ul, first, second]
    assert root.count_nodes() == 4


def test_path_uses_identity_for_equal_siblings():
    """Twee identieke siblings krijgen toch elk hun eigen positie."""
    a, b = MarkupNode(tag="li"), MarkupNode(tag="li")
    ul = MarkupNode(tag="ul", children=[a, b])
    MarkupNode(tag="#document", children=[ul])
    assert a == b
    assert a.path == "ul > li:nth-child(1)"
    assert b.path == "ul > li:nth-child(2)"


def test_equality_compares_content_only():
    left = MarkupNode(tag="div", children=[MarkupNode(tag="p", text="x")])
    right = MarkupNode(tag="div", children=[MarkupNode(tag="p", text="x")])
    assert left == right
    assert left != MarkupNode(tag="div")


def test_severity_ordering():
    assert Severity.ERROR > Severity.WARNING
    assert Severity.WARNING < Severity.ERROR
    assert max([Severity.WARNING, Severity.ERROR, Severity.WARNING]) is Severity.ERROR
    assert sorted([Severity.ERROR, Severity.WARNING]) == [Severity.WARNING, Severity.ERROR]


def test_rule_renders_attribute_placeholders():
    rule = Rule(
        id="link-questionable-href",
        message="Link points to {href} (target: '{target}', data: {data-x})",
        severity=Severity.WARNING,
        predicate=tag_in("a")
    )
    node = MarkupNode(tag="a", attrs={"href": "#", "data-x": "1"})
    assert rule.render(node) == "Link points to # (target: '', data: 1)"


def test_rule_render_tolerates_odd_templates():
    """Een kapotte template mag nooit een exception opleveren."""
    rule = Rule(id="odd", message="{ {} {unclosed", severity="error", predicate=has_attr("x"))
    assert rule.render(MarkupNode(tag="div")) == "{ {} {unclosed"
    assert rule.severity is Severity.ERROR


def test_rules_are_immutable():
    rule = Rule(id="inline-style", message="m", severity="warning", predicate=has_attr("style"))
    with pytest.raises(Exception):
        rule.id = "other"


def test_diagnostic_shares_node_and_serializes_flat(tree):
    _, _, _, second = tree
    rule = Rule(id="empty", message="Empty <li>", severity="warning", predicate=tag_in("li"), category="STRUCTURE")
    diagnostic = Diagnostic.from_match(rule, second)

    assert diagnostic.node is second
    assert diagnostic.to_record() == {
        "rule_id": "empty",
        "severity": "warning",
        "message": "Empty <li>",
        "path": "ul > li:nth-child(2)",
        "category": "STRUCTURE",
    }
    assert "node=" not in repr(diagnostic)


def _chain(depth, leaf_text="x"):
    """Bouwt <div><div>...<p>leaf_text</p>...</div></div> met ``depth`` div-niveaus."""
    root = MarkupNode(tag="#document")
    node = root
    for _ in range(depth):
        node = node.append_child(MarkupNode(tag="div"))
    node.append_child(MarkupNode(tag="p", text=leaf_text))
    return root


def test_equality_on_very_deep_trees():
    """Vergelijken van diepe bomen mag niet op de recursielimiet stuklopen."""
    assert _chain(3000) == _chain(3000)
    assert _chain(3000) != _chain(3000, leaf_text="y")
    assert _chain(3000) != _chain(2999)


def test_diagnostics_on_deep_nodes_compare_and_hash():
    rule = Rule(id="deep", message="div", severity="warning", predicate=tag_in("div"))
    left, right = _chain(3000), _chain(3000)

    first = Diagnostic.from_match(rule, left.children[0])
    second = Diagnostic.from_match(rule, right.children[0])

    assert first == second
    assert hash(first) == hash(second)
    assert len({first, second}) == 1


def test_node_survives_pickling(tree):
    """De zwakke parent-link wordt na unpickle opnieuw gelegd."""
    root, _, _, _ = tree
    restored = pickle.loads(pickle.dumps(root))

    assert restored == root
    ul = restored.children[0]
    assert ul.parent is restored
    assert ul.children[1].parent is ul
    assert restored.parent is None
    assert ul.children[1].path == "ul > li:nth-child(2)"
    # The original tree keeps its own links
    assert root.children[0].parent is root


def test_diagnostic_survives_pickling(tree):
    _, _, _, second = tree
    rule = Rule(id="empty", message="Empty <li>", severity="warning", predicate=tag_in("li"))
    diagnostic = Diagnostic.from_match(rule, second)

    restored = pickle.loads(pickle.dumps(diagnostic))

    assert restored == diagnostic
    assert restored.to_record() == diagnostic.to_record()
    assert restored.node == second
    assert restored.path == "ul > li:nth-child(2)"


def test_severity_comparisons_follow_rank_not_value():
    """Alfabetisch is "warning" > "error"; de rangorde moet het omgekeerde geven."""
    assert "warning" > "error"
    assert Severity.ERROR >= Severity.WARNING
    assert Severity.WARNING <= Severity.ERROR
    assert not Severity.WARNING > Severity.ERROR
    assert not Severity.ERROR <= Severity.WARNING
