# tests/core/test_audit_controller.py
import pytest

from markup_auditor.controllers.audit_controller import AuditController
from markup_auditor.dom.core import Rule
from markup_auditor.dom.registry import RuleRegistry
from markup_auditor.dom.selectors import tag_in
from markup_auditor.model import AuditReport

DOCUMENTS = {
    "index.html": '<a>home</a><img src="logo.png">',
    "clean.html": '<p>Niets aan de hand</p>',
    "form.html": '<form><input type="submit"></form>',
}


@pytest.fixture
def controller():
    return AuditController(workers=1)


def test_run_audit_aggregates_per_document(controller):
    report = controller.run_audit(DOCUMENTS)

    assert isinstance(report, AuditReport)
    assert [d.name for d in report.documents] == ["index.html", "clean.html", "form.html"]
    assert report.total_issues == 5
    assert report.documents_with_issues == 2
    assert report.failed_documents == 0
    assert report.by_severity == {"error": 4, "warning": 1}
    assert report.by_rule["img-missing-alt"] == 1
    assert report.by_rule["submit-missing-value"] == 1


def test_document_result_records(controller):
    report = controller.run_audit(DOCUMENTS)
    index = report.get("index.html")

    assert index.ok
    assert index.node_count == 3
    assert index.diagnostics[0] == {
        "rule_id": "link-missing-href",
        "severity": "error",
        "message": "Link has no href or an empty href",
        "path": "a:nth-child(1)",
        "category": "LINKS",
    }
    assert report.get("clean.html").diagnostics == []
    assert report.get("missing.html") is None


def test_failing_document_does_not_abort_batch():
    """Een document dat het node-budget overschrijdt wordt gerapporteerd, de rest loopt door."""
    controller = AuditController(workers=1)
    controller.max_nodes = 2

    report = controller.run_audit({"big.html": "<ul><li>a</li><li>b</li></ul>", "small.html": "<li></li>"})

    big = report.get("big.html")
    assert not big.ok
    assert "budget" in big.error
    assert report.failed_documents == 1
    assert report.by_rule == {"empty-element": 1}


def test_custom_registry_is_used():
    registry = RuleRegistry([Rule(id="any-paragraph", message="p", severity="warning", predicate=tag_in("p"))])
    report = AuditController(registry=registry, workers=1).run_audit(DOCUMENTS)
    assert report.by_rule == {"any-paragraph": 1}


def test_empty_batch(controller):
    report = controller.run_audit({})
    assert report.documents == []
    assert report.total_issues == 0


def test_parallel_run_matches_serial_run():
    """Met meerdere workers blijft de volgorde van de invoer behouden en kloppen de totalen."""
    serial = AuditController(workers=1).run_audit(DOCUMENTS)
    parallel = AuditController(workers=2).run_audit(DOCUMENTS)

    assert [d.name for d in parallel.documents] == list(DOCUMENTS)
    assert parallel.total_issues == serial.total_issues
    assert parallel.by_severity == serial.by_severity
    assert parallel.by_rule == serial.by_rule
    assert [d.diagnostics for d in parallel.documents] == [d.diagnostics for d in serial.documents]


def test_parallel_run_isolates_failures():
    controller = AuditController(workers=2)
    controller.max_nodes = 2

    report = controller.run_audit({"big.html": "<ul><li>a</li><li>b</li></ul>", "small.html": "<li></li>"})

    assert [d.name for d in report.documents] == ["big.html", "small.html"]
    assert not report.get("big.html").ok
    assert report.get("small.html").ok
    assert report.by_rule == {"empty-element": 1}
