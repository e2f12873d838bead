import logging
from collections import Counter
from concurrent.futures import ProcessPoolExecutor
from functools import partial
from typing import List, Mapping, Optional, Tuple

from tqdm.auto import tqdm

from markup_auditor.dom.builder import DOMBuilder
from markup_auditor.dom.qngine import analyze
from markup_auditor.dom.registry import RuleRegistry
from markup_auditor.managers.config_manager import config_manager
from markup_auditor.model import AuditReport, DocumentResult

logger = logging.getLogger(__name__)


def _worker_audit_document(
        item: Tuple[str, str],
        registry: RuleRegistry,
        max_nodes: Optional[int],
        max_depth: Optional[int]
) -> DocumentResult:
    """
    Worker function to audit a single document, possibly in a separate process.
    A failure is reported on the result instead of aborting the batch.
    """
    name, html = item
    try:
        root = DOMBuilder().parse(html)
        findings = analyze(root, registry, max_nodes=max_nodes, max_depth=max_depth)
        return DocumentResult(name=name, node_count=root.count_nodes(), diagnostics=findings.to_records())
    except Exception as e:
        logger.error(f"Worker failed on {name}: {e}")
        return DocumentResult(name=name, error=str(e))


class AuditController:
    """
    Orchestrates auditing a batch of HTML documents: parsing, analysis,
    optional parallel execution and aggregation into an AuditReport.
    """

    def __init__(
            self,
            registry: Optional[RuleRegistry] = None,
            workers: Optional[int] = None,
            show_progress: bool = False
    ):
        if registry is None:
            registry = RuleRegistry.default(disabled=config_manager.disabled_rules())
        self.registry = registry
        self.workers = workers or config_manager.get_nested("controller.workers", 1)
        self.show_progress = show_progress
        self.max_nodes, self.max_depth = config_manager.analysis_limits()

    def run_audit(self, documents: Mapping[str, str]) -> AuditReport:
        """
        Audits every document and aggregates the findings.

        Args:
            documents (Mapping[str, str]): Document name (e.g. path or URL) to raw HTML.

        Returns:
            AuditReport: Per-document results in input order plus totals.
        """
        tasks = list(documents.items())
        func = partial(
            _worker_audit_document,
            registry=self.registry,
            max_nodes=self.max_nodes,
            max_depth=self.max_depth
        )

        with tqdm(total=len(tasks), desc="Auditing", unit="doc", disable=not self.show_progress) as bar:
            if self.workers > 1 and len(tasks) > 1:
                with ProcessPoolExecutor(max_workers=self.workers) as executor:
                    results = []
                    for result in executor.map(func, tasks):
                        results.append(result)
                        bar.update(1)
            else:
                results = []
                for task in tasks:
                    results.append(func(task))
                    bar.update(1)

        report = self._aggregate(results)
        logger.info(
            f"Audit finished: {len(tasks)} documents, {report.total_issues} issues, "
            f"{report.failed_documents} failed"
        )
        return report

    @staticmethod
    def _aggregate(results: List[DocumentResult]) -> AuditReport:
        by_severity: Counter = Counter()
        by_rule: Counter = Counter()
        with_issues = 0
        failed = 0

        for result in results:
            if not result.ok:
                failed += 1
                continue
            if result.diagnostics:
                with_issues += 1
            for record in result.diagnostics:
                by_severity[record["severity"]] += 1
                by_rule[record["rule_id"]] += 1

        return AuditReport(
            documents=results,
            total_issues=sum(by_rule.values()),
            documents_with_issues=with_issues,
            failed_documents=failed,
            by_severity=dict(by_severity),
            by_rule=dict(by_rule)
        )
