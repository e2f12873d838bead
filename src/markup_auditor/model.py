from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class DocumentResult(BaseModel):
    """
    Audit outcome for a single named document.
    ``error`` is set (and ``diagnostics`` left empty) when the document could not be audited.
    """
    name: str
    node_count: int = 0
    diagnostics: List[Dict[str, Any]] = Field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class AuditReport(BaseModel):
    """Aggregated result of a batch audit."""
    documents: List[DocumentResult] = Field(default_factory=list)
    total_issues: int = 0
    documents_with_issues: int = 0
    failed_documents: int = 0
    by_severity: Dict[str, int] = Field(default_factory=dict)
    by_rule: Dict[str, int] = Field(default_factory=dict)

    def get(self, name: str) -> Optional[DocumentResult]:
        return next((d for d in self.documents if d.name == name), None)
