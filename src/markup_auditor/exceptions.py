"""Custom exceptions for markup_auditor."""


class AuditorError(Exception):
    """Base exception for markup_auditor operations."""


class DuplicateRuleError(AuditorError, KeyError):
    """A rule with the same identifier is already registered."""

    def __init__(self, rule_id: str):
        self.rule_id = rule_id
        super().__init__(f"Rule '{rule_id}' is already registered")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class RuleDefinitionError(AuditorError, ValueError):
    """A data-defined rule file could not be read or validated."""


class MalformedTreeError(AuditorError):
    """The markup tree is not a proper tree (a node was reached twice)."""


class AnalysisBudgetError(MalformedTreeError):
    """The document exceeded the configured node or depth budget."""
