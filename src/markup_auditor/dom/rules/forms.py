from typing import List

from ..core import Rule, Severity
from ..selectors import all_of, attr_equals, has_attr, missing_or_empty, not_, tag_in

# Overlapping findings are kept on purpose: an unnamed submit button reports both
# control-missing-name and submit-missing-value.
RULES: List[Rule] = [
    Rule(
        id="input-missing-type",
        message="Input has no type attribute",
        severity=Severity.ERROR,
        predicate=all_of(tag_in("input"), not_(has_attr("type"))),
        category="FORMS"
    ),
    Rule(
        id="textarea-missing-rowscols",
        message="Textarea has neither rows nor cols",
        severity=Severity.ERROR,
        predicate=all_of(tag_in("textarea"), not_(has_attr("rows")), not_(has_attr("cols"))),
        category="FORMS"
    ),
    Rule(
        id="control-missing-name",
        message="Form control has no name or an empty name",
        severity=Severity.ERROR,
        predicate=all_of(tag_in("input", "select", "textarea"), missing_or_empty("name")),
        category="FORMS"
    ),
    Rule(
        id="submit-missing-value",
        message="Submit button has no value",
        severity=Severity.ERROR,
        predicate=all_of(tag_in("input"), attr_equals("type", "submit"), not_(has_attr("value"))),
        category="FORMS"
    ),
    Rule(
        id="label-missing-for",
        message="Label is not associated with a control (missing or empty for)",
        severity=Severity.WARNING,
        predicate=all_of(tag_in("label"), missing_or_empty("for")),
        category="FORMS"
    ),
]
