from typing import List

from ..core import Rule, Severity
from ..selectors import all_of, any_of, attr_equals, attr_starts_with, has_attr, missing_or_empty, tag_in

ANCHOR = tag_in("a")

RULES: List[Rule] = [
    Rule(
        id="link-missing-href",
        message="Link has no href or an empty href",
        severity=Severity.ERROR,
        predicate=all_of(ANCHOR, missing_or_empty("href")),
        category="LINKS"
    ),
    Rule(
        id="link-questionable-href",
        message="Link points to a placeholder or script URL: {href}",
        severity=Severity.WARNING,
        predicate=all_of(
            ANCHOR,
            any_of(attr_equals("href", "#"), attr_starts_with("href", "javascript"))
        ),
        category="LINKS"
    ),
    Rule(
        id="link-target",
        message="Link forces a browsing context with target=\"{target}\"",
        severity=Severity.WARNING,
        predicate=all_of(ANCHOR, has_attr("target")),
        category="LINKS"
    ),
]
