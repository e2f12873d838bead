from typing import List

from ..core import Rule, Severity
from ..selectors import all_of, has_attr, not_, tag_in

IMAGE = tag_in("img")

RULES: List[Rule] = [
    Rule(
        id="img-missing-alt",
        message="Image missing alt attribute: {src}",
        severity=Severity.ERROR,
        predicate=all_of(IMAGE, not_(has_attr("alt"))),
        category="CONTENT"
    ),
    Rule(
        id="img-missing-dimensions",
        message="Image has neither width nor height: {src}",
        severity=Severity.WARNING,
        predicate=all_of(IMAGE, not_(has_attr("width")), not_(has_attr("height"))),
        category="CONTENT"
    ),
]
