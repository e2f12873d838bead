from typing import List

from ..core import Rule, Severity
from ..selectors import all_of, is_empty, tag_in

# Elements that are obsolete or were never standardised
DEPRECATED_TAGS = (
    "acronym", "applet", "basefont", "bgsound", "big", "blink",
    "center", "dir", "font", "frame", "frameset", "isindex",
    "listing", "marquee", "multicol", "nextid", "nobr", "noembed",
    "noframes", "plaintext", "spacer", "strike", "tt", "xmp",
)

RULES: List[Rule] = [
    Rule(
        id="empty-element",
        message="Element has no content",
        severity=Severity.WARNING,
        predicate=all_of(tag_in("li", "p", "td", "th"), is_empty()),
        category="STRUCTURE"
    ),
    Rule(
        id="deprecated-element",
        message="Deprecated element",
        severity=Severity.ERROR,
        predicate=tag_in(*DEPRECATED_TAGS),
        category="STRUCTURE"
    ),
]
