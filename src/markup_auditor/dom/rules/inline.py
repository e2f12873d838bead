from typing import List

from ..core import Rule, Severity
from ..selectors import has_attr

# Inline event handler attributes (HTML4 intrinsic events plus the HTML5 additions)
EVENT_ATTRIBUTES = (
    "onabort", "onafterprint", "onbeforeprint", "onbeforeunload", "onblur",
    "oncanplay", "oncanplaythrough", "onchange", "onclick", "oncontextmenu",
    "oncopy", "oncut", "ondblclick", "ondrag", "ondragend",
    "ondragenter", "ondragleave", "ondragover", "ondragstart", "ondrop",
    "ondurationchange", "onemptied", "onended", "onerror", "onfocus",
    "onhashchange", "oninput", "oninvalid", "onkeydown", "onkeypress",
    "onkeyup", "onload", "onloadeddata", "onloadedmetadata", "onloadstart",
    "onmessage", "onmousedown", "onmousemove", "onmouseout", "onmouseover",
    "onmouseup", "onmousewheel", "onoffline", "ononline", "onpagehide",
    "onpageshow", "onpaste", "onpause", "onplay", "onplaying",
    "onpopstate", "onprogress", "onratechange", "onreset", "onresize",
    "onscroll", "onseeked", "onseeking", "onselect", "onstalled",
    "onstorage", "onsubmit", "onsuspend", "ontimeupdate", "onunload",
    "onvolumechange", "onwaiting",
)


def _event_rule(attr: str) -> Rule:
    return Rule(
        id=f"inline-event-{attr}",
        message=f"Inline event handler {attr}=\"{{{attr}}}\"",
        severity=Severity.ERROR,
        predicate=has_attr(attr),
        category="SCRIPT"
    )


RULES: List[Rule] = [
    Rule(
        id="inline-style",
        message="Inline style attribute: {style}",
        severity=Severity.WARNING,
        predicate=has_attr("style"),
        category="STYLE"
    ),
    *(_event_rule(attr) for attr in EVENT_ATTRIBUTES),
]
