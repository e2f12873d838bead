import logging
from typing import Dict, List, Tuple

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from .core import MarkupNode

logger = logging.getLogger(__name__)

DOCUMENT_TAG = "#document"


class DOMBuilder:
    """
    Builder responsible for turning raw HTML into a MarkupNode tree.

    The analysis engine works on MarkupNode trees only; this is the adapter that
    produces one from text using BeautifulSoup's 'html.parser'.
    """

    def parse(self, html: str) -> MarkupNode:
        """
        Parses an HTML document or fragment.

        Args:
            html (str): The raw HTML string.

        Returns:
            MarkupNode: A synthetic '#document' root holding the top-level elements.
        """
        if not html:
            return MarkupNode(tag=DOCUMENT_TAG)

        # Basic cleanup of potentially dirty HTML (e.g., BOM)
        clean_html = html.replace('\ufeff', '')
        # Keep class/rel/etc. as the literal attribute string instead of token lists
        soup = BeautifulSoup(clean_html, 'html.parser', multi_valued_attributes=None)

        root = self._build_tree(soup, tag_name=DOCUMENT_TAG)
        logger.debug("Parsed document with %d nodes", root.count_nodes())
        return root

    def _build_tree(self, tag: Tag, tag_name: str) -> MarkupNode:
        """
        Builds a MarkupNode tree from a BeautifulSoup Tag.

        Only element children become nodes. Plain text children are joined into the
        node's own ``text``; comments, doctypes and CDATA are dropped. Uses an
        explicit stack, so nesting depth is not bound by the recursion limit.
        """
        root = MarkupNode(tag=tag_name, attrs=self._normalize_attrs(tag.attrs))
        stack: List[Tuple[Tag, MarkupNode]] = [(tag, root)]

        while stack:
            source, node = stack.pop()
            text_parts: List[str] = []

            for child in source.children:
                if isinstance(child, Tag):
                    child_node = node.append_child(
                        MarkupNode(tag=child.name, attrs=self._normalize_attrs(child.attrs))
                    )
                    stack.append((child, child_node))
                elif isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
                    text_parts.append(str(child))

            node.text = "".join(text_parts)

        return root

    @staticmethod
    def _normalize_attrs(attrs: Dict) -> Dict[str, str]:
        normalized = {}
        for name, value in attrs.items():
            if value is None:
                value = ""
            elif not isinstance(value, str):
                value = " ".join(value)
            normalized[name] = value
        return normalized
