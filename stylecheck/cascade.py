"""
Cascade resolution.

For an element and a property, every applicable declaration is ranked
by ``(important, origin, specificity, sheet order, source index)`` and
the largest one wins. Sources, lowest sheet order first:

1. ``<style>`` elements of the tree, in document order;
2. stylesheets supplied by the caller, in the order given;
3. the element's own ``style`` attribute (inline origin).

There is no inheritance and no initial value: a property without a
winning declaration is simply absent.
"""

import logging
from collections import OrderedDict
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .dom import DocumentNode, Node
from .selector import Specificity
from .stylesheet import (
    Declaration,
    Origin,
    StyleRule,
    Stylesheet,
    parse_declarations,
    parse_stylesheet,
)

logger = logging.getLogger(__name__)

StylesheetLike = Union[str, Stylesheet]

# (important, origin, specificity, sheet order, source index)
CascadeKey = Tuple[bool, Origin, Specificity, int, int]


class Cascade:
    """
    Resolves declarations for the elements of one tree.

    Results are memoized per element until :meth:`invalidate` is
    called; call it after changing the tree or the stylesheets.

    Attributes:
        root        (:class:`~stylecheck.dom.Node`)
        stylesheets (:class:`List`\\[:class:`~stylecheck.stylesheet.Stylesheet`]):
            External stylesheets, in cascade order.
    """

    def __init__(self, root: Node, stylesheets: Iterable[StylesheetLike] = ()) -> None:
        self.root = root
        self.stylesheets = [_coerce(stylesheet) for stylesheet in stylesheets]
        self._rules = None  # type: Optional[List[Tuple[int, StyleRule]]]
        self._sheet_count = 0
        self._winners = {}  # type: Dict[Node, OrderedDict[str, Declaration]]

    def __repr__(self) -> str:
        return "<Cascade root=%s stylesheets=%d>" % (
            getattr(self.root, "tag", None) or "#document",
            len(self.stylesheets),
        )

    def invalidate(self) -> None:
        logger.debug("invalidating %d memoized styles", len(self._winners))
        self._rules = None
        self._winners = {}

    def rules(self) -> List[Tuple[int, StyleRule]]:
        """All style rules in cascade order, each with its sheet order."""
        if self._rules is None:
            sheets = self.embedded_stylesheets() + self.stylesheets
            self._sheet_count = len(sheets)
            self._rules = [
                (sheet_order, rule)
                for sheet_order, sheet in enumerate(sheets)
                for rule in sheet
            ]
            logger.debug(
                "collected %d rules from %d stylesheets", len(self._rules), len(sheets)
            )
        return self._rules

    def embedded_stylesheets(self) -> List[Stylesheet]:
        """Stylesheets of the ``<style>`` elements in the tree."""
        sheets = []
        nodes = [self.root] if self.root.tag == "style" else []
        nodes.extend(self.root.select_all("style"))
        for node in nodes:
            type_ = node.attrs.get("type", "text/css").strip().lower()
            if type_ not in ("", "text/css"):
                logger.debug("ignoring <style> of type %r", type_)
                continue
            sheets.append(parse_stylesheet(node.text))
        return sheets

    def matched(self, element: Node) -> List[Tuple[CascadeKey, Declaration]]:
        """
        Every declaration applying to `element`, sorted from the lowest
        to the highest priority.
        """
        candidates = []  # type: List[Tuple[CascadeKey, Declaration]]
        for sheet_order, rule in self.rules():
            specificity = rule.selectors.matching_specificity(element)
            if specificity is None:
                continue
            for declaration in rule.declarations:
                key = (
                    declaration.important,
                    declaration.origin,
                    specificity,
                    sheet_order,
                    declaration.source_index,
                )
                candidates.append((key, declaration))
        inline = element.attrs.get("style")
        if inline is not None:
            inline_order = self._sheet_count
            for declaration in parse_declarations(inline):
                key = (
                    declaration.important,
                    declaration.origin,
                    Specificity(),
                    inline_order,
                    declaration.source_index,
                )
                candidates.append((key, declaration))
        candidates.sort(key=lambda candidate: candidate[0])
        return candidates

    def winners(self, element: Node) -> "OrderedDict[str, Declaration]":
        """Winning declaration per property on `element`."""
        if not element.tag:
            return OrderedDict()
        try:
            return self._winners[element]
        except KeyError:
            pass
        winners = OrderedDict()  # type: OrderedDict[str, Declaration]
        for _, declaration in self.matched(element):
            winners[declaration.property] = declaration
        self._winners[element] = winners
        return winners

    def style(self, element: Node) -> "OrderedDict[str, str]":
        """Resolved style of `element`: property to winning value."""
        return OrderedDict(
            (prop, declaration.value)
            for prop, declaration in self.winners(element).items()
        )

    def value(self, element: Node, prop: str) -> Optional[str]:
        declaration = self.winners(element).get(prop.lower())
        return declaration.value if declaration is not None else None


def cascade_for(root: Node) -> Cascade:
    """
    The cascade owned by the tree rooted at `root`, built on first use.

    A :class:`~stylecheck.dom.DocumentNode` contributes its attached
    stylesheets.
    """
    if root._cascade is None:
        root._cascade = Cascade(root, getattr(root, "stylesheets", []))
    return root._cascade


def resolve(tree: Node, stylesheets: Iterable[StylesheetLike] = ()) -> Node:
    """
    Resolves styles of every element in `tree` against its own
    ``<style>`` elements and `stylesheets`.

    A document also contributes the stylesheets attached to it with
    :meth:`~stylecheck.dom.DocumentNode.add_stylesheet`; `stylesheets`
    only apply to this call and are not attached.

    Each element gets a ``resolved_style`` attribute (property to value)
    and :meth:`~stylecheck.dom.Node.css` answers from the same results
    until the next call. The tree is returned.
    """
    if isinstance(stylesheets, (str, Stylesheet)):
        stylesheets = [stylesheets]
    if isinstance(tree, DocumentNode):
        stylesheets = list(tree.stylesheets) + list(stylesheets)
    # Replaces whatever an earlier call left behind; tree.stylesheets
    # itself is never touched.
    cascade = Cascade(tree, stylesheets)
    tree._cascade = cascade
    for node in _elements(tree):
        node.resolved_style = cascade.style(node)  # type: ignore
    return tree


def inline(
    tree: Node,
    stylesheets: Iterable[StylesheetLike] = (),
    *,
    remove_style_tags: bool = True
) -> Node:
    """
    Returns a copy of `tree` in which every element's ``style``
    attribute holds all of its resolved declarations, so that the
    styles can be read back without any stylesheet.

    `tree` is left untouched. Elements with no resolved declarations
    keep no ``style`` attribute. ``<style>`` elements are dropped from
    the copy unless `remove_style_tags` is false.
    """
    if isinstance(stylesheets, (str, Stylesheet)):
        stylesheets = [stylesheets]
    own = list(getattr(tree, "stylesheets", []))
    cascade = Cascade(tree, own + list(stylesheets))
    copy = tree.clone()
    for original, node in zip(_elements(tree), _elements(copy)):
        winners = cascade.winners(original)
        if winners:
            node.attrs["style"] = "; ".join(str(d) for d in winners.values())
        else:
            node.attrs.pop("style", None)
    if remove_style_tags:
        for node in [n for n in _elements(copy) if n.tag == "style"]:
            if node.parent is not None:
                node.parent.children.remove(node)
                node.parent = None
    if isinstance(copy, DocumentNode):
        copy.stylesheets = []
    return copy


def _coerce(stylesheet: StylesheetLike) -> Stylesheet:
    if isinstance(stylesheet, Stylesheet):
        return stylesheet
    return parse_stylesheet(stylesheet)


def _elements(tree: Node) -> List[Node]:
    nodes = [tree] if tree.tag else []
    nodes.extend(node for node in tree.descendants() if node.tag)
    return nodes
