"""
Read-only query facade for stating expectations about a document.

.. doctest::

   >>> from stylecheck.query import load
   >>> doc = load('<table><tr><td>1</td></tr><tr><td>2</td></tr></table>',
   ...            'tr:nth-child(even) { background-color: #eee }')
   >>> [row.css('background-color') for row in doc.find('tr').each()]
   [None, '#eee']
"""

from typing import Iterable, Iterator, List, Optional, Union, overload

from .dom import DocumentNode, ElementNode, Node, SelectorGroupLike, parse_html
from .selector import SelectorGroup, as_selector_group
from .stylesheet import Stylesheet


def select(tree: Node, selector: SelectorGroupLike) -> List[Node]:
    """All elements under `tree` matched by `selector`, in document order."""
    return tree.select_all(selector)


def load(markup: str, *stylesheets: Union[str, Stylesheet]) -> "Selection":
    """
    Parses `markup`, attaches `stylesheets` to the document and returns
    a :class:`Selection` holding the document node.
    """
    document = parse_html(markup)
    for stylesheet in stylesheets:
        document.add_stylesheet(stylesheet)
    return Selection([document])


class Selection:
    """
    An immutable, ordered collection of nodes.

    Traversal methods return new selections, with duplicates removed and
    document order kept where the method implies it. Reading methods
    (:meth:`attr`, :meth:`css`) look at the first node only and return
    ``None`` on an empty selection.
    """

    def __init__(self, nodes: Iterable[Node] = ()) -> None:
        self._nodes = _unique(nodes)

    def __repr__(self) -> str:
        return "<Selection %s>" % repr(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __bool__(self) -> bool:
        return bool(self._nodes)

    @overload
    def __getitem__(self, index: int) -> Node:
        ...

    @overload
    def __getitem__(self, index: slice) -> "Selection":
        ...

    def __getitem__(self, index: Union[int, slice]) -> Union[Node, "Selection"]:
        if isinstance(index, slice):
            return Selection(self._nodes[index])
        return self._nodes[index]

    def __iter__(self) -> Iterator[Node]:
        return iter(self._nodes)

    def each(self) -> Iterator["Selection"]:
        """One single-node selection per node."""
        for node in self._nodes:
            yield Selection([node])

    def eq(self, index: int) -> "Selection":
        try:
            return Selection([self._nodes[index]])
        except IndexError:
            return Selection()

    def first(self) -> "Selection":
        return self.eq(0)

    def last(self) -> "Selection":
        return self.eq(-1)

    def find(self, selector: SelectorGroupLike) -> "Selection":
        """Descendants matched by `selector`."""
        group = as_selector_group(selector)
        return Selection(
            match for node in self._nodes for match in node.select_all(group)
        )

    def children(self, selector: Optional[SelectorGroupLike] = None) -> "Selection":
        return Selection(
            child for node in self._nodes for child in node.element_children()
        ).filter(selector)

    def parent(self, selector: Optional[SelectorGroupLike] = None) -> "Selection":
        return Selection(
            node.parent
            for node in self._nodes
            if node.parent is not None and node.parent.tag
        ).filter(selector)

    def next(self, selector: Optional[SelectorGroupLike] = None) -> "Selection":
        """Immediately following element siblings."""
        return Selection(
            sibling
            for sibling in (n.next_sibling(elements=True) for n in self._nodes)
            if sibling is not None
        ).filter(selector)

    def prev(self, selector: Optional[SelectorGroupLike] = None) -> "Selection":
        """Immediately preceding element siblings."""
        return Selection(
            sibling
            for sibling in (n.previous_sibling(elements=True) for n in self._nodes)
            if sibling is not None
        ).filter(selector)

    def filter(self, selector: Optional[SelectorGroupLike]) -> "Selection":
        if selector is None:
            return self
        group = as_selector_group(selector)  # type: SelectorGroup
        return Selection(node for node in self._nodes if group.matches(node))

    def text(self) -> str:
        """Combined text of all nodes."""
        return "".join(node.text for node in self._nodes)

    def html(self) -> Optional[str]:
        """Inner HTML of the first node."""
        if not self._nodes:
            return None
        return self._nodes[0].inner_html()

    def attr(self, name: str) -> Optional[str]:
        if not self._nodes:
            return None
        return self._nodes[0].attr(name)

    def css(self, prop: str) -> Optional[str]:
        """Resolved value of `prop` on the first element."""
        if not self._nodes:
            return None
        return self._nodes[0].css(prop)

    @property
    def tags(self) -> List[Optional[str]]:
        return [node.tag for node in self._nodes]

    @property
    def document(self) -> Optional[DocumentNode]:
        """The document owning the first node, if any."""
        if not self._nodes:
            return None
        root = self._nodes[0].root()
        return root if isinstance(root, DocumentNode) else None

    def elements(self) -> List[ElementNode]:
        return [node for node in self._nodes if isinstance(node, ElementNode)]


def _unique(nodes: Iterable[Node]) -> List[Node]:
    seen = set()
    unique = []
    for node in nodes:
        if id(node) in seen:
            continue
        seen.add(id(node))
        unique.append(node)
    return unique
