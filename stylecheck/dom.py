"""
HTML parser and simple DOM.

The tree is built on top of :class:`html.parser.HTMLParser` and is
tolerant of the tag soup found in hand-authored pages: stray end tags
are dropped, unclosed elements are closed implicitly, and the usual
implied end tags (``<p>``, ``<li>``, ``<tr>``, ``<td>``...) are
honored. :func:`parse_html` only gives up when there is nothing to
build a tree from.
"""

import html
import logging
from collections import OrderedDict
from html.parser import HTMLParser
from itertools import chain
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from .selector import Selector, SelectorGroup, as_selector_group

if TYPE_CHECKING:  # pragma: no cover
    from .cascade import Cascade

logger = logging.getLogger(__name__)

SelectorGroupLike = Union[str, "SelectorGroup", "Selector"]
N = TypeVar("N", bound="Node")

# https://html.spec.whatwg.org/multipage/syntax.html#void-elements
VOID_ELEMENTS = frozenset(
    (
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    )
)

# Elements whose content html.parser passes through unparsed.
RAW_TEXT_ELEMENTS = frozenset(("script", "style"))


class Node(object):
    """
    A node in the document tree: the document itself, an element, or a
    run of text.

    Selection (:meth:`select`, :meth:`select_all`), navigation
    (:meth:`ancestors`, :meth:`descendants`, the child and sibling
    accessors) and read-back (:meth:`attr`, :meth:`css`, :attr:`text`,
    :attr:`html`) are shared by all three kinds. Child and sibling
    accessors take ``elements=True`` to skip text nodes.

    Attributes:
        tag      (:class:`Optional`\\[:class:`str`]): lowercased tag name, ``None`` unless an element
        attrs    (:class:`Dict`\\[:class:`str`, :class:`str`]): attribute values in source order
        parent   (:class:`Optional`\\[:class:`Node`])
        children (:class:`List`\\[:class:`Node`])
        pos      (:class:`Optional`\\[:class:`Tuple`\\[:class:`int`, :class:`int`]]): start tag
            location (1-based line, 0-based column) for parsed elements
    """

    def __init__(self) -> None:
        self.tag = None  # type: Optional[str]
        self.attrs = {}  # type: Dict[str, str]
        self.parent = None  # type: Optional[Node]
        self.children = []  # type: List[Node]
        self.pos = None  # type: Optional[Tuple[int, int]]
        # Set while the element is still open in DOMBuilder.
        self._partial = False
        # Set by resolve(), or lazily by cascade_for() on root nodes.
        self._cascade = None  # type: Optional[Cascade]

    def __str__(self) -> str:  # pragma: no cover
        raise NotImplementedError

    def clone(self) -> "Node":  # pragma: no cover
        """Deep copy of the subtree rooted at this node, detached from its parent."""
        raise NotImplementedError

    def select(self, selector: SelectorGroupLike) -> Optional["Node"]:
        """First element below this node matched by `selector`, if any."""
        return next(self._matching(as_selector_group(selector)), None)

    def select_all(self, selector: SelectorGroupLike) -> List["Node"]:
        """Every element below this node matched by `selector`, in document order."""
        return list(self._matching(as_selector_group(selector)))

    def matched_by(
        self, selector: SelectorGroupLike, root: Optional["Node"] = None
    ) -> bool:
        """See :meth:`SelectorGroup.matches()`."""
        return as_selector_group(selector).matches(self, root=root)

    def _matching(self, group: "SelectorGroup") -> Iterator["Node"]:
        return (
            node
            for node in self.descendants()
            if node.tag is not None and group.matches(node, root=self)
        )

    def element_children(self) -> List["ElementNode"]:
        return [child for child in self.children if isinstance(child, ElementNode)]

    def first_child(self, *, elements: bool = False) -> Optional["Node"]:
        return _first(self.children, elements)

    def last_child(self, *, elements: bool = False) -> Optional["Node"]:
        return _first(reversed(self.children), elements)

    def next_siblings(self) -> List["Node"]:
        """Siblings following this node, nearest first."""
        if self.parent is None:
            return []
        siblings = self.parent.children
        return siblings[self._position(siblings) + 1 :]

    def previous_siblings(self) -> List["Node"]:
        """Siblings preceding this node, nearest first."""
        if self.parent is None:
            return []
        siblings = self.parent.children
        return list(reversed(siblings[: self._position(siblings)]))

    def next_sibling(self, *, elements: bool = False) -> Optional["Node"]:
        return _first(self.next_siblings(), elements)

    def previous_sibling(self, *, elements: bool = False) -> Optional["Node"]:
        return _first(self.previous_siblings(), elements)

    def _position(self, siblings: List["Node"]) -> int:
        # Identity, not equality: text nodes with equal content are distinct.
        for index, sibling in enumerate(siblings):
            if sibling is self:
                return index
        raise ValueError("node is detached from its parent's children")

    def ancestors(self, *, root: Optional["Node"] = None) -> Iterator["Node"]:
        """
        Parent, grandparent and so on up to and including `root` (or up to
        the top of the tree when `root` is ``None``).

        Raises :class:`RuntimeError` when `root` is given but is not an
        ancestor of this node.
        """
        node = self
        while node is not root:
            node = node.parent
            if node is None:
                if root is None:
                    return
                raise RuntimeError("%r is not an ancestor of this node" % root)
            yield node

    def descendants(self) -> Iterator["Node"]:
        """Every node below this one, in document (pre-)order."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def root(self) -> "Node":
        """The topmost ancestor (or the node itself when detached)."""
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    def attr(self, attr: str) -> Optional[str]:
        """Value of attribute `attr` (case-insensitive), or ``None`` if absent."""
        return self.attrs.get(attr.lower())

    def css(self, prop: str) -> Optional[str]:
        """
        Resolved value of the CSS property `prop` on this element, or
        ``None`` if no declaration applies.

        Declarations are collected by the cascade owned by the root of
        the tree; see :func:`stylecheck.cascade.cascade_for`.
        """
        style = self.computed_style()
        return style.get(prop.lower())

    def computed_style(self) -> "OrderedDict[str, str]":
        """All resolved declarations on this element, property to value."""
        if not self.tag:
            return OrderedDict()
        from .cascade import cascade_for

        # The nearest tree resolved with resolve() answers first.
        for node in chain((self,), self.ancestors()):
            if node._cascade is not None:
                return node._cascade.style(self)
        return cascade_for(self.root()).style(self)

    @property
    def html(self) -> str:
        """Serialized markup of this node; text is escaped."""
        return str(self)

    def inner_html(self) -> str:
        return "".join(child.html for child in self.children)

    @property
    def text(self) -> str:  # pragma: no cover
        """Concatenated, unescaped text below this node."""
        raise NotImplementedError

    @property
    def classes(self) -> List[str]:
        return self.attrs.get("class", "").split()


class ElementNode(Node):
    """
    Represents an element node.

    Note that tag and attribute names are case-insensitive; attribute
    values are case-sensitive. An attribute given without a value is
    stored as the empty string, and when an attribute is repeated the
    last value wins.
    """

    def __init__(
        self,
        tag: str,
        attrs: Iterable[Tuple[str, Optional[str]]],
        *,
        parent: Optional["Node"] = None,
        children: Optional[List["Node"]] = None,
        pos: Optional[Tuple[int, int]] = None
    ) -> None:
        Node.__init__(self)
        self.tag = tag.lower()  # type: str
        self.attrs = OrderedDict()  # type: Dict[str, str]
        for attr, val in attrs:
            self.attrs[attr.lower()] = val if val is not None else ""
        self.parent = parent
        self.children = children or []
        self.pos = pos

    def __repr__(self) -> str:
        details = [self.tag]
        if self.attrs:
            details.append("attrs=%r" % list(self.attrs.items()))
        if self.children:
            details.append("children=%r" % self.children)
        return "<%s>" % " ".join(details)

    def __str__(self) -> str:
        start = self.tag + "".join(
            ' %s="%s"' % (attr, html.escape(val)) for attr, val in self.attrs.items()
        )
        if not self.children and self.tag in VOID_ELEMENTS:
            return "<%s/>" % start
        return "<%s>%s</%s>" % (start, self.inner_html(), self.tag)

    def clone(self) -> "ElementNode":
        copy = ElementNode(self.tag, self.attrs.items(), pos=self.pos)
        return _adopt_copies(copy, self)

    @property
    def text(self) -> str:
        """The concatenation of all descendant text nodes."""
        return "".join(child.text for child in self.children)


class TextNode(str, Node):
    """
    Represents a text node.

    Subclasses :class:`Node` and :class:`str`.
    """

    def __new__(cls, text: str) -> "TextNode":
        s = str.__new__(cls, text)  # type: ignore
        s.parent = None
        return s  # type: ignore

    def __init__(self, text: str) -> None:
        Node.__init__(self)

    def __repr__(self) -> str:
        return "<%s>" % str.__repr__(self)

    # Escaped for use as element content, except inside raw text elements;
    # see text for the raw string.
    def __str__(self) -> str:
        if self.parent is not None and self.parent.tag in RAW_TEXT_ELEMENTS:
            return self.text
        return html.escape(self, quote=False)

    # Text nodes compare by identity so that tree positions can be told
    # apart; compare .text for string equality.
    def __eq__(self, other: object) -> bool:
        return self is other

    def __ne__(self, other: object) -> bool:
        return self is not other

    __hash__ = object.__hash__

    def clone(self) -> "TextNode":
        return TextNode(self.text)

    @property
    def text(self) -> str:
        return str.__str__(self)


class DocumentNode(Node):
    """
    Represents a whole parsed document.

    The document has no tag of its own; its children are the top-level
    nodes of the input (usually whitespace and a single ``<html>``
    element).

    Attributes:
        doctype (:class:`Optional`\\[:class:`str`]):
            Text of the ``<!...>`` declaration, e.g. ``"DOCTYPE html"``.
        doctype_first (:class:`bool`):
            Whether the doctype came before any element or non-blank text.
        doctype_pos (:class:`Optional`\\[:class:`Tuple`\\[:class:`int`, :class:`int`]]):
            Where the doctype was found.
        source (:class:`Optional`\\[:class:`str`]):
            The markup the document was parsed from.
        stylesheets (:class:`List`\\[:class:`stylecheck.stylesheet.Stylesheet`]):
            External stylesheets attached with :meth:`add_stylesheet`.
    """

    def __init__(self) -> None:
        Node.__init__(self)
        self.doctype = None  # type: Optional[str]
        self.doctype_first = False
        self.doctype_pos = None  # type: Optional[Tuple[int, int]]
        self.source = None  # type: Optional[str]
        self.stylesheets = []  # type: List[Any]

    def __repr__(self) -> str:
        s = "<#document"
        if self.doctype:
            s += " doctype=%s" % repr(self.doctype)
        if self.children:
            s += " children=%s" % repr(self.children)
        s += ">"
        return s

    def __str__(self) -> str:
        s = ""
        if self.doctype is not None:
            s += "<!%s>" % self.doctype
        s += "".join(str(child) for child in self.children)
        return s

    def clone(self) -> "DocumentNode":
        copy = DocumentNode()
        copy.doctype = self.doctype
        copy.doctype_first = self.doctype_first
        copy.doctype_pos = self.doctype_pos
        copy.source = self.source
        copy.stylesheets = list(self.stylesheets)
        return _adopt_copies(copy, self)

    @property
    def document_element(self) -> Optional["ElementNode"]:
        """The first top-level element, normally ``<html>``."""
        return self.first_child(elements=True)

    def add_stylesheet(self, stylesheet: Any) -> None:
        """
        Attaches an external stylesheet (text or a parsed
        :class:`stylecheck.stylesheet.Stylesheet`) to the document.

        Resolved styles computed so far are discarded.
        """
        from .stylesheet import Stylesheet, parse_stylesheet

        if not isinstance(stylesheet, Stylesheet):
            stylesheet = parse_stylesheet(stylesheet)
        self.stylesheets.append(stylesheet)
        if self._cascade is not None:
            self._cascade.invalidate()
            self._cascade = None

    @property
    def text(self) -> str:
        return "".join(child.text for child in self.children)


class MalformedMarkupError(Exception):
    """
    Exception raised when :class:`DOMBuilder` cannot build a tree.

    Attributes:
        pos (:class:`Tuple`\\[:class:`int`, :class:`int`]):
            Line number and offset in HTML input.
        why (:class:`str`):
            Reason of the exception.
    """

    def __init__(self, pos: Tuple[int, int], why: str) -> None:
        super().__init__(pos, why)
        self.pos = pos
        self.why = why

    def __str__(self) -> str:
        return "DOM builder aborted at %d:%d: %s" % (self.pos[0], self.pos[1], self.why)


# Start tags which implicitly close an open <p>.
_CLOSES_P = frozenset(
    (
        "address",
        "article",
        "aside",
        "blockquote",
        "details",
        "div",
        "dl",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hr",
        "main",
        "nav",
        "ol",
        "p",
        "pre",
        "section",
        "table",
        "ul",
    )
)

# tag -> (tags it implicitly closes, tags that bound the search).
_IMPLIED_END = {
    "li": (("li",), ("ul", "ol", "menu")),
    "dt": (("dt", "dd"), ("dl",)),
    "dd": (("dt", "dd"), ("dl",)),
    "tr": (("tr", "td", "th"), ("table", "thead", "tbody", "tfoot")),
    "td": (("td", "th"), ("tr", "table")),
    "th": (("td", "th"), ("tr", "table")),
    "thead": (("tbody", "thead", "tr", "td", "th"), ("table",)),
    "tbody": (("tbody", "thead", "tr", "td", "th"), ("table",)),
    "tfoot": (("tbody", "thead", "tr", "td", "th"), ("table",)),
    "option": (("option",), ("select", "datalist", "optgroup")),
}  # type: Dict[str, Tuple[Tuple[str, ...], Tuple[str, ...]]]


class DOMBuilder(HTMLParser):
    """
    HTML parser / DOM builder.

    Subclasses :class:`html.parser.HTMLParser`.

    Consume HTML and builds a :class:`Node` tree. Once finished, use
    :attr:`root` to access the :class:`DocumentNode` at the top of the
    tree.

    Tag mismatches are recovered from rather than reported: an end tag
    closes every element opened after its matching start tag, an end
    tag with no matching start tag is dropped, and whatever is still
    open when the input ends is closed.
    """

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._document = DocumentNode()
        self._document._partial = True
        self._stack = [self._document]  # type: List[Node]
        self._seen_content = False
        self._closed = False

    def reset(self) -> None:
        super().reset()
        self._source_parts = []  # type: List[str]

    def feed(self, data: str) -> None:
        self._source_parts.append(data)
        super().feed(data)

    def handle_decl(self, decl: str) -> None:
        if self._document.doctype is not None:
            logger.debug("ignoring extra declaration %r at %d:%d", decl, *self.getpos())
            return
        self._document.doctype = decl
        self._document.doctype_pos = self.getpos()
        self._document.doctype_first = not self._seen_content

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        tag = tag.lower()
        self._seen_content = True
        self._close_implied(tag)
        node = ElementNode(tag, attrs, pos=self.getpos())
        node._partial = True
        self._stack.append(node)
        # For void elements, immediately invoke the end tag handler (see
        # handle_startendtag()).
        if tag in VOID_ELEMENTS:
            self._close_top()

    def handle_endtag(self, tag: str) -> None:
        tag = tag.lower()
        if tag in VOID_ELEMENTS:
            logger.debug("dropping end tag of void element %r at %d:%d", tag, *self.getpos())
            return
        for index in range(len(self._stack) - 1, 0, -1):
            node = self._stack[index]
            if node._partial and node.tag == tag:
                break
        else:
            logger.debug("dropping stray end tag %r at %d:%d", tag, *self.getpos())
            return
        while True:
            closed = self._close_top()
            if closed is node:
                return
            logger.debug(
                "implicitly closing %r before end tag %r at %d:%d",
                closed.tag,
                tag,
                *self.getpos()
            )

    # Make parser behavior for explicitly and implicitly void elements
    # (e.g., <hr> vs <hr/>) consistent. The former triggers
    # handle_starttag only, whereas the latter triggers
    # handle_startendtag (which by default triggers both handle_starttag
    # and handle_endtag). See https://www.bugs.python.org/issue25258.
    def handle_startendtag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        self.handle_starttag(tag, attrs)
        if tag not in VOID_ELEMENTS:
            self.handle_endtag(tag)

    def handle_data(self, text: str) -> None:
        if text.strip():
            self._seen_content = True
        self._stack.append(TextNode(text))

    def close(self) -> None:
        super().close()
        while self._open_elements():
            closed = self._close_top()
            logger.debug("implicitly closing %r at end of input", closed.tag)
        self._close_top()
        self._document.source = "".join(self._source_parts)
        self._closed = True

    # Open elements (the document node excluded), innermost last.
    def _open_elements(self) -> List[Node]:
        return [node for node in self._stack[1:] if node._partial]

    def _close_top(self) -> Node:
        """Attaches finished nodes to the innermost open node and closes it."""
        children = []
        while self._stack and not self._stack[-1]._partial:
            children.append(self._stack.pop())
        parent = self._stack[-1]
        parent.children = list(reversed(children))
        parent._partial = False
        for child in children:
            child.parent = parent
        return parent

    def _close_implied(self, tag: str) -> None:
        if tag in _CLOSES_P:
            self._close_open("p", ("button",))
        if tag in _IMPLIED_END:
            closes, boundaries = _IMPLIED_END[tag]
            for implied in closes:
                self._close_open(implied, boundaries)

    # Closes the innermost open `tag` element, unless one of the
    # `boundaries` is opened more recently.
    def _close_open(self, tag: str, boundaries: Tuple[str, ...]) -> None:
        for node in reversed(self._open_elements()):
            if node.tag == tag:
                while self._close_top() is not node:
                    pass
                return
            if node.tag in boundaries:
                return

    @property
    def root(self) -> "DocumentNode":
        """
        Finishes processing and returns the document node.

        Raises :class:`MalformedMarkupError` if the input holds no
        element at all.
        """
        if not self._closed:
            self.close()
        document = self._document
        if document.first_child(elements=True) is None:
            raise MalformedMarkupError(self.getpos(), "no root tag")
        return document


def parse_html(html: str, *, ParserClass: type = DOMBuilder) -> "DocumentNode":
    """
    Parses HTML string, builds DOM, and returns the document node.

    The parser may raise :class:`MalformedMarkupError`.

    Args:
        html: input HTML string
        ParserClass: :class:`DOMBuilder` or a subclass

    Returns:
        The :class:`DocumentNode` of the parsed tree.
    """
    builder = ParserClass()  # type: DOMBuilder
    try:
        builder.feed(html)
        builder.close()
    except AssertionError as e:  # pragma: no cover
        # Older html.parser versions signal tokenizer failures this way.
        raise MalformedMarkupError(builder.getpos(), str(e)) from e
    return builder.root


def _adopt_copies(copy: N, original: Node) -> N:
    for child in original.children:
        child_copy = child.clone()
        child_copy.parent = copy
        copy.children.append(child_copy)
    return copy


def _first(nodes: Iterable[Node], elements: bool) -> Optional[Node]:
    for node in nodes:
        if not elements or isinstance(node, ElementNode):
            return node
    return None
