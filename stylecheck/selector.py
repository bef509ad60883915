"""
CSS selector parsing, matching and specificity.

Selectors operate on duck-typed nodes (anything with ``tag``,
``attrs``, ``parent``, ``children`` and the sibling helpers of
:class:`stylecheck.dom.Node`); text nodes have no tag and are never
matched.
"""

import re
from enum import Enum
from re import Match, Pattern
from typing import (
    TYPE_CHECKING,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    NamedTuple,
    Optional,
    Tuple,
    Union,
    cast,
)

if TYPE_CHECKING:  # pragma: no cover
    from .dom import Node


class UnknownSelectorSyntaxError(Exception):
    """
    Raised when a selector cannot be parsed or uses syntax the matcher
    does not implement.

    Attributes:
        s (:class:`str`):
            The selector text.
        cursor (:class:`int`):
            Offset in `s` where parsing stopped.
        why (:class:`str`):
            What went wrong.
    """

    def __init__(self, s: str, cursor: int, why: str) -> None:
        super().__init__(s, cursor, why)
        self.s = s
        self.cursor = cursor
        self.why = why

    def __str__(self) -> str:
        return "selector parser aborted at character %d of %r: %s" % (
            self.cursor,
            self.s,
            self.why,
        )


class Specificity(NamedTuple):
    """
    Selector specificity. [#]_

    Compares lexicographically, ids first.

    .. [#] https://www.w3.org/TR/selectors-3/#specificity
    """

    ids: int = 0
    classes: int = 0
    types: int = 0

    def plus(self, other: "Specificity") -> "Specificity":
        return Specificity(
            self.ids + other.ids, self.classes + other.classes, self.types + other.types
        )


class SelectorGroup:
    """
    A comma-separated list of selectors, e.g. ``th.center, td.center``.

    Build one with :meth:`from_str`. A group matches an element when any
    of its selectors does.
    """

    def __init__(self, selectors: Iterable["Selector"]) -> None:
        self._selectors = list(selectors)

    def __repr__(self) -> str:
        return "<SelectorGroup %r>" % str(self)

    def __str__(self) -> str:
        return ", ".join(str(selector) for selector in self._selectors)

    def __len__(self) -> int:
        return len(self._selectors)

    def __getitem__(self, index: int) -> "Selector":
        return self._selectors[index]

    def __iter__(self) -> Iterator["Selector"]:
        return iter(self._selectors)

    @classmethod
    def from_str(cls, s: str) -> "SelectorGroup":
        """
        Parses every selector in `s`.

        Raises :class:`UnknownSelectorSyntaxError` if any of them is
        invalid or the group is empty.
        """
        selectors = []
        cursor = 0
        while True:
            selector, cursor = Selector.from_str(s, cursor)
            selectors.append(selector)
            # A comma always needs a selector after it.
            if cursor == len(s) and not s.endswith(","):
                return cls(selectors)

    def matches(self, node: "Node", root: Optional["Node"] = None) -> bool:
        """See :meth:`Selector.matches`."""
        return any(selector.matches(node, root=root) for selector in self)

    def matching_specificity(self, node: "Node") -> Optional[Specificity]:
        """
        Highest specificity among the selectors matching `node`, or
        ``None`` if none matches.
        """
        return max(
            (selector.specificity for selector in self if selector.matches(node)),
            default=None,
        )

    @property
    def is_dynamic(self) -> bool:
        return any(selector.is_dynamic for selector in self)


class Selector:
    """
    A single complex selector, e.g. ``main#main p.note > a[href]:first-child``.

    The selector is stored as a linked chain of *sequences of simple
    selectors*, rightmost first: this object holds the sequence that the
    subject element itself must match, :attr:`combinator` says how the
    :attr:`previous` sequence relates to it, and so on leftwards. For
    the example above::

        a [href] :first-child   --combinator ">"-->
        p .note                 --combinator " "-->
        main #main

    What parses (from selectors level 3 [#]_):

    - type, universal, class, id and attribute selectors;
    - the descendant, child, next-sibling and subsequent-sibling
      combinators;
    - structural pseudo-classes (``:root``, ``:empty``,
      ``:first-child``, ``:nth-child(an+b)`` and the ``-of-type``
      variants);
    - ``:link``, ``:any-link``, ``:checked``, ``:disabled`` and
      ``:enabled``, which are judged from attributes;
    - ``:not()`` around one sequence of simple selectors;
    - interaction state pseudo-classes (``:hover``, ``:focus``...);
    - pseudo-elements, in either the ``::`` or the legacy ``:`` form.

    Interaction states and pseudo-elements never match anything in a
    static document. Selectors using them still parse, so rules such as
    ``tr:hover`` stay inspectable (see :attr:`is_dynamic`).

    Anything else raises :class:`UnknownSelectorSyntaxError`, including
    other pseudo-classes, nested parentheses inside a pseudo-class
    argument and namespace prefixes (``ns|a``, ``*|*``).

    Identifiers are read as ``[\\w-]+`` and whitespace as ``\\s``, both in
    ASCII mode. Quoted attribute values may contain an escaped quote of
    their own kind; no other escapes are interpreted.

    .. [#] https://www.w3.org/TR/selectors-3/

    Attributes:
        tag (:class:`Optional`\\[:class:`str`])
        classes (:class:`List`\\[:class:`str`])
        id (:class:`Optional`\\[:class:`str`])
        attrs (:class:`List`\\[:class:`AttributeSelector`])
        pseudo_classes (:class:`List`\\[:class:`PseudoClassSelector`])
        pseudo_element (:class:`Optional`\\[:class:`str`])
        combinator (:class:`Optional`\\[:class:`Combinator`]):
            Relation between :attr:`previous` and this sequence.
        previous (:class:`Optional`\\[:class:`Selector`]):
            The sequence to the left, if any.
    """

    def __init__(
        self,
        *,
        tag: Optional[str] = None,
        classes: Optional[List[str]] = None,
        id: Optional[str] = None,
        attrs: Optional[List["AttributeSelector"]] = None,
        pseudo_classes: Optional[List["PseudoClassSelector"]] = None,
        pseudo_element: Optional[str] = None,
        combinator: Optional["Combinator"] = None,
        previous: Optional["Selector"] = None
    ) -> None:
        self.tag = tag.lower() if tag else None
        self.classes = classes or []
        self.id = id
        self.attrs = attrs or []
        self.pseudo_classes = pseudo_classes or []
        self.pseudo_element = pseudo_element.lower() if pseudo_element else None
        self.combinator = combinator
        self.previous = previous

    def __repr__(self) -> str:
        return "<Selector %r>" % str(self)

    def __str__(self) -> str:
        parts = []  # type: List[str]
        for seq in self._chain():
            parts.append(seq._sequence_str())
            if seq.previous is not None and seq.combinator is not None:
                if seq.combinator is Combinator.DESCENDANT:
                    parts.append(" ")
                else:
                    parts.append(" %s " % seq.combinator.value)
        return "".join(reversed(parts))

    def _sequence_str(self) -> str:
        s = "".join(
            [
                self.tag or "",
                "".join(".%s" % class_ for class_ in self.classes),
                "#%s" % self.id if self.id else "",
                "".join(str(attr) for attr in self.attrs),
                "".join(str(pseudo) for pseudo in self.pseudo_classes),
            ]
        )
        s = s or "*"
        if self.pseudo_element:
            s += "::%s" % self.pseudo_element
        return s

    def _chain(self) -> Iterator["Selector"]:
        """This sequence and every sequence to its left, rightmost first."""
        seq = self  # type: Optional[Selector]
        while seq is not None:
            yield seq
            seq = seq.previous

    @property
    def specificity(self) -> Specificity:
        """Specificity of the whole chain."""
        total = Specificity()
        for seq in self._chain():
            total = total.plus(seq._sequence_specificity())
        return total

    def _sequence_specificity(self) -> Specificity:
        total = Specificity(
            1 if self.id else 0,
            len(self.classes) + len(self.attrs),
            (1 if self.tag else 0) + (1 if self.pseudo_element else 0),
        )
        for pseudo in self.pseudo_classes:
            total = total.plus(pseudo.specificity)
        return total

    @property
    def is_dynamic(self) -> bool:
        """Whether an interaction state pseudo-class appears anywhere in the chain."""
        return any(
            pseudo.is_dynamic for seq in self._chain() for pseudo in seq.pseudo_classes
        )

    @classmethod
    def from_str(cls, s: str, cursor: int = 0) -> Tuple["Selector", int]:
        """
        Parses the selector of `s` that starts at `cursor`.

        Parsing stops after the next comma or at the end of `s`, so a
        group can be read one selector at a time; the returned cursor is
        where the following selector (if any) begins. Use
        :meth:`SelectorGroup.from_str` to parse a whole group.

        Raises :class:`UnknownSelectorSyntaxError` on invalid input.
        """
        selector = None  # type: Optional[Selector]
        combinator = None  # type: Optional[Combinator]
        i = cast(Match[str], WHITESPACE.match(s, cursor)).end()
        while i < len(s):
            seq, next_combinator, i = cls._parse_sequence(s, i)
            seq.combinator = combinator
            seq.previous = selector
            selector, combinator = seq, next_combinator
            if combinator is None:
                break
            if i == len(s):
                raise UnknownSelectorSyntaxError(s, i, "unexpected end at combinator")
        if selector is None:
            raise UnknownSelectorSyntaxError(s, i, "selector is empty")
        return selector, i

    # Reads simple selectors up to the next combinator, comma or end of
    # input. The combinator (None at a comma or the end) is consumed.
    @classmethod
    def _parse_sequence(
        cls, s: str, i: int
    ) -> Tuple["Selector", Optional["Combinator"], int]:
        seq = cls()
        while True:
            i = seq._parse_simple(s, i)
            if seq.pseudo_element and not END_OF_SELECTOR.match(s, i):
                raise UnknownSelectorSyntaxError(
                    s, i, "pseudo-element must end the selector"
                )
            for pattern, combinator in COMBINATORS:
                m = pattern.match(s, i)
                if m:
                    return seq, combinator, m.end()

    def _parse_simple(self, s: str, i: int) -> int:
        m = TYPE_SEL.match(s, i)
        if m:
            if self.tag:
                raise UnknownSelectorSyntaxError(s, i, "multiple type selectors found")
            self.tag = m.group().lower()
            return m.end()
        m = UNIVERSAL_SEL.match(s, i)
        if m:
            return m.end()
        m = ATTR_SEL.match(s, i)
        if m:
            self.attrs.append(AttributeSelector.from_match(m))
            return m.end()
        m = CLASS_SEL.match(s, i)
        if m:
            self.classes.append(m.group(1))
            return m.end()
        m = ID_SEL.match(s, i)
        if m:
            if self.id:
                raise UnknownSelectorSyntaxError(s, i, "multiple id selectors found")
            self.id = m.group(1)
            return m.end()
        m = PSEUDO_ELEM_SEL.match(s, i)
        if m:
            self.pseudo_element = m.group(1).lower()
            return m.end()
        m = PSEUDO_CLASS_SEL.match(s, i)
        if m:
            name = m.group("name").lower()
            if name in LEGACY_PSEUDO_ELEMENTS and m.group("arg") is None:
                self.pseudo_element = name
            else:
                self.pseudo_classes.append(
                    PseudoClassSelector.parse(name, m.group("arg"), s, i)
                )
            return m.end()
        raise UnknownSelectorSyntaxError(s, i, "expecting simple selector, found none")

    def matches(self, node: "Node", root: Optional["Node"] = None) -> bool:
        """
        Decides whether the selector matches `node`.

        The rightmost sequence is tested against `node`; then some
        element related to `node` through :attr:`combinator` must be
        matched by the rest of the chain. When `root` is given, ``>``
        never looks above it.
        """
        if not self._sequence_matches(node):
            return False
        if self.previous is None:
            return True
        previous = self.previous
        return any(
            previous.matches(candidate, root=root)
            for candidate in self._related(node, root)
        )

    # Nodes the combinator relates to `node`; nodes without a tag are
    # rejected later by _sequence_matches().
    def _related(self, node: "Node", root: Optional["Node"]) -> Iterator["Node"]:
        if self.combinator is Combinator.DESCENDANT:
            yield from node.ancestors()
        elif self.combinator is Combinator.CHILD:
            if node is not root and node.parent is not None:
                yield node.parent
        elif self.combinator is Combinator.NEXT_SIBLING:
            sibling = node.previous_sibling(elements=True)
            if sibling is not None:
                yield sibling
        elif self.combinator is Combinator.SUBSEQUENT_SIBLING:
            yield from node.previous_siblings()
        else:  # pragma: no cover
            raise RuntimeError("unimplemented combinator: %r" % self.combinator)

    def _sequence_matches(self, node: "Node") -> bool:
        if not node.tag or self.pseudo_element:
            return False
        if self.tag and node.tag != self.tag:
            return False
        if self.id and node.attrs.get("id") != self.id:
            return False
        classes = node.classes
        return (
            all(class_ in classes for class_ in self.classes)
            and all(attr.matches(node) for attr in self.attrs)
            and all(pseudo.matches(node) for pseudo in self.pseudo_classes)
        )


class AttributeSelector:
    """
    An attribute selector such as ``[href]`` or ``[lang|=en]``.

    Attributes:
        attr (:class:`str`)
        val  (:class:`Optional`\\[:class:`str`])
        type (:class:`AttributeSelectorType`)
    """

    def __init__(
        self, attr: str, val: Optional[str], type: "AttributeSelectorType"
    ) -> None:
        self.attr = attr.lower()
        self.val = val
        self.type = type

    def __repr__(self) -> str:
        return "<AttributeSelector %r>" % str(self)

    def __str__(self) -> str:
        if self.type is AttributeSelectorType.BARE:
            return "[%s]" % self.attr
        return "[%s%s%r]" % (self.attr, self.type.value, self.val)

    @classmethod
    def from_match(cls, m: Match[str]) -> "AttributeSelector":
        """Builds the selector from a match of ``ATTR_SEL``."""
        quote = m.group("quote")
        if m.group("val_identifier") is not None:
            val = m.group("val_identifier")  # type: Optional[str]
        elif quote is not None:
            val = m.group("val_string_inner").replace("\\" + quote, quote)
        else:
            val = None
        return cls(m.group("attr"), val, AttributeSelectorType(m.group("op") or ""))

    def matches(self, node: "Node") -> bool:
        actual = node.attrs.get(self.attr)
        if actual is None:
            return False
        return ATTRIBUTE_TESTS[self.type](actual, self.val or "")


class PseudoClassSelector:
    """
    Represents a pseudo-class selector.

    Use :meth:`parse` to construct one; it validates the name and the
    argument.

    Attributes:
        name     (:class:`str`)
        arg      (:class:`Optional`\\[:class:`str`])
        nth      (:class:`Optional`\\[:class:`Tuple`\\[:class:`int`, :class:`int`]]):
            ``(a, b)`` of an ``an+b`` argument.
        negation (:class:`Optional`\\[:class:`Selector`]):
            Argument of ``:not()``.
    """

    def __init__(
        self,
        name: str,
        arg: Optional[str] = None,
        *,
        nth: Optional[Tuple[int, int]] = None,
        negation: Optional[Selector] = None
    ) -> None:
        self.name = name
        self.arg = arg
        self.nth = nth
        self.negation = negation

    def __repr__(self) -> str:
        return "<PseudoClassSelector %s>" % repr(str(self))

    def __str__(self) -> str:
        if self.arg is None:
            return ":%s" % self.name
        return ":%s(%s)" % (self.name, self.arg.strip())

    @classmethod
    def parse(
        cls, name: str, arg: Optional[str], s: str, cursor: int
    ) -> "PseudoClassSelector":
        """
        Validates `name` and `arg` (found at `cursor` of `s`) and builds
        the selector.
        """
        if name in STATE_PSEUDO_CLASSES or name in PLAIN_PSEUDO_CLASSES:
            if arg is not None:
                raise UnknownSelectorSyntaxError(
                    s, cursor, "pseudo-class :%s takes no argument" % name
                )
            return cls(name)
        if name in NTH_PSEUDO_CLASSES:
            if arg is None:
                raise UnknownSelectorSyntaxError(
                    s, cursor, "pseudo-class :%s requires an argument" % name
                )
            nth = _parse_nth(arg)
            if nth is None:
                raise UnknownSelectorSyntaxError(
                    s, cursor, "malformed an+b expression %s" % repr(arg)
                )
            return cls(name, arg, nth=nth)
        if name == "not":
            if arg is None or not arg.strip():
                raise UnknownSelectorSyntaxError(
                    s, cursor, "pseudo-class :not requires an argument"
                )
            negation, end = Selector.from_str(arg)
            if end < len(arg) or negation.previous or negation.pseudo_element:
                raise UnknownSelectorSyntaxError(
                    s, cursor, ":not() takes a single sequence of simple selectors"
                )
            return cls(name, arg, negation=negation)
        raise UnknownSelectorSyntaxError(
            s, cursor, "unsupported pseudo-class :%s" % name
        )

    @property
    def is_dynamic(self) -> bool:
        if self.negation is not None:
            return self.negation.is_dynamic
        return self.name in STATE_PSEUDO_CLASSES

    @property
    def specificity(self) -> Specificity:
        if self.negation is not None:
            return self.negation.specificity
        return Specificity(0, 1, 0)

    def matches(self, node: "Node") -> bool:
        name = self.name
        if name in STATE_PSEUDO_CLASSES:
            return False
        if self.negation is not None:
            return not self.negation.matches(node)
        if name == "root":
            return node.parent is None or not node.parent.tag
        if name == "empty":
            return not any(child.tag or child.text for child in node.children)
        if name in ("link", "any-link"):
            return node.tag in ("a", "area") and "href" in node.attrs
        if name == "checked":
            return (node.tag == "input" and "checked" in node.attrs) or (
                node.tag == "option" and "selected" in node.attrs
            )
        if name in ("disabled", "enabled"):
            if node.tag not in FORM_CONTROLS:
                return False
            return ("disabled" in node.attrs) == (name == "disabled")

        siblings = _element_siblings(node)
        if name.endswith("of-type"):
            siblings = [sibling for sibling in siblings if sibling.tag == node.tag]
        index = _index_of(node, siblings)
        if name in ("first-child", "first-of-type"):
            return index == 0
        if name in ("last-child", "last-of-type"):
            return index == len(siblings) - 1
        if name in ("only-child", "only-of-type"):
            return len(siblings) == 1
        a, b = cast(Tuple[int, int], self.nth)
        if name.startswith("nth-last"):
            position = len(siblings) - index
        else:
            position = index + 1
        return _nth_matches(position, a, b)


class AttributeSelectorType(Enum):
    """Attribute selector forms, valued by their operator."""

    # [attr]
    BARE = ""
    # [attr=val]
    EQUAL = "="
    # [attr~=val]
    TILDE = "~="
    # [attr|=val]
    PIPE = "|="
    # [attr^=val]
    CARET = "^="
    # [attr$=val]
    DOLLAR = "$="
    # [attr*=val]
    ASTERISK = "*="


class Combinator(Enum):
    """Combinators, valued by their CSS token."""

    DESCENDANT = " "
    CHILD = ">"
    NEXT_SIBLING = "+"
    SUBSEQUENT_SIBLING = "~"


def as_selector_group(selector: Union[str, SelectorGroup, Selector]) -> SelectorGroup:
    """Parses `selector` if it is a string; wraps a lone :class:`Selector`."""
    if isinstance(selector, SelectorGroup):
        return selector
    if isinstance(selector, Selector):
        return SelectorGroup([selector])
    if isinstance(selector, str):
        return SelectorGroup.from_str(selector)
    raise TypeError("not a selector or group of selectors: %r" % (selector,))


def matches(node: "Node", selector: Union[str, SelectorGroup, Selector]) -> bool:
    """Decides whether `selector` (a string or parsed selector) matches `node`."""
    return as_selector_group(selector).matches(node)


# Simple selectors.
TYPE_SEL = re.compile(r"[\w-]+", re.A)
UNIVERSAL_SEL = re.compile(r"\*")
ATTR_SEL = re.compile(
    r"""\[
    \s*(?P<attr>[\w-]+)\s*
    (
        (?P<op>[~|^$*]?=)\s*
        (
            (?P<val_identifier>[\w-]+)|
            (?P<val_string>
                (?P<quote>['"])
                (?P<val_string_inner>.*?)
                (?<!\\)(?P=quote)
            )
        )\s*
    )?
    \]""",
    re.A | re.X,
)
CLASS_SEL = re.compile(r"\.([\w-]+)", re.A)
ID_SEL = re.compile(r"#([\w-]+)", re.A)
PSEUDO_CLASS_SEL = re.compile(r":(?P<name>[\w-]+)(\((?P<arg>[^)]*)\))?", re.A)
PSEUDO_ELEM_SEL = re.compile(r"::([\w-]+)", re.A)

# Combinators
DESCENDANT_COM = re.compile(r"\s+")
CHILD_COM = re.compile(r"\s*>\s*")
NEXT_SIB_COM = re.compile(r"\s*\+\s*")
SUB_SIB_COM = re.compile(r"\s*~\s*")

# Misc
WHITESPACE = re.compile(r"\s*")
END_OF_SELECTOR = re.compile(r"\s*($|,)")

# Tried in order after each sequence; the descendant combinator comes
# last since whitespace also prefixes every other case. None ends the
# selector.
COMBINATORS = (
    (CHILD_COM, Combinator.CHILD),
    (NEXT_SIB_COM, Combinator.NEXT_SIBLING),
    (SUB_SIB_COM, Combinator.SUBSEQUENT_SIBLING),
    (END_OF_SELECTOR, None),
    (DESCENDANT_COM, Combinator.DESCENDANT),
)  # type: Tuple[Tuple[Pattern[str], Optional[Combinator]], ...]

ATTRIBUTE_TESTS = {
    AttributeSelectorType.BARE: lambda actual, val: True,
    AttributeSelectorType.EQUAL: lambda actual, val: actual == val,
    AttributeSelectorType.TILDE: lambda actual, val: val in actual.split(),
    AttributeSelectorType.PIPE: lambda actual, val: (
        actual == val or actual.startswith(val + "-")
    ),
    AttributeSelectorType.CARET: lambda actual, val: bool(val) and actual.startswith(val),
    AttributeSelectorType.DOLLAR: lambda actual, val: bool(val) and actual.endswith(val),
    AttributeSelectorType.ASTERISK: lambda actual, val: bool(val) and val in actual,
}  # type: Dict[AttributeSelectorType, Callable[[str, str], bool]]

NTH_EXPR = re.compile(
    r"""^\s*(?:
        (?P<odd>odd)|
        (?P<even>even)|
        (?P<a>[+-]?\d*)n\s*(?:(?P<sign>[+-])\s*(?P<b>\d+))?|
        (?P<b_only>[+-]?\d+)
    )\s*$""",
    re.A | re.I | re.X,
)

STATE_PSEUDO_CLASSES = frozenset(
    ("hover", "active", "focus", "focus-within", "focus-visible", "visited", "target")
)
PLAIN_PSEUDO_CLASSES = frozenset(
    (
        "root",
        "empty",
        "first-child",
        "last-child",
        "only-child",
        "first-of-type",
        "last-of-type",
        "only-of-type",
        "link",
        "any-link",
        "checked",
        "disabled",
        "enabled",
    )
)
NTH_PSEUDO_CLASSES = frozenset(
    ("nth-child", "nth-last-child", "nth-of-type", "nth-last-of-type")
)
LEGACY_PSEUDO_ELEMENTS = frozenset(("before", "after", "first-line", "first-letter"))
FORM_CONTROLS = frozenset(
    ("button", "input", "select", "textarea", "optgroup", "option", "fieldset")
)


def _parse_nth(expr: str) -> Optional[Tuple[int, int]]:
    """Parses ``an+b``, ``odd`` or ``even`` into ``(a, b)``."""
    m = NTH_EXPR.match(expr)
    if not m:
        return None
    if m.group("odd"):
        return 2, 1
    if m.group("even"):
        return 2, 0
    if m.group("b_only") is not None:
        return 0, int(m.group("b_only"))
    a_part = m.group("a")
    if a_part in ("", "+"):
        a = 1
    elif a_part == "-":
        a = -1
    else:
        a = int(a_part)
    b = int(m.group("b") or 0)
    if m.group("sign") == "-":
        b = -b
    return a, b


def _nth_matches(position: int, a: int, b: int) -> bool:
    """Checks whether the 1-based `position` is ``a*n + b`` for some n >= 0."""
    if a == 0:
        return position == b
    diff = position - b
    if a > 0:
        return diff >= 0 and diff % a == 0
    return diff <= 0 and diff % a == 0


def _element_siblings(node: "Node") -> List["Node"]:
    if node.parent is None:
        return [node]
    return [child for child in node.parent.children if child.tag]


def _index_of(node: "Node", nodes: List["Node"]) -> int:
    for index, other in enumerate(nodes):
        if other is node:
            return index
    raise ValueError("node is not found in children of its parent")  # pragma: no cover
