"""
CSS stylesheet parser.

Turns stylesheet text into an ordered list of :class:`StyleRule`, each a
parsed :class:`~stylecheck.selector.SelectorGroup` paired with its
:class:`Declaration` list. Parsing is strict: anything that cannot be
read as rules and declarations raises
:class:`MalformedStylesheetError`, since silently dropping a rule would
hide the very mistakes a checker is meant to report.

At-rules are recorded but not interpreted.
"""

import logging
import re
from enum import IntEnum
from typing import Iterator, List, Optional, Tuple

from .selector import SelectorGroup, UnknownSelectorSyntaxError

logger = logging.getLogger(__name__)


class MalformedStylesheetError(Exception):
    """
    Exception raised when stylesheet text cannot be parsed.

    Attributes:
        pos (:class:`Optional`\\[:class:`Tuple`\\[:class:`int`, :class:`int`]]):
            Line number and offset in the stylesheet, when known.
        why (:class:`str`):
            Reason of the exception.
    """

    def __init__(self, pos: Optional[Tuple[int, int]], why: str) -> None:
        super().__init__(pos, why)
        self.pos = pos
        self.why = why

    def __str__(self) -> str:
        if self.pos is None:
            return "stylesheet parser aborted: %s" % self.why
        return "stylesheet parser aborted at %d:%d: %s" % (
            self.pos[0],
            self.pos[1],
            self.why,
        )


class Origin(IntEnum):
    """
    Where a declaration comes from. Inline declarations (``style``
    attributes) outrank rule declarations regardless of specificity.
    """

    RULE = 1
    INLINE = 2


class Declaration:
    """
    A single ``property: value`` pair.

    Attributes:
        property     (:class:`str`): lower-cased property name.
        value        (:class:`str`): value with ``!important`` removed.
        important    (:class:`bool`)
        origin       (:class:`Origin`)
        source_index (:class:`int`): position among the declarations of
            the stylesheet (or ``style`` attribute) it was parsed from.
        pos          (:class:`Optional`\\[:class:`Tuple`\\[:class:`int`, :class:`int`]])
    """

    def __init__(
        self,
        property: str,
        value: str,
        *,
        important: bool = False,
        origin: Origin = Origin.RULE,
        source_index: int = 0,
        pos: Optional[Tuple[int, int]] = None
    ) -> None:
        self.property = property.lower()
        self.value = value
        self.important = important
        self.origin = origin
        self.source_index = source_index
        self.pos = pos

    def __repr__(self) -> str:
        return "<Declaration %s>" % repr(str(self))

    def __str__(self) -> str:
        s = "%s: %s" % (self.property, self.value)
        if self.important:
            s += " !important"
        return s


class StyleRule:
    """
    A qualified rule: a selector group and its declarations.

    Attributes:
        selectors     (:class:`~stylecheck.selector.SelectorGroup`)
        selector_text (:class:`str`): the selector as written, with
            whitespace collapsed.
        declarations  (:class:`List`\\[:class:`Declaration`])
        pos           (:class:`Optional`\\[:class:`Tuple`\\[:class:`int`, :class:`int`]])
    """

    def __init__(
        self,
        selectors: SelectorGroup,
        selector_text: str,
        declarations: List[Declaration],
        pos: Optional[Tuple[int, int]] = None,
    ) -> None:
        self.selectors = selectors
        self.selector_text = selector_text
        self.declarations = declarations
        self.pos = pos

    def __repr__(self) -> str:
        return "<StyleRule %s>" % repr(str(self))

    def __str__(self) -> str:
        return "%s { %s }" % (
            self.selector_text,
            " ".join("%s;" % declaration for declaration in self.declarations),
        )

    def get(self, prop: str) -> Optional[str]:
        """Value of the last declaration of `prop` in this rule, if any."""
        prop = prop.lower()
        for declaration in reversed(self.declarations):
            if declaration.property == prop:
                return declaration.value
        return None

    @property
    def is_dynamic(self) -> bool:
        return self.selectors.is_dynamic


class AtRule:
    """
    An uninterpreted at-rule such as ``@media`` or ``@import``.

    Attributes:
        name    (:class:`str`): lower-cased name, without ``@``.
        prelude (:class:`str`)
        block   (:class:`Optional`\\[:class:`str`]): raw block contents,
            ``None`` for statement at-rules.
        pos     (:class:`Optional`\\[:class:`Tuple`\\[:class:`int`, :class:`int`]])
    """

    def __init__(
        self,
        name: str,
        prelude: str,
        block: Optional[str] = None,
        pos: Optional[Tuple[int, int]] = None,
    ) -> None:
        self.name = name
        self.prelude = prelude
        self.block = block
        self.pos = pos

    def __repr__(self) -> str:
        return "<AtRule @%s %s>" % (self.name, repr(self.prelude))


class Stylesheet:
    """
    An ordered sequence of :class:`StyleRule`.

    Iterating, indexing and ``len()`` operate on the style rules;
    at-rules are kept apart in :attr:`at_rules`.
    """

    def __init__(
        self,
        rules: Optional[List[StyleRule]] = None,
        at_rules: Optional[List[AtRule]] = None,
        source: Optional[str] = None,
    ) -> None:
        self.rules = rules or []
        self.at_rules = at_rules or []
        self.source = source

    def __repr__(self) -> str:
        return "<Stylesheet rules=%s>" % repr(self.rules)

    def __len__(self) -> int:
        return len(self.rules)

    def __getitem__(self, index: int) -> StyleRule:
        return self.rules[index]

    def __iter__(self) -> Iterator[StyleRule]:
        return iter(self.rules)

    def dynamic_rules(self) -> List[StyleRule]:
        """
        Rules whose selectors depend on interaction state (``:hover``,
        ``:focus``...). They never apply to a static document, but are
        still present here for inspection.
        """
        return [rule for rule in self.rules if rule.is_dynamic]


AT_KEYWORD = re.compile(r"@(-?[\w-]+)", re.A)
PROPERTY_NAME = re.compile(r"-{0,2}[A-Za-z_][\w-]*", re.A)
IMPORTANT = re.compile(r"!\s*important\s*$", re.I)
WHITESPACE_RUN = re.compile(r"\s+")


class StylesheetParser:
    """
    Cursor-based parser over comment-free stylesheet text.

    Comments are blanked out up front (replaced by spaces, newlines
    kept) so that every reported position still refers to the original
    text.
    """

    def __init__(self, s: str, *, origin: Origin = Origin.RULE) -> None:
        self.source = s
        self.s = _blank_comments(s)
        self.i = 0
        self.origin = origin
        self._index = 0

    def pos(self, i: int) -> Tuple[int, int]:
        """(line, offset) of index `i`, in the convention of :class:`html.parser.HTMLParser`."""
        line = self.s.count("\n", 0, i) + 1
        offset = i - (self.s.rfind("\n", 0, i) + 1)
        return line, offset

    def error(self, i: int, why: str) -> MalformedStylesheetError:
        return MalformedStylesheetError(self.pos(i), why)

    def whitespace(self) -> None:
        while self.i < len(self.s) and self.s[self.i].isspace():
            self.i += 1

    def parse(self) -> Stylesheet:
        rules = []
        at_rules = []
        while True:
            self.whitespace()
            if self.i >= len(self.s):
                break
            c = self.s[self.i]
            if c == "}":
                raise self.error(self.i, "unexpected '}'")
            if c == "@":
                at_rules.append(self.at_rule())
            else:
                rules.append(self.rule())
        return Stylesheet(rules, at_rules, self.source)

    def rule(self) -> StyleRule:
        start = self.i
        j = self.scan(start, "{;}")
        if j == len(self.s) or self.s[j] != "{":
            raise self.error(start, "expecting '{' after selector")
        selector_text = _collapse(self.s[start:j])
        if not selector_text:
            raise self.error(start, "missing selector")
        try:
            selectors = SelectorGroup.from_str(selector_text)
        except UnknownSelectorSyntaxError as e:
            raise self.error(
                start, "invalid selector %s: %s" % (repr(selector_text), e.why)
            ) from e
        self.i = j + 1
        declarations = self.declarations(block_start=j)
        return StyleRule(selectors, selector_text, declarations, self.pos(start))

    def at_rule(self) -> AtRule:
        start = self.i
        m = AT_KEYWORD.match(self.s, start)
        if not m:
            raise self.error(start, "expecting at-rule name")
        name = m.group(1).lower()
        j = self.scan(m.end(), "{;}")
        prelude = _collapse(self.s[m.end() : j])
        if j == len(self.s):
            raise self.error(start, "unterminated at-rule @%s" % name)
        if self.s[j] == "}":
            raise self.error(j, "unexpected '}'")
        if self.s[j] == ";":
            self.i = j + 1
            logger.debug("skipping @%s statement at %d:%d", name, *self.pos(start))
            return AtRule(name, prelude, None, self.pos(start))
        end = self.matching_brace(j)
        self.i = end + 1
        logger.debug("skipping @%s block at %d:%d", name, *self.pos(start))
        return AtRule(name, prelude, self.s[j + 1 : end], self.pos(start))

    def declarations(self, block_start: Optional[int] = None) -> List[Declaration]:
        """
        Parses declarations up to the closing brace (when `block_start`
        is given) or to the end of input (a ``style`` attribute body).
        """
        declarations = []
        while True:
            self.whitespace()
            if self.i >= len(self.s):
                if block_start is not None:
                    raise self.error(block_start, "unterminated block")
                break
            c = self.s[self.i]
            if c == "}":
                if block_start is None:
                    raise self.error(self.i, "unexpected '}'")
                self.i += 1
                break
            if c == ";":
                self.i += 1
                continue
            start = self.i
            j = self.scan(start, "{;}")
            if j < len(self.s) and self.s[j] == "{":
                raise self.error(j, "unexpected '{' in declaration block")
            declarations.append(self.declaration(start, j))
            self.i = j + 1 if j < len(self.s) and self.s[j] == ";" else j
        return declarations

    def declaration(self, start: int, end: int) -> Declaration:
        text = self.s[start:end]
        colon = text.find(":")
        if colon < 0:
            raise self.error(start, "expecting ':' in declaration %s" % repr(_collapse(text)))
        name = text[:colon].strip()
        if not PROPERTY_NAME.fullmatch(name):
            raise self.error(start, "invalid property name %s" % repr(name))
        value = _collapse(text[colon + 1 :])
        important = False
        m = IMPORTANT.search(value)
        if m:
            important = True
            value = value[: m.start()].rstrip()
        if not value:
            raise self.error(start, "missing value for property %s" % repr(name))
        declaration = Declaration(
            name,
            value,
            important=important,
            origin=self.origin,
            source_index=self._index,
            pos=self.pos(start),
        )
        self._index += 1
        return declaration

    def scan(self, start: int, stops: str) -> int:
        """
        Index of the first character in `stops` at or after `start`,
        outside strings and parentheses, or the length of the text.
        """
        s = self.s
        depth = 0
        k = start
        while k < len(s):
            c = s[k]
            if c in "\"'":
                k = self.skip_string(k)
                continue
            if c == "(":
                depth += 1
            elif c == ")":
                depth = max(depth - 1, 0)
            elif depth == 0 and c in stops:
                return k
            k += 1
        return len(s)

    def skip_string(self, start: int) -> int:
        s = self.s
        quote = s[start]
        k = start + 1
        while k < len(s):
            c = s[k]
            if c == "\\":
                k += 2
                continue
            if c == quote:
                return k + 1
            if c == "\n":
                break
            k += 1
        raise self.error(start, "unterminated string")

    def matching_brace(self, start: int) -> int:
        depth = 0
        k = start
        while True:
            k = self.scan(k, "{}")
            if k == len(self.s):
                raise self.error(start, "unterminated block")
            depth += 1 if self.s[k] == "{" else -1
            if depth == 0:
                return k
            k += 1


def parse_stylesheet(css: str) -> Stylesheet:
    """
    Parses stylesheet text.

    Raises :class:`MalformedStylesheetError` on unparsable input.
    """
    return StylesheetParser(css).parse()


def parse_declarations(text: str, *, origin: Origin = Origin.INLINE) -> List[Declaration]:
    """
    Parses the body of a ``style`` attribute (declarations without
    braces).

    Raises :class:`MalformedStylesheetError` on unparsable input.
    """
    return StylesheetParser(text, origin=origin).declarations()


def _collapse(text: str) -> str:
    return WHITESPACE_RUN.sub(" ", text).strip()


def _blank_comments(s: str) -> str:
    """Replaces every comment by spaces, keeping newlines and string contents."""
    out = []
    k = 0
    quote = None
    while k < len(s):
        c = s[k]
        if quote:
            out.append(c)
            if c == "\\" and k + 1 < len(s):
                out.append(s[k + 1])
                k += 2
                continue
            if c == quote or c == "\n":
                quote = None
        elif c in "\"'":
            quote = c
            out.append(c)
        elif s.startswith("/*", k):
            end = s.find("*/", k + 2)
            if end < 0:
                line = s.count("\n", 0, k) + 1
                offset = k - (s.rfind("\n", 0, k) + 1)
                raise MalformedStylesheetError((line, offset), "unterminated comment")
            comment = s[k : end + 2]
            out.append("".join("\n" if ch == "\n" else " " for ch in comment))
            k = end + 2
            continue
        else:
            out.append(c)
        k += 1
    return "".join(out)
