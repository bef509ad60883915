"""
Lint rules for markup and stylesheets.

Rules are named after the htmllint / csslint options coursework
checkers are usually configured with, and take the same option values:

.. doctest::

   >>> from stylecheck import parse_html
   >>> from stylecheck.lint import lint
   >>> document = parse_html('<html><body><b>bold</b></body></html>')
   >>> [v.rule for v in lint(document, config={'tag-bans': ['b'], 'html-req-lang': True})]
   ['html-req-lang', 'tag-bans']

A rule runs only when its option is present and not false. Unknown
options are ignored. Violations are ordered by position (markup before
stylesheet), then by rule registration order.
"""

import logging
import re
from collections import OrderedDict
from typing import (
    Any,
    Callable,
    Dict,
    Iterator,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Tuple,
    Union,
)

from .dom import DocumentNode, Node
from .stylesheet import Stylesheet, parse_stylesheet

logger = logging.getLogger(__name__)

MARKUP = "markup"
STYLESHEET = "stylesheet"

Position = Tuple[int, int]
# What a check yields: where, and the fields for the message template.
Finding = Tuple[Union[Any, Position], Dict[str, Any]]


class ConfigurationError(ValueError):
    """
    Exception raised for a lint option with an unusable value.

    Attributes:
        rule  (:class:`str`): rule id.
        value: the offending value.
        why   (:class:`str`)
    """

    def __init__(self, rule: str, value: Any, why: str) -> None:
        super().__init__(rule, value, why)
        self.rule = rule
        self.value = value
        self.why = why

    def __str__(self) -> str:
        return "invalid value %s for lint option %s: %s" % (
            repr(self.value),
            repr(self.rule),
            self.why,
        )


class Violation(NamedTuple):
    """
    A single lint finding.

    Attributes:
        rule    (:class:`str`): rule id.
        message (:class:`str`)
        node:   the offending element, style rule or declaration, if any.
        pos     (:class:`Optional`\\[:class:`Tuple`\\[:class:`int`, :class:`int`]]):
            line and offset in the markup or stylesheet text.
        source  (:class:`str`): ``"markup"`` or ``"stylesheet"``.
    """

    rule: str
    message: str
    node: Any = None
    pos: Optional[Position] = None
    source: str = MARKUP

    def __str__(self) -> str:
        if self.pos is None:
            return "%s: %s" % (self.rule, self.message)
        return "%s:%d:%d: %s: %s" % (
            self.source,
            self.pos[0],
            self.pos[1],
            self.rule,
            self.message,
        )


class LintRule:
    """
    A named check.

    Attributes:
        id      (:class:`str`)
        message (:class:`str`): :meth:`str.format` template filled with
            the fields the check reports.
        target  (:class:`str`): :data:`MARKUP` or :data:`STYLESHEET`.
        index   (:class:`int`): registration order.
    """

    def __init__(
        self,
        id: str,
        check: Callable[..., Iterator[Finding]],
        message: str,
        coerce: Callable[[str, Any], Any],
        target: str,
        index: int,
    ) -> None:
        self.id = id
        self.check = check
        self.message = message
        self.coerce = coerce
        self.target = target
        self.index = index

    def __repr__(self) -> str:
        return "<LintRule %s>" % self.id

    def run(self, option: Any, subject: Any) -> Iterator[Violation]:
        """Runs the check on `subject` (a tree or a stylesheet)."""
        for where, fields in self.check(option, subject):
            if isinstance(where, tuple):
                node, pos = None, where
            else:
                node, pos = where, getattr(where, "pos", None)
            yield Violation(
                self.id, self.message.format(**fields), node, pos, self.target
            )


_RULES = OrderedDict()  # type: OrderedDict[str, LintRule]


def _rule(
    id: str, message: str, coerce: Callable[[str, Any], Any], target: str = MARKUP
) -> Callable[[Callable[..., Iterator[Finding]]], Callable[..., Iterator[Finding]]]:
    def register(
        check: Callable[..., Iterator[Finding]]
    ) -> Callable[..., Iterator[Finding]]:
        _RULES[id] = LintRule(id, check, message, coerce, target, len(_RULES))
        return check

    return register


def registered_rules() -> List[LintRule]:
    """All known rules, in registration order."""
    return list(_RULES.values())


class LintConfig:
    """
    Validated lint options.

    Built from a flat mapping of rule id to option value. Options for
    unknown rule ids are ignored; values that a rule cannot use raise
    :class:`ConfigurationError`.
    """

    def __init__(self, options: Optional[Mapping[str, Any]] = None) -> None:
        self.options = OrderedDict()  # type: OrderedDict[str, Any]
        for key, value in (options or {}).items():
            rule = _RULES.get(key)
            if rule is None:
                logger.debug("ignoring unknown lint option %r", key)
                continue
            coerced = rule.coerce(key, value)
            if coerced is not None:
                self.options[key] = coerced

    def __repr__(self) -> str:
        return "<LintConfig %s>" % repr(dict(self.options))

    def __contains__(self, rule: str) -> bool:
        return rule in self.options

    def get(self, rule: str) -> Any:
        return self.options.get(rule)

    def enabled(self) -> Iterator[Tuple[LintRule, Any]]:
        """Enabled rules with their options, in registration order."""
        for rule in _RULES.values():
            if rule.id in self.options:
                yield rule, self.options[rule.id]


ConfigLike = Union[None, LintConfig, Mapping[str, Any]]

DEFAULT_STYLESHEET_OPTIONS = {
    "empty-rules": True,
    "duplicate-properties": True,
    "zero-units": True,
    "important": True,
}


def lint(
    tree: Node,
    stylesheet: Union[None, str, Stylesheet] = None,
    config: ConfigLike = None,
) -> List[Violation]:
    """
    Runs the enabled rules over `tree` and, for stylesheet rules, over
    `stylesheet`.

    Raw-text rules (line endings, whitespace, indentation) need the
    source text and only run on a :class:`~stylecheck.dom.DocumentNode`
    produced by :func:`~stylecheck.dom.parse_html`.
    """
    return _run(tree, stylesheet, config)


def lint_stylesheet(
    stylesheet: Union[str, Stylesheet], config: ConfigLike = None
) -> List[Violation]:
    """
    Runs the stylesheet rules only. Without `config`, every stylesheet
    rule is enabled (see :data:`DEFAULT_STYLESHEET_OPTIONS`).
    """
    if config is None:
        config = DEFAULT_STYLESHEET_OPTIONS
    return _run(None, stylesheet, config)


def _run(
    tree: Optional[Node],
    stylesheet: Union[None, str, Stylesheet],
    config: ConfigLike,
) -> List[Violation]:
    if not isinstance(config, LintConfig):
        config = LintConfig(config)
    if isinstance(stylesheet, str):
        stylesheet = parse_stylesheet(stylesheet)
    order = _document_order(tree) if tree is not None else {}
    found = []
    for rule, option in config.enabled():
        subject = tree if rule.target == MARKUP else stylesheet
        if subject is None:
            continue
        for seq, violation in enumerate(rule.run(option, subject)):
            key = (
                0 if violation.source == MARKUP else 1,
                violation.pos or (0, 0),
                order.get(id(violation.node), -1),
                rule.index,
                seq,
            )
            found.append((key, violation))
    found.sort(key=lambda item: item[0])
    return [violation for _, violation in found]


def _document_order(tree: Node) -> Dict[int, int]:
    return {id(node): index for index, node in enumerate(_elements(tree))}


def _elements(tree: Node) -> Iterator[Node]:
    if tree.tag:
        yield tree
    for node in tree.descendants():
        if node.tag:
            yield node


# Option coercion. Each returns None when the rule is disabled.


def _flag(rule: str, value: Any) -> Optional[bool]:
    if value is None or value is False:
        return None
    if value is True:
        return True
    raise ConfigurationError(rule, value, "expecting true or false")


def _names(default: List[str]) -> Callable[[str, Any], Optional[List[str]]]:
    def coerce(rule: str, value: Any) -> Optional[List[str]]:
        if value is None or value is False:
            return None
        if value is True:
            return list(default)
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple, set, frozenset)) and all(
            isinstance(name, str) for name in value
        ):
            return [name.lower() for name in value]
        raise ConfigurationError(rule, value, "expecting a list of names")

    return coerce


def _choice(*choices: str, off: str = "none") -> Callable[[str, Any], Optional[str]]:
    def coerce(rule: str, value: Any) -> Optional[str]:
        if value is None or value is False:
            return None
        if isinstance(value, str):
            value = value.lower()
            if value == off:
                return None
            if value in choices:
                return value
        raise ConfigurationError(
            rule, value, "expecting one of %s" % ", ".join(choices + (off,))
        )

    return coerce


def _alt_option(rule: str, value: Any) -> Union[None, bool, str]:
    if isinstance(value, str) and value.lower() == "allownull":
        return "allownull"
    return _flag(rule, value)


def _positive_int(rule: str, value: Any) -> Optional[int]:
    if value is None or value is False:
        return None
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    raise ConfigurationError(rule, value, "expecting a positive integer")


# Markup rules.

DEFAULT_ATTR_BANS = [
    "align",
    "background",
    "bgcolor",
    "border",
    "frameborder",
    "longdesc",
    "marginwidth",
    "marginheight",
    "scrolling",
    "style",
    "width",
]
DEFAULT_TAG_BANS = ["style", "b", "i"]

NAME_STYLES = OrderedDict(
    (
        ("lowercase", re.compile(r"[a-z\d]+([_-][a-z\d]+)*")),
        ("underscore", re.compile(r"[a-z\d]+(_[a-z\d]+)*")),
        ("dash", re.compile(r"[a-z\d]+(-[a-z\d]+)*")),
        ("camel", re.compile(r"[a-z][a-zA-Z\d]*")),
        (
            "bem",
            re.compile(
                r"[a-z\d]+(-[a-z\d]+)*"
                r"(__[a-z\d]+(-[a-z\d]+)*)?"
                r"(--[a-z\d]+(-[a-z\d]+)*)?"
            ),
        ),
    )
)
HTML5_DOCTYPES = ("doctype html", 'doctype html system "about:legacy-compat"')


def _document(tree: Node) -> Optional[DocumentNode]:
    root = tree.root()
    return root if isinstance(root, DocumentNode) else None


@_rule("doctype-first", "doctype must come before any content", _flag)
def _doctype_first(option: bool, tree: Node) -> Iterator[Finding]:
    document = _document(tree)
    if document is None or document.doctype is None:
        yield (1, 0), {}
    elif not document.doctype_first:
        yield document.doctype_pos or (1, 0), {}


@_rule("doctype-html5", "doctype is not the HTML5 doctype: {found}", _flag)
def _doctype_html5(option: bool, tree: Node) -> Iterator[Finding]:
    document = _document(tree)
    if document is None or document.doctype is None:
        yield (1, 0), {"found": "no doctype"}
        return
    normalized = " ".join(document.doctype.split()).lower().replace("'", '"')
    if normalized not in HTML5_DOCTYPES:
        yield document.doctype_pos or (1, 0), {"found": "<!%s>" % document.doctype}


@_rule("html-req-lang", "<html> has no lang attribute", _flag)
def _html_req_lang(option: bool, tree: Node) -> Iterator[Finding]:
    for node in _elements(tree):
        if node.tag == "html" and not node.attrs.get("lang", "").strip():
            yield node, {}


@_rule("attr-bans", "attribute {attr!r} is banned on <{tag}>", _names(DEFAULT_ATTR_BANS))
def _attr_bans(option: List[str], tree: Node) -> Iterator[Finding]:
    for node in _elements(tree):
        for attr in node.attrs:
            if attr in option:
                yield node, {"attr": attr, "tag": node.tag}


@_rule("tag-bans", "tag <{tag}> is banned", _names(DEFAULT_TAG_BANS))
def _tag_bans(option: List[str], tree: Node) -> Iterator[Finding]:
    for node in _elements(tree):
        if node.tag in option:
            yield node, {"tag": node.tag}


@_rule(
    "attr-name-style",
    "attribute name {attr!r} is not {style} style",
    _choice(*NAME_STYLES),
)
def _attr_name_style(option: str, tree: Node) -> Iterator[Finding]:
    pattern = NAME_STYLES[option]
    for node in _elements(tree):
        for attr in node.attrs:
            if not pattern.fullmatch(attr):
                yield node, {"attr": attr, "style": option}


@_rule("class-style", "class {name!r} is not {style} style", _choice(*NAME_STYLES))
def _class_style(option: str, tree: Node) -> Iterator[Finding]:
    pattern = NAME_STYLES[option]
    for node in _elements(tree):
        for name in node.classes:
            if not pattern.fullmatch(name):
                yield node, {"name": name, "style": option}


@_rule("id-no-dup", "id {id!r} is already used", _flag)
def _id_no_dup(option: bool, tree: Node) -> Iterator[Finding]:
    seen = set()
    for node in _elements(tree):
        id_ = node.attrs.get("id")
        if id_ is None:
            continue
        if id_ in seen:
            yield node, {"id": id_}
        seen.add(id_)


@_rule("img-req-alt", "<img> has no {what} alt attribute", _alt_option)
def _img_req_alt(option: Union[bool, str], tree: Node) -> Iterator[Finding]:
    for node in _elements(tree):
        if node.tag != "img":
            continue
        alt = node.attrs.get("alt")
        if alt is None:
            yield node, {"what": "an"}
        elif not alt.strip() and option != "allownull":
            yield node, {"what": "a non-empty"}


@_rule(
    "link-req-noopener",
    'link with target="_blank" has no rel="noopener"',
    _flag,
)
def _link_req_noopener(option: bool, tree: Node) -> Iterator[Finding]:
    for node in _elements(tree):
        if node.tag not in ("a", "area"):
            continue
        if node.attrs.get("target", "").strip().lower() != "_blank":
            continue
        rel = node.attrs.get("rel", "").lower().split()
        if "noopener" not in rel and "noreferrer" not in rel:
            yield node, {}


LINE = re.compile(r"([^\r\n]*)(\r\n|\r|\n)?")
LINE_ENDINGS = {"lf": "\n", "crlf": "\r\n", "cr": "\r"}


def _lines(tree: Node) -> Iterator[Tuple[int, str, str]]:
    """(line number, text, line ending) of each source line."""
    document = _document(tree)
    if document is None or document.source is None:
        logger.debug("no source text, skipping raw text rule")
        return
    source = document.source
    lineno = 1
    i = 0
    while i < len(source):
        m = LINE.match(source, i)
        yield lineno, m.group(1), m.group(2) or ""
        lineno += 1
        i = m.end()


@_rule(
    "line-end-style",
    "line ending is not {style}",
    _choice(*LINE_ENDINGS, off="false"),
)
def _line_end_style(option: str, tree: Node) -> Iterator[Finding]:
    expected = LINE_ENDINGS[option]
    for lineno, text, ending in _lines(tree):
        if ending and ending != expected:
            yield (lineno, len(text)), {"style": option}


@_rule("line-no-trailing-whitespace", "line has trailing whitespace", _flag)
def _line_no_trailing_whitespace(option: bool, tree: Node) -> Iterator[Finding]:
    for lineno, text, _ in _lines(tree):
        stripped = text.rstrip(" \t\f\v")
        if stripped != text:
            yield (lineno, len(stripped)), {}


INDENT = re.compile(r"[ \t]*")


@_rule(
    "indent-style",
    "indentation {problem}",
    _choice("tabs", "spaces", "nonmixed", off="false"),
)
def _indent_style(option: str, tree: Node) -> Iterator[Finding]:
    for lineno, text, _ in _lines(tree):
        indent = INDENT.match(text).group()
        if not indent or indent == text:
            continue
        if option == "tabs" and " " in indent:
            yield (lineno, 0), {"problem": "uses spaces"}
        elif option == "spaces" and "\t" in indent:
            yield (lineno, 0), {"problem": "uses tabs"}
        elif option == "nonmixed" and " " in indent and "\t" in indent:
            yield (lineno, 0), {"problem": "mixes tabs and spaces"}


@_rule(
    "indent-width",
    "indentation of {width} spaces is not a multiple of {expected}",
    _positive_int,
)
def _indent_width(option: int, tree: Node) -> Iterator[Finding]:
    for lineno, text, _ in _lines(tree):
        indent = INDENT.match(text).group()
        if not indent or indent == text or "\t" in indent:
            continue
        if len(indent) % option:
            yield (lineno, 0), {"width": len(indent), "expected": option}


# Stylesheet rules.

ZERO_WITH_UNIT = re.compile(
    r"(?<![\w.#-])0+(\.0+)?(px|em|rem|ex|ch|pt|pc|cm|mm|in|q|vw|vh|vmin|vmax)\b",
    re.I,
)


@_rule("empty-rules", "rule {selector!r} has no declarations", _flag, STYLESHEET)
def _empty_rules(option: bool, stylesheet: Stylesheet) -> Iterator[Finding]:
    for rule in stylesheet:
        if not rule.declarations:
            yield rule, {"selector": rule.selector_text}


@_rule(
    "duplicate-properties",
    "property {property!r} is declared twice in {selector!r}",
    _flag,
    STYLESHEET,
)
def _duplicate_properties(option: bool, stylesheet: Stylesheet) -> Iterator[Finding]:
    # A repeated property directly following itself with another value
    # is a fallback, not a duplicate.
    for rule in stylesheet:
        seen = {}  # type: Dict[str, str]
        previous = None
        for declaration in rule.declarations:
            prop = declaration.property
            if prop in seen and (
                seen[prop] == declaration.value or previous != prop
            ):
                yield declaration, {"property": prop, "selector": rule.selector_text}
            seen[prop] = declaration.value
            previous = prop


@_rule(
    "zero-units",
    "unit on zero length in {property!r}: {value!r}",
    _flag,
    STYLESHEET,
)
def _zero_units(option: bool, stylesheet: Stylesheet) -> Iterator[Finding]:
    for rule in stylesheet:
        for declaration in rule.declarations:
            if ZERO_WITH_UNIT.search(declaration.value):
                yield declaration, {
                    "property": declaration.property,
                    "value": declaration.value,
                }


@_rule("important", "!important used on {property!r}", _flag, STYLESHEET)
def _important(option: bool, stylesheet: Stylesheet) -> Iterator[Finding]:
    for rule in stylesheet:
        for declaration in rule.declarations:
            if declaration.important:
                yield declaration, {"property": declaration.property}
