import pytest

from stylecheck import (
    Combinator,
    Selector,
    SelectorGroup,
    Specificity,
    UnknownSelectorSyntaxError,
    matches,
    parse_html,
)
from stylecheck.selector import _nth_matches, _parse_nth


LIST_HTML = """\
<div id="fixture">
  <ul id="list">
    <li class="item">one</li>
    <li class="item special">two</li>
    <li class="item">three</li>
    <li class="item">four</li>
    <li class="item">five</li>
  </ul>
  <p class="blank"></p>
  <p class="blank"> </p>
  <div class="mixed"><span>a</span><em>b</em><span>c</span></div>
  <a href="/x">link</a><a name="top">anchor</a>
  <form>
    <input type="checkbox" checked>
    <input type="text" disabled>
    <input type="text">
    <select><option selected>x</option><option>y</option></select>
  </form>
</div>
"""


@pytest.fixture(scope="module")
def doc():
    return parse_html(LIST_HTML)


def texts(nodes):
    return [node.text.strip() for node in nodes]


@pytest.mark.parametrize(
    "selector,expected",
    [
        ("li:first-child", ["one"]),
        ("li:last-child", ["five"]),
        ("li:only-child", []),
        ("li:nth-child(even)", ["two", "four"]),
        ("li:nth-child(odd)", ["one", "three", "five"]),
        ("li:nth-child(2n+1)", ["one", "three", "five"]),
        ("li:nth-child(2n + 1)", ["one", "three", "five"]),
        ("li:nth-child(3)", ["three"]),
        ("li:nth-child(-n+2)", ["one", "two"]),
        ("li:nth-child(n+4)", ["four", "five"]),
        ("li:nth-child(3n-1)", ["two", "five"]),
        ("li:nth-last-child(1)", ["five"]),
        ("li:nth-last-child(even)", ["two", "four"]),
        ("li:not(.special)", ["one", "three", "four", "five"]),
        ("li:not(:first-child):not(:last-child)", ["two", "three", "four"]),
        ("li:first-child:last-child", []),
        ("li.item:hover", []),
        ("ul > li:FIRST-CHILD", ["one"]),
        (".mixed > span:first-of-type", ["a"]),
        (".mixed > span:last-of-type", ["c"]),
        (".mixed > em:only-of-type", ["b"]),
        (".mixed > span:nth-of-type(2)", ["c"]),
        (".mixed > :nth-last-of-type(1)", ["b", "c"]),
        (".mixed :first-child", ["a"]),
        ("span + em", ["b"]),
        ("span ~ span", ["c"]),
        ("a:link", ["link"]),
        ("a:any-link", ["link"]),
        ("a:visited", []),
    ],
)
def test_pseudo_classes(doc, selector, expected):
    assert texts(doc.select_all(selector)) == expected


@pytest.mark.parametrize(
    "selector,count",
    [
        ("p:empty", 1),
        ("p.blank", 2),
        ("input:checked", 1),
        ("option:checked", 1),
        ("input:disabled", 1),
        ("input:enabled", 2),
        ("form :enabled", 5),
        ("li:focus", 0),
    ],
)
def test_pseudo_class_counts(doc, selector, count):
    assert len(doc.select_all(selector)) == count


def test_root_pseudo_class():
    doc = parse_html("<html><body><p>x</p></body></html>")
    assert [node.tag for node in doc.select_all(":root")] == ["html"]
    assert matches(doc.select("html"), "html:root")
    assert not matches(doc.select("body"), ":root")


def test_matches_type_id_class():
    doc = parse_html('<div id="main" class="note wide">x</div><div id="other">y</div>')
    main = doc.select("#main")
    assert matches(main, "div#main.note")
    assert matches(main, "DIV#main.note.wide")
    assert matches(main, SelectorGroup.from_str("span, div.wide"))
    assert not matches(main, "div#Main")
    assert not matches(main, "div#main.Note")
    assert not matches(main, "span#main.note")
    assert not matches(main, "div#other")
    assert not matches(doc.select("#other"), "div#main.note")


def test_text_nodes_never_match():
    doc = parse_html("<p>text</p>")
    text = doc.select("p").first_child()
    assert not matches(text, "*")
    assert not matches(text, ":not(p)")


@pytest.mark.parametrize(
    "selector,specificity",
    [
        ("*", (0, 0, 0)),
        ("li", (0, 0, 1)),
        ("ul li", (0, 0, 2)),
        ("ul ol+li", (0, 0, 3)),
        ("h1 + *[rel=up]", (0, 1, 1)),
        ("ul ol li.red", (0, 1, 3)),
        ("li.red.level", (0, 2, 1)),
        ("#x34y", (1, 0, 0)),
        ("#s12:not(FOO)", (1, 0, 1)),
        ("tr:nth-child(even)", (0, 1, 1)),
        ("tbody tr:hover", (0, 1, 2)),
        ("p::before", (0, 0, 2)),
        ("p:first-line", (0, 0, 2)),
        ("main#article > p.note[title]", (1, 2, 2)),
    ],
)
def test_specificity(selector, specificity):
    (parsed,) = SelectorGroup.from_str(selector)
    assert parsed.specificity == specificity


def test_specificity_ordering():
    assert Specificity(1, 0, 0) > Specificity(0, 10, 10)
    assert Specificity(0, 1, 0) > Specificity(0, 0, 10)
    assert Specificity(0, 1, 1).plus(Specificity(1, 0, 1)) == (1, 1, 2)


def test_matching_specificity():
    doc = parse_html('<p id="x" class="note">x</p>')
    p = doc.select("p")
    group = SelectorGroup.from_str("p, .note, #x, span")
    assert group.matching_specificity(p) == (1, 0, 0)
    assert SelectorGroup.from_str("span, div").matching_specificity(p) is None


@pytest.mark.parametrize(
    "selector,dynamic",
    [
        ("tbody tr:hover", True),
        ("a:focus, p", True),
        ("a:not(:visited)", True),
        ("tr:nth-child(2)", False),
        ("p::before", False),
    ],
)
def test_is_dynamic(selector, dynamic):
    assert SelectorGroup.from_str(selector).is_dynamic is dynamic


@pytest.mark.parametrize(
    "selector,expected",
    [
        ("p", "p"),
        ("ul   >li", "ul > li"),
        ("h1+h2 ~  p", "h1 + h2 ~ p"),
        ("li:nth-child( 2n+1 )", "li:nth-child(2n+1)"),
        ("p:before", "p::before"),
        ("a::AFTER", "a::after"),
        ("*.note", ".note"),
        ("a, b", "a, b"),
    ],
)
def test_selector_str(selector, expected):
    assert str(SelectorGroup.from_str(selector)) == expected


def test_selector_structure():
    (selector,) = SelectorGroup.from_str("main#main p.important > a.term[href]:first-child")
    assert selector.tag == "a"
    assert selector.classes == ["term"]
    assert [attr.attr for attr in selector.attrs] == ["href"]
    assert [pseudo.name for pseudo in selector.pseudo_classes] == ["first-child"]
    assert selector.combinator == Combinator.CHILD
    assert selector.previous.classes == ["important"]
    assert selector.previous.combinator == Combinator.DESCENDANT
    assert selector.previous.previous.id == "main"
    assert selector.previous.previous.previous is None


def test_partial_consumption():
    selector, cursor = Selector.from_str("p > a, div", 0)
    assert str(selector) == "p > a"
    assert cursor == 6
    selector, cursor = Selector.from_str("p > a, div", cursor)
    assert str(selector) == "div"
    assert cursor == 10


@pytest.mark.parametrize(
    "selector",
    [
        "",
        " ",
        ", p",
        "p,",
        "p, a,",
        "p, a, ",
        "p > a > ",
        "+ a",
        "[attr=val",
        "[attr=~val]",
        '[attr="val]',
        '[attr="val\\"]',
        "[attr='val]",
        "[attr='val\\']",
        "#id1#id2",
        "th[attr]td",
    ],
)
def test_bad_selector(selector):
    with pytest.raises(UnknownSelectorSyntaxError):
        SelectorGroup.from_str(selector)


@pytest.mark.parametrize(
    "selector",
    [
        "svg|a",
        "*|*",
        "|*",
        "a:unknown",
        "a:contains(x)",
        "a:hover(1)",
        "li:first-child(2)",
        "li:nth-child",
        "li:nth-child()",
        "li:nth-child(foo)",
        "li:nth-child(2n+)",
        "li:not()",
        "li:not(ul li)",
        "li:not(::before)",
        "p::before span",
        "p::before.note",
        "p::before:hover",
    ],
)
def test_unsupported_selector(selector):
    with pytest.raises(UnknownSelectorSyntaxError) as excinfo:
        SelectorGroup.from_str(selector)
    assert str(excinfo.value).startswith("selector parser aborted at character")


@pytest.mark.parametrize(
    "expr,nth",
    [
        ("odd", (2, 1)),
        ("EVEN", (2, 0)),
        ("3", (0, 3)),
        ("+3", (0, 3)),
        ("n", (1, 0)),
        ("-n+3", (-1, 3)),
        ("2n+1", (2, 1)),
        ("2n - 1", (2, -1)),
        (" 10n ", (10, 0)),
        ("foo", None),
        ("2n+", None),
        ("", None),
    ],
)
def test_parse_nth(expr, nth):
    assert _parse_nth(expr) == nth


@pytest.mark.parametrize(
    "a,b,positions",
    [
        (2, 0, [2, 4, 6]),
        (2, 1, [1, 3, 5]),
        (0, 3, [3]),
        (-1, 3, [1, 2, 3]),
        (3, -1, [2, 5]),
        (1, 0, [1, 2, 3, 4, 5, 6]),
    ],
)
def test_nth_matches(a, b, positions):
    assert [p for p in range(1, 7) if _nth_matches(p, a, b)] == positions
