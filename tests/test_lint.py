import pytest

from stylecheck import (
    ConfigurationError,
    LintConfig,
    Violation,
    lint,
    lint_stylesheet,
    parse_html,
    parse_stylesheet,
    registered_rules,
)


VALID_HTML = """\
<!DOCTYPE html>
<html lang="en">
  <head>
    <title>Page</title>
  </head>
  <body>
    <p class="intro">Hello, <em>world</em>.</p>
    <img src="a.png" alt="A picture">
    <a href="https://example.com" target="_blank" rel="noopener">example</a>
  </body>
</html>
"""

ALL_MARKUP_RULES = {
    "doctype-first": True,
    "doctype-html5": True,
    "html-req-lang": True,
    "attr-bans": True,
    "tag-bans": True,
    "attr-name-style": "dash",
    "class-style": "dash",
    "id-no-dup": True,
    "img-req-alt": True,
    "link-req-noopener": True,
    "line-end-style": "lf",
    "line-no-trailing-whitespace": True,
    "indent-style": "spaces",
    "indent-width": 2,
}


def rules_of(violations):
    return [violation.rule for violation in violations]


def test_valid_document():
    assert lint(parse_html(VALID_HTML), config=ALL_MARKUP_RULES) == []


def test_no_config():
    doc = parse_html("<b>bold</b>")
    assert lint(doc) == []
    assert lint(doc, config={}) == []


def test_tag_bans():
    doc = parse_html("<html><body><b>x</b><i>y</i><p>z</p></body></html>")
    violations = lint(doc, config={"tag-bans": ["style", "b"]})
    assert len(violations) == 1
    (violation,) = violations
    assert violation.rule == "tag-bans"
    assert violation.node is doc.select("b")
    assert violation.message == "tag <b> is banned"
    assert violation.source == "markup"
    assert rules_of(lint(doc, config={"tag-bans": True})) == ["tag-bans", "tag-bans"]
    assert lint(doc, config={"tag-bans": False}) == []
    assert lint(doc, config={"tag-bans": ["STYLE", "B"]})[0].node is doc.select("b")


def test_attr_bans():
    doc = parse_html('<table width="50%" border="1"><tr><td style="color: red">x</td></tr></table>')
    violations = lint(doc, config={"attr-bans": True})
    assert [(v.node.tag, v.message) for v in violations] == [
        ("table", "attribute 'width' is banned on <table>"),
        ("table", "attribute 'border' is banned on <table>"),
        ("td", "attribute 'style' is banned on <td>"),
    ]
    assert rules_of(lint(doc, config={"attr-bans": ["border"]})) == ["attr-bans"]
    assert rules_of(lint(doc, config={"attr-bans": "style"})) == ["attr-bans"]


@pytest.mark.parametrize(
    "html,violations",
    [
        ("<!DOCTYPE html>\n<html></html>", []),
        ("<!doctype HTML>\n<html></html>", []),
        ('<!DOCTYPE html SYSTEM "about:legacy-compat"><html></html>', []),
        (
            '<!DOCTYPE HTML PUBLIC "-//W3C//DTD HTML 4.01//EN">\n<html></html>',
            ["doctype-html5"],
        ),
        ("<html></html>", ["doctype-html5"]),
    ],
)
def test_doctype_html5(html, violations):
    assert rules_of(lint(parse_html(html), config={"doctype-html5": True})) == violations


@pytest.mark.parametrize(
    "html,violations",
    [
        ("<!DOCTYPE html>\n<html></html>", []),
        ("<!-- comment -->\n<!DOCTYPE html>\n<html></html>", []),
        ("<p>text</p>\n<!DOCTYPE html>\n<html></html>", ["doctype-first"]),
        ("<html></html>", ["doctype-first"]),
    ],
)
def test_doctype_first(html, violations):
    assert rules_of(lint(parse_html(html), config={"doctype-first": True})) == violations


def test_doctype_first_position():
    doc = parse_html("<p>text</p>\n<!DOCTYPE html>\n<html></html>")
    (violation,) = lint(doc, config={"doctype-first": True})
    assert violation.pos == (2, 0)
    assert violation.node is None


@pytest.mark.parametrize(
    "html,violations",
    [
        ('<html lang="en"></html>', []),
        ("<html></html>", ["html-req-lang"]),
        ('<html lang=" "></html>', ["html-req-lang"]),
        ("<p>no html element</p>", []),
    ],
)
def test_html_req_lang(html, violations):
    assert rules_of(lint(parse_html(html), config={"html-req-lang": True})) == violations


@pytest.mark.parametrize(
    "style,name,ok",
    [
        ("dash", "top-songs", True),
        ("dash", "top_songs", False),
        ("dash", "topSongs", False),
        ("underscore", "top_songs", True),
        ("underscore", "top-songs", False),
        ("lowercase", "top-songs", True),
        ("lowercase", "top_songs", True),
        ("lowercase", "TopSongs", False),
        ("camel", "topSongs", True),
        ("camel", "TopSongs", False),
        ("camel", "top-songs", False),
        ("bem", "block__element--modifier", True),
        ("bem", "song-list__item", True),
        ("bem", "song_list", False),
    ],
)
def test_class_style(style, name, ok):
    doc = parse_html('<p class="%s">x</p>' % name)
    violations = lint(doc, config={"class-style": style})
    assert (violations == []) == ok


def test_class_style_none():
    doc = parse_html('<p class="Anything_Goes">x</p>')
    assert lint(doc, config={"class-style": "none"}) == []
    assert lint(doc, config={"class-style": False}) == []


def test_attr_name_style():
    doc = parse_html('<p data-song-id="1" data_song="2">x</p>')
    violations = lint(doc, config={"attr-name-style": "dash"})
    assert [v.message for v in violations] == ["attribute name 'data_song' is not dash style"]


def test_id_no_dup():
    doc = parse_html('<p id="a">1</p><p id="b">2</p><p id="a">3</p>')
    (violation,) = lint(doc, config={"id-no-dup": True})
    assert violation.node is doc.select_all("p")[2]


@pytest.mark.parametrize(
    "option,html,count",
    [
        (True, '<img src="a.png" alt="A">', 0),
        (True, '<img src="a.png">', 1),
        (True, '<img src="a.png" alt="">', 1),
        ("allownull", '<img src="a.png" alt="">', 0),
        ("allownull", '<img src="a.png">', 1),
        (False, '<img src="a.png">', 0),
    ],
)
def test_img_req_alt(option, html, count):
    assert len(lint(parse_html(html), config={"img-req-alt": option})) == count


@pytest.mark.parametrize(
    "html,count",
    [
        ('<a href="x" target="_blank">x</a>', 1),
        ('<a href="x" target="_blank" rel="noopener">x</a>', 0),
        ('<a href="x" target="_blank" rel="external noreferrer">x</a>', 0),
        ('<a href="x">x</a>', 0),
        ('<a href="x" target="_self">x</a>', 0),
    ],
)
def test_link_req_noopener(html, count):
    assert len(lint(parse_html(html), config={"link-req-noopener": True})) == count


def test_line_end_style():
    doc = parse_html("<html>\r\n<body>\n</body>\r\n</html>")
    violations = lint(doc, config={"line-end-style": "lf"})
    assert [v.pos for v in violations] == [(1, 6), (3, 7)]
    violations = lint(doc, config={"line-end-style": "crlf"})
    assert [v.pos for v in violations] == [(2, 6)]
    assert lint(doc, config={"line-end-style": False}) == []
    assert lint(doc, config={"line-end-style": "false"}) == []


def test_line_no_trailing_whitespace():
    doc = parse_html("<html>  \n<body>\n</body>\t\n</html> ")
    violations = lint(doc, config={"line-no-trailing-whitespace": True})
    assert [v.pos for v in violations] == [(1, 6), (3, 7), (4, 7)]
    assert all(v.node is None for v in violations)


def test_indent_style():
    doc = parse_html("<html>\n  <body>\n\t<p>x</p>\n \t</body>\n</html>")
    assert [v.pos for v in lint(doc, config={"indent-style": "spaces"})] == [(3, 0), (4, 0)]
    assert [v.pos for v in lint(doc, config={"indent-style": "tabs"})] == [(2, 0), (4, 0)]
    assert [v.pos for v in lint(doc, config={"indent-style": "nonmixed"})] == [(4, 0)]


def test_indent_width():
    doc = parse_html("<html>\n  <body>\n     <p>x</p>\n    <p>y</p>\n  </body>\n</html>")
    violations = lint(doc, config={"indent-width": 2})
    assert [v.pos for v in violations] == [(3, 0)]
    assert violations[0].message == "indentation of 5 spaces is not a multiple of 2"
    assert len(lint(doc, config={"indent-width": 4})) == 3


def test_raw_text_rules_need_source():
    doc = parse_html("<html>  \n</html>")
    detached = doc.select("html").clone()
    assert lint(detached, config={"line-no-trailing-whitespace": True}) == []


def test_ordering():
    doc = parse_html(
        '<html>\n<body>\n<b style="x">bold</b>\n<p style="y">text</p>\n</body>\n</html>'
    )
    violations = lint(
        doc,
        config={
            "tag-bans": ["b"],
            "attr-bans": ["style"],
            "html-req-lang": True,
            "doctype-first": True,
        },
    )
    assert [(v.rule, v.pos) for v in violations] == [
        ("doctype-first", (1, 0)),
        ("html-req-lang", (1, 0)),
        ("attr-bans", (3, 0)),
        ("tag-bans", (3, 0)),
        ("attr-bans", (4, 0)),
    ]


def test_unknown_options_ignored():
    doc = parse_html("<b>x</b>")
    config = {"spec-char-escape": False, "no-such-rule": True, "tag-bans": ["b"]}
    assert rules_of(lint(doc, config=config)) == ["tag-bans"]
    assert "no-such-rule" not in LintConfig(config)


@pytest.mark.parametrize(
    "options",
    [
        {"class-style": "weird"},
        {"class-style": 1},
        {"attr-bans": 5},
        {"tag-bans": ["b", 1]},
        {"indent-width": 0},
        {"indent-width": True},
        {"indent-width": "4"},
        {"doctype-first": "yes"},
        {"line-end-style": "unix"},
        {"indent-style": "both"},
        {"img-req-alt": "sometimes"},
    ],
)
def test_configuration_error(options):
    with pytest.raises(ConfigurationError) as excinfo:
        LintConfig(options)
    (key,) = options
    assert excinfo.value.rule == key
    assert str(excinfo.value).startswith("invalid value")
    with pytest.raises(ValueError):
        lint(parse_html("<p>x</p>"), config=options)


def test_lint_config():
    config = LintConfig({"tag-bans": True, "class-style": "NONE", "indent-width": 4})
    assert config.get("tag-bans") == ["style", "b", "i"]
    assert "class-style" not in config
    assert config.get("indent-width") == 4
    assert [rule.id for rule, _ in config.enabled()] == ["tag-bans", "indent-width"]
    assert lint(parse_html("<i>x</i>"), config=config)[0].rule == "tag-bans"


def test_registered_rules():
    ids = [rule.id for rule in registered_rules()]
    assert ids[:3] == ["doctype-first", "doctype-html5", "html-req-lang"]
    for rule_id in ALL_MARKUP_RULES:
        assert rule_id in ids
    for rule_id in ("empty-rules", "duplicate-properties", "zero-units", "important"):
        assert rule_id in ids
    assert [rule.index for rule in registered_rules()] == list(range(len(ids)))


def test_violation_str():
    violation = Violation("tag-bans", "tag <b> is banned", None, (3, 4))
    assert str(violation) == "markup:3:4: tag-bans: tag <b> is banned"
    assert str(Violation("x", "y")) == "x: y"


STYLE_CSS = """\
h1 { }
p { color: red; margin: 0px; color: red }
div { background: #fff; background: rgba(255, 255, 255, 0.5) }
span { padding: 0.5em 10px 0 0; color: blue !important }
ul { color: red; margin: 0; color: blue }
"""


def test_lint_stylesheet():
    violations = lint_stylesheet(STYLE_CSS)
    assert [(v.rule, v.pos) for v in violations] == [
        ("empty-rules", (1, 0)),
        ("zero-units", (2, 16)),
        ("duplicate-properties", (2, 29)),
        ("important", (4, 32)),
        ("duplicate-properties", (5, 28)),
    ]
    assert all(v.source == "stylesheet" for v in violations)
    assert str(violations[0]) == "stylesheet:1:0: empty-rules: rule 'h1' has no declarations"


def test_lint_stylesheet_config():
    sheet = parse_stylesheet(STYLE_CSS)
    assert rules_of(lint_stylesheet(sheet, config={"important": True})) == ["important"]
    assert lint_stylesheet(sheet, config={}) == []
    assert lint_stylesheet(sheet, config={"tag-bans": True}) == []


def test_markup_and_stylesheet():
    doc = parse_html("<b>x</b>")
    violations = lint(
        doc, "p { margin: 0px }", config={"tag-bans": True, "zero-units": True}
    )
    assert [(v.rule, v.source) for v in violations] == [
        ("tag-bans", "markup"),
        ("zero-units", "stylesheet"),
    ]
    assert rules_of(lint(doc, config={"zero-units": True})) == []
