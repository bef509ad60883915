"""
:mod:`stylecheck` parses HTML and CSS, resolves the cascade and lints
markup, so that coursework pages can be checked against the structure
and styling they are expected to have.

:mod:`stylecheck`

- parses HTML tolerantly into a small DOM (:mod:`stylecheck.dom`);
- parses CSS strictly into rules (:mod:`stylecheck.stylesheet`);
- matches CSS selectors, including structural pseudo-classes
  (:mod:`stylecheck.selector`);
- resolves which declaration wins for an element and property, and can
  inline the result (:mod:`stylecheck.cascade`);
- runs htmllint/csslint style rules (:mod:`stylecheck.lint`);
- has no dependency outside `PSL <https://docs.python.org/3/library/>`_.

Simple example:

.. doctest::

   >>> import stylecheck
   >>> html = '''<!DOCTYPE html>
   ... <html lang="en">
   ... <body>
   ...   <table>
   ...     <thead>
   ...       <tr><th>Rank</th><th>Artist</th></tr>
   ...     </thead>
   ...     <tbody>
   ...       <tr><td>1</td><td>A</td></tr>
   ...       <tr><td>2</td><td>B</td></tr>
   ...     </tbody>
   ...   </table>
   ... </body>
   ... </html>'''
   >>> css = '''
   ... th { color: #1db954 }
   ... tbody tr:nth-child(even) { background-color: #eee }
   ... tbody tr:hover { background-color: pink }
   ... '''
   >>> doc = stylecheck.load(html, css)
   >>> [th.text for th in doc.find('table > thead > tr > th')]
   ['Rank', 'Artist']
   >>> doc.find('th').css('color')
   '#1db954'
   >>> [row.css('background-color') for row in doc.find('tbody > tr').each()]
   [None, '#eee']
   >>> stylecheck.lint(doc.document, config={'doctype-html5': True, 'html-req-lang': True})
   []
"""

import logging

from .cascade import Cascade, cascade_for, inline, resolve
from .dom import (
    DocumentNode,
    DOMBuilder,
    ElementNode,
    MalformedMarkupError,
    Node,
    TextNode,
    parse_html,
)
from .lint import (
    ConfigurationError,
    LintConfig,
    LintRule,
    Violation,
    lint,
    lint_stylesheet,
    registered_rules,
)
from .query import Selection, load, select
from .selector import (
    AttributeSelector,
    AttributeSelectorType,
    Combinator,
    PseudoClassSelector,
    Selector,
    SelectorGroup,
    Specificity,
    UnknownSelectorSyntaxError,
    matches,
)
from .stylesheet import (
    AtRule,
    Declaration,
    MalformedStylesheetError,
    Origin,
    StyleRule,
    Stylesheet,
    parse_declarations,
    parse_stylesheet,
)

__version__ = "0.1.0"

__all__ = [
    "AtRule",
    "AttributeSelector",
    "AttributeSelectorType",
    "Cascade",
    "Combinator",
    "ConfigurationError",
    "Declaration",
    "DocumentNode",
    "DOMBuilder",
    "ElementNode",
    "LintConfig",
    "LintRule",
    "MalformedMarkupError",
    "MalformedStylesheetError",
    "Node",
    "Origin",
    "PseudoClassSelector",
    "Selection",
    "Selector",
    "SelectorGroup",
    "Specificity",
    "StyleRule",
    "Stylesheet",
    "TextNode",
    "UnknownSelectorSyntaxError",
    "Violation",
    "cascade_for",
    "inline",
    "lint",
    "lint_stylesheet",
    "load",
    "matches",
    "parse_declarations",
    "parse_html",
    "parse_stylesheet",
    "registered_rules",
    "resolve",
    "select",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
