import datetime
import os
import sys

sys.path.insert(0, os.path.abspath(".."))

import stylecheck


def copyright_years():
    this_year = datetime.date.today().year
    if this_year == 2021:
        return str(this_year)
    else:
        return "2021–%s" % this_year


project = "stylecheck"
copyright = "%s, the stylecheck authors" % copyright_years()
author = "the stylecheck authors"
version = stylecheck.__version__
release = stylecheck.__version__
master_doc = "index"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.napoleon",
    "sphinx_autodoc_typehints",
    "sphinx.ext.intersphinx",
    "sphinx.ext.viewcode",
    "sphinx.ext.doctest",
]

# autodoc
autodoc_default_options = {"members": True, "undoc-members": True}
autodoc_member_order = "bysource"

# intersphinx
intersphinx_mapping = {"python": ("https://docs.python.org/3", None)}

# html
html_theme = "python_docs_theme"
html_last_updated_fmt = "%b %d, %Y"
html_sidebars = {"**": ["localtoc.html", "sourcelink.html"]}
html_theme_options = {"collapsiblesidebar": True}
