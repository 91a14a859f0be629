import os
import sys
from datetime import date

sys.path.insert(0, os.path.abspath("../.."))

import jobwire  # noqa: E402

project = "jobwire"
author = "jobwire Contributors"
copyright = f"{date.today().year}, jobwire Contributors"

version = jobwire.__version__
release = jobwire.__version__

extensions = [
    "myst_parser",
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.napoleon",
]

templates_path: list[str] = []
exclude_patterns: list[str] = []
source_suffix = [".rst", ".md"]
master_doc = "index"
language = "en"

autodoc_member_order = "bysource"

html_theme = "sphinx_book_theme"
html_title = f"jobwire {version} Documentation"

html_theme_options = {
    "show_toc_level": 2,
    "navbar_end": ["theme-switcher", "navbar-icon-links"],
}
