from __future__ import annotations

# -- Project information -----------------------------------------------------
import importlib.metadata

metadata = importlib.metadata.metadata("dtt")

project = metadata["Name"]
version = metadata["Version"]
release = metadata["Version"]
author = "dtt contributors"
copyright = author


# -- General configuration ------------------------------------------------

nitpicky = True
nitpick_ignore = [
    # private types that show up in public signatures
    ("py:class", "dtt._TimePatch"),
    ("py:class", "_TimePatch"),
    ("py:class", "_Iterator"),
]
extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.doctest",
    "sphinx.ext.intersphinx",
    "sphinx.ext.napoleon",
    "sphinx.ext.viewcode",
    "sphinx_copybutton",
    "enum_tools.autoenum",
    "myst_parser",
]
source_suffix = {
    ".md": "markdown",
    ".rst": "restructuredtext",
}

master_doc = "index"
exclude_patterns = ["_build", "Thumbs.db", ".DS_Store"]
myst_heading_anchors = 2

napoleon_numpy_docstring = True
napoleon_google_docstring = False
copybutton_prompt_text = ">>> "

# -- Options for HTML output ----------------------------------------------

autodoc_member_order = "bysource"
autodoc_typehints = "signature"
add_module_names = False
html_theme = "furo"
html_title = f"{project} {version}"
highlight_language = "python3"
pygments_style = "default"
pygments_dark_style = "lightbulb"
intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
}
toc_object_entries_show_parents = "hide"
