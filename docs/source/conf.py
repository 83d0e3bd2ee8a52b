# Configuration file for the Sphinx documentation builder.
#
# For a full list of options see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html

# -- Path setup --------------------------------------------------------------

import os
import sys

module_paths = [
    os.path.abspath("../.."),
    os.path.abspath("../../zdfsuite"),
    ]
for module_path in module_paths:
    sys.path.insert(0, module_path)

from zdfsuite import __version__

# -- Project information -----------------------------------------------------

project = "zdfsuite"
copyright = "2025, zdfsuite Developers"
author = "zdfsuite Developers"
release = __version__

# -- General configuration ---------------------------------------------------

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.napoleon",
    "sphinx.ext.mathjax",
]

# The vendor SDK is not needed to build the documentation.
autodoc_mock_imports = ["zivid"]

toc_object_entries_show_parents = 'hide'

exclude_patterns = ["_build", "Thumbs.db", ".DS_Store"]

autosummary_generate = True
autodoc_member_order = "bysource"
napoleon_use_param = True
add_module_names = False # Remove namespaces from class/method signatures

pygments_style = "sphinx"

# -- Options for HTML output -------------------------------------------------

html_theme = "pydata_sphinx_theme"
html_title = f"{project} v{release} Manual"
html_last_updated_fmt = "%b %d, %Y"

def skip(app, what, name, obj, would_skip, options):
    skip_ = would_skip
    # Document `__init__`.
    if name in ("__init__",):
        skip_ = False
    # Don't document magic things.
    elif name in ("__dict__", "__doc__", "__weakref__", "__module__"):
        skip_ = True
    # Don't document private things.
    elif name[0] == '_':
        skip_ = True

    return skip_

def setup(app):
    app.connect("autodoc-skip-member", skip)
