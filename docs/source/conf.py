# Sphinx configuration for the self-driving car simulation API docs.
#
# Build with:  sphinx-build -b html docs/source docs/build

import os
import sys
import sphinx_rtd_dark_mode

# sim/, ml/ and the top-level modules are imported from the repository root.
sys.path.insert(0, os.path.abspath("../.."))

# -- Project information -----------------------------------------------------

project = 'Self-driving car simulation'
copyright = '2026, Self-driving Team'
author = 'Self-driving Team'
release = '0.1'

# -- General configuration ---------------------------------------------------

extensions = [
    "sphinx.ext.autodoc",    # API pages for sim and ml
    "sphinx.ext.napoleon",   # NumPy-style Parameters / Returns sections
    "sphinx.ext.viewcode",
    "sphinx_rtd_dark_mode"
]

templates_path = ['_templates']
# Test modules sit beside the code; keep them out of the API pages.
exclude_patterns = ['**/test_*']

# -- Options for HTML output -------------------------------------------------

html_theme = "sphinx_rtd_theme"
default_dark_mode = True
html_static_path = ['_static']

autodoc_member_order = "bysource"
