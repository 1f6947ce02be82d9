"""Sphinx configuration file for afdclean documentation."""

import os
import sys

# Add the package to the Python path
sys.path.insert(0, os.path.abspath(".."))

# Project information
project = "afdclean"
copyright = "2025, afdclean developers"
author = "afdclean developers"

# The full version, including alpha/beta/rc tags
release = "0.1.0"
version = "0.1.0"

# General configuration
extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.autosummary",
    "sphinx.ext.doctest",
    "sphinx.ext.viewcode",
    "sphinx.ext.napoleon",
    "sphinx.ext.intersphinx",
    "sphinx_autodoc_typehints",
    "sphinx_copybutton",
]

templates_path = ["_templates"]
exclude_patterns = ["_build", "Thumbs.db", ".DS_Store"]
autosummary_generate = True

# Language
language = "en"

# HTML output
html_theme = "furo"
html_title = f"{project} {version}"

# Theme options
html_theme_options = {
    "sidebar_hide_name": False,
    "light_css_variables": {
        "color-brand-primary": "#2f6f4f",
        "color-brand-content": "#2f6f4f",
    },
    "dark_css_variables": {
        "color-brand-primary": "#5fb38a",
        "color-brand-content": "#5fb38a",
    },
}

# Autodoc configuration
autodoc_member_order = "bysource"
autodoc_default_options = {
    "members": True,
    "member-order": "bysource",
    "undoc-members": True,
}

# Docstrings are NumPy style throughout
napoleon_google_docstring = False
napoleon_numpy_docstring = True
napoleon_include_init_with_doc = False
napoleon_include_private_with_doc = False
napoleon_use_ivar = False
napoleon_use_param = True
napoleon_use_rtype = True
napoleon_preprocess_types = True
napoleon_type_aliases = {
    "Attribute": "afdclean.types.Attribute",
    "RowId": "afdclean.types.RowId",
    "Value": "afdclean.types.Value",
    "RowSource": "afdclean.source.RowSource",
}
napoleon_attr_annotations = True

# Doctests run against a fresh import of the package
doctest_global_setup = """
import pandas as pd
from afdclean import *
"""

# Intersphinx mapping
intersphinx_mapping = {
    "python": ("https://docs.python.org/3", None),
    "numpy": ("https://numpy.org/doc/stable/", None),
    "pandas": ("https://pandas.pydata.org/docs/", None),
}

# Autodoc type hints
autodoc_typehints = "description"
always_document_param_types = True
typehints_fully_qualified = False

# Copy button configuration
copybutton_prompt_text = r">>> |\.\.\. |\$ "
copybutton_prompt_is_regexp = True
