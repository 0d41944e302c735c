"""Sphinx configuration."""
import litprint

project = "litprint"
release = version = litprint.__version__

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.doctest",
    "sphinx.ext.intersphinx",
    "sphinx.ext.napoleon",
]

autodoc_typehints = "none"
autodoc_member_order = "bysource"

intersphinx_mapping = {"python": ("https://docs.python.org/3", None)}

doctest_global_setup = """
import math

from litprint import *
"""
