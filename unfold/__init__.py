"""
Unfold - flatten nested directory trees into a single folder.

Every regular file under a source directory is copied (or moved) into one
``<source>_unfolded`` directory, with colliding file names disambiguated
and every action recorded in a Markdown audit document.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
