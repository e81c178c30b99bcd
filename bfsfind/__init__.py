# bfsfind/__init__.py
"""bfsfind: breadth-first, .gitignore-aware file search with streamed results."""

__version__ = "0.1.0"
