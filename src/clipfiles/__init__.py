"""
Clipfiles - A tool for copying a project's text files to the clipboard.

This package walks a directory tree, skips files matched by .gitignore rules,
built-in exclusions and user patterns, drops binary content, and joins the
remaining files into one document with a small header per file.
"""

__version__ = "0.1.0"
__author__ = "Clipfiles Team"
