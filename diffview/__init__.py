"""Diffview - unified diff parsing and side-by-side alignment backend"""

__version__ = "1.0.0"
