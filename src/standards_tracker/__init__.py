"""Standards tracker: hierarchical competency standards and their groups."""

__version__ = "0.1.0"
