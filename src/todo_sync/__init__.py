"""Todo list with optimistic updates over a remote HTTP webhook store."""

__version__ = "0.1.0"
