"""flow: a personal, hierarchical task list in the terminal."""

__version__ = "0.3.0"
