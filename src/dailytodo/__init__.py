"""Daily-resetting terminal todo list with a DIDs activity feed."""

__version__ = "0.1.0"
