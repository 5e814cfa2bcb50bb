"""Speed dial: save shell commands under short keys and run them by key."""

__version__ = "0.3.0"
