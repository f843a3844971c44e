"""perbranch: one working directory per git branch."""

__version__ = "0.3.0"
