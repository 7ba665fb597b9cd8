"""Forum core: credentials, sessions, post ranking, comments and votes."""

__version__ = "0.1.0"
