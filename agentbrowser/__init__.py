"""agent-browser: command-line client for a long-running browser daemon."""

__version__ = "0.1.0"
