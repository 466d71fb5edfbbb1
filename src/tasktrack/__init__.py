"""tasktrack: personal task tracker (task store, query pipeline, local persistence)."""

__version__ = "0.1.0"
