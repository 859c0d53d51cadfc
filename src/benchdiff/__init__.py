"""benchdiff: store benchmark output per commit and compare runs."""

__version__ = "0.1.0"
