"""tabflow - flow graph compiler for tabular-data pipelines."""

__version__ = "0.1.0"
