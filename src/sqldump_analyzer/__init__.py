"""SQL dump analyzer: schema and row-count summaries of SQL dumps."""

__version__ = "0.1.0"
