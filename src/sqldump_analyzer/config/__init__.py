"""Configuration management for the SQL dump analyzer."""
from .analyzer import (
    AnalyzerConfig,
    ParserConfig,
    OutputConfig,
    LoggingConfig,
    SUPPORTED_DIALECTS,
    load_config,
)

__all__ = [
    "AnalyzerConfig",
    "ParserConfig",
    "OutputConfig",
    "LoggingConfig",
    "SUPPORTED_DIALECTS",
    "load_config",
]
