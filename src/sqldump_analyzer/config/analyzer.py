"""Analyzer configuration loading and validation.

Loads optional YAML configuration for the dump analyzer with full validation.
"""
from __future__ import annotations
import os
import yaml
from pathlib import Path
from typing import Literal
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

DEFAULT_CONFIG_PATH = Path("config/sqldump-analyzer.yaml")

SUPPORTED_DIALECTS = (
    "auto", "mysql", "postgres", "sqlite", "tsql", "oracle",
    "bigquery", "snowflake", "duckdb", "redshift", "hive", "spark",
)


class ParserConfig(BaseModel):
    """Dump parsing configuration."""
    dialect: str = Field("auto", description="sqlglot dialect, or 'auto' to detect")
    strict: bool = Field(False, description="Fail on the first unparseable statement")
    encoding: str = Field("utf-8", description="Dump file encoding")

    @field_validator("dialect")
    @classmethod
    def validate_dialect(cls, v: str) -> str:
        """Validate dialect is one sqlglot knows."""
        v = v.lower()
        if v not in SUPPORTED_DIALECTS:
            raise ValueError(f"dialect must be one of: {', '.join(SUPPORTED_DIALECTS)}")
        return v


class OutputConfig(BaseModel):
    """Result output configuration."""
    format: Literal["json", "markdown"] = Field("json", description="Output format")
    indent: int = Field(2, ge=0, le=8, description="JSON indentation (0 for compact)")


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field("WARNING", description="Log level")
    format: str = Field(
        "%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="logging format string"
    )


class AnalyzerConfig(BaseModel):
    """Complete analyzer configuration."""
    parser: ParserConfig = Field(default_factory=ParserConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> AnalyzerConfig:
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Validated AnalyzerConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If configuration is invalid
        """
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)

        if not data:
            raise ValueError(f"Empty configuration file: {config_path}")

        try:
            return cls.model_validate(data)
        except Exception as e:
            raise ValueError(f"Invalid configuration in {config_path}: {e}") from e

    @classmethod
    def from_env(cls, env_var: str = "SQLDUMP_ANALYZER_CONFIG") -> AnalyzerConfig:
        """Load configuration from path in environment variable.

        Falls back to config/sqldump-analyzer.yaml, then to built-in defaults.

        Args:
            env_var: Environment variable name (default: SQLDUMP_ANALYZER_CONFIG)

        Returns:
            Validated AnalyzerConfig instance
        """
        load_dotenv()
        config_path = os.getenv(env_var)

        if config_path:
            return cls.from_yaml(config_path)

        if DEFAULT_CONFIG_PATH.exists():
            return cls.from_yaml(DEFAULT_CONFIG_PATH)

        return cls()


def load_config(config_path: str | Path | None = None) -> AnalyzerConfig:
    """Load analyzer configuration from file or environment.

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Validated AnalyzerConfig instance

    Raises:
        ValueError: If configuration is invalid
    """
    if config_path:
        return AnalyzerConfig.from_yaml(config_path)

    return AnalyzerConfig.from_env()
