"""Configuration for the json_api ingest processor."""

from .settings import ConfigurationError, HTTPSettings, LoggingSettings, Settings


__all__ = ["ConfigurationError", "HTTPSettings", "LoggingSettings", "Settings"]
