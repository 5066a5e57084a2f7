"""
Configuration management package for notesearch.

This package provides configuration loading and validation for the search
engine's ignore patterns, saved searches and limits.
"""

from .parser import (
    ConfigParser,
    ConfigParseResult,
    ConfigurationError,
    load_config,
    validate_config_file
)

__all__ = [
    'ConfigParser',
    'ConfigParseResult',
    'ConfigurationError',
    'load_config',
    'validate_config_file'
]
