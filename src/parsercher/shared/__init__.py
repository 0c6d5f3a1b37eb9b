"""Shared utilities for markup parsing.

This module provides configuration objects, diagnostic and metrics types, and
logging helpers used across all processing layers.
"""

from .result import (
    DiagnosticEntry,
    DiagnosticSeverity,
    PerformanceMetrics,
)
from .config import (
    RAW_TEXT_ELEMENTS,
    VOID_ELEMENTS,
    ConfigError,
    ConfigValidationError,
    ParserConfig,
    TokenizerConfig,
    TreeConfig,
)
from .logging import (
    CorrelationLogger,
    get_logger,
)

__all__ = [
    "DiagnosticEntry",
    "DiagnosticSeverity",
    "PerformanceMetrics",
    "RAW_TEXT_ELEMENTS",
    "VOID_ELEMENTS",
    "ConfigError",
    "ConfigValidationError",
    "ParserConfig",
    "TokenizerConfig",
    "TreeConfig",
    "CorrelationLogger",
    "get_logger",
]
