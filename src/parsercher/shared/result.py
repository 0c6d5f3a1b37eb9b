"""Diagnostic and metrics types shared by every parsing layer.

Malformed markup never raises. Each recovery the tokenizer or tree builder
performs is recorded as a diagnostic entry instead, so callers can inspect
what was repaired.
"""

import time
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, Optional


class DiagnosticSeverity(Enum):
    """Severity levels for diagnostic entries."""

    DEBUG = auto()
    INFO = auto()       # Routine repairs such as implicitly closed elements
    WARNING = auto()    # Input was truncated or a closer had no opener
    ERROR = auto()
    CRITICAL = auto()


@dataclass
class DiagnosticEntry:
    """Single diagnostic entry with position context."""

    severity: DiagnosticSeverity
    message: str
    component: str
    position: Optional[Dict[str, int]] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: float = field(default_factory=time.time)
    correlation_id: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.message:
            raise ValueError("Diagnostic message cannot be empty")
        if not self.component:
            raise ValueError("Diagnostic component cannot be empty")

    @property
    def is_problem(self) -> bool:
        """True for WARNING and above."""
        return self.severity in (
            DiagnosticSeverity.WARNING,
            DiagnosticSeverity.ERROR,
            DiagnosticSeverity.CRITICAL,
        )


@dataclass
class PerformanceMetrics:
    """Performance metrics for a parse operation."""

    processing_time_ms: float = 0.0
    memory_used_bytes: int = 0
    characters_processed: int = 0
    tokens_generated: int = 0
    nodes_created: int = 0

    @property
    def characters_per_second(self) -> float:
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_processed * 1000.0) / self.processing_time_ms

    @property
    def tokens_per_second(self) -> float:
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.tokens_generated * 1000.0) / self.processing_time_ms
