"""
Title generation services.

Provides:
- TitleGenerator: provider wrapper with snapshot replacement
- TitleOrchestrator: generate -> pick -> apply flow with rollback
- Naming helpers: sanitize, collision-free paths, rename/front matter
"""

from .generator import TitleGenerator
from .naming import TitleApplier, resolve_unique_path, sanitize_filename
from .orchestrator import OrchestrationResult, Outcome, TitleOrchestrator

__all__ = [
    "OrchestrationResult",
    "Outcome",
    "TitleApplier",
    "TitleGenerator",
    "TitleOrchestrator",
    "resolve_unique_path",
    "sanitize_filename",
]
