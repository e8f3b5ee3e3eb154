"""
Note eligibility detection.

Provides:
- Placeholder-name matching against configurable patterns
- Front matter title detection
- Front matter stripping and word counting for thresholds
"""

from .classifier import EligibilityClassifier, count_words, has_declared_title, strip_front_matter

__all__ = [
    "EligibilityClassifier",
    "count_words",
    "has_declared_title",
    "strip_front_matter",
]
