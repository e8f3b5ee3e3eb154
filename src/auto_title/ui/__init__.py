"""
Suggestion picker surfaces.

Provides:
- PickRequest: explicit request/response for the user's choice
- TitlePicker interface and a console implementation
"""

from .picker import Choice, ConsolePicker, PickRequest, PickResult, PickStatus, TitlePicker, rank_choices

__all__ = [
    "Choice",
    "ConsolePicker",
    "PickRequest",
    "PickResult",
    "PickStatus",
    "TitlePicker",
    "rank_choices",
]
