"""
Shared Utilities

Common constants used across all modules.
"""

from src.utils.constants import (
    EXTRA_DOB,
    EXTRA_DOC_NUM,
    EXTRA_DOC_TYPE,
    EXTRA_EXPIRY,
    EXTRA_MRZ_LINES,
    MRZ_ALPHABET,
    MRZ_FILLER,
)

__all__ = [
    "MRZ_ALPHABET",
    "MRZ_FILLER",
    "EXTRA_DOC_NUM",
    "EXTRA_DOB",
    "EXTRA_EXPIRY",
    "EXTRA_MRZ_LINES",
    "EXTRA_DOC_TYPE",
]
