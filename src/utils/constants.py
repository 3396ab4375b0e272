"""
Shared Constants for the MRZ Recognition Pipeline

This module contains constants used across multiple modules to ensure
consistency and avoid duplication.
"""

# ============================================================================
# MRZ Alphabet (ICAO Doc 9303 Part 3)
# ============================================================================
MRZ_FILLER = "<"  # Padding / absent-data character
MRZ_LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
MRZ_DIGITS = "0123456789"
MRZ_ALPHABET = frozenset(MRZ_LETTERS + MRZ_DIGITS + MRZ_FILLER)

# Check digit weights, applied cyclically left to right
CHECK_DIGIT_WEIGHTS = (7, 3, 1)

# ============================================================================
# Line Length Windows
# ============================================================================
# Tolerated OCR line lengths around the nominal 30 / 36 / 44 widths
SHORT_LINE_RANGE = (28, 32)  # TD1, EEP
MEDIUM_LINE_RANGE = (34, 38)  # TD2, MRV-B
LONG_LINE_RANGE = (42, 46)  # TD3, MRV-A

# ============================================================================
# EEP (China Exit-Entry Permit)
# ============================================================================
EEP_DOCUMENT_CODE = "CS"
EEP_PREFIXES = ("CS", "C5", "C$", "C8")
EEP_LINE_PREFIXES = EEP_PREFIXES + ("C<",)

# ============================================================================
# Pass-back Data Keys
# ============================================================================
# Keys read by presentation / storage collaborators
EXTRA_DOC_NUM = "DOCUMENT_NUMBER"
EXTRA_DOB = "DATE_OF_BIRTH"
EXTRA_EXPIRY = "EXPIRY_DATE"
EXTRA_MRZ_LINES = "MRZ_LINES"
EXTRA_DOC_TYPE = "DOCUMENT_TYPE"
