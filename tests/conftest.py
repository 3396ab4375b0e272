"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules. MRZ specimens use the ICAO Doc 9303 sample data
(Utopia, ERIKSSON ANNA MARIA) with hand-verified check digits.
"""

import pytest


@pytest.fixture
def td3_lines():
    """Passport specimen (2 x 44), every check digit valid."""
    return [
        "P<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<<<<<<<<<",
        "L898902C36UTO7408122F1204159ZE184226B<<<<<10",
    ]


@pytest.fixture
def td1_lines():
    """ID card specimen (3 x 30), every check digit valid."""
    return [
        "I<UTOD231458907<<<<<<<<<<<<<<<",
        "7408122F1204159UTO<<<<<<<<<<<6",
        "ERIKSSON<<ANNA<MARIA<<<<<<<<<<",
    ]


@pytest.fixture
def td2_lines():
    """Travel document specimen (2 x 36), every check digit valid."""
    return [
        "I<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<",
        "D231458907UTO7408122F1204159<<<<<<<6",
    ]


@pytest.fixture
def mrva_lines():
    """Type A visa specimen (2 x 44); optional and composite checks unused."""
    return [
        "V<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<<<<<<<<<",
        "L8988901C4XXX4009078F96121096ZE184226B<<<<<<",
    ]


@pytest.fixture
def mrvb_lines():
    """Type B visa specimen (2 x 36); composite check unused."""
    return [
        "V<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<",
        "L8988901C4XXX4009078F9612109<<<<<<<<",
    ]


@pytest.fixture
def eep_line():
    """China Exit-Entry Permit specimen (1 x 30), every check digit valid."""
    return "CSC123456788<3001019<9001011<4"
