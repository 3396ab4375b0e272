#!/usr/bin/env python3
"""
Configuration Verification Script

Validates an MRZ configuration YAML (default: the bundled src/mrz/config.yaml).
"""

import argparse
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.mrz.config_loader import Config, load_config  # noqa: E402

DEFAULT_CONFIG_PATH = PROJECT_ROOT / "src" / "mrz" / "config.yaml"


def verify_configuration(config_path: Path = DEFAULT_CONFIG_PATH) -> bool:
    """
    Verify MRZ configuration is consistent.

    Args:
        config_path: Path to config.yaml

    Returns:
        True if all checks pass

    Raises:
        FileNotFoundError: If the config file does not exist
        pydantic.ValidationError: If a value violates its field constraints
    """
    print("=" * 60)
    print("  Configuration Verification  ")
    print(f"  File: {config_path}")
    print("=" * 60)
    print()

    config: Config = load_config(config_path)
    mrz = config.mrz

    # Display current configuration
    print("Current Configuration:")
    print(f"  Policy: {mrz.parser.policy}")
    print(f"  EEP country code: {mrz.parser.eep_country_code}")
    print(f"  Synthetic confidence: {mrz.parser.synthetic_confidence}")
    print(f"  Century window: {mrz.parser.century_window}")
    print()
    print(f"  Line length: {mrz.validator.min_line_length}-{mrz.validator.max_line_length}")
    print(f"  EEP length: {mrz.validator.eep_min_length}-{mrz.validator.eep_max_length}")
    print(f"  Valid char ratio: {mrz.validator.min_valid_char_ratio}")
    print()
    print(f"  Spare lines: {mrz.extractor.spare_lines}")
    print(f"  Higher position first: {mrz.extractor.higher_position_first}")
    print()

    # Validation checks
    print("Validation Checks:")

    checks = []

    # 1. Line length window covers every format width (30, 36, 44)
    if mrz.validator.min_line_length <= 30 and mrz.validator.max_line_length >= 44:
        print("  ✓ Line length window covers 30/36/44")
        checks.append(True)
    else:
        print("  ✗ Line length window excludes a format width")
        checks.append(False)

    # 2. EEP window covers 30
    if mrz.validator.eep_min_length <= 30 <= mrz.validator.eep_max_length:
        print("  ✓ EEP length window covers 30")
        checks.append(True)
    else:
        print("  ✗ EEP length window excludes 30")
        checks.append(False)

    # 3. Loose acceptance is stricter than the base ratio
    if mrz.validator.loose_valid_char_ratio >= mrz.validator.min_valid_char_ratio:
        print("  ✓ Loose char ratio >= minimum char ratio")
        checks.append(True)
    else:
        print("  ⚠ Loose char ratio below minimum (loose rule never applies)")
        checks.append(True)  # Warning but acceptable

    # 4. Substitution tables stay inside the MRZ alphabet
    rules = mrz.normalizer.rules
    targets = (
        set(rules.ocr_substitutions.values())
        | set(rules.letter_to_digit.values())
        | set(rules.digit_to_letter.values())
    )
    if all(len(t) == 1 and (t.isalnum() or t == mrz.normalizer.filler) for t in targets):
        print("  ✓ Substitution targets are MRZ characters")
        checks.append(True)
    else:
        print(f"  ✗ Substitution targets outside MRZ alphabet: {sorted(targets)}")
        checks.append(False)

    print()

    # Summary
    passed = sum(checks)
    total = len(checks)

    print("=" * 60)
    if all(checks):
        print("✅ Configuration VERIFIED: All checks passed!")
        print("=" * 60)
        return True
    else:
        print(f"⚠️  Configuration WARNING: {passed}/{total} checks passed")
        print("=" * 60)
        print()
        print("Please review the configuration and fix any issues.")
        return False


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Verify MRZ configuration")
    parser.add_argument(
        "--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to config YAML"
    )
    args = parser.parse_args()

    try:
        success = verify_configuration(args.config)
        sys.exit(0 if success else 1)
    except Exception as e:
        print(f"\n❌ Error: {e}")
        sys.exit(1)
