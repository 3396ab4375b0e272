"""
MRZ Parsing Command-Line Tool.

Parses MRZ text lines given on the command line, in a text file or on stdin
and prints the decoded document.

Usage:
    # Parse lines given as arguments
    python scripts/parse_mrz.py "P<UTOERIKSSON<<ANNA<MARIA<<<<<<<<<<<<<<<<<<<" \
        "L898902C36UTO7408122F1204159ZE184226B<<<<<10"

    # Parse a text file (one recognized line per row)
    python scripts/parse_mrz.py --file ocr_output.txt

    # Chip-sourced text with strict check digits, JSON output
    python scripts/parse_mrz.py --file chip.txt --policy strict --json
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.mrz import MRZParserManager  # noqa: E402

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    """Main entry point for MRZ parsing."""
    parser = argparse.ArgumentParser(
        description="Parse machine readable zone text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("lines", nargs="*", help="MRZ text lines in reading order")
    parser.add_argument(
        "--file", type=Path, default=None, help="Text file with one line per row"
    )
    parser.add_argument(
        "--config", type=Path, default=None, help="Path to config YAML (default: bundled)"
    )
    parser.add_argument(
        "--policy",
        type=str,
        choices=["lenient", "strict"],
        default=None,
        help="Check digit policy (default: from config)",
    )
    parser.add_argument("--json", action="store_true", help="Print JSON output")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.file is not None:
        if not args.file.exists():
            logger.error(f"Input file not found: {args.file}")
            sys.exit(1)
        lines = args.file.read_text(encoding="utf-8").splitlines()
    elif args.lines:
        lines = args.lines
    else:
        lines = sys.stdin.read().splitlines()

    lines = [line for line in lines if line.strip()]
    logger.info(f"Parsing {len(lines)} lines")

    manager = MRZParserManager(config_path=args.config)
    document = manager.parse_mrz(lines, policy=args.policy)

    if document is None:
        logger.warning("No MRZ could be parsed")
        sys.exit(1)

    if args.json:
        output = {
            "document_type": document.document_type,
            "country_code": document.country_code,
            "surname": document.surname,
            "given_names": document.given_names,
            "document_number": document.document_number,
            "nationality": document.nationality,
            "date_of_birth": document.formatted_date_of_birth,
            "sex": document.sex,
            "expiry_date": document.formatted_expiry_date,
            "personal_number": document.personal_number,
            "mrz_key": document.mrz_key,
            "check_digits_valid": document.check_digits.all_valid
            if document.check_digits
            else None,
        }
        print(json.dumps(output, indent=2, ensure_ascii=False))
    else:
        print(document)


if __name__ == "__main__":
    main()
