"""
Decoder for the line-oriented type,key,value encoding returned by the
remote transformation service.
"""
import re
from typing import List, Optional

from core.logger import setup_logger
from core.schema import DecodeResult, Triple

logger = setup_logger(__name__)

HEADER_LINE = "type,key,value"

_LINE_SPLIT = re.compile(r"\r?\n")


def decode_rows(text: Optional[str]) -> DecodeResult:
    """
    Decode raw remote output into typed triples.

    Only the first two commas delimit fields; anything after the second
    comma is the value verbatim. Lines with fewer than two commas are
    recorded as malformed and skipped. Never raises.

    Args:
        text: Raw multi-line text

    Returns:
        DecodeResult with triples in input order
    """
    result = DecodeResult()
    if not text:
        return result

    for line in _LINE_SPLIT.split(text):
        stripped = line.strip()
        if not stripped or stripped.lower() == HEADER_LINE:
            continue

        first_comma = line.find(",")
        second_comma = line.find(",", first_comma + 1) if first_comma != -1 else -1

        if first_comma == -1 or second_comma == -1:
            logger.warning(f"Malformed line skipped: {line!r}")
            result.malformed_lines.append(line)
            continue

        row_type = line[:first_comma].strip()
        key = line[first_comma + 1:second_comma].strip()
        value = line[second_comma + 1:].strip()

        if row_type and key:
            result.triples.append(Triple(type=row_type, key=key, value=value))

    if result.malformed_lines:
        logger.info(
            f"Decoded {len(result.triples)} rows, skipped {len(result.malformed_lines)} malformed lines"
        )

    return result


def parse_type_key_value_csv(text: Optional[str]) -> List[Triple]:
    """Decode text and return only the triples."""
    return decode_rows(text).triples
