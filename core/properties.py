"""
Column header extraction for converted records.
"""
import re
from typing import Iterable, List, Mapping

_DIGITS_ONLY = re.compile(r"[0-9]+")


def is_meaningful_key(key: str) -> bool:
    """Keys of one character or only digits are decoding artifacts."""
    return len(key) > 1 and not _DIGITS_ONLY.fullmatch(key)


def extract_meaningful_properties(records: Iterable[Mapping[str, str]]) -> List[str]:
    """
    Collect the sorted, de-duplicated column names across records.

    Args:
        records: Converted records

    Returns:
        Sorted list of meaningful keys
    """
    keys = set()
    for record in records:
        keys.update(key for key in record if key and is_meaningful_key(key))
    return sorted(keys)
