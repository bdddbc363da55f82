"""
Caller supplied options for the local XML converter.
"""
import json
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from core.exceptions import ConfigurationError
from core.logger import setup_logger

logger = setup_logger(__name__)

FIELD_MAPPING_ERROR = "Field mapping JSON is malformed"


class LocalConverterOptions(BaseModel):
    """Options for the local tier; an empty instance means defaults."""
    model_config = ConfigDict(frozen=True)

    root_element: Optional[str] = None
    field_mapping: Optional[Dict[str, List[str]]] = None


def parse_field_mapping(text: Optional[str]) -> Optional[Dict[str, List[str]]]:
    """
    Parse a JSON field mapping of output column -> candidate source keys.

    Args:
        text: JSON object text, e.g. '{"Amount": ["Tutar", "Amount"]}'

    Returns:
        Parsed mapping, or None for blank input

    Raises:
        ConfigurationError: If the text is not a JSON object of strings or string lists
    """
    if not text or not text.strip():
        return None

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(FIELD_MAPPING_ERROR, details={"error": str(e)})

    if not isinstance(raw, dict):
        raise ConfigurationError(FIELD_MAPPING_ERROR, details={"error": "expected a JSON object"})

    mapping: Dict[str, List[str]] = {}
    for column, candidates in raw.items():
        if isinstance(candidates, str):
            candidates = [candidates]
        if not isinstance(candidates, list) or not all(isinstance(c, str) for c in candidates):
            raise ConfigurationError(
                FIELD_MAPPING_ERROR,
                details={"error": f"candidates for '{column}' must be strings", "column": column}
            )
        mapping[column] = candidates

    return mapping


def build_local_options(
    root_element: Optional[str] = None,
    field_mapping_text: Optional[str] = None,
) -> Tuple[LocalConverterOptions, List[str]]:
    """
    Build local converter options from raw caller input.

    A malformed field mapping does not block conversion: it is left out
    and reported back as a warning.

    Returns:
        Tuple of (options, user-facing warnings)
    """
    warnings: List[str] = []
    field_mapping = None

    try:
        field_mapping = parse_field_mapping(field_mapping_text)
    except ConfigurationError as e:
        logger.warning(f"Ignoring field mapping: {e.message} ({e.details.get('error')})")
        warnings.append(e.message)

    options = LocalConverterOptions(
        root_element=(root_element or "").strip() or None,
        field_mapping=field_mapping,
    )
    return options, warnings
