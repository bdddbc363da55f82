"""
Grouping and merging of decoded type,key,value rows into flat records.

Scalar sections (Parameters, Header) are folded into single objects.
Repeating types (account rows, detail rows) are split into records by
watching for the first key of the type to come around again; the remote
encoding has no other record delimiter. Records of every repeating type
are then merged index by index on top of the scalar sections.
"""
import re
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from core.decoding import decode_rows
from core.logger import setup_logger
from core.schema import KeyValuePair, Record, TransformResult, Triple

logger = setup_logger(__name__)

DEFAULT_REPEATING_TYPES = ("IbanHesap", "Details")
DEFAULT_SCALAR_SECTIONS = ("Parameters", "Header")

_TRAILING_DIGITS = re.compile(r"\d+$")
_INVALID_KEY_CHARS = re.compile(r"[^A-Za-z0-9_]")


def extract_key_value(triples: Iterable[Triple], row_type: str) -> List[KeyValuePair]:
    """
    Project triples of one scalar section to key/value pairs.

    Args:
        triples: Decoded rows
        row_type: Section name, e.g. "Parameters"

    Returns:
        Pairs in input order
    """
    return [
        KeyValuePair(key=triple.key, value=triple.value)
        for triple in triples
        if triple.type == row_type
    ]


def to_object(pairs: Iterable[KeyValuePair]) -> Record:
    """Fold pairs into a dict; later pairs overwrite earlier ones."""
    obj: Record = {}
    for pair in pairs:
        obj[pair.key] = pair.value
    return obj


def group_by_type_as_objects(triples: Iterable[Triple], row_type: str) -> List[Record]:
    """
    Split the rows of a repeating type into logical records.

    The key of the first row of the type is the boundary key: each time it
    reappears a new record starts. A record that omits the boundary key
    therefore merges into the one before it.

    Args:
        triples: Decoded rows
        row_type: Repeating type name, e.g. "IbanHesap"

    Returns:
        Records in input order
    """
    rows = [triple for triple in triples if triple.type == row_type]
    if not rows:
        return []

    boundary_key = rows[0].key
    groups: List[Record] = []
    current: Record = {}

    for row in rows:
        if row.key == boundary_key and current:
            groups.append(current)
            current = {}
        current[row.key] = row.value

    if current:
        groups.append(current)

    return groups


def normalize_key(key: Optional[str]) -> str:
    """
    Normalize a field name for merged records.

    Strips a trailing run of digits (DestinationAccountNo2 -> DestinationAccountNo)
    and then every character outside [A-Za-z0-9_]. An empty result means the
    entry should be dropped.
    """
    if not key:
        return ""
    normalized = _TRAILING_DIGITS.sub("", key.strip())
    return _INVALID_KEY_CHARS.sub("", normalized)


def clean_record(record: Mapping[str, Any]) -> Record:
    """
    Drop blank values and normalize keys.

    Args:
        record: Merged mapping, values may be None or non-string

    Returns:
        Record with trimmed string values and non-empty normalized keys
    """
    cleaned: Record = {}
    for key, value in record.items():
        if value is None:
            continue
        text = str(value).strip()
        if not text:
            continue
        clean_key = normalize_key(key)
        if clean_key:
            cleaned[clean_key] = text
    return cleaned


def merge_layers(layers: Sequence[Mapping[str, str]]) -> Record:
    """
    Merge mappings in precedence order.

    Layers are listed lowest precedence first; on a key collision the
    later layer wins.
    """
    merged: Record = {}
    for layer in layers:
        merged.update(layer)
    return merged


def transform_type_key_value_csv(
    text: Optional[str],
    repeating_types: Sequence[str] = DEFAULT_REPEATING_TYPES,
    scalar_sections: Sequence[str] = DEFAULT_SCALAR_SECTIONS,
) -> TransformResult:
    """
    Turn remote type,key,value output into merged records.

    Merge precedence for record i is: parameters section, header section,
    then record i of each repeating type in the order given. Repeating rows
    therefore win over document-wide scalar values with the same name.

    Args:
        text: Raw remote output
        repeating_types: Repeating type names in merge order
        scalar_sections: (parameters section, header section) names

    Returns:
        TransformResult with records and both scalar sections
    """
    triples = decode_rows(text).triples
    if not triples:
        return TransformResult()

    parameters_section, header_section = scalar_sections
    parameters_data = extract_key_value(triples, parameters_section)
    header_data = extract_key_value(triples, header_section)
    param_obj = to_object(parameters_data)
    header_obj = to_object(header_data)

    groups = [group_by_type_as_objects(triples, row_type) for row_type in repeating_types]
    logger.info(
        "Groups built: "
        + ", ".join(f"{name} ({len(group)})" for name, group in zip(repeating_types, groups))
    )

    count = max((len(group) for group in groups), default=0)
    records: List[Record] = []
    for i in range(count):
        layers = [param_obj, header_obj]
        layers.extend(group[i] if i < len(group) else {} for group in groups)
        records.append(clean_record(merge_layers(layers)))

    return TransformResult(
        records=records,
        parameters_data=parameters_data,
        header_data=header_data,
    )
