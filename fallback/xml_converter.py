"""
Local XML converter used when the remote transformation tier is unavailable.
Flattens repeating XML elements into flat records without any network call.
"""
import xml.etree.ElementTree as ET
from collections import Counter
from typing import Dict, List, Optional

from core.exceptions import LocalConversionError
from core.logger import setup_logger
from core.options import LocalConverterOptions
from core.properties import extract_meaningful_properties
from core.schema import LocalConversionResult, Record
from core.sources import Source, read_source_text

logger = setup_logger(__name__)


def local_name(tag) -> str:
    """Strip a {namespace} prefix from an element or attribute name."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _put(record: Record, key: str, value: str) -> None:
    """Store a value; repeated keys get numeric suffixes (Tag, Tag2, Tag3...)."""
    if key not in record:
        record[key] = value
        return
    n = 2
    while f"{key}{n}" in record:
        n += 1
    record[f"{key}{n}"] = value


def flatten_element(element: ET.Element) -> Record:
    """
    Flatten one record element into a dict.

    Leaf text is stored under the leaf tag, attributes of the record element
    under their own name and attributes of nested elements as <tag>_<attr>.
    Blank leaves are skipped.
    """
    record: Record = {}

    for name, value in element.attrib.items():
        if value.strip():
            _put(record, local_name(name), value.strip())

    if len(element) == 0:
        text = (element.text or "").strip()
        if text:
            _put(record, local_name(element.tag), text)
        return record

    def walk(node: ET.Element) -> None:
        for child in node:
            tag = local_name(child.tag)
            for name, value in child.attrib.items():
                if value.strip():
                    _put(record, f"{tag}_{local_name(name)}", value.strip())
            if len(child):
                walk(child)
            else:
                text = (child.text or "").strip()
                if text:
                    _put(record, tag, text)

    walk(element)
    return record


def find_record_elements(root: ET.Element, root_element: Optional[str] = None) -> List[ET.Element]:
    """
    Locate the elements that make up the records of a document.

    With root_element every element with that tag is a record. Otherwise the
    most frequently repeated sibling tag wins (first in document order on a
    tie); a document without repetition is a single record.

    Raises:
        LocalConversionError: If root_element does not occur in the document
    """
    if root_element:
        matches = [el for el in root.iter() if local_name(el.tag) == root_element]
        if not matches:
            raise LocalConversionError(
                f"Root element '{root_element}' not found",
                details={"root_element": root_element}
            )
        return matches

    best_parent = None
    best_tag = None
    best_count = 1
    for parent in root.iter():
        counts = Counter(local_name(child.tag) for child in parent)
        for tag, count in counts.items():
            if count > best_count:
                best_parent, best_tag, best_count = parent, tag, count

    if best_parent is None:
        return [root]
    return [child for child in best_parent if local_name(child.tag) == best_tag]


def apply_field_mapping(record: Record, field_mapping: Dict[str, List[str]]) -> Record:
    """
    Rename columns using output column -> candidate source keys.
    The first candidate present wins; unmapped keys are kept.
    """
    mapped: Record = {}
    consumed = set()
    for column, candidates in field_mapping.items():
        for candidate in candidates:
            if candidate in record:
                mapped[column] = record[candidate]
                consumed.add(candidate)
                break
    for key, value in record.items():
        if key not in consumed and key not in mapped:
            mapped[key] = value
    return mapped


class XmlFileConverter:
    """Self-contained XML to records converter."""

    def convert(
        self,
        source: Source,
        options: Optional[LocalConverterOptions] = None,
    ) -> LocalConversionResult:
        """
        Convert an XML document into flat records.

        Args:
            source: XML path, text, bytes or file object
            options: Root element and field mapping (optional)

        Returns:
            LocalConversionResult with records and their properties

        Raises:
            LocalConversionError: If the XML is invalid or yields no records
            SourceReadError: If the source cannot be read
        """
        options = options or LocalConverterOptions()
        text = read_source_text(source)

        try:
            root = ET.fromstring(text)
        except ET.ParseError as e:
            logger.error(f"Local XML parse failed: {e}")
            raise LocalConversionError(f"Invalid XML: {e}", details={"error": str(e)})

        elements = find_record_elements(root, options.root_element)
        records = []
        for element in elements:
            record = flatten_element(element)
            if options.field_mapping:
                record = apply_field_mapping(record, options.field_mapping)
            if record:
                records.append(record)

        if not records:
            raise LocalConversionError(
                "XML document produced no records",
                details={"root_element": options.root_element, "candidates": len(elements)}
            )

        logger.info(f"Local XML conversion produced {len(records)} records")
        return LocalConversionResult(
            result=records,
            properties=extract_meaningful_properties(records),
        )
