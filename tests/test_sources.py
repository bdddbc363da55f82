"""
Tests for reading source documents.
"""
import io

import pytest

from core.exceptions import SourceReadError
from core.sources import read_source_text


def test_xml_string_is_returned_as_is():
    assert read_source_text("  <Batch/>") == "  <Batch/>"


def test_xml_string_with_bom_is_the_document():
    """Text read with encoding="utf-8" keeps the BOM; it is still a document."""
    assert read_source_text("\ufeff<Batch/>") == "<Batch/>"


def test_bytes_with_bom_are_decoded():
    assert read_source_text(b"\xef\xbb\xbf<Batch/>") == "<Batch/>"


def test_path_string_is_read(tmp_path):
    path = tmp_path / "batch.xml"
    path.write_text("\ufeff<Batch/>", encoding="utf-8")
    assert read_source_text(str(path)) == "<Batch/>"
    assert read_source_text(path) == "<Batch/>"


def test_text_file_object_with_bom():
    assert read_source_text(io.StringIO("\ufeff<Batch/>")) == "<Batch/>"


def test_binary_file_object_is_rewound():
    stream = io.BytesIO(b"<Batch/>")
    stream.read()
    assert read_source_text(stream) == "<Batch/>"


def test_missing_file_raises(tmp_path):
    with pytest.raises(SourceReadError, match="File read error: missing.xml"):
        read_source_text(tmp_path / "missing.xml")


def test_invalid_bytes_raise():
    with pytest.raises(SourceReadError, match="not valid utf-8-sig"):
        read_source_text(b"\xff\xfe<")


def test_none_and_unsupported_types_raise():
    with pytest.raises(SourceReadError, match="No source document"):
        read_source_text(None)
    with pytest.raises(SourceReadError, match="Unsupported source type: int"):
        read_source_text(42)
