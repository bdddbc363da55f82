"""
Unit tests for caller supplied local converter options.
"""
import pytest

from core.exceptions import ConfigurationError
from core.options import (
    FIELD_MAPPING_ERROR,
    LocalConverterOptions,
    build_local_options,
    parse_field_mapping,
)


def test_parse_field_mapping_blank():
    assert parse_field_mapping(None) is None
    assert parse_field_mapping("   ") is None


def test_parse_field_mapping_lists_and_strings():
    mapping = parse_field_mapping('{"Amount": ["Tutar", "Amount"], "Iban": "IBAN"}')
    assert mapping == {"Amount": ["Tutar", "Amount"], "Iban": ["IBAN"]}


@pytest.mark.parametrize("text", ["{not json", "[1, 2]", '{"Amount": [1]}', '{"Amount": 3}'])
def test_parse_field_mapping_malformed(text):
    with pytest.raises(ConfigurationError) as exc_info:
        parse_field_mapping(text)
    assert exc_info.value.message == FIELD_MAPPING_ERROR


def test_build_local_options_valid():
    options, warnings = build_local_options(" Account ", '{"Iban": ["IBAN"]}')
    assert options == LocalConverterOptions(root_element="Account", field_mapping={"Iban": ["IBAN"]})
    assert warnings == []


def test_build_local_options_malformed_mapping_is_a_warning():
    """A bad optional mapping does not block conversion."""
    options, warnings = build_local_options("Account", "{broken")
    assert options.root_element == "Account"
    assert options.field_mapping is None
    assert warnings == [FIELD_MAPPING_ERROR]


def test_build_local_options_empty():
    options, warnings = build_local_options()
    assert options == LocalConverterOptions()
    assert warnings == []
