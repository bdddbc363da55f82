"""
Shared fixtures: isolated settings and singletons per test.
"""
import pytest

from core.config import reset_settings
from remote.client import reset_client


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """Point storage at a temp dir and rebuild settings for every test."""
    for name in ("LOG_LEVEL", "PORT", "REMOTE_TIMEOUT", "REPEATING_TYPES", "SCALAR_SECTIONS",
                 "REMOTE_TRANSFORM_URL", "REMOTE_MAX_ATTEMPTS"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("STORAGE_PATH", str(tmp_path / "files"))
    reset_settings()
    reset_client()
    yield
    reset_settings()
    reset_client()


SAMPLE_REMOTE_OUTPUT = (
    "type,key,value\n"
    "Header,Date,2024-01-01\n"
    "IbanHesap,IBAN,TR01\n"
    "IbanHesap,IBAN,TR02\n"
    "Details,Amount,100\n"
    "Details,Amount,200"
)

SAMPLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<Batch>
  <Header><Date>2024-01-01</Date></Header>
  <Accounts>
    <Account currency="TRY"><IBAN>TR01</IBAN><Amount>100</Amount></Account>
    <Account currency="EUR"><IBAN>TR02</IBAN><Amount>200</Amount></Account>
  </Accounts>
</Batch>
"""


@pytest.fixture
def remote_output():
    return SAMPLE_REMOTE_OUTPUT


@pytest.fixture
def sample_xml():
    return SAMPLE_XML
