"""
Tests for the HTTP API.
"""
import pytest
from fastapi.testclient import TestClient

from core.exceptions import LocalConversionError, RemoteTierError
from fallback.xml_converter import XmlFileConverter
from services.conversion_service import ConversionService


def failing_remote(xml_text, timeout=None):
    raise RemoteTierError("Failed to connect to service")


@pytest.fixture
def api(monkeypatch, tmp_path):
    from app import api as api_module

    monkeypatch.setattr(api_module.settings, "temp_storage_path", str(tmp_path))
    yield api_module
    api_module.set_service(None)


@pytest.fixture
def client(api):
    return TestClient(api.app)


def use_remote(api, remote, local=None):
    api.set_service(ConversionService(
        remote_transform=remote,
        local_converter=local or XmlFileConverter().convert,
        timeout=1.0,
    ))


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_no_favicon_route(client):
    assert client.get("/favicon.ico").status_code == 404


def test_convert_via_remote(api, client, remote_output, sample_xml):
    use_remote(api, lambda xml_text, timeout=None: remote_output)

    response = client.post("/convert", files={"file": ("batch.xml", sample_xml, "application/xml")})

    assert response.status_code == 200
    body = response.json()
    assert body["via"] == "remote_tier"
    assert body["prettyJson"] == body["result"]
    assert body["headerData"] == [{"key": "Date", "value": "2024-01-01"}]
    assert body["warnings"] == []


def test_convert_falls_back_and_reports_mapping_warning(api, client, sample_xml):
    use_remote(api, failing_remote)

    response = client.post(
        "/convert",
        files={"file": ("batch.xml", sample_xml, "application/xml")},
        data={"field_mapping": "{not json"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["via"] == "local"
    assert body["parametersData"] == []
    assert body["warnings"] == ["Field mapping JSON is malformed"]


def test_convert_uses_local_options(api, client, sample_xml):
    use_remote(api, failing_remote)

    response = client.post(
        "/convert",
        files={"file": ("batch.xml", sample_xml, "application/xml")},
        data={"root_element": "Header"},
    )

    assert response.json()["result"] == [{"Date": "2024-01-01"}]


def test_convert_both_tiers_failed(api, client, sample_xml):
    def broken_local(source, options):
        raise LocalConversionError("Invalid XML: broken")

    use_remote(api, failing_remote, broken_local)

    response = client.post("/convert", files={"file": ("batch.xml", sample_xml, "application/xml")})

    assert response.status_code == 502
    detail = response.json()["detail"]
    assert "Failed to connect to service" in detail["message"]
    assert "Invalid XML: broken" in detail["message"]


def test_convert_rejects_non_xml(client):
    response = client.post("/convert", files={"file": ("batch.csv", "a,b,c", "text/csv")})
    assert response.status_code == 400


def test_convert_rejects_undecodable_upload(api, client):
    use_remote(api, failing_remote)
    response = client.post("/convert", files={"file": ("batch.xml", b"\xff\xfe\xfa", "application/xml")})
    assert response.status_code == 400


def test_convert_rejects_large_upload(api, client, monkeypatch, sample_xml):
    monkeypatch.setattr(api.settings, "max_upload_bytes", 10)
    response = client.post("/convert", files={"file": ("batch.xml", sample_xml, "application/xml")})
    assert response.status_code == 413


def test_export_and_download(api, client, remote_output, sample_xml, tmp_path):
    use_remote(api, lambda xml_text, timeout=None: remote_output)

    response = client.post("/convert/export", files={"file": ("batch.xml", sample_xml, "application/xml")})

    assert response.status_code == 200
    body = response.json()
    assert body["via"] == "remote_tier"
    assert body["records"] == 2
    assert (tmp_path / body["filename"]).exists()

    download = client.get(f"/download/{body['filename']}")
    assert download.status_code == 200


@pytest.mark.parametrize("filename,status", [
    ("..secret.xlsx", 400),
    ("report.txt", 400),
    ("missing.xlsx", 404),
])
def test_download_validation(client, filename, status):
    assert client.get(f"/download/{filename}").status_code == status
