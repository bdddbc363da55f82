"""
FastAPI routes for XML upload and conversion.
Thin API layer over ConversionService.
"""
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.responses import FileResponse

from core.config import get_settings
from core.exceptions import ConversionFailedError, ExportError, SourceReadError
from core.exporters import create_output_filename, export_records_to_excel
from core.logger import setup_logger
from core.options import LocalConverterOptions, build_local_options
from core.schema import OrchestratedResult
from services.conversion_service import ConversionService

logger = setup_logger(__name__)
settings = get_settings()

app = FastAPI(
    title="XML Batch Converter",
    description="Convert XML transaction batches into flat records",
    version="1.0.0"
)

# Service instance, built lazily so tests can swap it
_service: Optional[ConversionService] = None


def get_service() -> ConversionService:
    global _service
    if _service is None:
        _service = ConversionService()
    return _service


def set_service(service: Optional[ConversionService]) -> None:
    """Replace the service instance (useful for testing)."""
    global _service
    _service = service


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "xml_batch_converter",
        "version": "1.0.0"
    }


def validate_file_extension(filename: str) -> None:
    """
    Validate file has correct extension.

    Args:
        filename: Name of file to validate

    Raises:
        HTTPException: If file extension is invalid
    """
    if not filename or not filename.lower().endswith(".xml"):
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type: {filename}. Only .xml is supported."
        )


async def read_upload(file: UploadFile) -> bytes:
    """Read an uploaded XML file, enforcing the size limit."""
    validate_file_extension(file.filename)
    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large: {len(content)} bytes (limit {settings.max_upload_bytes})"
        )
    return content


async def run_conversion(content: bytes, options: LocalConverterOptions) -> OrchestratedResult:
    """Run the conversion and map pipeline errors to HTTP errors."""
    try:
        return await get_service().process_xml_async(content, options)

    except SourceReadError as e:
        logger.error(f"Unreadable upload: {e.message}")
        raise HTTPException(status_code=400, detail=e.message)

    except ConversionFailedError as e:
        logger.error(f"Conversion failed: {e.message}")
        raise HTTPException(
            status_code=502,
            detail={"message": e.message, "details": e.details}
        )


@app.post("/convert")
async def convert_xml(
    file: UploadFile = File(...),
    root_element: Optional[str] = Form(None),
    field_mapping: Optional[str] = Form(None),
) -> Dict[str, Any]:
    """
    Convert an uploaded XML document.

    Args:
        file: XML transaction batch
        root_element: Record element for the local converter (optional)
        field_mapping: JSON column mapping for the local converter (optional)

    Returns:
        Conversion result with camelCase keys and any option warnings
    """
    logger.info(f"Received file for conversion: {file.filename}")
    content = await read_upload(file)
    options, warnings = build_local_options(root_element, field_mapping)

    result = await run_conversion(content, options)
    logger.info(f"Converted {file.filename}: {len(result.result)} records via {result.via}")

    return {**result.to_response(), "warnings": warnings}


@app.post("/convert/export")
async def convert_and_export(
    file: UploadFile = File(...),
    root_element: Optional[str] = Form(None),
    field_mapping: Optional[str] = Form(None),
) -> Dict[str, Any]:
    """
    Convert an uploaded XML document and write the records to Excel.

    Returns:
        Output filename for /download, provenance and warnings
    """
    content = await read_upload(file)
    options, warnings = build_local_options(root_element, field_mapping)

    result = await run_conversion(content, options)

    output_path = create_output_filename(result.via, settings.temp_storage_path)
    try:
        export_records_to_excel(result, output_path)
    except ExportError as e:
        logger.error(f"Export failed: {e.message}", exc_info=True)
        raise HTTPException(status_code=500, detail=e.message)

    return {
        "filename": Path(output_path).name,
        "via": result.via,
        "records": len(result.result),
        "warnings": warnings,
    }


@app.get("/download/{filename}")
async def download_file(filename: str):
    """
    Download an exported file.

    Args:
        filename: Name of the file to download

    Returns:
        File response
    """
    # Security: Validate filename to prevent path traversal
    if ".." in filename or "/" in filename or "\\" in filename:
        raise HTTPException(status_code=400, detail="Invalid filename")

    if not filename.endswith(".xlsx"):
        raise HTTPException(status_code=400, detail="Invalid file type")

    storage = Path(settings.temp_storage_path).resolve()
    file_path = (storage / filename).resolve()

    # Ensure the resolved path is within temp storage
    if storage not in file_path.parents:
        raise HTTPException(status_code=400, detail="Invalid file path")

    if not file_path.exists():
        raise HTTPException(status_code=404, detail="File not found")

    return FileResponse(
        path=str(file_path),
        filename=filename,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    )
