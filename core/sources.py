"""
Reading source documents into text.
Accepts paths, raw bytes, XML strings and file-like objects.
"""
from pathlib import Path
from typing import IO, Union

from core.exceptions import SourceReadError
from core.logger import setup_logger

logger = setup_logger(__name__)

Source = Union[str, bytes, bytearray, Path, IO]


def _decode(data: bytes, encoding: str) -> str:
    try:
        return data.decode(encoding)
    except UnicodeDecodeError as e:
        raise SourceReadError(
            f"Source document is not valid {encoding} text",
            details={"error": str(e)}
        )


def read_source_text(source: Source, encoding: str = "utf-8-sig") -> str:
    """
    Read a source document as text.

    A str starting with "<" (after an optional BOM) is taken to be the
    document itself and returned without the BOM; any other str or Path
    is a file path.

    Args:
        source: Path, XML string, bytes or binary/text file object
        encoding: Encoding for byte input (BOM is stripped by default)

    Returns:
        Document text

    Raises:
        SourceReadError: If the source cannot be read or decoded
    """
    if source is None:
        raise SourceReadError("No source document given")

    if isinstance(source, (bytes, bytearray)):
        return _decode(bytes(source), encoding)

    if isinstance(source, str):
        text = source.lstrip("\ufeff")
        if text.lstrip().startswith("<"):
            return text

    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.error(f"Failed to read source file {path}: {e}")
            raise SourceReadError(
                f"File read error: {path.name}",
                details={"file_path": str(path), "error": str(e)}
            )
        return _decode(data, encoding)

    if hasattr(source, "read"):
        try:
            if hasattr(source, "seek"):
                source.seek(0)
            data = source.read()
        except (OSError, ValueError) as e:
            raise SourceReadError("File read error", details={"error": str(e)})
        if isinstance(data, (bytes, bytearray)):
            return _decode(bytes(data), encoding)
        return data.lstrip("\ufeff")

    raise SourceReadError(
        f"Unsupported source type: {type(source).__name__}",
        details={"type": type(source).__name__}
    )
