"""
Excel exporter for converted records.
Writes the record table plus the scalar sections of remote results.
"""
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import pandas as pd

from core.config import get_settings
from core.exceptions import ExportError
from core.logger import setup_logger
from core.schema import KeyValuePair, OrchestratedResult

logger = setup_logger(__name__)

RECORDS_SHEET = "Records"
PARAMETERS_SHEET = "Parameters"
HEADER_SHEET = "Header"


def records_to_dataframe(result: OrchestratedResult) -> pd.DataFrame:
    """
    Build the record table with one column per property.
    Missing fields become empty cells.
    """
    columns = result.properties or sorted({key for record in result.result for key in record})
    df = pd.DataFrame(result.result, columns=columns)
    return df.fillna("")


def pairs_to_dataframe(pairs: List[KeyValuePair]) -> pd.DataFrame:
    """Two-column key/value table for a scalar section."""
    return pd.DataFrame(
        [(pair.key, pair.value) for pair in pairs],
        columns=["Key", "Value"]
    )


def export_records_to_excel(result: OrchestratedResult, output_path: str) -> str:
    """
    Export a conversion result to Excel.

    Args:
        result: Conversion result to export
        output_path: Output file path

    Returns:
        Path to created file

    Raises:
        ExportError: If there is nothing to export or writing fails
    """
    if not result.result:
        raise ExportError("No records to export", details={"via": result.via})

    logger.info(f"Exporting {len(result.result)} records (via {result.via}) to {output_path}")

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    records_df = records_to_dataframe(result)

    try:
        with pd.ExcelWriter(output_path, engine="xlsxwriter") as writer:
            records_df.to_excel(writer, sheet_name=RECORDS_SHEET, index=False)
            worksheet = writer.sheets[RECORDS_SHEET]

            # Auto-fit columns (approximate)
            for idx, col in enumerate(records_df.columns):
                max_len = max(
                    records_df[col].astype(str).map(len).max(),
                    len(str(col))
                )
                worksheet.set_column(idx, idx, min(max_len + 2, 50))

            if result.parameters_data:
                pairs_to_dataframe(result.parameters_data).to_excel(
                    writer, sheet_name=PARAMETERS_SHEET, index=False
                )
            if result.header_data:
                pairs_to_dataframe(result.header_data).to_excel(
                    writer, sheet_name=HEADER_SHEET, index=False
                )

        logger.info(f"Successfully exported to {output_path}")
        return output_path

    except Exception as e:
        logger.error(f"Failed to export Excel: {e}")
        raise ExportError(
            "Failed to export to Excel",
            details={"output_path": output_path, "error": str(e)}
        )


def create_output_filename(via: str, base_path: Optional[str] = None) -> str:
    """
    Create timestamped output filename.

    Args:
        via: Tier that produced the records ("remote_tier" or "local")
        base_path: Base directory path (defaults to configured temp storage)

    Returns:
        Full output file path
    """
    if base_path is None:
        base_path = get_settings().temp_storage_path

    Path(base_path).mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%dT%H-%M-%S-%f")
    filename = f"records_{via}_{timestamp}.xlsx"

    return str(Path(base_path) / filename)
