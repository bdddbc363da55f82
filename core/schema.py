"""
Pydantic schemas for values flowing through the conversion pipeline.
All models are created and consumed within a single conversion call.
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

# Flat record shown as one table row
Record = Dict[str, str]

Via = Literal["remote_tier", "local"]

REMOTE_TIER: Via = "remote_tier"
LOCAL_TIER: Via = "local"


class Triple(BaseModel):
    """One decoded line of the remote type,key,value encoding."""
    model_config = ConfigDict(frozen=True)

    type: str
    key: str
    value: str


class KeyValuePair(BaseModel):
    """Key/value entry of a scalar (non-repeating) section."""
    model_config = ConfigDict(frozen=True)

    key: str
    value: str


class DecodeResult(BaseModel):
    """Decoded triples plus the malformed lines that were dropped."""
    triples: List[Triple] = Field(default_factory=list)
    malformed_lines: List[str] = Field(default_factory=list)


class TransformResult(BaseModel):
    """Merged records and scalar sections produced from remote output."""
    records: List[Record] = Field(default_factory=list)
    parameters_data: List[KeyValuePair] = Field(default_factory=list)
    header_data: List[KeyValuePair] = Field(default_factory=list)


class LocalConversionResult(BaseModel):
    """Output of the local XML converter."""
    result: List[Record]
    properties: List[str] = Field(default_factory=list)


class TierFailure(BaseModel):
    """Failure of one conversion tier, carried as a value."""
    model_config = ConfigDict(frozen=True)

    tier: Via
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class OrchestratedResult(BaseModel):
    """
    Unified conversion result returned to callers.
    `via` tells which tier produced the records; scalar sections are
    only populated by the remote tier.
    """
    model_config = ConfigDict(frozen=True)

    result: List[Record]
    properties: Optional[List[str]] = None
    pretty_json: Optional[List[Record]] = Field(default=None, serialization_alias="prettyJson")
    via: Via
    parameters_data: List[KeyValuePair] = Field(
        default_factory=list, serialization_alias="parametersData"
    )
    header_data: List[KeyValuePair] = Field(
        default_factory=list, serialization_alias="headerData"
    )

    def to_response(self) -> Dict[str, Any]:
        """Serialize with the camelCase field names used by API clients."""
        return self.model_dump(by_alias=True)
