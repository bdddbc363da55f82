"""
XML conversion service.
Runs the two-tier conversion: remote transformation service first,
local XML converter as fallback, one aggregated error if both fail.
"""
import asyncio
import functools
from enum import Enum
from typing import Any, Callable, List, Optional, Sequence

from pydantic import BaseModel

from core.config import get_settings
from core.exceptions import ConversionFailedError, XmlConverterException
from core.grouping import transform_type_key_value_csv
from core.logger import setup_logger
from core.options import LocalConverterOptions
from core.properties import extract_meaningful_properties
from core.schema import (
    LOCAL_TIER,
    REMOTE_TIER,
    LocalConversionResult,
    OrchestratedResult,
    TierFailure,
)
from core.sources import Source, read_source_text

logger = setup_logger(__name__)

# Called as remote_transform(xml_text, timeout=seconds); must give up by the deadline
RemoteTransform = Callable[..., str]
LocalConverter = Callable[[Source, LocalConverterOptions], LocalConversionResult]

REMOTE_FAILURE_PREFIX = "Remote transform service"
EMPTY_RESPONSE_MESSAGE = "Empty response received from remote transform service"
NO_RECORDS_MESSAGE = "Remote transform produced no meaningful records"


class ConversionState(str, Enum):
    """States of one conversion run."""
    START = "start"
    REMOTE_ATTEMPT = "remote_attempt"
    REMOTE_SUCCESS = "remote_success"
    REMOTE_FAILED = "remote_failed"
    LOCAL_ATTEMPT = "local_attempt"
    LOCAL_SUCCESS = "local_success"
    LOCAL_FAILED = "local_failed"
    DONE = "done"
    FATAL = "fatal"


class TierOutcome(BaseModel):
    """Result of one tier: either a converted result or a failure."""
    result: Optional[OrchestratedResult] = None
    failure: Optional[TierFailure] = None

    @property
    def ok(self) -> bool:
        return self.result is not None

    @classmethod
    def success(cls, result: OrchestratedResult) -> "TierOutcome":
        return cls(result=result)

    @classmethod
    def failed(cls, tier: str, message: str, **details: Any) -> "TierOutcome":
        return cls(failure=TierFailure(tier=tier, message=message, details=details))


def describe_error(error: BaseException, default: str) -> str:
    """Extract the most specific message carried by an exception."""
    if isinstance(error, XmlConverterException) and error.message:
        return error.message
    return str(error) or default


class ConversionService:
    """Service running XML documents through the remote and local tiers."""

    def __init__(
        self,
        remote_transform: Optional[RemoteTransform] = None,
        local_converter: Optional[LocalConverter] = None,
        timeout: Optional[float] = None,
        repeating_types: Optional[Sequence[str]] = None,
        scalar_sections: Optional[Sequence[str]] = None,
    ):
        """
        Initialize conversion service.

        Unset collaborators are built from settings: the shared remote
        client and a fresh local XML converter.
        """
        settings = get_settings()

        if remote_transform is None:
            from remote.client import get_client
            remote_transform = get_client().transform
        if local_converter is None:
            from fallback.xml_converter import XmlFileConverter
            local_converter = XmlFileConverter().convert

        self.remote_transform = remote_transform
        self.local_converter = local_converter
        self.timeout = timeout if timeout is not None else settings.remote_timeout
        self.repeating_types = tuple(repeating_types or settings.repeating_types)
        self.scalar_sections = tuple(scalar_sections or settings.scalar_sections)

    def attempt_remote(self, xml_text: str) -> TierOutcome:
        """
        Convert through the remote service.

        The adapter receives the deadline and enforces it itself, so no
        remote work outlives this call. Timeouts, transport errors, empty
        bodies and transforms without records all come back as a failed
        outcome.
        """
        try:
            body = self.remote_transform(xml_text, timeout=self.timeout)
        except Exception as e:
            message = describe_error(e, "Unexpected error in remote transform service")
            logger.error(f"Remote tier call failed: {message}")
            return TierOutcome.failed(
                REMOTE_TIER,
                f"{REMOTE_FAILURE_PREFIX}: {message}",
                error_type=type(e).__name__,
            )

        if not body or not body.strip():
            logger.warning(EMPTY_RESPONSE_MESSAGE)
            return TierOutcome.failed(REMOTE_TIER, EMPTY_RESPONSE_MESSAGE)

        try:
            transformed = transform_type_key_value_csv(
                body, self.repeating_types, self.scalar_sections
            )
        except Exception as e:
            logger.error(f"Remote output transform failed: {e}", exc_info=True)
            return TierOutcome.failed(
                REMOTE_TIER, f"Remote output could not be transformed: {e}"
            )

        if not transformed.records:
            logger.warning(f"{NO_RECORDS_MESSAGE} ({len(body)} characters received)")
            return TierOutcome.failed(REMOTE_TIER, NO_RECORDS_MESSAGE, body_length=len(body))

        logger.info(f"Remote conversion succeeded: {len(transformed.records)} records")
        return TierOutcome.success(OrchestratedResult(
            result=transformed.records,
            properties=extract_meaningful_properties(transformed.records),
            pretty_json=transformed.records,
            via=REMOTE_TIER,
            parameters_data=transformed.parameters_data,
            header_data=transformed.header_data,
        ))

    def attempt_local(
        self,
        source: Source,
        options: Optional[LocalConverterOptions] = None,
    ) -> TierOutcome:
        """Convert with the local XML converter."""
        try:
            local = self.local_converter(source, options or LocalConverterOptions())
        except Exception as e:
            message = describe_error(e, "Unexpected error in local XML converter")
            logger.error(f"Local tier failed: {message}")
            return TierOutcome.failed(LOCAL_TIER, message, error_type=type(e).__name__)

        logger.info(f"Local conversion succeeded: {len(local.result)} records")
        return TierOutcome.success(OrchestratedResult(
            result=local.result,
            properties=local.properties,
            pretty_json=local.result,
            via=LOCAL_TIER,
            parameters_data=[],
            header_data=[],
        ))

    def process_xml(
        self,
        source: Source,
        options: Optional[LocalConverterOptions] = None,
    ) -> OrchestratedResult:
        """
        Convert an XML document into flat records.

        Args:
            source: XML path, text, bytes or file object
            options: Options for the local tier (the remote tier ignores them)

        Returns:
            OrchestratedResult tagged with the tier that produced it

        Raises:
            SourceReadError: If the source cannot be read (no fallback)
            ConversionFailedError: If both tiers failed
        """
        return ConversionRun(self, source, options).execute()

    async def process_xml_async(
        self,
        source: Source,
        options: Optional[LocalConverterOptions] = None,
    ) -> OrchestratedResult:
        """Run process_xml in the default thread pool executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, functools.partial(self.process_xml, source, options)
        )


class ConversionRun:
    """
    One pass through the fallback protocol for a single document.
    The visited states are kept in `trace`.
    """

    def __init__(
        self,
        service: ConversionService,
        source: Source,
        options: Optional[LocalConverterOptions] = None,
    ):
        self.service = service
        self.source = source
        self.options = options
        self.state = ConversionState.START
        self.trace: List[ConversionState] = [ConversionState.START]
        self.remote_failure: Optional[TierFailure] = None
        self.local_failure: Optional[TierFailure] = None

    def _enter(self, state: ConversionState) -> None:
        logger.debug(f"Conversion state: {self.state.value} -> {state.value}")
        self.state = state
        self.trace.append(state)

    def execute(self) -> OrchestratedResult:
        xml_text = read_source_text(self.source)

        self._enter(ConversionState.REMOTE_ATTEMPT)
        logger.info(f"Trying remote tier ({len(xml_text)} characters)")
        remote = self.service.attempt_remote(xml_text)
        if remote.ok:
            self._enter(ConversionState.REMOTE_SUCCESS)
            self._enter(ConversionState.DONE)
            return remote.result

        self.remote_failure = remote.failure
        self._enter(ConversionState.REMOTE_FAILED)
        logger.warning(f"Remote tier failed, trying local XML converter: {remote.failure.message}")

        self._enter(ConversionState.LOCAL_ATTEMPT)
        # File objects were consumed above; hand the local tier the text instead
        local_source = xml_text if hasattr(self.source, "read") else self.source
        local = self.service.attempt_local(local_source, self.options)
        if local.ok:
            self._enter(ConversionState.LOCAL_SUCCESS)
            self._enter(ConversionState.DONE)
            return local.result

        self.local_failure = local.failure
        self._enter(ConversionState.LOCAL_FAILED)
        self._enter(ConversionState.FATAL)
        logger.error("Both conversion tiers failed")
        raise ConversionFailedError(
            f"XML processing failed - Remote: {self.remote_failure.message}, "
            f"Local: {self.local_failure.message}",
            details={
                "remote_error": self.remote_failure.message,
                "local_error": self.local_failure.message,
                "trace": [state.value for state in self.trace],
            }
        )
