"""
Custom exceptions for the conversion pipeline.
"""
from typing import Any, Dict, Optional


class XmlConverterException(Exception):
    """Base exception for all XML batch conversion errors."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception.
        
        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class SourceReadError(XmlConverterException):
    """Raised when the source document cannot be read as text."""
    pass


class RemoteTierError(XmlConverterException):
    """Raised when the remote transformation service call fails."""
    pass


class LocalConversionError(XmlConverterException):
    """Raised when the local XML converter cannot produce records."""
    pass


class ConversionFailedError(XmlConverterException):
    """Raised when both the remote and the local tier failed."""
    pass


class ExportError(XmlConverterException):
    """Raised when Excel export fails."""
    pass


class ConfigurationError(XmlConverterException):
    """Raised when configuration or caller options are invalid."""
    pass
