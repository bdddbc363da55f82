"""
Core conversion modules for the XML batch converter.

This package contains:
- config: Application configuration and settings
- decoding: type,key,value row decoder
- exceptions: Custom exception classes
- exporters: Excel export functionality
- grouping: Record grouping, merging and key normalization
- logger: Logging configuration
- options: Caller supplied converter options
- properties: Table header extraction
- schema: Pydantic models for pipeline values
- sources: Reading source documents into text
"""
