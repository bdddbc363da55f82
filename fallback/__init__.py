"""
Local fallback tier.

This package contains:
- xml_converter: Self-contained XML to flat records converter
"""
