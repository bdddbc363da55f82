"""
HTTP API for the XML batch converter.
"""
