"""
Service layer for business logic.

This package contains the conversion service that runs XML documents
through the remote transformation tier with a local fallback.
"""
