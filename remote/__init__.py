"""
Remote transformation tier.

This package contains:
- client: REST client for the remote XML -> type,key,value service
"""
