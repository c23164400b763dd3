"""
API layer for the user service.

Exposes the user RPC endpoints and the health check under /api/v1.
"""
