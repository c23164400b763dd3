"""
User account service root package.

This package contains the FastAPI app entry point (main.py), the RPC-style
API routes, the domain service and model, and the relational storage and
messaging infrastructure.
"""
