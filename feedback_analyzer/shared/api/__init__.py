"""
Shared API Layer
================

FastAPI middleware and exception handlers used by every router.
"""
