"""
API Schemas - request/response shapes for the /api/v1 endpoints.
"""
