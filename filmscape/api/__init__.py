"""
REST API: FastAPI app, routers, request/response schemas.
"""
