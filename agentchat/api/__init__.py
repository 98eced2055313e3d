"""
HTTP API: FastAPI app, routers and dependency wiring.
"""
