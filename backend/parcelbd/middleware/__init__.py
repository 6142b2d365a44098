# Middleware package init
"""
ParcelBD Backend — Middleware Package
======================================

Middleware Chain (request direction):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID first, so every later log line can carry it
    2. Logging measures the full handler duration and sees the final status
    3. CORS is FastAPI's CORSMiddleware (handles preflight)
"""
