"""
Kanuni API Module
=================
FastAPI routers for the Kanuni API.
"""

from api.analyze import router as analyze_router
from api.rules import router as rules_router

__all__ = ["analyze_router", "rules_router"]
