"""
Module: handlers
Description: FastAPI routers for the simulator's HTTP surface.

- sessions: launch, status, stop and finish endpoints
"""

__all__ = []
