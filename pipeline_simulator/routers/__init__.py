"""
API routers
"""

from . import deployments, simulator

__all__ = ["deployments", "simulator"]
