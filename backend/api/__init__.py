"""
Portfolio Contact API Routers
"""
from backend.api import contact, health, resume

__all__ = [
    "contact",
    "health",
    "resume",
]
