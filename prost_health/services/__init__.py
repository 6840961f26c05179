"""
Services Package
"""
from .screening import ScreeningService

__all__ = ["ScreeningService"]
