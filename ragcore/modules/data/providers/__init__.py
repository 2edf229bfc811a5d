"""
Data Providers Module

This module contains the provider implementations for different data sources.
"""

from .vector import VectorConfig

__all__ = ["VectorConfig"]
