"""Common base classes and utilities for core functionality."""

from .base_mapper import BaseMapperRegistry

__all__ = ["BaseMapperRegistry"]
