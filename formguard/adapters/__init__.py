"""Validation adapters."""

from formguard.adapters.pydantic_adapter import pydantic_adapter, validation_errors

__all__ = ["pydantic_adapter", "validation_errors"]
