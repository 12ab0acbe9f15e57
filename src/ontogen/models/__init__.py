"""Pydantic models for generation output."""

from ontogen.models.report import GenerationReport

__all__ = ["GenerationReport"]
