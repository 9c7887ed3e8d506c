"""Serialization of analysis snapshots."""

from .schemas import ICTAnalysisSchema, analysis_to_json, analysis_to_schema

__all__ = ["ICTAnalysisSchema", "analysis_to_json", "analysis_to_schema"]
