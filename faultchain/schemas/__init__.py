"""Schemas — pydantic models for rendered error chains."""
