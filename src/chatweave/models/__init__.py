"""Pydantic data models for chatweave."""
