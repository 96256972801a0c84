"""Stages of the structured-query protocol."""
