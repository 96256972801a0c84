"""Core value types and the answer-shape predicate language."""
