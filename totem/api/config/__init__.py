"""Configuration models and helpers."""
