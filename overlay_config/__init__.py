"""Shared overlay definitions, persisted store and logging helpers."""
