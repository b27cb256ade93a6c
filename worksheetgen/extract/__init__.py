"""Prompt templates and completion-request assembly for worksheet generation."""
