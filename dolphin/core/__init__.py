"""Validation, templates, emitting and patching."""
