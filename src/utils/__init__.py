"""Shared utilities for the Cairo project model."""
