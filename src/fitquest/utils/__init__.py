"""Utility helpers for fitquest."""
