# tests/__init__.py
"""Test suite for gaussdist."""
