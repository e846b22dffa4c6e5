"""Utility modules for Strongroom."""
