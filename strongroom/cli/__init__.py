"""Strongroom command-line interface."""
