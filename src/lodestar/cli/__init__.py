"""Lodestar command line interface."""
