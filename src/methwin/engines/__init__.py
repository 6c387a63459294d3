"""Algorithms operating on the containers."""
