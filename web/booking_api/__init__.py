"""Immersive Trips booking backend."""
