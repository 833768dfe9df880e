"""Warmane armory arena match-history crawler."""
