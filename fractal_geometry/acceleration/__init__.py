"""Acceleration backends for the Julia set."""
