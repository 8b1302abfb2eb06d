"""Geometry primitives and fractal generators."""
