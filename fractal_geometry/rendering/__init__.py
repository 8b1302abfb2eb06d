"""Coloring and raster export."""
