"""Cost quotes for 3D-printed parts."""

__version__ = "0.1.0"
