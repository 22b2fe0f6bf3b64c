"""I/O utilities for loading multibody descriptions from robot file formats."""

from .urdf_parser import load_multibody, load_urdf

__all__ = ["load_urdf", "load_multibody"]
