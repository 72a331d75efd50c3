"""Shared model infrastructure."""
from geokernel.utils.base_model import ImmutableModel

__all__ = ["ImmutableModel"]
