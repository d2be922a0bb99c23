"""Image scale plugin: format registry, sizing, source acquisition and rendering."""

from .schema import CropRectangle, ImageScaleParams, TransformResult

__all__ = ["ImageScaleParams", "CropRectangle", "TransformResult"]
