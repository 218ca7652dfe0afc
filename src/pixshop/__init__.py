"""
Pixshop.

An image-editing studio whose edits, filters, upscaling, outpainting, style
transfer and translation are delegated to a generative model, while the
history, selections, masks, crops and batch scheduling run locally.

Usage:
    # Show configuration
    pixshop info

    # Edit an image
    pixshop edit photo.png adjustment "warmer golden-hour light"

    # Process a batch
    pixshop batch *.png --action "Noir Filter"
"""

__version__ = "0.1.0"

from .editing import EditSession
from .models import ImageModel, create_image_model
from .raster import Artifact

__all__ = [
    "Artifact",
    "EditSession",
    "ImageModel",
    "create_image_model",
]
