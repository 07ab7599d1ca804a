"""
Processor modules for the paper digestion pipeline

Leaf stages are re-exported here. Import the assembler, synthesizer and driver
from their own modules; they depend on the extractors package.
"""

from .page_rasterizer import PageImage, PageRasterizer, PdftoppmRasterizer
from .image_encoder import EncodedImage, ImageEncoder

__all__ = [
    'PageImage',
    'PageRasterizer',
    'PdftoppmRasterizer',
    'EncodedImage',
    'ImageEncoder'
]
