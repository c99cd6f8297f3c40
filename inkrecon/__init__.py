"""
Ink Reconstruction Pipeline
===========================

Converts handwriting-capture exports (page metadata, JIIX ink descriptions
and image assets) into vector page documents.

Main components:
- Style span decoding
- Stroke and line reconstruction from coordinate/pressure arrays
- Image placement in the shared coordinate space
- Page assembly in source order
- JSON, SVG and PNG export
"""

__version__ = "1.0.0"
__author__ = "Ink Reconstruction Team"
