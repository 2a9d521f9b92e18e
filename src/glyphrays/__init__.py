"""glyphrays - Encode glyph outlines for restricted-ray GPU coverage.

glyphrays converts the closed contours of a glyph (line segments and quadratic
curves) into a hierarchy of boxes packed into 32-bit words. Each leaf box holds
the curves crossing it together with one sample point of known winding, which
lets a fragment shader compute antialiased coverage by casting a ray against
only a handful of curves.

Example:
    $ glyphrays encode Roboto-Regular.ttf

This will create Roboto-Regular.rays (the packed atlas store) together with
Roboto-Regular.rays.json describing where each glyph lives in the store.
"""

__version__ = "0.1.0"
__author__ = "Dimosthenis Kaponis"

__all__ = ["__author__", "__version__"]
