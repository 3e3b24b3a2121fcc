"""KML Dispersion Segment Extraction.

Converts the time-stepped KML output of an atmospheric dispersion run
(HYSPLIT concentration contours) into a time-ordered series of
georeferenced PNG overlays suitable for web-map display.
"""

__version__ = "0.1.0"
