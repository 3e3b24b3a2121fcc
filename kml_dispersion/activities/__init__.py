"""Pipeline activity functions.

Each activity performs a single unit of work:
- parse_kml: Validate and decode the dispersion KML into folders and styles
- resolve_timestamp: Derive one epoch timestamp per folder
- rasterize_segment: Render one folder's polygons to a PNG data URI
"""
