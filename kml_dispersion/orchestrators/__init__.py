"""Pipeline orchestration.

Manages the end-to-end workflow for a dispersion KML document:
1. Parse KML → style table + folders
2. Per qualifying folder → bbox, projection, rasterize, timestamp
3. Fan-in → stable sort by timestamp, collect warnings
"""
