"""GeoJSON to ESRI Shapefile converter.

Reads a GeoJSON FeatureCollection of Point and LineString features,
derives a fixed-width dBASE schema from the first feature's properties,
and writes the ``.shp`` / ``.shx`` / ``.dbf`` triple with geometry and
attribute records kept in lock-step.
"""

__version__ = "0.1.0"
