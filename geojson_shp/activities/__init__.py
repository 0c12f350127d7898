"""Conversion activity functions.

Each activity performs a single unit of work within a conversion run:
- parse_geojson: Decode the document into a typed FeatureCollection
- infer_schema: Derive the attribute table schema from the first feature
- transcode_geometry: Map one geometry onto one shape record
- assemble_record: Map one feature's properties onto the schema
- write_report: Store the JSON conversion report
"""
