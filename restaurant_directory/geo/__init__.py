"""
Geospatial search over the restaurants collection.

Responsibilities:
- Convert meter and mile distances into angular radii on a spherical Earth.
- Assemble the $geoNear aggregation pipelines for radius and range search.
- Build the $centerSphere containment filter for bounding-region search.
"""
