"""
Restaurant request/response schemas and the location checks applied to them
before anything reaches the store.
"""
