"""
Restaurant directory API.

Responsibilities:
- Register users and issue short-lived bearer tokens.
- CRUD over restaurant documents stored in MongoDB.
- Proximity search built on MongoDB's 2dsphere index and aggregation pipeline.
"""
