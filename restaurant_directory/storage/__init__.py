"""
MongoDB persistence.

Responsibilities:
- Open and close the single MongoClient the application shares.
- Ensure the 2dsphere index on restaurant locations and the unique email index.
- CRUD for restaurant documents and lookups for user credentials.
"""
