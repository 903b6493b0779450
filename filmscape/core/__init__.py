"""
Domain logic that sits between the API layer and the database.

- aggregation: keeps movie rating aggregates consistent with reviews
- catalog: client for the public OMDb movie catalog
"""
