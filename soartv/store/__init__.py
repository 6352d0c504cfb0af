"""
Document-store boundary.

Responsibilities:
- Define the read interface the recommendation engine depends on.
- Provide an in-memory store seeded from a JSON snapshot.
- Wrap any store with a TTL read-through cache.
- Bound every external call with a timeout and a fallback value.
"""
