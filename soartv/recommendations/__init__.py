"""
Recommendation engine.

Responsibilities:
- Score user-to-user collaboration compatibility.
- Score user-to-project relevance.
- Assemble ranked, thresholded, capped recommendation lists from a
  document-store snapshot without ever raising to the caller.
"""
