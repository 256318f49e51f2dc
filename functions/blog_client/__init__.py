"""
Client access layer for the posts API.

The facade picks one backend from configuration and degrades gracefully when
that backend is missing or unreachable.
"""
