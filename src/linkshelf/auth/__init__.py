"""Authentication and session handling.

Users log in with username/password and get an opaque session token in a
cookie. The token is resolved on every protected request by the session
gate in auth.dependencies against the in-memory SessionStore.
"""
