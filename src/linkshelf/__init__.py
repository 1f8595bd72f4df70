"""linkshelf: personal link sharing service.

Users log in with a cookie session, collect links into groups (public or
key-protected), and attach pre-rendered cache entries to groups and links.
"""

__version__ = "0.1.0"
