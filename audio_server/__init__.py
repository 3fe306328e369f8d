"""
Audio Library Browse Server.

HTTP API for browsing an artist/album/track audio library with embedded
metadata and cached responses.
"""

__version__ = "1.0.0"
