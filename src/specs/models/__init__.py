from __future__ import annotations

from .post import Location, Post, RawPost, GeoPoint, PostDocument

__all__ = [
    "Location",
    "Post",
    "RawPost",
    "GeoPoint",
    "PostDocument",
]
