from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class Location(BaseModel):
    lat: float = Field(ge=-90.0, le=90.0)
    lon: float = Field(ge=-180.0, le=180.0)


class Post(BaseModel):
    """A single user submission as seen by clients and the pipeline."""

    id: str = ""
    user: str
    message: str = ""
    location: Location
    url: str = ""


class RawPost(BaseModel):
    """Unparsed write request fields, straight from the HTTP boundary.

    Coordinates stay strings here; the pipeline owns the parsing policy.
    """

    user: str = ""
    message: str = ""
    lat: Optional[str] = None
    lon: Optional[str] = None


class GeoPoint(BaseModel):
    """GeoJSON point as stored in the Cosmos spatial index ([lon, lat] order)."""

    type: Literal["Point"] = "Point"
    coordinates: List[float] = Field(min_length=2, max_length=2)

    @classmethod
    def from_location(cls, location: Location) -> "GeoPoint":
        return cls(coordinates=[location.lon, location.lat])

    def to_location(self) -> Location:
        lon, lat = self.coordinates
        return Location(lat=lat, lon=lon)


class PostDocument(BaseModel):
    """Index document for one post, keyed by the post id."""

    # Cosmos adds _rid, _self, _etag, _attachments and _ts to every item
    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
    user: str
    message: str
    location: GeoPoint
    url: str

    @classmethod
    def from_post(cls, post: Post) -> "PostDocument":
        return cls(
            id=post.id,
            user=post.user,
            message=post.message,
            location=GeoPoint.from_location(post.location),
            url=post.url,
        )

    def to_post(self) -> Post:
        return Post(
            id=self.id,
            user=self.user,
            message=self.message,
            location=self.location.to_location(),
            url=self.url,
        )


__all__ = [
    "Location",
    "Post",
    "RawPost",
    "GeoPoint",
    "PostDocument",
]
