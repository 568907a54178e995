"""
Pydantic models for the movie catalog.
"""

from typing import List, Optional
from pydantic import BaseModel


class PlatformResponse(BaseModel):
    name: str
    icon: str
    is_available: bool
    deep_link: Optional[str] = None
    is_subscription: bool = True
    is_synthetic: bool = True


class MovieResponse(BaseModel):
    """A catalog entry, stored the first time a title is identified."""
    id: str
    title: str
    year: Optional[int] = None
    type: str = "movie"
    genres: List[str] = []
    rating: float = 0.0
    duration: str = ""
    synopsis: str = ""
    cast: List[str] = []
    director: str = ""
    poster_url: str = ""
    backdrop_url: str = ""
    platforms: List[PlatformResponse] = []

    class Config:
        from_attributes = True


class MovieListResponse(BaseModel):
    movies: List[MovieResponse]
    total: int
    page: int
    total_pages: int


class YearRange(BaseModel):
    min: Optional[int] = None
    max: Optional[int] = None


class CatalogStats(BaseModel):
    total_movies: int
    total_series: int
    total_genres: int
    average_rating: float
    year_range: YearRange
