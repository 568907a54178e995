"""
Movie catalog routes.

The catalog is filled as a side effect of identification: every title a
provider returns is stored once (by title and year).
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from cineai.auth import get_database
from cineai.models.movie import CatalogStats, MovieListResponse, MovieResponse, YearRange
from cineai.storage import Database
from .users import paginate

router = APIRouter(prefix="/api/movies", tags=["Movies"])


def filter_movies(
    movies: List[dict],
    genre: Optional[str] = None,
    year: Optional[int] = None,
    type: Optional[str] = None,
    search: Optional[str] = None
) -> List[dict]:
    """
    Filter catalog entries and sort them by rating, then year, both descending.

    genre matches as a case-insensitive substring of any genre; search
    looks at title, synopsis, cast and director.
    """
    if genre:
        genre = genre.lower()
        movies = [m for m in movies if any(genre in g.lower() for g in m.get("genres") or [])]

    if year is not None:
        movies = [m for m in movies if m.get("year") == year]

    if type:
        movies = [m for m in movies if m.get("type") == type]

    if search:
        needle = search.lower()
        movies = [
            m for m in movies
            if needle in (m.get("title") or "").lower()
            or needle in (m.get("synopsis") or "").lower()
            or any(needle in actor.lower() for actor in m.get("cast") or [])
            or needle in (m.get("director") or "").lower()
        ]

    return sorted(movies, key=lambda m: (m.get("rating") or 0, m.get("year") or 0), reverse=True)


def catalog_stats(movies: List[dict]) -> CatalogStats:
    years = [m["year"] for m in movies if m.get("year") is not None]
    ratings = [m.get("rating") or 0 for m in movies]
    genres = {g for m in movies for g in m.get("genres") or []}

    return CatalogStats(
        total_movies=sum(1 for m in movies if m.get("type") == "movie"),
        total_series=sum(1 for m in movies if m.get("type") == "series"),
        total_genres=len(genres),
        average_rating=round(sum(ratings) / len(ratings), 1) if ratings else 0.0,
        year_range=YearRange(min=min(years) if years else None, max=max(years) if years else None)
    )


@router.get("", response_model=MovieListResponse)
async def list_movies(
    genre: Optional[str] = Query(None),
    year: Optional[int] = Query(None),
    type: Optional[str] = Query(None, pattern="^(movie|series)$"),
    search: Optional[str] = Query(None, max_length=200),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Database = Depends(get_database)
):
    """
    List catalog entries with optional filters and pagination.
    """
    movies = filter_movies(db.get_movies(), genre=genre, year=year, type=type, search=search)
    page = paginate(movies, limit, offset)
    return MovieListResponse(
        movies=page["items"],
        total=page["total"],
        page=page["page"],
        total_pages=page["total_pages"]
    )


@router.get("/meta/genres")
async def list_genres(db: Database = Depends(get_database)):
    """
    Every genre present in the catalog, sorted.
    """
    genres = {g for m in db.get_movies() for g in m.get("genres") or []}
    return {"genres": sorted(genres)}


@router.get("/meta/stats", response_model=CatalogStats)
async def get_stats(db: Database = Depends(get_database)):
    """
    Catalog totals, average rating and year range.
    """
    return catalog_stats(db.get_movies())


@router.get("/{movie_id}", response_model=MovieResponse)
async def get_movie(movie_id: str, db: Database = Depends(get_database)):
    """
    Get one catalog entry.
    """
    movie = db.find_movie(movie_id)
    if not movie:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Movie not found"
        )
    return movie
