# services/search.py
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from sqlalchemy.orm import Session

from db import crud
from services.errors import UpstreamError, ValidationError
from services.ingestion import CURATED_TAGS, photo_to_dict, search_tags, transform_photo
from services.photo_source import MAX_PAGE_SIZE, PicsumClient

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 30
# The listing API does not report a total; the curated endpoint advertises this fixed figure.
CURATED_TOTAL_RESULTS = 1000
# Below this many photographer matches the remote search broadens its filter.
MIN_KEYWORD_MATCHES = 10
SEARCH_ERROR_MESSAGE = "Error searching photos"

# The source has no content search, so keywords map to photographers whose work fits them.
SEARCH_KEYWORDS: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    "computer": ("Alejandro Escamilla", "Paul Jarvis", "Tina Rataj"),
    "technology": ("Paul Jarvis", "Alejandro Escamilla"),
    "business": ("Philipe Cavalcante", "Tina Rataj"),
    "ocean": ("Ben Moore", "Glen Carrie"),
    "nature": ("Glen Carrie", "Ben Moore", "Paul Jarvis"),
    "mountain": ("Glen Carrie", "Ben Moore"),
    "coffee": ("Philipe Cavalcante", "Kevin Laminto"),
    "food": ("Philipe Cavalcante", "Kevin Laminto"),
    "city": ("Alejandro Escamilla", "Paul Jarvis"),
    "people": ("Joseph Pearson", "Jeffrey Betts"),
    "art": ("Tina Rataj", "Jeffrey Betts"),
    "architecture": ("Tina Rataj", "Alejandro Escamilla"),
})


@dataclass
class SearchResult:
    page: int
    per_page: int
    total_results: int
    photos: List[Dict[str, Any]] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "page": self.page,
            "per_page": self.per_page,
            "total_results": self.total_results,
            "photos": self.photos,
        }


def _validate_paging(page: int, per_page: int) -> None:
    if page < 1:
        raise ValidationError("page must be a positive integer")
    if per_page < 1:
        raise ValidationError("per_page must be a positive integer")


def _author(entry: Dict[str, Any]) -> str:
    return str(entry.get("author") or "").lower()


def filter_listing(listing: Sequence[Dict[str, Any]], query: str) -> List[Dict[str, Any]]:
    """
    Heuristic author-name filter:
    mapped photographers first, then authors containing the query (or
    everything when the keyword is unmapped), then the full listing.
    """
    query_lower = query.lower()
    photographers = [name.lower() for name in SEARCH_KEYWORDS.get(query_lower, ())]

    filtered = list(listing)
    if photographers:
        filtered = [
            entry for entry in listing
            if any(name in _author(entry) for name in photographers)
        ]

    if len(filtered) < MIN_KEYWORD_MATCHES:
        filtered = [
            entry for entry in listing
            if query_lower in _author(entry) or not photographers
        ]

    if not filtered:
        filtered = list(listing)

    return filtered


async def list_curated(source: PicsumClient, page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> SearchResult:
    _validate_paging(page, per_page)
    per_page = min(per_page, MAX_PAGE_SIZE)
    listing = await source.list_photos(page=page, limit=per_page)
    photos = [transform_photo(entry, CURATED_TAGS) for entry in listing]
    return SearchResult(page=page, per_page=per_page, total_results=CURATED_TOTAL_RESULTS, photos=photos)


async def search_remote(
    source: PicsumClient, query: str, page: int = 1, per_page: int = DEFAULT_PER_PAGE
) -> SearchResult:
    """
    Search the external listing by keyword.

    `total_results` is the size of the filtered set before truncation to
    `per_page`, not an upstream total.
    """
    if not query:
        raise ValidationError("Search query is required")
    _validate_paging(page, per_page)

    try:
        listing = await source.list_photos(page=page, limit=MAX_PAGE_SIZE)
        filtered = filter_listing(listing, query)
        tags = search_tags(query)
        photos = [transform_photo(entry, tags) for entry in filtered[:per_page]]
    except UpstreamError as e:
        raise UpstreamError(SEARCH_ERROR_MESSAGE, error=e.error)
    logger.info(f"Remote search '{query}' matched {len(filtered)} of {len(listing)} listing entries.")
    return SearchResult(page=page, per_page=per_page, total_results=len(filtered), photos=photos)


def search_local(db: Session, search_term: str, page: int = 1, per_page: int = DEFAULT_PER_PAGE) -> SearchResult:
    """Substring search over cached photos; `total_results` is an exact count."""
    if not search_term:
        raise ValidationError("Search term is required")
    _validate_paging(page, per_page)

    skip = (page - 1) * per_page
    db_photos, total = crud.search_photos(db, search_term, skip=skip, limit=per_page)
    return SearchResult(
        page=page,
        per_page=per_page,
        total_results=total,
        photos=[photo_to_dict(p) for p in db_photos],
    )
