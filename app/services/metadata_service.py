"""
Metadata Enrichment Service

Turns a program title into a normalized MetadataRecord using the TMDb client,
memoized in the MetadataCache. Never raises: upstream failures produce an
empty record that is cached like any other result.
"""
import logging

from app.models import Episode, MetadataRecord, Movie
from app.services.metadata_cache import MetadataCache
from app.services.tmdb_client import TMDbClient
from app.utils.http_operations import UpstreamUnavailable
from app.utils.titles import classify_title


logger = logging.getLogger(__name__)


class MetadataService:
    """Cache-gated enrichment of program titles"""

    def __init__(
        self,
        client: TMDbClient,
        cache: MetadataCache,
        *,
        certification_region: str = "US",
    ) -> None:
        self.client = client
        self.cache = cache
        self.certification_region = certification_region.upper()

    async def enrich(self, title: str) -> MetadataRecord:
        """
        Get metadata for a title

        Args:
            title: Lookup title (also the cache key)

        Returns:
            MetadataRecord, empty when the title is unknown, unmatched or the lookup failed
        """
        cached = self.cache.get(title)
        if cached is not None:
            logger.debug("Metadata cache hit: %s", title)
            return cached

        classified = classify_title(title)
        if not isinstance(classified, (Episode, Movie)):
            return MetadataRecord()

        try:
            if isinstance(classified, Episode):
                record = await self._lookup_episode(classified)
            else:
                record = await self._lookup_movie(classified)
        except (UpstreamUnavailable, AttributeError, KeyError, TypeError, ValueError) as e:
            logger.error(f"TMDb lookup error for '{title}': {e}")
            record = MetadataRecord()

        self.cache.put(title, record)
        return record

    async def _lookup_episode(self, episode: Episode) -> MetadataRecord:
        results = await self.client.search_tv(episode.series)
        if not results:
            logger.info(f"No TMDb series match for '{episode.series}'")
            return MetadataRecord()
        return MetadataRecord(series_id=int(results[0]["id"]))

    async def _lookup_movie(self, movie: Movie) -> MetadataRecord:
        results = await self.client.search_movie(movie.name, movie.year)
        if not results:
            logger.info(f"No TMDb movie match for '{movie.name}' ({movie.year})")
            return MetadataRecord()

        match = results[0]
        movie_id = int(match["id"])

        details = await self.client.movie_details(movie_id)
        release_dates = await self.client.movie_release_dates(movie_id)
        credits = await self.client.movie_credits(movie_id)

        return MetadataRecord(
            overview=match.get("overview") or "",
            certification=self._certification(release_dates),
            image=match.get("backdrop_path") or match.get("poster_path") or "",
            director=_director(credits),
            tmdb_id=movie_id,
            runtime=details.get("runtime") or 0,
            star_rating=details.get("vote_average") or 0,
        )

    def _certification(self, release_dates: list[dict]) -> str:
        """First non-empty certification listed for the target region"""
        for country in release_dates:
            if not isinstance(country, dict):
                continue
            if country.get("iso_3166_1") != self.certification_region:
                continue
            for entry in country.get("release_dates") or []:
                if not isinstance(entry, dict):
                    continue
                certification = (entry.get("certification") or "").strip()
                if certification:
                    return certification
            break
        return ""


def _director(credits: dict) -> str:
    for member in credits.get("crew") or []:
        if isinstance(member, dict) and member.get("job") == "Director":
            return member.get("name") or ""
    return ""
