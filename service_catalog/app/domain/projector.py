"""
Response projector.

Maps raw upstream records into the public response schema. Pure: no I/O and
no state beyond the base URL, so projecting the same record twice yields the
same output.
"""

import re
from typing import Any, Dict, List, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .models import (
    EpisodeRef,
    HomePage,
    MovieDetail,
    MovieSummary,
    RawDetail,
    RawMovieDetail,
    RawMovieItem,
    RawSearchPage,
    RawSeriesItem,
    RawStreamResult,
    SearchPage,
    Section,
    SeriesDetail,
    SeriesSummary,
    StreamSource,
    WatchRef,
)
from .pagination import build_page_links

TRENDING_SERIES_TITLE = "Trending TV Series"
TRENDING_MOVIES_TITLE = "Trending Movies"

_SEASON_PREFIX = re.compile(r"^(?:SS |S )")
_EPISODE_PREFIX = re.compile(r"^(?:EPS |EP )")

_SERIES_LIST = TypeAdapter(List[RawSeriesItem])
_MOVIE_LIST = TypeAdapter(List[RawMovieItem])
_DETAIL = TypeAdapter(RawDetail)
_STREAM = TypeAdapter(RawStreamResult)
_SEARCH = TypeAdapter(RawSearchPage)


class ProjectionError(Exception):
    """An upstream record could not be shaped into a response."""


def strip_label(value: Any, prefix: "re.Pattern[str]") -> Optional[str]:
    """Drop a leading display prefix such as ``"SS "``; no-op if absent."""
    if value is None:
        return None
    return prefix.sub("", str(value), count=1)


def _validate(adapter: TypeAdapter, record: Any, what: str) -> Any:
    try:
        return adapter.validate_python(record)
    except PydanticValidationError as exc:
        raise ProjectionError(f"unexpected upstream {what} record") from exc


class ResponseProjector:
    """Shapes upstream records into public response dictionaries."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def info_url(self, media_id: str) -> str:
        return f"{self.base_url}/info?id={media_id}"

    def watch_url(self, episode_id: str, media_id: str) -> str:
        return f"{self.base_url}/watch?episodeId={episode_id}&mediaId={media_id}"

    # summaries

    def _series_summary(self, item: RawSeriesItem) -> SeriesSummary:
        return SeriesSummary(
            id=item.id,
            title=item.title,
            image=item.image,
            latest_season=strip_label(item.season, _SEASON_PREFIX),
            latest_episode=strip_label(item.latest_episode, _EPISODE_PREFIX),
            info_url=self.info_url(item.id),
        )

    def _movie_summary(self, item: RawMovieItem) -> MovieSummary:
        return MovieSummary(
            id=item.id,
            title=item.title,
            image=item.image,
            release_date=item.release_date,
            duration=item.duration,
            info_url=self.info_url(item.id),
        )

    def _summary(self, item: Any):
        if isinstance(item, RawMovieItem):
            return self._movie_summary(item)
        return self._series_summary(item)

    def trending_series(self, records: Any) -> List[Dict[str, Any]]:
        items = _validate(_SERIES_LIST, records, "trending series")
        return [self._series_summary(item).model_dump() for item in items]

    def trending_movies(self, records: Any) -> List[Dict[str, Any]]:
        items = _validate(_MOVIE_LIST, records, "trending movies")
        return [self._movie_summary(item).model_dump() for item in items]

    def home(self, series: Any, movies: Any) -> Dict[str, Any]:
        """Home page with the trending TV and trending movie sections."""
        page = HomePage(
            sections=[
                Section(title=TRENDING_SERIES_TITLE, media_items=self.trending_series(series)),
                Section(title=TRENDING_MOVIES_TITLE, media_items=self.trending_movies(movies)),
            ]
        )
        return page.model_dump()

    # detail

    def detail(self, record: Any) -> Dict[str, Any]:
        """Movie detail carries one watch reference, series detail an episode list.

        The movie reference is built from the first upstream episode.
        """
        raw = _validate(_DETAIL, record, "detail")

        if isinstance(raw, RawMovieDetail):
            if not raw.episodes:
                raise ProjectionError(f"movie {raw.id!r} has no episodes")
            detail = MovieDetail(
                id=raw.id,
                title=raw.title,
                cover=raw.cover,
                image=raw.image,
                description=raw.description,
                release_date=raw.release_date,
                duration=raw.duration,
                rating=raw.rating,
                episodes=WatchRef(watch_url=self.watch_url(raw.episodes[0].id, raw.id)),
            )
        else:
            detail = SeriesDetail(
                id=raw.id,
                title=raw.title,
                cover=raw.cover,
                image=raw.image,
                description=raw.description,
                release_date=raw.release_date,
                duration=raw.duration,
                rating=raw.rating,
                episodes=[
                    EpisodeRef(
                        title=episode.title,
                        episode=episode.number,
                        season=episode.season,
                        watch_url=self.watch_url(episode.id, raw.id),
                    )
                    for episode in raw.episodes
                ],
            )
        return detail.model_dump()

    # stream

    def stream(self, record: Any) -> Dict[str, Any]:
        """Playback URL is the last upstream source, whatever its quality."""
        raw = _validate(_STREAM, record, "stream")
        if not raw.sources:
            raise ProjectionError("upstream returned no stream sources")
        return StreamSource(url=raw.sources[-1].url, subtitles=raw.subtitles).model_dump()

    # search

    def search(self, query: str, record: Any) -> Dict[str, Any]:
        raw = _validate(_SEARCH, record, "search")
        next_url, prev_url = build_page_links(
            self.base_url, query, raw.current_page, raw.has_next_page
        )
        page = SearchPage(
            items=[self._summary(item) for item in raw.items],
            current_page=raw.current_page,
            has_next_page=raw.has_next_page,
            next_page_url=next_url,
            prev_page_url=prev_url,
        )
        return page.model_dump()
