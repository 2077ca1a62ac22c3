"""
Raw upstream records and public response shapes.

Raw models accept the provider's loose camelCase payloads and are only used
at the projector boundary. Detail and search items are a tagged union keyed
on the declared media type: the movie tag selects the movie shape, anything
else is treated as a series.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Discriminator, Field, Tag

MOVIE_TAG = "movie"
SERIES_TAG = "series"

Label = Union[int, str]


def is_movie_type(declared: Any) -> bool:
    """True when the upstream type label names the movie variant."""
    return isinstance(declared, str) and declared.strip().lower() == MOVIE_TAG


def media_variant(record: Any) -> str:
    """Discriminator for raw records: "movie" or "series"."""
    if isinstance(record, dict):
        declared = record.get("type")
    else:
        declared = getattr(record, "type", None)
    return MOVIE_TAG if is_movie_type(declared) else SERIES_TAG


class RawRecord(BaseModel):
    """Base for upstream payloads; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)


# --- raw upstream records -------------------------------------------------


class RawMovieItem(RawRecord):
    id: str
    title: Optional[str] = None
    image: Optional[str] = None
    type: Optional[str] = None
    release_date: Optional[Label] = Field(default=None, alias="releaseDate")
    duration: Optional[Label] = None


class RawSeriesItem(RawRecord):
    id: str
    title: Optional[str] = None
    image: Optional[str] = None
    type: Optional[str] = None
    season: Optional[Label] = Field(default=None, validation_alias=AliasChoices("season", "seasons"))
    latest_episode: Optional[Label] = Field(default=None, alias="latestEpisode")


RawSummaryItem = Annotated[
    Union[
        Annotated[RawMovieItem, Tag(MOVIE_TAG)],
        Annotated[RawSeriesItem, Tag(SERIES_TAG)],
    ],
    Discriminator(media_variant),
]


class RawEpisode(RawRecord):
    id: str
    title: Optional[str] = None
    number: Optional[Label] = None
    season: Optional[Label] = None


class RawDetailBase(RawRecord):
    id: str
    title: Optional[str] = None
    cover: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    release_date: Optional[Label] = Field(default=None, alias="releaseDate")
    duration: Optional[Label] = None
    rating: Optional[Union[float, str]] = None
    episodes: List[RawEpisode] = Field(default_factory=list)


class RawMovieDetail(RawDetailBase):
    pass


class RawSeriesDetail(RawDetailBase):
    pass


RawDetail = Annotated[
    Union[
        Annotated[RawMovieDetail, Tag(MOVIE_TAG)],
        Annotated[RawSeriesDetail, Tag(SERIES_TAG)],
    ],
    Discriminator(media_variant),
]


class RawSource(RawRecord):
    url: str
    quality: Optional[str] = None
    is_m3u8: Optional[bool] = Field(default=None, alias="isM3U8")


class RawStreamResult(RawRecord):
    sources: List[RawSource] = Field(default_factory=list)
    subtitles: List[Dict[str, Any]] = Field(default_factory=list)


class RawSearchPage(RawRecord):
    items: List[RawSummaryItem] = Field(
        default_factory=list,
        validation_alias=AliasChoices("items", "results"),
    )
    current_page: int = Field(default=1, ge=1, alias="currentPage")
    has_next_page: bool = Field(default=False, alias="hasNextPage")


# --- public response shapes -----------------------------------------------


class MovieSummary(BaseModel):
    id: str
    title: Optional[str] = None
    image: Optional[str] = None
    release_date: Optional[Label] = None
    duration: Optional[Label] = None
    type: Literal["movie"] = "movie"
    info_url: str


class SeriesSummary(BaseModel):
    id: str
    title: Optional[str] = None
    image: Optional[str] = None
    latest_season: Optional[str] = None
    latest_episode: Optional[str] = None
    type: Literal["series"] = "series"
    info_url: str


MediaSummary = Union[MovieSummary, SeriesSummary]


class Section(BaseModel):
    title: str
    media_items: List[MediaSummary]


class HomePage(BaseModel):
    sections: List[Section]


class WatchRef(BaseModel):
    watch_url: str


class EpisodeRef(BaseModel):
    title: Optional[str] = None
    episode: Optional[Label] = None
    season: Optional[Label] = None
    watch_url: str


class DetailBase(BaseModel):
    id: str
    title: Optional[str] = None
    cover: Optional[str] = None
    image: Optional[str] = None
    description: Optional[str] = None


class MovieDetail(DetailBase):
    type: Literal["movie"] = "movie"
    release_date: Optional[Label] = None
    duration: Optional[Label] = None
    rating: Optional[Union[float, str]] = None
    episodes: WatchRef


class SeriesDetail(DetailBase):
    type: Literal["series"] = "series"
    release_date: Optional[Label] = None
    duration: Optional[Label] = None
    rating: Optional[Union[float, str]] = None
    episodes: List[EpisodeRef]


class StreamSource(BaseModel):
    url: str
    subtitles: List[Dict[str, Any]] = Field(default_factory=list)


class SearchPage(BaseModel):
    items: List[MediaSummary]
    current_page: int = Field(ge=1)
    has_next_page: bool
    next_page_url: Optional[str] = None
    prev_page_url: Optional[str] = None
