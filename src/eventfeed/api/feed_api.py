"""
FastAPI service for the event discovery feed.
Exposes REST endpoints for the mixed feed, recurrence expansion, the
"My Events" agenda and the tag bar.
"""

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Dict, List, Literal, Optional

import numpy as np
from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from eventfeed.agenda import build_agenda
from eventfeed.models import FeedFilter, Occurrence, RecommendationItem
from eventfeed.pipeline import assemble_feed
from eventfeed.records import event_from_row
from eventfeed.recurrence import expand_recurrence, recurrence_label
from eventfeed.supabase_client.supabase_service import SupabaseService, get_supabase_service
from eventfeed.tags import build_tag_bar

LOGGER = logging.getLogger(__name__)


# Pydantic models for request/response
class FeedRequest(BaseModel):
    user_id: str = Field(..., description="User identifier")
    latitude: Optional[float] = Field(None, description="Current latitude", ge=-90, le=90)
    longitude: Optional[float] = Field(None, description="Current longitude", ge=-180, le=180)
    city: Optional[str] = Field(None, description="Overrides the city stored on the profile")
    filter: Literal["all", "near_me", "tag"] = Field("all", description="Primary feed filter")
    tag: Optional[str] = Field(None, description="Tag used with the 'tag' filter")
    rotation_counter: int = Field(0, description="Refresh counter selecting the headlined shelf", ge=0)
    personalized: bool = Field(True, description="Let interests reorder the primary feed")
    search_query: Optional[str] = Field(None, description="Title/location search")
    today: Optional[date] = Field(None, description="Reference day, defaults to the server date")


class ExpandRequest(BaseModel):
    event: Dict[str, Any] = Field(..., description="Event row as stored")
    today: Optional[date] = None


class TagBarRequest(BaseModel):
    user_id: Optional[str] = None
    tags: Optional[List[str]] = Field(None, description="Candidate tags, fetched from storage when omitted")
    interests: Optional[List[str]] = Field(None, description="Interests, read from the profile when omitted")
    seed: int = Field(..., description="Seed for the tag shuffle")
    limit: int = Field(10, ge=1, le=50)


class OccurrenceModel(BaseModel):
    id: str
    title: str
    date: str
    time: str
    end_date: Optional[str] = None
    end_time: Optional[str] = None
    location: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    is_online: bool
    price: float
    gender: str
    tags: List[str]
    attending_count: int
    organizer_id: Optional[str] = None
    status: str
    is_recurring: bool
    generated: bool


class ShelfModel(BaseModel):
    type: str
    title: str
    score: float
    events: List[OccurrenceModel]


class FeedItemModel(BaseModel):
    type: Literal["event", "recommendation"]
    id: str
    event: Optional[OccurrenceModel] = None
    recommendation: Optional[ShelfModel] = None


class FeedResponse(BaseModel):
    user_id: str
    filter: str
    rotation_counter: int
    headline: Optional[ShelfModel] = None
    total_events: int
    total_recommendations: int
    items: List[FeedItemModel]
    timestamp: str


class ExpandResponse(BaseModel):
    event_id: str
    label: Optional[str] = None
    total_occurrences: int
    occurrences: List[OccurrenceModel]


class AgendaDayModel(BaseModel):
    day: str
    events: List[OccurrenceModel]


class AgendaResponse(BaseModel):
    user_id: str
    selected_day: str
    days: List[AgendaDayModel]


class TagBarResponse(BaseModel):
    tags: List[str]


class HealthResponse(BaseModel):
    status: str
    timestamp: str


# Initialize FastAPI app
app = FastAPI(
    title="Event Feed API",
    description="Personalized event feed with rotating recommendation shelves",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_store() -> SupabaseService:
    return get_supabase_service()


def _occurrence_model(occ: Occurrence) -> OccurrenceModel:
    return OccurrenceModel(**occ.to_dict())


def _shelf_model(candidate) -> ShelfModel:
    return ShelfModel(
        type=candidate.type.value,
        title=candidate.title,
        score=candidate.score,
        events=[_occurrence_model(occ) for occ in candidate.events],
    )


def _feed_filter(request: FeedRequest) -> FeedFilter:
    if request.filter == "near_me":
        return FeedFilter.near_me()
    if request.filter == "tag":
        if not request.tag:
            raise HTTPException(status_code=422, detail="'tag' is required with the tag filter")
        return FeedFilter.for_tag(request.tag)
    return FeedFilter.all()


def _load_profile(store: SupabaseService, user_id: str):
    try:
        profile = store.fetch_user_profile(user_id)
    except Exception as exc:
        LOGGER.error("Profile lookup failed for %s: %s", user_id, exc)
        raise HTTPException(status_code=502, detail="User storage unavailable")
    if profile is None:
        raise HTTPException(status_code=404, detail=f"User '{user_id}' not found")
    return profile


@app.get("/", response_model=Dict[str, str])
async def root():
    """Root endpoint."""
    return {
        "message": "Event Feed API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(status="healthy", timestamp=datetime.utcnow().isoformat())


@app.post("/feed", response_model=FeedResponse)
def get_feed(request: FeedRequest, store: SupabaseService = Depends(get_store)):
    """
    Build the mixed feed for one refresh.

    The client owns ``rotation_counter`` and bumps it on every pull-to-refresh
    so a different shelf gets headlined.
    """
    feed_filter = _feed_filter(request)
    today = request.today or date.today()
    profile = _load_profile(store, request.user_id)
    if request.latitude is not None and request.longitude is not None:
        profile = replace(profile, location=(request.latitude, request.longitude))
    if request.city:
        profile = replace(profile, city=request.city)

    try:
        events = store.fetch_events(today, request.search_query)
    except Exception as exc:
        LOGGER.error("Event fetch failed: %s", exc)
        raise HTTPException(status_code=502, detail="Event storage unavailable")

    feed = assemble_feed(
        events,
        profile,
        feed_filter,
        request.rotation_counter,
        today,
        personalized=request.personalized,
    )

    items = []
    for item in feed.items:
        if isinstance(item, RecommendationItem):
            items.append(FeedItemModel(type="recommendation", id=item.key, recommendation=_shelf_model(item.candidate)))
        else:
            items.append(FeedItemModel(type="event", id=item.key, event=_occurrence_model(item.occurrence)))

    return FeedResponse(
        user_id=profile.id,
        filter=feed_filter.kind.value,
        rotation_counter=request.rotation_counter,
        headline=_shelf_model(feed.headline) if feed.headline else None,
        total_events=len(feed.event_items),
        total_recommendations=len(feed.recommendation_items),
        items=items,
        timestamp=datetime.utcnow().isoformat()
    )


@app.post("/recurrence/expand", response_model=ExpandResponse)
async def expand_event(request: ExpandRequest):
    """
    Expand one event row into its upcoming occurrences.
    """
    event = event_from_row(request.event)
    occurrences = expand_recurrence(event, request.today or date.today())
    return ExpandResponse(
        event_id=event.id,
        label=recurrence_label(event.recurrence),
        total_occurrences=len(occurrences),
        occurrences=[_occurrence_model(occ) for occ in occurrences],
    )


@app.get("/users/{user_id}/agenda", response_model=AgendaResponse)
def get_agenda(
    user_id: str,
    today: Optional[date] = Query(None),
    selected_day: Optional[str] = Query(None),
    store: SupabaseService = Depends(get_store),
):
    """
    Events the user organizes or attends, grouped by day.
    """
    today = today or date.today()
    try:
        organized, attending = store.fetch_my_events(user_id, today)
    except Exception as exc:
        LOGGER.error("My events fetch failed for %s: %s", user_id, exc)
        raise HTTPException(status_code=502, detail="Event storage unavailable")

    agenda = build_agenda(organized, attending, today, selected_day=selected_day)
    return AgendaResponse(
        user_id=user_id,
        selected_day=agenda.selected_day,
        days=[
            AgendaDayModel(day=entry.day, events=[_occurrence_model(occ) for occ in entry.occurrences])
            for entry in agenda.days
        ],
    )


@app.post("/tags/bar", response_model=TagBarResponse)
def get_tag_bar(request: TagBarRequest, store: SupabaseService = Depends(get_store)):
    """
    Tags for the filter bar, shuffled with the client-provided seed.
    """
    tags = request.tags
    if tags is None:
        try:
            tags = store.get_tag_names()
        except Exception as exc:
            LOGGER.error("Tag fetch failed: %s", exc)
            raise HTTPException(status_code=502, detail="Tag storage unavailable")

    interests = request.interests
    if interests is None:
        interests = []
        if request.user_id:
            interests = list(_load_profile(store, request.user_id).interested_tags)

    rng = np.random.default_rng(request.seed)
    return TagBarResponse(tags=build_tag_bar(tags, interests, rng, limit=request.limit))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
