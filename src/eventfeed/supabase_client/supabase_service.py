import logging
import os
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from dotenv import load_dotenv
from supabase import create_client, Client

from eventfeed.models import EventRecord, UserProfile
from eventfeed.records import events_from_rows, profile_from_row

# Load environment variables
load_dotenv()

LOGGER = logging.getLogger(__name__)

EVENT_SELECT = """
    *,
    attendees (
        user_id
    ),
    event_tags (
        tags (
            name
        )
    )
"""


class SupabaseService:
    """Read access to the hosted event/user tables used by the feed"""

    def __init__(self, client: Optional[Client] = None):
        if client is not None:
            self.client = client
            return

        url = os.getenv("SUPABASE_URL")
        # Use service role key for full access
        key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")

        if not url or not key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set in environment")

        self.client: Client = create_client(url, key)

    # ==================== EVENTS ====================

    def get_event_rows(self, today: date, search_query: Optional[str] = None) -> List[Dict[str, Any]]:
        """Active, upcoming event rows with their tags and attendees"""
        query = (self.client.table("events")
                 .select(EVENT_SELECT)
                 .neq("status", "ended")
                 .neq("status", "canceled")
                 .gte("date", today.isoformat()))
        if search_query and search_query.strip():
            term = search_query.strip()
            query = query.or_(f"title.ilike.%{term}%,location.ilike.%{term}%")
        response = query.execute()
        return response.data or []

    def fetch_events(self, today: date, search_query: Optional[str] = None) -> List[EventRecord]:
        """Upcoming events as pipeline records"""
        rows = self.get_event_rows(today, search_query)
        LOGGER.debug("Fetched %d event rows (search=%r)", len(rows), search_query)
        return events_from_rows(rows)

    def fetch_my_events(self, user_id: str, today: date) -> Tuple[List[EventRecord], List[EventRecord]]:
        """Events the user organizes and events the user attends"""
        organized = (self.client.table("events")
                     .select(EVENT_SELECT)
                     .eq("organizer_id", user_id)
                     .neq("status", "ended")
                     .neq("status", "canceled")
                     .gte("date", today.isoformat())
                     .execute()).data or []

        attended_ids = (self.client.table("attendees")
                        .select("event_id")
                        .eq("user_id", user_id)
                        .execute()).data or []
        organized_ids = {row.get("id") for row in organized}
        wanted = [row["event_id"] for row in attended_ids if row.get("event_id") not in organized_ids]

        attending: List[Dict[str, Any]] = []
        if wanted:
            attending = (self.client.table("events")
                         .select(EVENT_SELECT)
                         .in_("id", wanted)
                         .neq("status", "ended")
                         .gte("date", today.isoformat())
                         .execute()).data or []
        return events_from_rows(organized), events_from_rows(attending)

    # ==================== USERS ====================

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Get a user row by ID"""
        response = self.client.table("users").select("*").eq("id", user_id).execute()
        return response.data[0] if response.data else None

    def fetch_user_profile(self, user_id: str) -> Optional[UserProfile]:
        """Profile of a user, None when the user does not exist"""
        row = self.get_user(user_id)
        if row is None:
            return None
        return profile_from_row(row)

    # ==================== TAGS ====================

    def get_tag_names(self, limit: int = 100) -> List[str]:
        """Tag names in storage order"""
        response = self.client.table("tags").select("name").limit(limit).execute()
        return [row["name"] for row in (response.data or []) if row.get("name")]


# Singleton instance
_supabase_service = None


def get_supabase_service() -> SupabaseService:
    """Get or create the singleton SupabaseService instance"""
    global _supabase_service
    if _supabase_service is None:
        _supabase_service = SupabaseService()
    return _supabase_service
