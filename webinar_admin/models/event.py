"""Event data model."""
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

SESSION_SLOTS = ("talk", "interview")


@dataclass
class SocialLinks:
    """Optional social profile links for a speaker."""

    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    github: Optional[str] = None
    website: Optional[str] = None

    def items(self) -> List[tuple]:
        """Return (network, url) pairs for links that are set."""
        return [
            (name, url)
            for name, url in (
                ("linkedin", self.linkedin),
                ("twitter", self.twitter),
                ("github", self.github),
                ("website", self.website),
            )
            if url
        ]


@dataclass
class Session:
    """Named sub-program of an event (talk or interview)."""

    title: str
    description: str
    time: Optional[datetime] = None


@dataclass
class Speaker:
    """Presenter profile shown on the event page."""

    name: str
    role: str = ""
    bio: str = ""
    photo_url: Optional[str] = None
    session_time: Optional[datetime] = None
    session_id: Optional[str] = None
    social_links: SocialLinks = field(default_factory=SocialLinks)


@dataclass
class Sessions:
    """The two fixed session slots of every event."""

    talk: Session
    interview: Session

    def get(self, slot: str) -> Session:
        if slot not in SESSION_SLOTS:
            raise KeyError(f"Unknown session slot: {slot}")
        return getattr(self, slot)


@dataclass
class Event:
    """Scheduled webinar with two sessions and a speaker list."""

    id: Optional[str]
    title: str
    date: Optional[datetime]
    sessions: Sessions
    speakers: List[Speaker] = field(default_factory=list)
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
