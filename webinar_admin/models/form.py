"""Form-layer shapes of an event, with dates kept as display strings."""
import uuid
from dataclasses import dataclass, field
from typing import Dict, List, Optional


def new_speaker_key() -> str:
    """Generate a stable identifier for a speaker entry in the form."""
    return uuid.uuid4().hex


@dataclass
class SessionFields:
    title: str = ""
    description: str = ""
    time: str = ""


@dataclass
class SpeakerFields:
    """One speaker entry; ``key`` identifies it for the lifetime of the form."""

    key: str = field(default_factory=new_speaker_key)
    name: str = ""
    role: str = ""
    bio: str = ""
    photo_url: str = ""
    session_time: str = ""
    session_id: Optional[str] = None
    social_links: Dict[str, str] = field(default_factory=dict)


@dataclass
class EventFields:
    title: str = ""
    date: str = ""
    talk: SessionFields = field(default_factory=SessionFields)
    interview: SessionFields = field(default_factory=SessionFields)
    speakers: List[SpeakerFields] = field(default_factory=list)
