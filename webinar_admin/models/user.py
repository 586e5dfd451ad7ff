"""Signed-in user model."""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class User:
    """Account known to the auth collaborator."""

    uid: str
    email: str
    display_name: Optional[str] = None
    claims: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate user data after initialization."""
        if not self.uid or not self.uid.strip():
            raise ValueError("User uid cannot be empty")

        if not self.email or "@" not in self.email:
            raise ValueError(f"Invalid email: {self.email}")

    def has_claim(self, name: str) -> bool:
        return bool(self.claims.get(name))
