"""
Data models shared by the bootstrap services, API client and tests.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Credentials:
    """Email/password pair a test run authenticates as."""

    email: str
    password: str

    def to_dict(self) -> Dict[str, str]:
        return {"email": self.email, "password": self.password}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional["Credentials"]:
        """Build from a decoded record; None unless both fields are non-empty strings."""
        email = data.get("email") if isinstance(data, dict) else None
        password = data.get("password") if isinstance(data, dict) else None
        if isinstance(email, str) and isinstance(password, str) and email and password:
            return cls(email=email, password=password)
        return None

    def __repr__(self) -> str:
        return f"Credentials(email={self.email!r}, password='***')"


@dataclass(frozen=True)
class SignupData:
    """Identity minted for a signup attempt."""

    username: str
    email: str
    password: str

    def credentials(self) -> Credentials:
        return Credentials(email=self.email, password=self.password)


@dataclass
class ArticleData:
    """Article payload as the editor form and the API expect it."""

    title: str
    description: str
    body: str
    tags: List[str] = field(default_factory=list)

    def to_api(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "body": self.body,
            "tagList": list(self.tags),
        }


@dataclass
class UserSettings:
    """Fields accepted by the settings form and PUT /user."""

    image: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        return {k: v for k, v in asdict(self).items() if v}
