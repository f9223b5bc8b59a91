from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

DEFAULT_BASE_URL = "https://api.split.io/internal/api/v2"
API_KEY_ENV = "SPLIT_API_KEY"
BASE_URL_ENV = "SPLIT_API_BASE"

PAGE_SIZE = 50  # Fixed by the Admin API list endpoints
SUCCESS_STATUSES = {200, 204}
NOT_FOUND = 404


# ANSI color codes for terminal output
class Colors:
    GREEN = "\033[92m"
    RED = "\033[91m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    RESET = "\033[0m"
    BOLD = "\033[1m"


class LogLevel(IntEnum):
    DEFAULT = 0
    DEBUG = 1
    TRACE = 2


class ResourceType(str, Enum):
    FLAG = "flag"
    SEGMENT = "segment"
    ENVIRONMENT = "environment"


class SegmentSubtype(str, Enum):
    """Segment kinds, valued by the API path segment that serves them."""

    STANDARD = "segments"
    LARGE = "large-segments"
    RULE_BASED = "rule-based-segments"


# Iteration order for listing and for the delete fallback
SEGMENT_SUBTYPES = (
    SegmentSubtype.STANDARD,
    SegmentSubtype.LARGE,
    SegmentSubtype.RULE_BASED,
)


@dataclass(frozen=True)
class SegmentInfo:
    name: str
    subtype: SegmentSubtype


@dataclass
class DeleteResult:
    name: str
    type: str
    subtype: Optional[str]
    status: str

    def as_row(self) -> dict:
        return {
            "name": self.name,
            "type": self.type,
            "subtype": self.subtype or "",
            "status": self.status,
        }
