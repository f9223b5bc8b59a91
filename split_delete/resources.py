from typing import Dict, Iterable, List, Optional, Union

from split_delete.client import TRANSPORT_ERRORS, SplitAdminClient, error_message
from split_delete.console import echo_error, echo_success
from split_delete.models import (
    NOT_FOUND,
    SEGMENT_SUBTYPES,
    SUCCESS_STATUSES,
    ResourceType,
    SegmentInfo,
    SegmentSubtype,
)


class NamedResource:
    """A resource kind served by a single endpoint family, keyed by name."""

    def __init__(self, label: str, noun: str, family: str) -> None:
        self.label = label
        self.noun = noun
        self.family = family

    async def list(self, client: SplitAdminClient) -> List[str]:
        return await client.list_names(
            client.workspace_path(self.family), f"{self.label}s"
        )

    async def delete(
        self,
        client: SplitAdminClient,
        name: str,
        subtype: Optional[SegmentSubtype] = None,
    ) -> bool:
        path = client.workspace_path(self.family, name)
        try:
            status, body = await client.request(
                "DELETE", path, label=f"delete {self.label}"
            )
        except TRANSPORT_ERRORS as error:
            echo_error(f"Error deleting {self.label}: {error}")
            return False

        if status in SUCCESS_STATUSES:
            echo_success(f"{self.noun} '{name}' deleted successfully.")
            return True
        if status == NOT_FOUND:
            echo_error(f"{self.noun} '{name}' not found.")
        else:
            echo_error(
                f"Failed to delete {self.label}: {status} - {error_message(body)}"
            )
        return False


def dedupe_segments(segments: Iterable[SegmentInfo]) -> List[SegmentInfo]:
    seen = set()
    unique_segments = []
    for segment in segments:
        if segment.name in seen:
            continue
        seen.add(segment.name)
        unique_segments.append(segment)
    return unique_segments


class SegmentResource:
    """Segments live under three endpoint families, one per subtype."""

    label = "segment"
    noun = "Segment"

    async def list(self, client: SplitAdminClient) -> List[SegmentInfo]:
        all_segments: List[SegmentInfo] = []
        for subtype in SEGMENT_SUBTYPES:
            names = await client.list_names(
                client.workspace_path(subtype.value), subtype.value
            )
            all_segments.extend(SegmentInfo(name, subtype) for name in names)
        # A name reported by several endpoints keeps its first subtype
        return dedupe_segments(all_segments)

    async def delete(
        self,
        client: SplitAdminClient,
        name: str,
        subtype: Optional[SegmentSubtype] = None,
    ) -> bool:
        candidates = (subtype,) if subtype else SEGMENT_SUBTYPES
        verb = "delete" if subtype else "trying delete"

        for candidate in candidates:
            endpoint = candidate.value
            path = client.workspace_path(endpoint, name)
            try:
                status, body = await client.request(
                    "DELETE", path, label=f"{verb} {endpoint}"
                )
            except TRANSPORT_ERRORS as error:
                echo_error(f"Error deleting segment from {endpoint}: {error}")
                continue

            if status in SUCCESS_STATUSES:
                echo_success(f"Segment '{name}' deleted successfully ({endpoint}).")
                return True
            if status != NOT_FOUND:
                echo_error(
                    f"Failed to delete segment from {endpoint}: "
                    f"{status} - {error_message(body)}"
                )

        scope = f"in {subtype.value}" if subtype else "in any segment type"
        echo_error(f"Segment '{name}' not found {scope}.")
        return False


Resource = Union[NamedResource, SegmentResource]

RESOURCES: Dict[ResourceType, Resource] = {
    ResourceType.FLAG: NamedResource("flag", "Feature flag", "splits"),
    ResourceType.SEGMENT: SegmentResource(),
    ResourceType.ENVIRONMENT: NamedResource(
        "environment", "Environment", "environments"
    ),
}
