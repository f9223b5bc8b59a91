import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Union
from urllib.parse import parse_qs, urlsplit

from split_delete.client import SplitAdminClient
from split_delete.models import LogLevel

BASE_URL = "https://split.test/api/v2"
API_KEY = "secret-admin-key"
WORKSPACE_ID = "ws-123"


class FakeResponse:
    def __init__(self, status: int, body: Any = None) -> None:
        self.status = status
        if body is None:
            self._raw = b""
        elif isinstance(body, bytes):
            self._raw = body
        elif isinstance(body, str):
            self._raw = body.encode("utf-8")
        else:
            self._raw = json.dumps(body).encode("utf-8")

    async def read(self) -> bytes:
        return self._raw

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None


@dataclass
class Call:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def path(self) -> str:
        return urlsplit(self.url).path[len(urlsplit(BASE_URL).path):]

    @property
    def family(self) -> str:
        return self.path.split("/")[1]

    @property
    def offset(self) -> int:
        return int(parse_qs(urlsplit(self.url).query)["offset"][0])


Outcome = Union[FakeResponse, BaseException]


class FakeSession:
    """Stands in for aiohttp.ClientSession, replaying scripted outcomes."""

    def __init__(
        self, responses: Union[List[Outcome], Callable[[Call], Outcome]]
    ) -> None:
        self.responses = responses
        self.calls: List[Call] = []
        self.closed = False

    def request(self, method: str, url: str, headers=None) -> FakeResponse:
        call = Call(method, url, dict(headers or {}))
        self.calls.append(call)
        if callable(self.responses):
            outcome = self.responses(call)
        else:
            outcome = self.responses.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def close(self) -> None:
        self.closed = True

    def calls_for(self, method: str) -> List[Call]:
        return [call for call in self.calls if call.method == method]


def page(names: List[str]) -> FakeResponse:
    return FakeResponse(200, {"objects": [{"name": name} for name in names]})


def names_page(prefix: str, count: int) -> FakeResponse:
    return page([f"{prefix}{index}" for index in range(count)])


def make_client(session: FakeSession, log_level: LogLevel = LogLevel.DEFAULT):
    return SplitAdminClient(
        API_KEY, WORKSPACE_ID, base_url=BASE_URL, log_level=log_level, session=session
    )

