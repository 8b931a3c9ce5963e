import asyncio
import sys
from pathlib import Path

import pytest


# Ensure `backend/` is on sys.path so tests can import local modules
# like `query.*`, `search.*`, and `main`.
BACKEND_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(BACKEND_ROOT))

REPO_ROOT = BACKEND_ROOT.parent

ACME_FIELDS = ["FSC_ID", "HOLDER_1", "FM_CERT", "CB", "xmin", "xmax", "ymin", "ymax"]


class RoutedTransport:
    """Replies by the quoted search text found in the request predicate."""

    def __init__(self, replies: dict[str, dict], default: dict):
        self.replies = replies
        self.default = default
        self.gates: dict[str, asyncio.Event] = {}
        self.calls: list[dict[str, str]] = []

    async def send(self, endpoint, params):
        self.calls.append(dict(params))
        for text, reply in self.replies.items():
            if f"'{text}'" in params["query"]:
                gate = self.gates.get(text)
                if gate is not None:
                    await gate.wait()
                return reply
        return self.default

    async def aclose(self):
        return None


class ScriptedGeocoder:
    def __init__(self, places=None, error: Exception | None = None):
        self.places = places or []
        self.error = error
        self.calls: list[str] = []

    async def search(self, text, *, limit):
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        return list(self.places)[:limit]

    async def aclose(self):
        return None


@pytest.fixture
def acme_reply():
    return {
        "Status": "ok",
        "Result": {
            "fields": list(ACME_FIELDS),
            "values": [
                ["FSC-C101002", "Acme Corp", "FM-1002", "SGS", 4102300.0, 4115900.0, 7441800.0, 7452200.0],
                ["FSC-C101001", "Acme Holdings", "FM-1001", "NEPCon", 4118800.0, 4131200.0, 7460100.0, 7473900.0],
            ],
        },
    }


@pytest.fixture
def empty_reply():
    return {"Status": "ok", "Result": {"fields": list(ACME_FIELDS), "values": []}}


@pytest.fixture
def error_reply():
    return {"Status": "error", "ErrorInfo": {"ErrorMessage": "timeout"}}


@pytest.fixture
def features_csv() -> Path:
    return REPO_ROOT / "data" / "fsc_features.csv"
