"""Tests for the roast API router."""
from typing import Iterator, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from burnmaster.api.roast import (
    GENERATION_FAILED_DETAIL,
    get_roast_gate,
    get_roast_pipeline,
)
from burnmaster.models.roast import GeneratedRoast, RoastSettings, RoastStats
from burnmaster.services.history import RoastGate
from burnmaster.services.text import GenerationError


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _make_roast(caricature_url: Optional[str] = None) -> GeneratedRoast:
    return GeneratedRoast(
        id="abc123xyz",
        text="Sam is the reason meetings have a 'late arrivals' slide.",
        timestamp="2026-10-19T00:00:00+00:00",
        settings=RoastSettings(target_name="Sam", savage_level=90, witty_level=40, absurdity_level=10),
        caricature_url=caricature_url,
        stats=RoastStats(wit=40, heat=90, chaos=10),
    )


@pytest.fixture
def mock_pipeline() -> MagicMock:
    pipeline = MagicMock()
    pipeline.generate = AsyncMock(return_value=_make_roast())
    return pipeline


@pytest.fixture
def client(mock_pipeline: MagicMock) -> Iterator[TestClient]:
    from burnmaster.main import app

    app.dependency_overrides[get_roast_pipeline] = lambda: mock_pipeline
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


ROAST_BODY = {
    "target_name": "Sam",
    "context": "always late",
    "savage_level": 90,
    "witty_level": 40,
    "absurdity_level": 10,
    "style": "modern-slang",
    "focus": "life-choices",
}


# ---------------------------------------------------------------------------
# POST /api/roast
# ---------------------------------------------------------------------------


class TestGenerateRoastEndpoint:
    """Tests for POST /api/roast."""

    def test_returns_200_on_success(self, client: TestClient) -> None:
        """A valid request returns 200."""
        resp = client.post("/api/roast", json=ROAST_BODY)
        assert resp.status_code == 200

    def test_response_shape(self, client: TestClient) -> None:
        """The response carries id, text, caricature, stats and settings."""
        data = client.post("/api/roast", json=ROAST_BODY).json()
        assert data["id"] == "abc123xyz"
        assert data["text"]
        assert data["caricature_url"] is None
        assert data["stats"] == {"wit": 40, "heat": 90, "chaos": 10}
        assert data["settings"]["target_name"] == "Sam"

    def test_passes_settings_to_pipeline(self, client: TestClient, mock_pipeline: MagicMock) -> None:
        """The validated body is handed to the pipeline as RoastSettings."""
        client.post("/api/roast", json=ROAST_BODY)
        settings = mock_pipeline.generate.call_args.args[0]
        assert isinstance(settings, RoastSettings)
        assert settings.focus.value == "life-choices"
        assert settings.savage_level == 90

    def test_success_is_added_to_history(self, client: TestClient) -> None:
        """A successful roast appears in history."""
        client.post("/api/roast", json=ROAST_BODY)
        history = client.get("/api/roast/history").json()
        assert [r["id"] for r in history] == ["abc123xyz"]

    def test_generation_error_returns_503(self, client: TestClient, mock_pipeline: MagicMock) -> None:
        """GenerationError maps to 503 with a user-facing message."""
        mock_pipeline.generate = AsyncMock(side_effect=GenerationError("quota"))
        resp = client.post("/api/roast", json=ROAST_BODY)
        assert resp.status_code == 503
        assert resp.json()["detail"] == GENERATION_FAILED_DETAIL

    def test_generation_error_leaves_history_untouched(
        self, client: TestClient, mock_pipeline: MagicMock
    ) -> None:
        """A failed generation adds nothing to history."""
        mock_pipeline.generate = AsyncMock(side_effect=GenerationError("quota"))
        client.post("/api/roast", json=ROAST_BODY)
        assert client.get("/api/roast/history").json() == []

    def test_returns_409_while_busy(self, client: TestClient, mock_pipeline: MagicMock) -> None:
        """A request during another generation returns 409."""
        from burnmaster.main import app

        busy_gate = RoastGate()
        busy_gate._busy = True
        app.dependency_overrides[get_roast_gate] = lambda: busy_gate

        resp = client.post("/api/roast", json=ROAST_BODY)
        assert resp.status_code == 409
        mock_pipeline.generate.assert_not_called()

    def test_returns_422_on_empty_name(self, client: TestClient) -> None:
        """A blank target name returns 422."""
        resp = client.post("/api/roast", json={**ROAST_BODY, "target_name": "  "})
        assert resp.status_code == 422

    def test_returns_422_on_out_of_range_level(self, client: TestClient) -> None:
        """A level above 100 returns 422."""
        resp = client.post("/api/roast", json={**ROAST_BODY, "savage_level": 150})
        assert resp.status_code == 422

    def test_returns_422_on_unknown_style(self, client: TestClient) -> None:
        """An unknown style returns 422."""
        resp = client.post("/api/roast", json={**ROAST_BODY, "style": "pirate"})
        assert resp.status_code == 422

    def test_returns_503_when_pipeline_missing(self) -> None:
        """An uninitialized pipeline returns 503."""
        from burnmaster.main import app

        with TestClient(app) as c:
            app.state.roast_pipeline = None
            resp = c.post("/api/roast", json=ROAST_BODY)
        assert resp.status_code == 503


# ---------------------------------------------------------------------------
# History / options
# ---------------------------------------------------------------------------


class TestHistoryEndpoint:
    """Tests for GET and DELETE /api/roast/history."""

    def test_history_newest_first_and_limited(
        self, client: TestClient, mock_pipeline: MagicMock
    ) -> None:
        """History is newest first and honours the limit parameter."""
        for i in range(3):
            mock_pipeline.generate = AsyncMock(return_value=_make_roast().model_copy(update={"id": f"id{i}"}))
            client.post("/api/roast", json=ROAST_BODY)

        assert [r["id"] for r in client.get("/api/roast/history").json()] == ["id2", "id1", "id0"]
        assert [r["id"] for r in client.get("/api/roast/history?limit=1").json()] == ["id2"]

    def test_history_is_bounded(self, client: TestClient, mock_pipeline: MagicMock) -> None:
        """History keeps at most ten roasts."""
        for i in range(12):
            mock_pipeline.generate = AsyncMock(return_value=_make_roast().model_copy(update={"id": f"id{i}"}))
            client.post("/api/roast", json=ROAST_BODY)

        assert len(client.get("/api/roast/history").json()) == 10

    def test_clear_history(self, client: TestClient) -> None:
        """DELETE returns 204 and empties history."""
        client.post("/api/roast", json=ROAST_BODY)
        resp = client.delete("/api/roast/history")
        assert resp.status_code == 204
        assert client.get("/api/roast/history").json() == []


class TestOptionsEndpoint:
    """Tests for GET /api/roast/options."""

    def test_lists_styles_and_focuses(self, client: TestClient) -> None:
        """Every style and focus is listed with its label."""
        data = client.get("/api/roast/options").json()
        assert {"value": "modern-slang", "label": "Modern Slang"} in data["styles"]
        assert {"value": "life-choices", "label": "Life Choices"} in data["focuses"]
        assert len(data["styles"]) == 6
        assert len(data["focuses"]) == 6

    def test_includes_form_defaults(self, client: TestClient) -> None:
        """Defaults cover optional fields but not image or target name."""
        defaults = client.get("/api/roast/options").json()["defaults"]
        assert defaults["savage_level"] == 50
        assert defaults["absurdity_level"] == 30
        assert defaults["style"] == "modern-slang"
        assert "image" not in defaults
        assert "target_name" not in defaults
