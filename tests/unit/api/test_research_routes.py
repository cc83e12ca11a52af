"""Unit tests for research streaming and evolution endpoints."""

import json
from uuid import uuid4

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from deepcurrent.agent.scripted import ScriptedResearchAgent
from deepcurrent.api.app import _register_exception_handlers
from deepcurrent.api.dependencies import (
    get_episode_controller,
    get_evolution_log_store,
    reset_dependencies,
)
from deepcurrent.api.routes.research import router
from deepcurrent.episodes.controller import EpisodeController
from deepcurrent.episodes.models import EpisodeStatus
from deepcurrent.episodes.stores.inmemory import InMemoryEpisodeStore
from deepcurrent.evolution.models import AggregatedMetrics
from deepcurrent.evolution.stores.inmemory import InMemoryEvolutionLogStore
from deepcurrent.notes.stores.inmemory import InMemoryNoteStore
from deepcurrent.strategy.stores.inmemory import InMemoryStrategyStore
from deepcurrent.topics.models import Topic
from deepcurrent.topics.stores.inmemory import InMemoryTopicStore
from tests.factories.research import TopicFactory, research_script


@pytest.fixture
def episode_store() -> InMemoryEpisodeStore:
    return InMemoryEpisodeStore()


@pytest.fixture
def evolution_log() -> InMemoryEvolutionLogStore:
    return InMemoryEvolutionLogStore()


@pytest.fixture
def topic_store() -> InMemoryTopicStore:
    return InMemoryTopicStore()


@pytest.fixture
async def topic(topic_store: InMemoryTopicStore) -> Topic:
    return await topic_store.save(TopicFactory.create())


@pytest.fixture
def controller(
    topic_store: InMemoryTopicStore, episode_store: InMemoryEpisodeStore
) -> EpisodeController:
    return EpisodeController(
        topic_store=topic_store,
        strategy_store=InMemoryStrategyStore(),
        episode_store=episode_store,
        note_store=InMemoryNoteStore(),
        agent=ScriptedResearchAgent(script=research_script()),
    )


@pytest.fixture
async def app(
    controller: EpisodeController, evolution_log: InMemoryEvolutionLogStore
) -> FastAPI:
    """Create test FastAPI app."""
    await reset_dependencies()

    app = FastAPI()
    app.include_router(router, prefix="/v1")
    _register_exception_handlers(app)

    app.dependency_overrides[get_episode_controller] = lambda: controller
    app.dependency_overrides[get_evolution_log_store] = lambda: evolution_log

    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Test client."""
    return TestClient(app)


def _events(body: str) -> list[dict]:
    frames = [frame for frame in body.split("\n\n") if frame]
    assert all(frame.startswith("data: ") for frame in frames)
    return [json.loads(frame[len("data: ") :]) for frame in frames]


class TestAskStream:
    """Tests for POST /v1/topics/{topic_id}/ask/stream."""

    async def test_streams_episode_events(
        self, client: TestClient, topic: Topic, episode_store: InMemoryEpisodeStore
    ) -> None:
        response = client.post(
            f"/v1/topics/{topic.id}/ask/stream", json={"query": "What is new in batteries?"}
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert response.headers["x-accel-buffering"] == "no"

        events = _events(response.text)
        assert events[0]["type"] == "episode_created"
        assert events[1] == {
            "type": "status",
            "status": "initializing",
            "message": "Using default strategy",
            "details": {"strategyVersion": 0},
        }
        assert events[-2]["type"] == "note_created"
        assert events[-2]["noteTitle"] == "Research: What is new in batteries?"
        assert events[-1]["type"] == "complete"
        assert events[-1]["episodeId"] == events[0]["episodeId"]

        episodes = await episode_store.list_by_topic(topic.id)
        assert [e.status for e in episodes] == [EpisodeStatus.COMPLETED]

    async def test_blank_query_returns_400(self, client: TestClient, topic: Topic) -> None:
        response = client.post(f"/v1/topics/{topic.id}/ask/stream", json={"query": "  "})

        assert response.status_code == 400
        assert response.json() == {
            "error": {"code": "INVALID_REQUEST", "message": "Query is required"}
        }

    def test_missing_query_returns_400(self, client: TestClient) -> None:
        response = client.post(f"/v1/topics/{uuid4()}/ask/stream", json={})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "INVALID_REQUEST"
        assert error["details"][0]["field"] == "body.query"

    def test_unknown_topic_returns_404(self, client: TestClient) -> None:
        topic_id = uuid4()
        response = client.post(f"/v1/topics/{topic_id}/ask/stream", json={"query": "q"})

        assert response.status_code == 404
        assert response.json()["error"] == {
            "code": "TOPIC_NOT_FOUND",
            "message": f"Topic {topic_id} not found",
        }

    def test_malformed_topic_id_returns_400(self, client: TestClient) -> None:
        response = client.post("/v1/topics/not-a-uuid/ask/stream", json={"query": "q"})
        assert response.status_code == 400


class TestListEvolutions:
    """Tests for GET /v1/topics/{topic_id}/evolutions."""

    @pytest.fixture
    async def topic_id(self, evolution_log: InMemoryEvolutionLogStore):
        topic_id = uuid4()
        for version in range(2, 9):
            await evolution_log.record(
                topic_id=topic_id,
                from_version=version - 1,
                to_version=version,
                reason=f"Auto-evolved: step {version}",
                before_config={"search_depth": "standard"},
                after_config={"search_depth": "deep"},
                metrics=AggregatedMetrics(total_episodes=2, avg_save_rate=0.25),
            )
        return topic_id

    async def test_lists_all_newest_first(self, client: TestClient, topic_id) -> None:
        response = client.get(f"/v1/topics/{topic_id}/evolutions")

        assert response.status_code == 200
        data = response.json()
        assert [e["toVersion"] for e in data] == [8, 7, 6, 5, 4, 3, 2]
        first = data[0]
        assert first["fromVersion"] == 7
        assert first["reason"] == "Auto-evolved: step 8"
        assert "timestamp" in first
        assert first["changes"]["after"] == {"search_depth": "deep"}
        assert first["changes"]["metrics"]["avg_save_rate"] == 0.25

    async def test_recent_limits_to_five(self, client: TestClient, topic_id) -> None:
        response = client.get(f"/v1/topics/{topic_id}/evolutions", params={"recent": "true"})

        assert response.status_code == 200
        assert [e["toVersion"] for e in response.json()] == [8, 7, 6, 5, 4]

    def test_unknown_topic_is_empty(self, client: TestClient) -> None:
        response = client.get(f"/v1/topics/{uuid4()}/evolutions")

        assert response.status_code == 200
        assert response.json() == []
