"""In-memory implementation of EpisodeStore."""

from uuid import UUID

from deepcurrent.db.errors import ConflictError, InvalidTransitionError, NotFoundError
from deepcurrent.episodes.models import Episode, EpisodeOutcome, EpisodeStatus, utc_now
from deepcurrent.episodes.store import EpisodeStore


class InMemoryEpisodeStore(EpisodeStore):
    """Dict-backed EpisodeStore for testing and development."""

    def __init__(self) -> None:
        self._episodes: dict[UUID, Episode] = {}

    async def create(self, episode: Episode) -> Episode:
        if episode.id in self._episodes:
            raise ConflictError(f"Episode {episode.id} already exists")
        self._episodes[episode.id] = episode
        return episode

    async def get(self, episode_id: UUID) -> Episode | None:
        return self._episodes.get(episode_id)

    async def update_status(
        self,
        episode_id: UUID,
        status: EpisodeStatus,
        outcome: EpisodeOutcome | None = None,
    ) -> Episode:
        episode = self._episodes.get(episode_id)
        if episode is None:
            raise NotFoundError(f"Episode {episode_id} not found")
        if not episode.status.can_transition_to(status):
            raise InvalidTransitionError(
                f"Episode {episode_id} cannot move from "
                f"{episode.status.value} to {status.value}"
            )

        update = outcome.as_update() if outcome else {}
        update.update(status=status, updated_at=utc_now())
        updated = episode.model_copy(update=update)
        self._episodes[episode_id] = updated
        return updated

    async def list_by_strategy_version(
        self, topic_id: UUID, strategy_version: int
    ) -> list[Episode]:
        return [
            e
            for e in self._episodes.values()
            if e.topic_id == topic_id and e.strategy_version == strategy_version
        ]

    async def list_by_topic(self, topic_id: UUID, limit: int = 50) -> list[Episode]:
        episodes = [e for e in self._episodes.values() if e.topic_id == topic_id]
        episodes.sort(key=lambda e: e.created_at, reverse=True)
        return episodes[:limit]
