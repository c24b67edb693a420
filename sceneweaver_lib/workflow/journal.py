"""Narrative Journal: append-only history of generated scenes."""

from typing import List

from sceneweaver_lib.core.logger import journal_logger as logger
from sceneweaver_lib.core.models import SceneDescriptor


class NarrativeJournal:
    """In-memory playthrough timeline. Entries are never evicted."""

    def __init__(self) -> None:
        self._history: List[SceneDescriptor] = []

    def __len__(self) -> int:
        return len(self._history)

    def log_scene(self, scene: SceneDescriptor) -> None:
        self._history.append(scene.model_copy(deep=True))
        logger.info(f"Logged scene: {scene.scene_id}. Total scenes in journal: {len(self._history)}")

    def get_history(self) -> List[SceneDescriptor]:
        """Return copies of all entries, oldest first."""
        return [scene.model_copy(deep=True) for scene in self._history]

    def clear(self) -> None:
        self._history = []
        logger.info("Journal cleared")
