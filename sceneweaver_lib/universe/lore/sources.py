"""Narrative hierarchy sources.

A source hands the catalog raw story documents (plain dicts shaped like
``Story``) once. Sources that support the out-of-band save path also
implement ``save_moment``.
"""

# Standard library imports
import copy
import json
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Union, runtime_checkable

# Local imports
from sceneweaver_lib.core.constants import ConfigDefaults, SampleData
from sceneweaver_lib.core.exceptions import NarrativeSourceError
from sceneweaver_lib.core.logger import get_logger
from sceneweaver_lib.universe.lore.breakdown import parse_narrative_breakdown

logger = get_logger(__name__)


@runtime_checkable
class NarrativeSource(Protocol):
    """Anything that can produce raw story documents."""

    def load_stories(self) -> List[Dict[str, Any]]:
        ...


def read_packaged_json(filename: str) -> Dict[str, Any]:
    """Read one of the sample documents shipped in ``sceneweaver_lib/data``."""
    data_file = resources.files("sceneweaver_lib.data").joinpath(filename)
    return json.loads(data_file.read_text(encoding="utf-8"))


def read_json_document(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a JSON document, wrapping I/O and syntax errors in NarrativeSourceError."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise NarrativeSourceError(f"Cannot read {path}: {e}", {"path": str(path)}) from e


class InMemoryNarrativeSource:
    """Source backed by a list of story documents held in memory.

    This is the only bundled source that accepts saved moments.
    """

    def __init__(self, stories: Optional[List[Dict[str, Any]]] = None):
        self._stories = copy.deepcopy(stories or [])

    def load_stories(self) -> List[Dict[str, Any]]:
        return copy.deepcopy(self._stories)

    def save_moment(
        self,
        story_id: str,
        chapter_id: str,
        arc_id: str,
        moment_data: Dict[str, Any],
    ) -> None:
        """Insert a moment into an arc, replacing any moment with the same id."""
        arc = self._find_arc(story_id, chapter_id, arc_id)
        moments = arc.setdefault("moments", [])
        moment = copy.deepcopy(moment_data)

        for index, existing in enumerate(moments):
            if existing.get("id") == moment.get("id"):
                moments[index] = moment
                logger.info(f"Replaced moment {moment.get('id')} in arc {arc_id}")
                return

        moments.append(moment)
        logger.info(f"Added moment {moment.get('id')} to arc {arc_id}")

    def _find_arc(self, story_id: str, chapter_id: str, arc_id: str) -> Dict[str, Any]:
        for story in self._stories:
            if story.get("id") != story_id:
                continue
            for chapter in story.get("chapters", []):
                if chapter.get("id") != chapter_id:
                    continue
                for arc in chapter.get("arcs", []):
                    if arc.get("id") == arc_id:
                        return arc
        raise NarrativeSourceError(
            f"Arc {story_id}/{chapter_id}/{arc_id} not present in source",
            {"story_id": story_id, "chapter_id": chapter_id, "arc_id": arc_id},
        )


class JSONNarrativeSource:
    """Read-only source for a ``{"stories": [...]}`` JSON document.

    Without a path the packaged sample narrative is used.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path else None

    def load_stories(self) -> List[Dict[str, Any]]:
        if self.path is None:
            document = read_packaged_json(SampleData.NARRATIVE)
            logger.debug(f"Loaded packaged narrative {SampleData.NARRATIVE}")
        else:
            document = read_json_document(self.path)
            logger.debug(f"Loaded narrative from {self.path}")

        stories = document.get("stories")
        if not isinstance(stories, list):
            raise NarrativeSourceError(
                "Narrative document must contain a 'stories' list",
                {"path": str(self.path) if self.path else SampleData.NARRATIVE},
            )
        return stories

    def save_moment(self, story_id: str, chapter_id: str, arc_id: str, moment_data: Dict[str, Any]) -> None:
        raise NarrativeSourceError("JSON narrative sources are read-only", {"path": str(self.path)})


class MarkdownBreakdownSource:
    """Read-only source for a single story authored as a narrative breakdown."""

    def __init__(
        self,
        text: Optional[str] = None,
        path: Optional[Union[str, Path]] = None,
        story_id: str = "breakdown",
        title: str = "Untitled",
        summary: str = "",
        moments_per_arc: int = ConfigDefaults.MOMENTS_PER_ARC,
        link_sequential: bool = True,
    ):
        if (text is None) == (path is None):
            raise ValueError("Provide exactly one of text or path")
        self.text = text
        self.path = Path(path) if path else None
        self.story_id = story_id
        self.title = title
        self.summary = summary
        self.moments_per_arc = moments_per_arc
        self.link_sequential = link_sequential

    def load_stories(self) -> List[Dict[str, Any]]:
        text = self.text
        if text is None:
            try:
                text = self.path.read_text(encoding="utf-8")
            except OSError as e:
                raise NarrativeSourceError(f"Cannot read {self.path}: {e}", {"path": str(self.path)}) from e

        return [
            parse_narrative_breakdown(
                text,
                story_id=self.story_id,
                title=self.title,
                summary=self.summary,
                moments_per_arc=self.moments_per_arc,
                link_sequential=self.link_sequential,
            )
        ]

    def save_moment(self, story_id: str, chapter_id: str, arc_id: str, moment_data: Dict[str, Any]) -> None:
        raise NarrativeSourceError("Breakdown sources are read-only", {"story_id": self.story_id})
