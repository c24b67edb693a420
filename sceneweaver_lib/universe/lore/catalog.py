"""Lore Catalog: read-only index over the authored story hierarchy.

The catalog builds its index once from a narrative source. While building,
it stamps every chapter, arc and moment with the ids of its parents, so any
story returned from here satisfies the parent-id invariant regardless of
what the source document declared. Lookups hand out deep copies; authored
content only changes through ``save_moment``.
"""

# Standard library imports
from typing import Any, Dict, List, Optional, Tuple, TypeVar

# Local imports
from sceneweaver_lib.analysis.validation import (
    ValidationReport,
    validate_branching_logic,
    validate_catalog_keys,
    validate_story_structure,
)
from sceneweaver_lib.core.exceptions import (
    ArcNotFound,
    CatalogIntegrityError,
    ChapterNotFound,
    NarrativeSourceError,
    StoryNotFound,
)
from sceneweaver_lib.core.logger import catalog_logger as logger
from sceneweaver_lib.core.models import Arc, Chapter, Moment, Story
from sceneweaver_lib.universe.lore.sources import NarrativeSource

NodeT = TypeVar("NodeT", Story, Chapter, Arc, Moment)


def _copy(node: Optional[NodeT]) -> Optional[NodeT]:
    return None if node is None else node.model_copy(deep=True)


def _stamp_moment(raw: Dict[str, Any], story_id: str, chapter_id: str, arc_id: str) -> Dict[str, Any]:
    return {**raw, "story_id": story_id, "chapter_id": chapter_id, "arc_id": arc_id}


def stamp_parent_ids(raw_story: Dict[str, Any]) -> Dict[str, Any]:
    """Return a copy of a raw story document with parent ids filled in."""
    story_id = raw_story.get("id")
    chapters = []
    for raw_chapter in raw_story.get("chapters", []):
        chapter_id = raw_chapter.get("id")
        arcs = []
        for raw_arc in raw_chapter.get("arcs", []):
            arc_id = raw_arc.get("id")
            moments = [
                _stamp_moment(raw_moment, story_id, chapter_id, arc_id)
                for raw_moment in raw_arc.get("moments", [])
            ]
            arcs.append({**raw_arc, "story_id": story_id, "chapter_id": chapter_id, "moments": moments})
        chapters.append({**raw_chapter, "story_id": story_id, "arcs": arcs})
    return {**raw_story, "chapters": chapters}


class LoreCatalog:
    """Constant-time lookups of stories, chapters, arcs and moments."""

    def __init__(self, source: NarrativeSource):
        self.source = source
        self._stories: List[Story] = []
        self._story_index: Dict[str, Story] = {}
        self._chapter_index: Dict[Tuple[str, str], Chapter] = {}
        self._arc_index: Dict[Tuple[str, str, str], Arc] = {}
        self._moment_index: Dict[Tuple[str, str, str, str], Moment] = {}
        self._moments_by_id: Dict[str, Moment] = {}
        self.validation_report = ValidationReport()
        self._build()

    def _build(self) -> None:
        stories = [Story.model_validate(stamp_parent_ids(raw)) for raw in self.source.load_stories()]

        report = validate_catalog_keys(stories)
        for story in stories:
            report = report.merge(validate_story_structure(story)).merge(validate_branching_logic(story))

        if not report.is_valid:
            for issue in report.fatal:
                logger.error(f"Catalog integrity: {issue.message}")
            raise CatalogIntegrityError(
                f"Narrative data has {report.fatal_count} fatal issue(s)",
                report=report,
            )
        for issue in report.warnings:
            logger.warning(f"Catalog validation: {issue.message}")

        self._stories = stories
        self._story_index = {}
        self._chapter_index = {}
        self._arc_index = {}
        self._moment_index = {}
        self._moments_by_id = {}

        for story in stories:
            self._story_index[story.id] = story
            for chapter in story.chapters:
                self._chapter_index[(story.id, chapter.id)] = chapter
                for arc in chapter.arcs:
                    self._arc_index[(story.id, chapter.id, arc.id)] = arc
                    for moment in arc.moments:
                        self._moment_index[(story.id, chapter.id, arc.id, moment.id)] = moment
                        self._moments_by_id[moment.id] = moment

        self.validation_report = report
        logger.info(
            f"Indexed {len(self._story_index)} stories, {len(self._moment_index)} moments "
            f"({report.warning_count} warnings)"
        )

    def get_stories(self) -> List[Story]:
        return [story.model_copy(deep=True) for story in self._stories]

    def get_story(self, story_id: str) -> Optional[Story]:
        return _copy(self._story_index.get(story_id))

    def get_chapter(self, story_id: str, chapter_id: str) -> Optional[Chapter]:
        return _copy(self._chapter_index.get((story_id, chapter_id)))

    def get_arc(self, story_id: str, chapter_id: str, arc_id: str) -> Optional[Arc]:
        return _copy(self._arc_index.get((story_id, chapter_id, arc_id)))

    def get_moment(self, story_id: str, chapter_id: str, arc_id: str, moment_id: str) -> Optional[Moment]:
        moment = self._moment_index.get((story_id, chapter_id, arc_id, moment_id))
        if moment is None:
            logger.debug(f"Moment lookup missed: {story_id}/{chapter_id}/{arc_id}/{moment_id}")
        return _copy(moment)

    def get_moment_by_id(self, moment_id: str) -> Optional[Moment]:
        """Look a moment up by its id alone.

        When a moment id is reused across arcs the last indexed moment wins;
        the catalog reports such reuse as a validation warning.
        """
        return _copy(self._moments_by_id.get(moment_id))

    def get_moment_bundle(
        self,
        chapter_id: Optional[str] = None,
        arc_id: Optional[str] = None,
        theme: Optional[str] = None,
    ) -> List[Moment]:
        """
        Collect moments matching every given filter, in authored order.

        Args:
            chapter_id: Only moments of this chapter
            arc_id: Only moments of this arc
            theme: Only moments listing exactly this theme

        Returns:
            Matching moments
        """
        bundle = []
        for moment in self._moment_index.values():
            if chapter_id and moment.chapter_id != chapter_id:
                continue
            if arc_id and moment.arc_id != arc_id:
                continue
            if theme and theme not in moment.themes:
                continue
            bundle.append(moment.model_copy(deep=True))
        return bundle

    def save_moment(
        self,
        story_id: str,
        chapter_id: str,
        arc_id: str,
        moment_data: Dict[str, Any],
    ) -> Moment:
        """
        Persist a moment through the source and rebuild the index.

        Args:
            story_id: Parent story id
            chapter_id: Parent chapter id
            arc_id: Parent arc id
            moment_data: Raw moment fields (``id`` and ``content`` required)

        Returns:
            The moment as indexed after the rebuild

        Raises:
            StoryNotFound, ChapterNotFound, ArcNotFound: If a parent is unknown
            NarrativeSourceError: If the source does not accept saves
        """
        if self.get_story(story_id) is None:
            raise StoryNotFound(story_id)
        if self.get_chapter(story_id, chapter_id) is None:
            raise ChapterNotFound(chapter_id, details={"story_id": story_id})
        if self.get_arc(story_id, chapter_id, arc_id) is None:
            raise ArcNotFound(arc_id, details={"story_id": story_id, "chapter_id": chapter_id})

        save = getattr(self.source, "save_moment", None)
        if save is None:
            raise NarrativeSourceError(f"{type(self.source).__name__} does not support saving moments")

        # Reject invalid moments before they reach the source
        moment = Moment.model_validate(_stamp_moment(moment_data, story_id, chapter_id, arc_id))
        save(story_id, chapter_id, arc_id, moment.model_dump(exclude={"story_id", "chapter_id", "arc_id"}))
        logger.info(f"Saved moment {moment.id} to {story_id}/{chapter_id}/{arc_id}")

        self._build()
        return self.get_moment(story_id, chapter_id, arc_id, moment.id)
