"""Validation of narrative hierarchies and generated scenes.

Validators never raise. They return a ``ValidationReport`` whose issues are
either warnings (collected and logged; authored content with dangling
branches must not crash the director) or fatal (the caller decides to abort).
"""

from collections import Counter
from enum import Enum
from typing import Dict, Iterable, List, Optional, Set

from pydantic import BaseModel, Field

from sceneweaver_lib.core.models import SceneDescriptor, Story


class Severity(str, Enum):
    """How an issue affects the caller."""

    WARNING = "warning"
    FATAL = "fatal"


class ValidationIssue(BaseModel):
    """A single finding of a validator."""

    severity: Severity
    code: str = Field(description="Stable machine-readable issue code")
    message: str
    entity_id: Optional[str] = None


class ValidationReport(BaseModel):
    """Collected issues of one or more validators."""

    issues: List[ValidationIssue] = Field(default_factory=list)
    valid_branches: int = 0
    invalid_branches: int = 0

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]

    @property
    def fatal(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.FATAL]

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    @property
    def fatal_count(self) -> int:
        return len(self.fatal)

    @property
    def is_valid(self) -> bool:
        """True when nothing fatal was found; warnings do not count."""
        return self.fatal_count == 0

    def warn(self, code: str, message: str, entity_id: Optional[str] = None) -> None:
        self.issues.append(
            ValidationIssue(severity=Severity.WARNING, code=code, message=message, entity_id=entity_id)
        )

    def fail(self, code: str, message: str, entity_id: Optional[str] = None) -> None:
        self.issues.append(
            ValidationIssue(severity=Severity.FATAL, code=code, message=message, entity_id=entity_id)
        )

    def merge(self, other: "ValidationReport") -> "ValidationReport":
        """Return a new report holding the issues and branch counts of both."""
        return ValidationReport(
            issues=[*self.issues, *other.issues],
            valid_branches=self.valid_branches + other.valid_branches,
            invalid_branches=self.invalid_branches + other.invalid_branches,
        )


def validate_story_structure(story: Story) -> ValidationReport:
    """
    Check required metadata and parent-id links of a story tree.

    Args:
        story: The story to validate

    Returns:
        Report whose issues are all warnings
    """
    report = ValidationReport()

    if not story.title:
        report.warn("story.missing_title", f"Story {story.id} has no title", story.id)
    if not story.chapters:
        report.warn("story.no_chapters", f"Story {story.id} must have at least one chapter", story.id)

    for chapter in story.chapters:
        if chapter.story_id != story.id:
            report.warn(
                "chapter.story_mismatch",
                f"Chapter {chapter.id} story_id {chapter.story_id} does not match containing story {story.id}",
                chapter.id,
            )
        if not chapter.arcs:
            report.warn("chapter.no_arcs", f"Chapter {chapter.id} must have at least one arc", chapter.id)

        for arc in chapter.arcs:
            if arc.chapter_id != chapter.id or arc.story_id != story.id:
                report.warn(
                    "arc.parent_mismatch",
                    f"Arc {arc.id} does not trace to chapter {chapter.id} of story {story.id}",
                    arc.id,
                )
            if not arc.moments:
                report.warn("arc.no_moments", f"Arc {arc.id} must have at least one moment", arc.id)

            for moment in arc.moments:
                if moment.arc_id != arc.id:
                    report.warn(
                        "moment.arc_mismatch",
                        f"Moment {moment.id} arc_id does not match containing arc {arc.id}",
                        moment.id,
                    )
                if moment.chapter_id != chapter.id:
                    report.warn(
                        "moment.chapter_mismatch",
                        f"Moment {moment.id} chapter_id does not match containing chapter {chapter.id}",
                        moment.id,
                    )
                if moment.story_id != story.id:
                    report.warn(
                        "moment.story_mismatch",
                        f"Moment {moment.id} story_id does not match containing story {story.id}",
                        moment.id,
                    )
                if not moment.title:
                    report.warn("moment.missing_title", f"Moment {moment.id} has no title", moment.id)

    return report


def _moment_ids(story: Story) -> Set[str]:
    return {
        moment.id
        for chapter in story.chapters
        for arc in chapter.arcs
        for moment in arc.moments
    }


def validate_branching_logic(story: Story) -> ValidationReport:
    """
    Check that branching hooks target moments of the same story and carry
    non-negative weights.

    Args:
        story: The story to validate

    Returns:
        Report with warnings and valid/invalid branch counts
    """
    report = ValidationReport()
    known = _moment_ids(story)

    for chapter in story.chapters:
        for arc in chapter.arcs:
            for moment in arc.moments:
                for index, hook in enumerate(moment.branching_hooks):
                    if hook.target_moment_id in known:
                        report.valid_branches += 1
                    else:
                        report.invalid_branches += 1
                        report.warn(
                            "hook.dangling_target",
                            f"Branch {index} in moment {moment.id} targets unknown moment: {hook.target_moment_id}",
                            moment.id,
                        )
                    if hook.weight < 0:
                        report.invalid_branches += 1
                        report.warn(
                            "hook.negative_weight",
                            f"Branch {index} in moment {moment.id} has invalid weight: {hook.weight}",
                            moment.id,
                        )

    return report


def validate_catalog_keys(stories: Iterable[Story]) -> ValidationReport:
    """
    Detect composite keys defined more than once across the loaded stories.

    A duplicate key makes catalog lookups ambiguous, so it is fatal.

    Args:
        stories: Stories about to be indexed

    Returns:
        Report with one fatal issue per duplicated key
    """
    report = ValidationReport()
    keys: Counter = Counter()
    moment_ids: Dict[str, int] = {}

    for story in stories:
        keys[(story.id,)] += 1
        for chapter in story.chapters:
            keys[(story.id, chapter.id)] += 1
            for arc in chapter.arcs:
                keys[(story.id, chapter.id, arc.id)] += 1
                for moment in arc.moments:
                    keys[(story.id, chapter.id, arc.id, moment.id)] += 1
                    moment_ids[moment.id] = moment_ids.get(moment.id, 0) + 1

    for key, count in keys.items():
        if count > 1:
            path = "/".join(key)
            report.fail("catalog.duplicate_key", f"Key {path} is defined {count} times", path)

    for moment_id, count in moment_ids.items():
        if count > 1:
            report.warn(
                "catalog.shared_moment_id",
                f"Moment id {moment_id} is used {count} times; id-only lookups return the last one",
                moment_id,
            )

    return report


def validate_scene_descriptor(scene: SceneDescriptor) -> ValidationReport:
    """
    Check that a generated scene carries its required blocks.

    Args:
        scene: The scene descriptor returned by a generation backend

    Returns:
        Report; blank id, title or narrative text are fatal
    """
    report = ValidationReport()

    if not scene.scene_id.strip():
        report.fail("scene.missing_id", "Scene missing scene_id")
    if not scene.title.strip():
        report.fail("scene.missing_title", "Scene missing title", scene.scene_id or None)
    if not scene.narrative_text.strip():
        report.fail("scene.missing_text", "Scene missing narrative_text", scene.scene_id or None)
    if not scene.mood.strip():
        report.warn("scene.missing_mood", "Scene missing mood", scene.scene_id or None)
    if not scene.diagnostics.branch_forecast.strip():
        report.warn("scene.missing_forecast", "Scene diagnostics missing branch_forecast", scene.scene_id or None)

    for option in scene.branch_options:
        if not 0.0 <= option.probability <= 1.0:
            report.warn(
                "scene.probability_range",
                f"Branch option to {option.target_moment_id} has probability {option.probability} outside 0..1",
                scene.scene_id or None,
            )

    return report
