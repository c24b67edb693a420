"""
SceneWeaver - Dreamweaver Director.

The director runs the scene pipeline for one request: resolve the moment,
snapshot the party, read the mood, assemble the scene, filter it, record it
in the journal and hand it back. Any failing step aborts the request and
nothing downstream of it runs, so the journal only ever holds fully filtered
scenes.
"""

# Standard library imports
import time
from typing import Any, Awaitable, Callable, Mapping, Optional, TypeVar, Union

# Local imports
from sceneweaver_lib.core.constants import ConfigDefaults, DiagnosticMarkers, Mood, PipelineSteps
from sceneweaver_lib.core.exceptions import MomentNotFound
from sceneweaver_lib.core.logger import director_logger as logger
from sceneweaver_lib.core.models import (
    ChoiceOutcome,
    Moment,
    RuntimeContext,
    SceneDescriptor,
)
from sceneweaver_lib.generation.mood import MoodEngine
from sceneweaver_lib.generation.scene.assembler import SceneAssembler
from sceneweaver_lib.generation.scene.restrictions import RestrictionService
from sceneweaver_lib.universe.characters.ledger import CharacterLedger
from sceneweaver_lib.universe.lore.catalog import LoreCatalog
from sceneweaver_lib.workflow.branching import resolve_next_moment
from sceneweaver_lib.workflow.journal import NarrativeJournal
from sceneweaver_lib.workflow.policy import CancellationToken, PipelinePolicy, call_with_policy

T = TypeVar("T")


class DreamweaverDirector:
    """Orchestrates scene generation over the catalog, ledger and backends."""

    def __init__(
        self,
        catalog: LoreCatalog,
        ledger: CharacterLedger,
        assembler: SceneAssembler,
        restriction_service: RestrictionService,
        mood_engine: Optional[MoodEngine] = None,
        journal: Optional[NarrativeJournal] = None,
        policy: Optional[PipelinePolicy] = None,
        environment_state: str = ConfigDefaults.ENVIRONMENT_STATE,
    ):
        """
        Initialize the director.

        Args:
            catalog: Lore catalog to resolve moments from
            ledger: Character ledger supplying the party snapshot
            assembler: Scene assembler wrapping the generation backend
            restriction_service: Restriction service wrapping the content filter
            mood_engine: Mood engine owned by this director (new one if omitted)
            journal: Journal owned by this director (new one if omitted)
            policy: Retry and deadline policy for the two backend calls
            environment_state: Environment description placed in every context
        """
        self.catalog = catalog
        self.ledger = ledger
        self.assembler = assembler
        self.restriction_service = restriction_service
        self.mood_engine = mood_engine if mood_engine is not None else MoodEngine()
        self.journal = journal if journal is not None else NarrativeJournal()
        self.policy = policy or PipelinePolicy()
        self.environment_state = environment_state

    async def _execute_step(
        self,
        step_name: str,
        func: Callable[[], Union[T, Awaitable[T]]],
        cancel_token: Optional[CancellationToken],
        backend: bool = False,
    ) -> T:
        """
        Execute a pipeline step with logging and timing.

        Args:
            step_name: Name of the step for logging
            func: Zero-argument callable; backend steps return an awaitable
            cancel_token: Checked before the step starts
            backend: Run the step under the director's call policy

        Returns:
            Result from the step
        """
        if cancel_token is not None:
            cancel_token.raise_if_cancelled(step_name)

        logger.debug(f"Executing step: {step_name}")
        start_time = time.time()

        try:
            if backend:
                result = await call_with_policy(step_name, func, self.policy, cancel_token)
            else:
                result = func()
            elapsed = time.time() - start_time
            logger.debug(f"Step {step_name} completed in {elapsed:.2f}s")
            return result
        except Exception as e:
            logger.error(f"Error in step {step_name}: {str(e)}", exc_info=True)
            raise

    def _resolve_moment(self, story_id: str, chapter_id: str, arc_id: str, moment_id: str) -> Moment:
        moment = self.catalog.get_moment(story_id, chapter_id, arc_id, moment_id)
        if moment is None:
            raise MomentNotFound(
                moment_id,
                f"Moment not found: {story_id}/{chapter_id}/{arc_id}/{moment_id}",
                {
                    "story_id": story_id,
                    "chapter_id": chapter_id,
                    "arc_id": arc_id,
                    "moment_id": moment_id,
                },
            )
        return moment

    async def generate_scene(
        self,
        story_id: str,
        chapter_id: str,
        arc_id: str,
        moment_id: str,
        persona: str,
        user_restrictions: Optional[str] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> SceneDescriptor:
        """
        Generate, filter and record the scene for one moment.

        Args:
            story_id: Story of the moment
            chapter_id: Chapter of the moment
            arc_id: Arc of the moment
            moment_id: The moment to render
            persona: Narrator voice (Luminari, Shadow, Chronicler)
            user_restrictions: Optional player-supplied restriction text
            cancel_token: Optional token checked before every step

        Returns:
            The final scene descriptor, as recorded in the journal

        Raises:
            MomentNotFound: If the moment does not resolve in the catalog
            BackendFailure: If the generation or content-filter backend fails
            OperationCancelled: If the token is cancelled mid-pipeline
        """
        persona = str(persona)
        logger.info(f"Generating scene for {story_id}/{chapter_id}/{arc_id}/{moment_id} as {persona}")

        moment = await self._execute_step(
            PipelineSteps.RESOLVE_MOMENT,
            lambda: self._resolve_moment(story_id, chapter_id, arc_id, moment_id),
            cancel_token,
        )
        party = await self._execute_step(PipelineSteps.SNAPSHOT_PARTY, self.ledger.snapshot_party, cancel_token)
        mood = await self._execute_step(PipelineSteps.READ_MOOD, self.mood_engine.get_current_mood, cancel_token)

        context = await self._execute_step(
            PipelineSteps.BUILD_CONTEXT,
            lambda: RuntimeContext(
                chapter_id=chapter_id,
                arc_id=arc_id,
                moment_id=moment_id,
                party_snapshot=party,
                environment_state=self.environment_state,
                current_mood=str(mood),
            ),
            cancel_token,
        )

        raw_scene = await self._execute_step(
            PipelineSteps.ASSEMBLE_SCENE,
            lambda: self.assembler.build_scene(moment, context, persona),
            cancel_token,
            backend=True,
        )

        restricted = await self._execute_step(
            PipelineSteps.APPLY_RESTRICTIONS,
            lambda: self.restriction_service.apply_restrictions(
                raw_scene.narrative_text, moment, user_restrictions
            ),
            cancel_token,
            backend=True,
        )

        final_scene = await self._execute_step(
            PipelineSteps.FINALIZE_SCENE,
            lambda: raw_scene.model_copy(
                update={
                    "narrative_text": restricted.filtered_content,
                    "diagnostics": raw_scene.diagnostics.model_copy(
                        update={
                            "applied_restrictions": [
                                *raw_scene.diagnostics.applied_restrictions,
                                *restricted.applied_restrictions,
                                DiagnosticMarkers.PERSONALITY.format(persona=persona),
                            ]
                        }
                    ),
                }
            ),
            cancel_token,
        )

        await self._execute_step(PipelineSteps.LOG_SCENE, lambda: self.journal.log_scene(final_scene), cancel_token)

        logger.info(f"Scene {final_scene.scene_id} ready for moment {moment_id}")
        return final_scene

    def plan_next_scene(self, moment: Moment) -> Optional[str]:
        """Target moment id of the highest-weighted hook, or None without hooks."""
        return resolve_next_moment(moment.branching_hooks)

    def record_choice(self, outcome: Union[ChoiceOutcome, Mapping[str, Any]]) -> Mood:
        """Feed a scene or player choice outcome to this director's mood engine."""
        return self.mood_engine.update_from_choice(outcome)
