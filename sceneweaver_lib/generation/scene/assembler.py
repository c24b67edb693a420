"""Scene Assembler: turns a moment and runtime context into a scene."""

# Standard library imports
from typing import Optional, Protocol, runtime_checkable

# Third party imports
from langchain_core.language_models import BaseChatModel

# Local imports
from sceneweaver_lib.analysis.validation import validate_scene_descriptor
from sceneweaver_lib.core.constants import BackendNames
from sceneweaver_lib.core.exceptions import GenerationBackendError, handle_backend_error
from sceneweaver_lib.core.logger import get_logger
from sceneweaver_lib.core.models import Moment, RuntimeContext, SceneDescriptor, SceneGenerationRequest
from sceneweaver_lib.prompts.renderer import render_prompt

logger = get_logger(__name__)


@runtime_checkable
class GenerationBackend(Protocol):
    """Produces a scene descriptor for a generation request."""

    async def generate_scene(self, request: SceneGenerationRequest) -> SceneDescriptor:
        ...


class SceneAssembler:
    """Builds generation requests and forwards them to the backend."""

    def __init__(self, backend: GenerationBackend):
        self.backend = backend

    async def build_scene(self, moment: Moment, context: RuntimeContext, persona: str) -> SceneDescriptor:
        """
        Generate the raw scene for a moment.

        The backend's descriptor is returned as is. ``persona`` is passed
        through without validation.

        Args:
            moment: Moment supplying the id and authored content
            context: Party, mood and environment for this call
            persona: Narrator voice

        Returns:
            The scene descriptor produced by the backend
        """
        request = SceneGenerationRequest(
            moment_id=moment.id,
            content=moment.content,
            chapter_id=context.chapter_id,
            arc_id=context.arc_id,
            party_snapshot=context.party_snapshot,
            environment_state=context.environment_state,
            current_mood=context.current_mood,
            dreamweaver_personality=str(persona),
        )
        return await self.backend.generate_scene(request)


class LLMSceneGenerator:
    """Generation backend that asks a chat model for a structured scene."""

    def __init__(self, llm: Optional[BaseChatModel] = None):
        if llm is None:
            from sceneweaver_lib.core.config import get_llm

            llm = get_llm()
        self.llm = llm

    async def generate_scene(self, request: SceneGenerationRequest) -> SceneDescriptor:
        prompt = render_prompt(
            "generate_scene",
            persona=request.dreamweaver_personality,
            moment_id=request.moment_id,
            content=request.content,
            chapter_id=request.chapter_id,
            arc_id=request.arc_id,
            party=request.party_snapshot,
            environment_state=request.environment_state,
            current_mood=request.current_mood,
            dreamweaver_personality=request.dreamweaver_personality,
        )

        structured_llm = self.llm.with_structured_output(SceneDescriptor)
        try:
            scene = await structured_llm.ainvoke(prompt)
        except Exception as e:
            raise handle_backend_error(e, BackendNames.GENERATION, "generate_scene") from e

        if scene is None:
            raise GenerationBackendError(
                "Generation backend returned no scene",
                {"moment_id": request.moment_id},
            )

        report = validate_scene_descriptor(scene)
        if not report.is_valid:
            raise GenerationBackendError(
                f"Generation backend returned a malformed scene: "
                f"{'; '.join(issue.message for issue in report.fatal)}",
                {"moment_id": request.moment_id, "issues": [i.code for i in report.fatal]},
            )
        for issue in report.warnings:
            logger.warning(f"Generated scene {scene.scene_id}: {issue.message}")

        logger.info(f"Generated scene {scene.scene_id} for moment {request.moment_id}")
        return scene
