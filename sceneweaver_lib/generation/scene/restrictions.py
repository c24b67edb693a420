"""Restriction Service: content guardrails for generated scenes.

The service only composes the restriction specification and forwards it to
a content-filter backend. It performs no filtering of its own, so a failing
backend fails the call.
"""

# Standard library imports
from typing import List, Optional, Protocol, runtime_checkable

# Third party imports
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage

# Local imports
from sceneweaver_lib.core.constants import BackendNames, DiagnosticMarkers
from sceneweaver_lib.core.exceptions import handle_backend_error
from sceneweaver_lib.core.logger import get_logger
from sceneweaver_lib.core.models import (
    ContentFilterRequest,
    ContentFilterResponse,
    Moment,
    RestrictionResult,
)
from sceneweaver_lib.prompts.renderer import render_prompt

logger = get_logger(__name__)


def build_restriction_spec(moment: Moment, user_restrictions: Optional[str] = None) -> List[str]:
    """
    Compose the restrictions that apply to a moment.

    Args:
        moment: The moment whose ``restriction_tags`` apply
        user_restrictions: Free-text restrictions supplied by the player

    Returns:
        Moment tags without duplicates, in authored order, followed by the
        user restriction when it is not blank
    """
    spec = list(dict.fromkeys(moment.restriction_tags))
    if user_restrictions and user_restrictions.strip():
        spec.append(DiagnosticMarkers.USER_RESTRICTION.format(restriction=user_restrictions))
    return spec


@runtime_checkable
class ContentFilterBackend(Protocol):
    """Rewrites scene content so it satisfies a restriction specification."""

    async def filter_content(self, request: ContentFilterRequest) -> ContentFilterResponse:
        ...


class RestrictionService:
    """Applies moment and user restrictions to scene text through a backend."""

    def __init__(self, backend: ContentFilterBackend):
        self.backend = backend

    async def apply_restrictions(
        self,
        scene_content: str,
        moment: Moment,
        user_restrictions: Optional[str] = None,
    ) -> RestrictionResult:
        """
        Filter scene text against the restrictions of a moment.

        Args:
            scene_content: Narrative text to filter
            moment: Moment carrying the restriction tags
            user_restrictions: Optional player-supplied restriction text

        Returns:
            The backend's filtered content verbatim, with the restrictions it
            reports as applied (or the specification it was given when it
            reports none)
        """
        restrictions = build_restriction_spec(moment, user_restrictions)
        logger.debug(f"Applying {len(restrictions)} restrictions to moment {moment.id}")

        response = await self.backend.filter_content(
            ContentFilterRequest(scene_content=scene_content, restrictions=restrictions)
        )

        applied = response.applied_restrictions
        if applied is None:
            applied = restrictions
        return RestrictionResult(filtered_content=response.filtered_content, applied_restrictions=list(applied))


class LLMContentFilter:
    """Content-filter backend that asks a chat model to rewrite the scene."""

    def __init__(self, llm: Optional[BaseChatModel] = None):
        if llm is None:
            from sceneweaver_lib.core.config import get_llm

            llm = get_llm()
        self.llm = llm

    async def filter_content(self, request: ContentFilterRequest) -> ContentFilterResponse:
        if not request.restrictions:
            return ContentFilterResponse(
                filtered_content=request.scene_content,
                applied_restrictions=[DiagnosticMarkers.NO_RESTRICTIONS],
            )

        prompt = render_prompt(
            "filter_scene",
            scene_content=request.scene_content,
            restrictions=request.restrictions,
        )

        try:
            response = await self.llm.ainvoke([HumanMessage(content=prompt)])
        except Exception as e:
            raise handle_backend_error(e, BackendNames.CONTENT_FILTER, "filter_content") from e

        filtered = response.content if isinstance(response.content, str) else str(response.content)
        logger.info(f"Filtered scene content against {len(request.restrictions)} restrictions")
        return ContentFilterResponse(
            filtered_content=filtered.strip(),
            applied_restrictions=list(request.restrictions),
        )
