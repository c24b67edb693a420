"""
Main entry point for building a ready-to-use scene director.

Wires the JSON narrative and party documents and the chat-model backends
into a ``DreamweaverDirector``.
"""

from pathlib import Path

from langchain_core.language_models import BaseChatModel

from sceneweaver_lib.core.config import (
    ENVIRONMENT_STATE,
    configure_logging,
    get_llm,
    get_pipeline_policy,
)
from sceneweaver_lib.core.logger import get_logger
from sceneweaver_lib.generation.scene.assembler import LLMSceneGenerator, SceneAssembler
from sceneweaver_lib.generation.scene.restrictions import LLMContentFilter, RestrictionService
from sceneweaver_lib.universe.characters.ledger import CharacterLedger
from sceneweaver_lib.universe.lore.catalog import LoreCatalog
from sceneweaver_lib.universe.lore.sources import JSONNarrativeSource
from sceneweaver_lib.workflow.director import DreamweaverDirector
from sceneweaver_lib.workflow.policy import PipelinePolicy

logger = get_logger(__name__)


def create_director(
    provider: str | None = None,
    model: str | None = None,
    narrative_path: str | Path | None = None,
    party_path: str | Path | None = None,
    policy: PipelinePolicy | None = None,
    llm: BaseChatModel | None = None,
    log_level: str | None = None,
) -> DreamweaverDirector:
    """
    Build a director over the default sources and chat-model backends.

    Args:
        provider: Model provider (openai, anthropic, gemini); defaults from the environment
        model: Model name override
        narrative_path: Narrative JSON document (packaged sample if omitted)
        party_path: Party JSON document (packaged sample if omitted)
        policy: Backend call policy (built from the environment if omitted)
        llm: Chat model to use instead of creating one from provider/model
        log_level: Logging level (SCENEWEAVER_LOG_LEVEL or INFO if omitted)

    Returns:
        A director with its own mood engine and journal
    """
    configure_logging(log_level)
    chat_model = llm or get_llm(provider=provider, model=model)

    catalog = LoreCatalog(JSONNarrativeSource(narrative_path))
    ledger = CharacterLedger.from_json(party_path)

    director = DreamweaverDirector(
        catalog=catalog,
        ledger=ledger,
        assembler=SceneAssembler(LLMSceneGenerator(chat_model)),
        restriction_service=RestrictionService(LLMContentFilter(chat_model)),
        policy=policy or get_pipeline_policy(),
        environment_state=ENVIRONMENT_STATE,
    )
    logger.info(
        f"Director ready: {len(catalog.get_stories())} stories, "
        f"policy max_attempts={director.policy.max_attempts}"
    )
    return director
