import pytest
from jinja2 import TemplateNotFound
from langchain_core.language_models import FakeListChatModel

from conftest import make_scene
from sceneweaver_lib.core.exceptions import (
    BackendTimeoutError,
    ContentFilterBackendError,
    GenerationBackendError,
)
from sceneweaver_lib.core.models import (
    ContentFilterRequest,
    ContentFilterResponse,
    Moment,
    RuntimeContext,
)
from sceneweaver_lib.generation.scene.assembler import LLMSceneGenerator, SceneAssembler
from sceneweaver_lib.generation.scene.restrictions import (
    LLMContentFilter,
    RestrictionService,
    build_restriction_spec,
)
from sceneweaver_lib.prompts.renderer import get_template_manager, render_prompt


@pytest.fixture
def moment():
    return Moment(
        id="m1",
        story_id="s1",
        chapter_id="c1",
        arc_id="a1",
        title="First",
        content="The party wakes in a strange forest.",
        restriction_tags=["No gore", "Mild language", "No gore"],
    )


@pytest.fixture
def context(party):
    return RuntimeContext(
        chapter_id="c1",
        arc_id="a1",
        moment_id="m1",
        party_snapshot=party,
        environment_state="Calm, early evening",
        current_mood="Anticipation",
    )


# Restriction list and service


def test_restriction_spec_dedupes_and_appends_user_text(moment):
    assert build_restriction_spec(moment, "no spiders") == [
        "No gore",
        "Mild language",
        'User-defined: "no spiders"',
    ]


def test_blank_user_restrictions_are_ignored(moment):
    assert build_restriction_spec(moment, "   ") == ["No gore", "Mild language"]
    assert build_restriction_spec(moment.model_copy(update={"restriction_tags": []})) == []


@pytest.mark.asyncio
async def test_service_returns_backend_result_verbatim(moment, filter_backend):
    result = await RestrictionService(filter_backend).apply_restrictions("raw text", moment, "no spiders")

    assert result.filtered_content == "X"
    assert result.applied_restrictions == ["r1"]
    request = filter_backend.filter_content.call_args.args[0]
    assert request.scene_content == "raw text"
    assert request.restrictions[-1] == 'User-defined: "no spiders"'


@pytest.mark.asyncio
async def test_service_falls_back_to_spec_when_backend_reports_none(moment, mocker):
    backend = mocker.AsyncMock()
    backend.filter_content.return_value = ContentFilterResponse(filtered_content="clean")

    result = await RestrictionService(backend).apply_restrictions("raw", moment)
    assert result.applied_restrictions == ["No gore", "Mild language"]


@pytest.mark.asyncio
async def test_service_propagates_backend_failure(moment, mocker):
    backend = mocker.AsyncMock()
    backend.filter_content.side_effect = ContentFilterBackendError("filter down")

    with pytest.raises(ContentFilterBackendError):
        await RestrictionService(backend).apply_restrictions("raw", moment)


# Default content filter


@pytest.mark.asyncio
async def test_llm_filter_skips_model_without_restrictions(mocker):
    llm = mocker.Mock()
    response = await LLMContentFilter(llm).filter_content(
        ContentFilterRequest(scene_content="untouched", restrictions=[])
    )

    assert response.filtered_content == "untouched"
    assert response.applied_restrictions == ["No restrictions applied."]
    llm.ainvoke.assert_not_called()


@pytest.mark.asyncio
async def test_llm_filter_returns_model_text():
    llm = FakeListChatModel(responses=["  A gentler scene.  "])
    response = await LLMContentFilter(llm).filter_content(
        ContentFilterRequest(scene_content="A violent scene.", restrictions=["No gore"])
    )

    assert response.filtered_content == "A gentler scene."
    assert response.applied_restrictions == ["No gore"]


@pytest.mark.asyncio
async def test_llm_filter_converts_provider_errors(mocker):
    llm = mocker.Mock()
    llm.ainvoke = mocker.AsyncMock(side_effect=RuntimeError("Request timeout"))

    with pytest.raises(BackendTimeoutError) as exc_info:
        await LLMContentFilter(llm).filter_content(
            ContentFilterRequest(scene_content="text", restrictions=["No gore"])
        )
    assert exc_info.value.backend == "content_filter"


def test_filter_prompt_lists_restrictions():
    prompt = render_prompt("filter_scene", scene_content="Scene", restrictions=["No gore", "Mild language"])
    assert "- No gore" in prompt
    assert "- Mild language" in prompt
    assert '"Scene"' in prompt


# Scene assembler and default generator


@pytest.mark.asyncio
async def test_assembler_builds_request_and_returns_result_unmodified(moment, context, generation_backend):
    scene = await SceneAssembler(generation_backend).build_scene(moment, context, "Shadow")

    assert scene == make_scene()
    request = generation_backend.generate_scene.call_args.args[0]
    assert request.moment_id == "m1"
    assert request.content == moment.content
    assert request.current_mood == "Anticipation"
    assert request.dreamweaver_personality == "Shadow"
    assert request.party_snapshot.party_id == "party-1"


def structured_llm(mocker, result=None, error=None):
    runnable = mocker.Mock()
    runnable.ainvoke = mocker.AsyncMock(return_value=result, side_effect=error)
    llm = mocker.Mock()
    llm.with_structured_output.return_value = runnable
    return llm, runnable


@pytest.mark.asyncio
async def test_generator_renders_persona_voice(mocker, moment, context):
    llm, runnable = structured_llm(mocker, result=make_scene())
    assembler = SceneAssembler(LLMSceneGenerator(llm))

    scene = await assembler.build_scene(moment, context, "Luminari")

    assert scene.scene_id == "scene-1"
    prompt = runnable.ainvoke.call_args.args[0]
    assert "You are the Luminari" in prompt
    assert moment.content in prompt
    assert "Elara, level 3 Scholar" in prompt


@pytest.mark.asyncio
async def test_generator_rejects_malformed_scene(mocker, moment, context):
    llm, _ = structured_llm(mocker, result=make_scene(narrative_text="   "))

    with pytest.raises(GenerationBackendError) as exc_info:
        await SceneAssembler(LLMSceneGenerator(llm)).build_scene(moment, context, "Chronicler")
    assert "narrative_text" in str(exc_info.value)


@pytest.mark.asyncio
async def test_generator_rejects_missing_scene(mocker, moment, context):
    llm, _ = structured_llm(mocker, result=None)

    with pytest.raises(GenerationBackendError):
        await SceneAssembler(LLMSceneGenerator(llm)).build_scene(moment, context, "Chronicler")


@pytest.mark.asyncio
async def test_generator_converts_provider_errors(mocker, moment, context):
    llm, _ = structured_llm(mocker, error=ValueError("bad gateway"))

    with pytest.raises(GenerationBackendError) as exc_info:
        await SceneAssembler(LLMSceneGenerator(llm)).build_scene(moment, context, "Shadow")
    assert exc_info.value.details["original_error"] == "ValueError"


def test_unknown_persona_uses_base_voice():
    prompt = render_prompt(
        "generate_scene",
        persona="Trickster",
        moment_id="m1",
        content="Content",
        chapter_id="c1",
        arc_id="a1",
        party={"party_id": "p", "members": [], "status_effects": []},
        environment_state="Calm",
        current_mood="Neutral",
        dreamweaver_personality="Trickster",
    )
    assert "NARRATOR VOICE (Trickster)" in prompt


def test_template_managers_are_cached_per_persona():
    assert get_template_manager("Shadow") is get_template_manager("shadow")
    assert get_template_manager("Shadow") is not get_template_manager("Luminari")


def test_missing_template_raises():
    with pytest.raises(TemplateNotFound):
        render_prompt("no_such_prompt", persona="Shadow")
