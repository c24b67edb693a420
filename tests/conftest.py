import pytest

from sceneweaver_lib.core.models import (
    ContentFilterResponse,
    PartyMember,
    PartySnapshot,
    SceneDescriptor,
    SceneDiagnostics,
)
from sceneweaver_lib.generation.scene.assembler import SceneAssembler
from sceneweaver_lib.generation.scene.restrictions import RestrictionService
from sceneweaver_lib.universe.characters.ledger import CharacterLedger
from sceneweaver_lib.universe.lore.catalog import LoreCatalog
from sceneweaver_lib.universe.lore.sources import InMemoryNarrativeSource
from sceneweaver_lib.workflow.director import DreamweaverDirector


def make_scene(scene_id="scene-1", narrative_text="The campfire crackles.", **overrides):
    fields = {
        "scene_id": scene_id,
        "title": "The Compass Awakens",
        "narrative_text": narrative_text,
        "mood": "Anticipation",
        "asset_hooks": ["asset-forest-night"],
        "recommended_choices": ["Examine the compass"],
        "party_highlights": ["Elara studies the map."],
        "diagnostics": SceneDiagnostics(
            applied_restrictions=["existing"],
            mood_adjustments=[],
            branch_forecast="Likely to follow the light.",
        ),
    }
    fields.update(overrides)
    return SceneDescriptor(**fields)


@pytest.fixture
def raw_stories():
    return [
        {
            "id": "s1",
            "title": "Test Story",
            "summary": "A story for tests.",
            "chapters": [
                {
                    "id": "c1",
                    # Declared parent ids are overwritten by the catalog
                    "story_id": "wrong-story",
                    "name": "Chapter One",
                    "arcs": [
                        {
                            "id": "a1",
                            "label": "Arc One",
                            "moments": [
                                {
                                    "id": "m1",
                                    "title": "First",
                                    "content": "The party wakes in a strange forest.",
                                    "themes": ["Discovery"],
                                    "restriction_tags": ["No gore", "No gore", "Mild language"],
                                    "branching_hooks": [
                                        {"hook_id": "h1", "target_moment_id": "m2", "weight": 50},
                                        {"hook_id": "h2", "target_moment_id": "m3", "weight": 50},
                                    ],
                                },
                                {
                                    "id": "m2",
                                    "arc_id": "somewhere-else",
                                    "title": "Second",
                                    "content": "A path opens between the trees.",
                                    "themes": ["Courage"],
                                },
                            ],
                        },
                        {
                            "id": "a2",
                            "label": "Arc Two",
                            "moments": [
                                {
                                    "id": "m3",
                                    "title": "Third",
                                    "content": "An altar lies broken in a silent grove.",
                                    "themes": ["Memory", "discovery"],
                                },
                            ],
                        },
                    ],
                }
            ],
        }
    ]


@pytest.fixture
def source(raw_stories):
    return InMemoryNarrativeSource(raw_stories)


@pytest.fixture
def catalog(source):
    return LoreCatalog(source)


@pytest.fixture
def party():
    return PartySnapshot(
        party_id="party-1",
        members=[
            PartyMember(id="member-1", name="Elara", class_name="Scholar", level=3),
            PartyMember(id="member-2", name="Bram", class_name="Warrior", level=4),
        ],
        affinities={"member-1": 0.8},
        status_effects=["Well-rested"],
    )


@pytest.fixture
def ledger(party):
    return CharacterLedger(party)


@pytest.fixture
def generation_backend(mocker):
    backend = mocker.AsyncMock()
    backend.generate_scene.return_value = make_scene()
    return backend


@pytest.fixture
def filter_backend(mocker):
    backend = mocker.AsyncMock()
    backend.filter_content.return_value = ContentFilterResponse(
        filtered_content="X", applied_restrictions=["r1"]
    )
    return backend


@pytest.fixture
def director(catalog, ledger, generation_backend, filter_backend):
    return DreamweaverDirector(
        catalog=catalog,
        ledger=ledger,
        assembler=SceneAssembler(generation_backend),
        restriction_service=RestrictionService(filter_backend),
    )
