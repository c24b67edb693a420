import logging

import pytest

from conftest import make_scene
from sceneweaver_lib.core.constants import Mood
from sceneweaver_lib.core.models import BranchingHook, ChoiceOutcome
from sceneweaver_lib.generation.mood import MoodEngine
from sceneweaver_lib.workflow.branching import resolve_next_moment
from sceneweaver_lib.workflow.journal import NarrativeJournal


# Mood engine


def test_initial_mood_is_anticipation():
    assert MoodEngine().get_current_mood() == Mood.ANTICIPATION


def test_conflict_takes_precedence():
    engine = MoodEngine()
    mood = engine.update_from_choice({"leads_to_conflict": True, "is_positive_resolution": True})
    assert mood == Mood.TENSE


def test_positive_resolution_makes_joyful():
    engine = MoodEngine()
    assert engine.update_from_choice(ChoiceOutcome(is_positive_resolution=True)) == Mood.JOYFUL


def test_neutral_outcome_keeps_mood():
    engine = MoodEngine(Mood.SOMBER)
    assert engine.update_from_choice(ChoiceOutcome()) == Mood.SOMBER


def test_set_mood_logs_change(caplog):
    engine = MoodEngine()
    with caplog.at_level(logging.INFO, logger="sceneweaver"):
        engine.set_mood("Somber")
    assert engine.get_current_mood() == Mood.SOMBER
    assert "Mood updated to: Somber" in caplog.text


def test_set_mood_rejects_unknown_value():
    with pytest.raises(ValueError):
        MoodEngine().set_mood("Furious")


# Journal


def test_journal_appends_in_order(caplog):
    journal = NarrativeJournal()
    with caplog.at_level(logging.INFO, logger="sceneweaver"):
        journal.log_scene(make_scene("scene-1"))
        journal.log_scene(make_scene("scene-2"))

    assert [s.scene_id for s in journal.get_history()] == ["scene-1", "scene-2"]
    assert len(journal) == 2
    assert "Logged scene: scene-2. Total scenes in journal: 2" in caplog.text


def test_history_does_not_alias_internal_state():
    journal = NarrativeJournal()
    journal.log_scene(make_scene("scene-1"))

    history = journal.get_history()
    history.clear()
    assert len(journal.get_history()) == 1

    entry = journal.get_history()[0]
    entry.asset_hooks.append("injected")
    assert journal.get_history()[0].asset_hooks == ["asset-forest-night"]


def test_clear_empties_history():
    journal = NarrativeJournal()
    journal.log_scene(make_scene())
    journal.clear()
    assert journal.get_history() == []


# Branch resolution


def hooks(*pairs):
    return [
        BranchingHook(hook_id=f"h{i}", target_moment_id=target, weight=weight)
        for i, (weight, target) in enumerate(pairs)
    ]


def test_no_hooks_resolves_to_none():
    assert resolve_next_moment([]) is None


def test_highest_weight_wins():
    assert resolve_next_moment(hooks((10, "A"), (90, "B"), (30, "C"))) == "B"


def test_tie_keeps_earliest_hook():
    assert resolve_next_moment(hooks((50, "A"), (50, "B"))) == "A"


def test_weights_are_not_normalized():
    assert resolve_next_moment(hooks((0.2, "A"), (150, "B"))) == "B"
    assert resolve_next_moment(hooks((-5, "A"), (-1, "B"))) == "B"
