"""
SceneWeaver - Scene orchestration over an authored story hierarchy.
"""

# Export public API
from sceneweaver_lib.api.sceneweaver import create_director
from sceneweaver_lib.core.constants import DreamweaverPersonality, Mood
from sceneweaver_lib.core.models import ChoiceOutcome, Moment, SceneDescriptor, Story
from sceneweaver_lib.workflow.director import DreamweaverDirector
from sceneweaver_lib.workflow.policy import CancellationToken, PipelinePolicy

__all__ = [
    "create_director",
    "DreamweaverDirector",
    "DreamweaverPersonality",
    "Mood",
    "ChoiceOutcome",
    "Moment",
    "SceneDescriptor",
    "Story",
    "CancellationToken",
    "PipelinePolicy",
]
