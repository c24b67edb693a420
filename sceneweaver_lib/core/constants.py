"""Constants and magic strings used throughout the scene engine.

This module centralizes constant values to avoid magic strings scattered
throughout the codebase.
"""

from enum import Enum


class Mood(str, Enum):
    """Narrative moods tracked by the mood engine."""

    NEUTRAL = "Neutral"
    TENSE = "Tense"
    JOYFUL = "Joyful"
    SOMBER = "Somber"
    ANTICIPATION = "Anticipation"

    def __str__(self) -> str:
        return self.value


class DreamweaverPersonality(str, Enum):
    """The three narrator voices a scene can be generated in."""

    LUMINARI = "Luminari"
    SHADOW = "Shadow"
    CHRONICLER = "Chronicler"

    def __str__(self) -> str:
        return self.value


# Backend names used in error reporting
class BackendNames:
    """Names of the external collaborators the director calls."""

    GENERATION = "generation"
    CONTENT_FILTER = "content_filter"


# Pipeline step names
class PipelineSteps:
    """Step names of the generate-scene pipeline, used for logging.

    Order matches execution order.
    """

    RESOLVE_MOMENT = "resolve_moment"
    SNAPSHOT_PARTY = "snapshot_party"
    READ_MOOD = "read_mood"
    BUILD_CONTEXT = "build_context"
    ASSEMBLE_SCENE = "assemble_scene"
    APPLY_RESTRICTIONS = "apply_restrictions"
    FINALIZE_SCENE = "finalize_scene"
    LOG_SCENE = "log_scene"


# Diagnostics strings
class DiagnosticMarkers:
    """Fixed strings written into scene diagnostics."""

    PERSONALITY = "Personality: {persona}"
    USER_RESTRICTION = 'User-defined: "{restriction}"'
    NO_RESTRICTIONS = "No restrictions applied."


# Configuration defaults
class ConfigDefaults:
    """Default configuration values.

    These defaults are used when specific configuration values are not
    provided through the environment.
    """

    INITIAL_MOOD = Mood.ANTICIPATION
    ENVIRONMENT_STATE = "Calm, early evening"
    DEFAULT_TEMPERATURE = 0.7
    DEFAULT_MODEL_PROVIDER = "openai"
    BACKEND_MAX_ATTEMPTS = 1
    BACKEND_BACKOFF_SECONDS = 0.5
    BACKEND_BACKOFF_MULTIPLIER = 2.0
    MOMENTS_PER_ARC = 5
    SEQUENTIAL_HOOK_WEIGHT = 100.0
    INITIAL_PERSONA_HEALTH = 100
    LOG_LEVEL = "INFO"


# Packaged sample data
class SampleData:
    """File names of the sample documents shipped in ``sceneweaver_lib/data``."""

    NARRATIVE = "sample_narrative.json"
    PARTY = "sample_party.json"
    EQUIPMENT = "sample_equipment.json"
