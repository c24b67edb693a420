"""
SceneWeaver - Data models.

Pydantic models for the authored narrative hierarchy, party state, the
generation pipeline's request/response values and scene descriptors.
"""

# Standard library imports
from typing import Any, Dict, List, Optional

# Third party imports
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Local imports
from sceneweaver_lib.core.constants import ConfigDefaults


# Narrative hierarchy


class LoreReference(BaseModel):
    """Pointer from a moment to a piece of world lore."""

    model_config = ConfigDict(frozen=True)

    id: str
    type: str = Field(default="", description="Kind of lore (faction, artifact, place, ...)")
    description: str = ""


class BranchingHook(BaseModel):
    """Authored weighted edge from one moment to a candidate next moment.

    Negative weights and unknown targets are accepted here and reported by
    the branching validator instead.
    """

    model_config = ConfigDict(frozen=True)

    hook_id: str
    condition: str = Field(default="", description="Free-text predicate describing when the branch applies")
    target_moment_id: str
    weight: float = 0.0


class Moment(BaseModel):
    """Atomic authored narrative beat; leaf of the story hierarchy."""

    model_config = ConfigDict(frozen=True)

    id: str
    story_id: str
    chapter_id: str
    arc_id: str
    title: str = ""
    content: str = Field(..., min_length=1, description="Authored narrative content")
    timeline: List[str] = Field(default_factory=list)
    themes: List[str] = Field(default_factory=list)
    lore: List[str] = Field(default_factory=list)
    subtext: List[str] = Field(default_factory=list)
    sensory_anchors: List[str] = Field(default_factory=list)
    restriction_tags: List[str] = Field(default_factory=list)
    lore_refs: List[LoreReference] = Field(default_factory=list)
    branching_hooks: List[BranchingHook] = Field(default_factory=list)

    @field_validator("content")
    @classmethod
    def ensure_content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("moment content must not be blank")
        return value


class Arc(BaseModel):
    """Ordered run of moments inside a chapter."""

    model_config = ConfigDict(frozen=True)

    id: str
    story_id: str
    chapter_id: str
    label: str = ""
    theme: str = ""
    moments: List[Moment] = Field(default_factory=list)


class Chapter(BaseModel):
    """Ordered run of arcs inside a story."""

    model_config = ConfigDict(frozen=True)

    id: str
    story_id: str
    name: str = ""
    synopsis: str = ""
    metadata: Dict[str, Any] = Field(default_factory=dict)
    arcs: List[Arc] = Field(default_factory=list)


class Story(BaseModel):
    """Root of the authored narrative hierarchy."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    summary: str = ""
    chapters: List[Chapter] = Field(default_factory=list)


# Party, persona and equipment state


class PartyMember(BaseModel):
    """A member of the active party."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    class_name: str = Field(default="", alias="class")
    level: int = Field(default=1, ge=1)


class PartySnapshot(BaseModel):
    """Point-in-time copy of the party handed to the generation backend."""

    party_id: str
    members: List[PartyMember] = Field(default_factory=list)
    affinities: Dict[str, float] = Field(default_factory=dict)
    status_effects: List[str] = Field(default_factory=list)


class PersonaState(BaseModel):
    """Tracked state of a character; unknown attributes are kept as extras."""

    model_config = ConfigDict(extra="allow")

    mood: str = "Neutral"
    health: int = ConfigDefaults.INITIAL_PERSONA_HEALTH
    affinity: Dict[str, float] = Field(default_factory=dict)


class NPCProfile(BaseModel):
    """Registry record for a non-player character; open to extra attributes."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    role: str = ""
    disposition: str = ""
    attributes: Dict[str, Any] = Field(default_factory=dict)


class EquipmentItem(BaseModel):
    """Catalogue entry for a piece of equipment."""

    model_config = ConfigDict(frozen=True)

    item_id: str
    name: str
    description: str = ""
    gear_tags: List[str] = Field(default_factory=list)


# Pipeline values


class ChoiceOutcome(BaseModel):
    """Outcome flags of a scene or player choice, fed to the mood engine."""

    leads_to_conflict: bool = False
    is_positive_resolution: bool = False


class RuntimeContext(BaseModel):
    """Ephemeral bundle of party, mood and environment for one generation call."""

    chapter_id: str
    arc_id: str
    moment_id: str
    party_snapshot: PartySnapshot
    environment_state: str
    current_mood: str


class SceneGenerationRequest(BaseModel):
    """Input sent to the scene generation backend."""

    moment_id: str
    content: str
    chapter_id: str
    arc_id: str
    party_snapshot: PartySnapshot
    environment_state: str
    current_mood: str
    dreamweaver_personality: str


class EquipmentHighlight(BaseModel):
    """Equipment relevant to a generated scene."""

    model_config = ConfigDict(frozen=True)

    item_id: str = Field(description="The unique ID of the equipment item")
    name: str = Field(description="The name of the equipment item")
    usage_notes: str = Field(description="How the equipment is used or relevant in the scene")


class BranchOption(BaseModel):
    """A choice offered at the end of a scene."""

    model_config = ConfigDict(frozen=True)

    prompt: str = Field(description="Choice text shown to the player")
    target_moment_id: str = Field(description="Moment the choice leads to")
    probability: float = Field(description="Likelihood of this branch, between 0 and 1")
    restriction_notes: Optional[str] = Field(default=None, description="Restriction notes for this branch")


class SceneDiagnostics(BaseModel):
    """Diagnostics summarizing restrictions, mood adjustments and branch forecast."""

    model_config = ConfigDict(frozen=True)

    applied_restrictions: List[str] = Field(default_factory=list, description="Restrictions applied to the scene")
    mood_adjustments: List[str] = Field(default_factory=list, description="Mood adjustments made while generating")
    branch_forecast: str = Field(default="", description="Summary of likely branching")


class SceneDescriptor(BaseModel):
    """Generated, persona- and context-specific rendering of a moment."""

    model_config = ConfigDict(frozen=True)

    scene_id: str = Field(description="The unique ID of the generated scene")
    title: str = Field(description="The title of the scene")
    narrative_text: str = Field(description="The narrative text describing the scene")
    mood: str = Field(description="The overall mood or atmosphere of the scene")
    asset_hooks: List[str] = Field(default_factory=list, description="Asset keys required for the scene")
    recommended_choices: List[str] = Field(default_factory=list, description="Recommended actions for the player")
    party_highlights: List[str] = Field(default_factory=list, description="Notes about the current party")
    equipment_highlights: List[EquipmentHighlight] = Field(default_factory=list)
    branch_options: List[BranchOption] = Field(default_factory=list)
    diagnostics: SceneDiagnostics = Field(default_factory=SceneDiagnostics)
    dreamweaver_personality: str = Field(default="", description="Narrator voice the scene was written in")


class ContentFilterRequest(BaseModel):
    """Input sent to the content-filter backend."""

    scene_content: str
    restrictions: List[str] = Field(default_factory=list)


class ContentFilterResponse(BaseModel):
    """Content-filter backend output; applied restrictions are optional."""

    filtered_content: str
    applied_restrictions: Optional[List[str]] = None


class RestrictionResult(BaseModel):
    """Normalized result of the restriction step."""

    filtered_content: str
    applied_restrictions: List[str] = Field(default_factory=list)
