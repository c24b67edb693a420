"""Character Ledger: party snapshot, NPC registry and persona states.

Every read hands out a copy. Callers can change what they receive without
touching the ledger; changes go back in through the update methods.
"""

# Standard library imports
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

# Local imports
from sceneweaver_lib.core.constants import SampleData
from sceneweaver_lib.core.logger import get_logger
from sceneweaver_lib.core.models import NPCProfile, PartyMember, PartySnapshot, PersonaState
from sceneweaver_lib.universe.lore.sources import read_json_document, read_packaged_json

logger = get_logger(__name__)


class CharacterLedger:
    """Tracks the active party, known NPCs and per-character persona state."""

    def __init__(self, party: Optional[PartySnapshot] = None):
        self._party = party.model_copy(deep=True) if party else PartySnapshot(party_id="party-empty")
        self._npcs: Dict[str, NPCProfile] = {}
        self._persona_states: Dict[str, PersonaState] = {}
        self._init_persona_states()

    @classmethod
    def from_json(cls, path: Optional[Union[str, Path]] = None) -> "CharacterLedger":
        """Build a ledger from a party JSON document (packaged sample by default)."""
        document = read_json_document(path) if path else read_packaged_json(SampleData.PARTY)
        party = PartySnapshot.model_validate(document)
        logger.info(f"Loaded party {party.party_id} with {len(party.members)} members")
        return cls(party)

    def _init_persona_states(self) -> None:
        for member in self._party.members:
            self._persona_states.setdefault(member.id, PersonaState())

    # Party

    def snapshot_party(self) -> PartySnapshot:
        return self._party.model_copy(deep=True)

    def update_party_snapshot(self, snapshot: PartySnapshot) -> None:
        self._party = snapshot.model_copy(deep=True)
        self._init_persona_states()
        logger.info(f"Party snapshot updated: {len(snapshot.members)} members")

    def get_party_member(self, member_id: str) -> Optional[PartyMember]:
        for member in self._party.members:
            if member.id == member_id:
                return member.model_copy(deep=True)
        return None

    # NPC registry

    def set_npc(self, npc_id: str, data: Union[NPCProfile, Mapping[str, Any]]) -> None:
        profile = data if isinstance(data, NPCProfile) else NPCProfile.model_validate(dict(data))
        self._npcs[npc_id] = profile.model_copy(deep=True)

    def get_npc(self, npc_id: str) -> Optional[NPCProfile]:
        profile = self._npcs.get(npc_id)
        return profile.model_copy(deep=True) if profile else None

    def update_npc(self, npc_id: str, updates: Mapping[str, Any]) -> NPCProfile:
        """Merge updates into an NPC record, creating it if absent."""
        current = self._npcs.get(npc_id, NPCProfile())
        merged = NPCProfile.model_validate({**current.model_dump(), **dict(updates)})
        self._npcs[npc_id] = merged
        return merged.model_copy(deep=True)

    def get_npc_registry(self) -> Dict[str, NPCProfile]:
        return {npc_id: profile.model_copy(deep=True) for npc_id, profile in self._npcs.items()}

    # Persona state

    def get_persona_state(self, character_id: str) -> Optional[PersonaState]:
        state = self._persona_states.get(character_id)
        return state.model_copy(deep=True) if state else None

    def set_persona_state(self, character_id: str, state: Union[PersonaState, Mapping[str, Any]]) -> None:
        record = state if isinstance(state, PersonaState) else PersonaState.model_validate(dict(state))
        self._persona_states[character_id] = record.model_copy(deep=True)

    def update_persona_state(self, character_id: str, updates: Mapping[str, Any]) -> PersonaState:
        """
        Merge a partial record into a character's persona state.

        Fields not named in ``updates`` keep their values. A character without
        a slot gets one, starting from the defaults.

        Args:
            character_id: Party member or NPC id
            updates: Fields to overwrite; unknown keys are kept as extras

        Returns:
            Copy of the merged state

        Raises:
            pydantic.ValidationError: If a known field gets a value of the wrong type
        """
        current = self._persona_states.get(character_id, PersonaState())
        merged = PersonaState.model_validate({**current.model_dump(), **dict(updates)})
        self._persona_states[character_id] = merged
        logger.debug(f"Persona state of {character_id} updated: {sorted(updates)}")
        return merged.model_copy(deep=True)
