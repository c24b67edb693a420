"""Mood Engine: tracks the emotional tone of the running narrative."""

from typing import Any, Mapping, Union

from sceneweaver_lib.core.constants import ConfigDefaults, Mood
from sceneweaver_lib.core.logger import mood_logger as logger
from sceneweaver_lib.core.models import ChoiceOutcome


class MoodEngine:
    """Holds the current mood and moves it in response to choice outcomes."""

    def __init__(self, initial_mood: Mood = ConfigDefaults.INITIAL_MOOD):
        self._mood = Mood(initial_mood)

    def get_current_mood(self) -> Mood:
        return self._mood

    def set_mood(self, mood: Union[Mood, str]) -> None:
        self._mood = Mood(mood)
        logger.info(f"Mood updated to: {self._mood}")

    def update_from_choice(self, outcome: Union[ChoiceOutcome, Mapping[str, Any]]) -> Mood:
        """
        Move the mood according to a scene or player choice outcome.

        Conflict takes precedence: an outcome flagged both as conflict and as
        positive resolution makes the mood Tense. An outcome with neither flag
        leaves the mood as it is.

        Args:
            outcome: A ChoiceOutcome or a mapping with the same keys

        Returns:
            The mood after the update
        """
        if not isinstance(outcome, ChoiceOutcome):
            outcome = ChoiceOutcome.model_validate(dict(outcome))

        if outcome.leads_to_conflict:
            self.set_mood(Mood.TENSE)
        elif outcome.is_positive_resolution:
            self.set_mood(Mood.JOYFUL)
        return self._mood
