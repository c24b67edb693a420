"""Prompt template management for SceneWeaver.

Templates live in ``templates/base``. A narrator persona can override any of
them by shipping a file of the same name in ``templates/personas/<persona>``;
the persona directory is searched first.
"""

from pathlib import Path
from typing import Dict

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from sceneweaver_lib.core.logger import get_logger

logger = get_logger(__name__)

DEFAULT_PERSONA = "base"


class PromptTemplateManager:
    """Renders prompt templates for one narrator persona."""

    def __init__(self, persona: str = DEFAULT_PERSONA):
        """Initialize the template manager for a persona.

        Args:
            persona: Narrator persona name (case-insensitive, e.g. 'Luminari')
        """
        self.persona = (persona or DEFAULT_PERSONA).lower()
        self.template_dir = Path(__file__).parent / "templates"
        self.jinja_env = self._setup_jinja_environment()

    def _setup_jinja_environment(self) -> Environment:
        loaders = []

        persona_dir = self.template_dir / "personas" / self.persona
        if persona_dir.exists():
            logger.debug(f"Using persona templates from {persona_dir}")
            loaders.append(FileSystemLoader(str(persona_dir)))
        elif self.persona != DEFAULT_PERSONA:
            logger.warning(f"No persona templates for '{self.persona}', using base templates")

        loaders.append(FileSystemLoader(str(self.template_dir / "base")))

        env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=select_autoescape(),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        env.globals["persona"] = self.persona
        return env

    def render(self, template_name: str, **kwargs) -> str:
        """Render a template with the provided variables.

        Args:
            template_name: Name of the template file (without .jinja2 extension)
            **kwargs: Variables to pass to the template

        Returns:
            Rendered template string
        """
        try:
            template = self.jinja_env.get_template(f"{template_name}.jinja2")
        except TemplateNotFound:
            logger.error(f"Template '{template_name}' not found for persona '{self.persona}'")
            raise
        logger.debug(f"Rendering '{template_name}' from {getattr(template, 'filename', 'unknown')}")
        return template.render(**kwargs)


# One manager per persona
_template_managers: Dict[str, PromptTemplateManager] = {}


def get_template_manager(persona: str = DEFAULT_PERSONA) -> PromptTemplateManager:
    key = (persona or DEFAULT_PERSONA).lower()
    if key not in _template_managers:
        _template_managers[key] = PromptTemplateManager(key)
    return _template_managers[key]


def render_prompt(template_name: str, persona: str = DEFAULT_PERSONA, **kwargs) -> str:
    """Render a prompt template in a persona's voice.

    Args:
        template_name: Name of the template
        persona: Narrator persona
        **kwargs: Variables for the template

    Returns:
        Rendered prompt string
    """
    return get_template_manager(persona).render(template_name, **kwargs)
