"""Parser for authored narrative breakdown documents.

A breakdown is a markdown document where every beat is a section::

    ### Paragraph 1: The Ancient Call
    *Timeline*:
    1. A group of seekers gather in a primal world.
    **Content**:
    Long ago, when the earth trembled under untamed skies...
    **Themes**:
    - Creation: Bringing something vast into being.
    **Lore**:
    - *Omega*: A neutral, undefined force.
    **Subtext**:
    - *Faint Ruin*: Split motives plant seeds of future collapse.

The parser turns such a document into a raw story document that
``LoreCatalog`` can index.
"""

import re
from typing import Any, Dict, List, Optional

from sceneweaver_lib.core.constants import ConfigDefaults
from sceneweaver_lib.core.logger import get_logger

logger = get_logger(__name__)

PARAGRAPH_HEADING = re.compile(r"^###\s+Paragraph\s+(\d+)\s*:\s*(.+?)\s*$", re.IGNORECASE)
FIELD_MARKER = re.compile(r"^\*{1,2}(Timeline|Content|Themes|Lore|Subtext)\*{1,2}\s*:\s*(.*)$", re.IGNORECASE)
NUMBERED_ITEM = re.compile(r"^\d+\.\s+(.*)$")
BULLET_ITEM = re.compile(r"^[-*]\s+(.*)$")
RULE = re.compile(r"^-{3,}\s*$")


def _strip_item(line: str) -> Optional[str]:
    for pattern in (NUMBERED_ITEM, BULLET_ITEM):
        match = pattern.match(line)
        if match:
            return match.group(1).strip()
    return None


def _parse_sections(text: str) -> List[Dict[str, Any]]:
    """Split the document into paragraph sections with their raw fields."""
    sections: List[Dict[str, Any]] = []
    current: Optional[Dict[str, Any]] = None
    field: Optional[str] = None

    for raw_line in text.splitlines():
        line = raw_line.strip()

        heading = PARAGRAPH_HEADING.match(line)
        if heading:
            current = {
                "number": int(heading.group(1)),
                "title": heading.group(2).strip("* "),
                "timeline": [],
                "content": [],
                "themes": [],
                "lore": [],
                "subtext": [],
            }
            sections.append(current)
            field = None
            continue

        # Any other heading or a horizontal rule closes the current paragraph
        if line.startswith("#") or RULE.match(line):
            current = None
            field = None
            continue

        if current is None or not line:
            continue

        marker = FIELD_MARKER.match(line)
        if marker:
            field = marker.group(1).lower()
            remainder = marker.group(2).strip()
            if remainder:
                current[field].append(remainder)
            continue

        if field is None:
            continue

        if field == "content":
            current["content"].append(line)
        else:
            item = _strip_item(line)
            current[field].append(item if item is not None else line)

    return sections


def parse_narrative_breakdown(
    text: str,
    story_id: str,
    title: str,
    summary: str = "",
    moments_per_arc: int = ConfigDefaults.MOMENTS_PER_ARC,
    link_sequential: bool = True,
) -> Dict[str, Any]:
    """
    Parse a narrative breakdown into a raw story document.

    Paragraphs become moments of a single chapter, grouped into arcs of
    ``moments_per_arc`` consecutive paragraphs.

    Args:
        text: The markdown breakdown
        story_id: Id of the resulting story
        title: Story title
        summary: Story summary
        moments_per_arc: Paragraphs per arc (must be positive)
        link_sequential: Add a "continue" hook from each moment to the next

    Returns:
        Raw story document accepted by ``LoreCatalog``
    """
    if moments_per_arc < 1:
        raise ValueError("moments_per_arc must be positive")

    chapter_id = f"{story_id}-c1"
    moments: List[Dict[str, Any]] = []

    for section in _parse_sections(text):
        content = " ".join(section["content"]).strip()
        if not content:
            logger.warning(f"Skipping paragraph {section['number']} '{section['title']}': no content")
            continue
        moments.append(
            {
                "id": f"{story_id}-m{section['number']}",
                "title": section["title"],
                "content": content,
                "timeline": section["timeline"],
                "themes": section["themes"],
                "lore": section["lore"],
                "subtext": section["subtext"],
            }
        )

    if link_sequential:
        for current, following in zip(moments, moments[1:]):
            current["branching_hooks"] = [
                {
                    "hook_id": f"{current['id']}-continue",
                    "condition": "continue",
                    "target_moment_id": following["id"],
                    "weight": ConfigDefaults.SEQUENTIAL_HOOK_WEIGHT,
                }
            ]

    arcs = []
    for index in range(0, len(moments), moments_per_arc):
        group = moments[index:index + moments_per_arc]
        arc_number = index // moments_per_arc + 1
        arcs.append(
            {
                "id": f"{chapter_id}-a{arc_number}",
                "label": f"{group[0]['title']} - {group[-1]['title']}",
                "moments": group,
            }
        )

    logger.info(f"Parsed breakdown '{title}': {len(moments)} moments in {len(arcs)} arcs")

    return {
        "id": story_id,
        "title": title,
        "summary": summary,
        "chapters": [
            {
                "id": chapter_id,
                "name": title,
                "synopsis": summary,
                "arcs": arcs,
            }
        ],
    }
