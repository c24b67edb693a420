"""Equipment Registry: item catalogue, equipped items and inventories."""

# Standard library imports
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

# Local imports
from sceneweaver_lib.core.constants import SampleData
from sceneweaver_lib.core.logger import get_logger
from sceneweaver_lib.core.models import EquipmentItem
from sceneweaver_lib.universe.lore.sources import read_json_document, read_packaged_json

logger = get_logger(__name__)


class EquipmentRegistry:
    """Item catalogue plus per-member equipped lists and inventory counts."""

    def __init__(
        self,
        items: Iterable[EquipmentItem],
        equipped: Optional[Dict[str, List[str]]] = None,
        inventory: Optional[Dict[str, Dict[str, int]]] = None,
    ):
        self._items: Dict[str, EquipmentItem] = {item.item_id: item for item in items}
        self._equipped: Dict[str, List[str]] = {k: list(v) for k, v in (equipped or {}).items()}
        self._inventory: Dict[str, Dict[str, int]] = {k: dict(v) for k, v in (inventory or {}).items()}

    @classmethod
    def from_json(cls, path: Optional[Union[str, Path]] = None) -> "EquipmentRegistry":
        """Build a registry from ``{"items", "equipped", "inventory"}`` JSON."""
        document = read_json_document(path) if path else read_packaged_json(SampleData.EQUIPMENT)
        items = [EquipmentItem.model_validate(raw) for raw in document.get("items", [])]
        logger.info(f"Loaded {len(items)} equipment items")
        return cls(items, document.get("equipped"), document.get("inventory"))

    def get_equipment_item(self, item_id: str) -> Optional[EquipmentItem]:
        return self._items.get(item_id)

    def get_all_equipment(self) -> List[EquipmentItem]:
        return list(self._items.values())

    def list_for_member(self, member_id: str) -> List[EquipmentItem]:
        """Catalogue items present in a member's inventory."""
        return [
            self._items[item_id]
            for item_id in self._inventory.get(member_id, {})
            if item_id in self._items
        ]

    def get_equipped_for_member(self, member_id: str) -> List[EquipmentItem]:
        return [
            self._items[item_id]
            for item_id in self._equipped.get(member_id, [])
            if item_id in self._items
        ]

    def get_inventory_for_member(self, member_id: str) -> Dict[str, int]:
        return dict(self._inventory.get(member_id, {}))

    def equip_item(self, member_id: str, item_id: str) -> bool:
        if item_id not in self._items:
            return False
        equipped = self._equipped.setdefault(member_id, [])
        if item_id not in equipped:
            equipped.append(item_id)
            logger.debug(f"{member_id} equipped {item_id}")
        return True

    def unequip_item(self, member_id: str, item_id: str) -> bool:
        equipped = self._equipped.get(member_id)
        if not equipped or item_id not in equipped:
            return False
        equipped.remove(item_id)
        logger.debug(f"{member_id} unequipped {item_id}")
        return True

    def add_to_inventory(self, member_id: str, item_id: str, quantity: int = 1) -> bool:
        if item_id not in self._items or quantity <= 0:
            return False
        holdings = self._inventory.setdefault(member_id, {})
        holdings[item_id] = holdings.get(item_id, 0) + quantity
        return True

    def remove_from_inventory(self, member_id: str, item_id: str, quantity: int = 1) -> bool:
        """
        Take items out of a member's inventory.

        Nothing changes when the member holds fewer than ``quantity`` items.
        A slot that reaches zero is removed.

        Returns:
            True if the items were removed
        """
        holdings = self._inventory.get(member_id)
        if holdings is None or quantity <= 0:
            return False
        current = holdings.get(item_id, 0)
        if current < quantity:
            return False
        if current == quantity:
            del holdings[item_id]
        else:
            holdings[item_id] = current - quantity
        return True

    def has_gear_tags(self, item_id: str, tags: Iterable[str]) -> bool:
        item = self._items.get(item_id)
        if item is None:
            return False
        return any(tag in item.gear_tags for tag in tags)
