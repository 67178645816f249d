"""Loadout state shared by the parsers of one log."""

from dataclasses import dataclass, field
from typing import Optional

from mafialog.core.models import NO_EQUIPMENT, EquipmentChange, FamiliarChange

FAMILIAR_SLOT = "familiar_equip"


@dataclass
class ParseContext:
    """
    Equipment stack and familiar equipment, one instance per parse.

    The top of the stack is the loadout currently worn. Pushing saves it as a
    checkpoint that a later pop restores. Every parser that reads or changes
    the loadout holds the same instance.
    """

    equipment_stack: list[EquipmentChange] = field(default_factory=lambda: [NO_EQUIPMENT])
    # Familiar name (lowercase) -> the item it last had equipped
    familiar_equipment: dict[str, str] = field(default_factory=dict)
    current_familiar: FamiliarChange = field(
        default_factory=lambda: FamiliarChange("none", 0)
    )

    @property
    def current_equipment(self) -> EquipmentChange:
        return self.equipment_stack[-1]

    def set_current_equipment(self, change: EquipmentChange) -> None:
        self.equipment_stack[-1] = change

    def equip(self, slot: str, item: str, turn_number: int) -> EquipmentChange:
        """Change one slot of the worn loadout and return the new loadout."""
        change = self.current_equipment.with_slot(slot, item, turn_number)
        self.set_current_equipment(change)
        if slot == FAMILIAR_SLOT and self.current_familiar.familiar_name != "none":
            self.familiar_equipment[self.current_familiar.familiar_name.lower()] = item or "none"
        return change

    def push_checkpoint(self) -> None:
        self.equipment_stack.append(self.current_equipment)

    def pop_checkpoint(self, turn_number: int) -> Optional[EquipmentChange]:
        """
        Restore the last checkpoint.

        Returns:
            The restored loadout, or None if no checkpoint was saved
        """
        if len(self.equipment_stack) < 2:
            return None
        self.equipment_stack.pop()
        restored = self.current_equipment.at_turn(turn_number)
        self.set_current_equipment(restored)
        return restored

    def switch_familiar(self, familiar: FamiliarChange) -> EquipmentChange:
        """
        Make a familiar current, swapping familiar equipment with it.

        The outgoing familiar keeps its item; the incoming one gets back
        whatever it wore last, or nothing.
        """
        outgoing = self.current_familiar.familiar_name.lower()
        if outgoing != "none":
            self.familiar_equipment[outgoing] = self.current_equipment.familiar_equip
        self.current_familiar = familiar
        item = self.familiar_equipment.get(familiar.familiar_name.lower(), "none")
        change = self.current_equipment.with_slot(FAMILIAR_SLOT, item, familiar.turn_number)
        self.set_current_equipment(change)
        return change
