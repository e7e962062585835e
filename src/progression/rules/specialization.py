from __future__ import annotations

from progression.components.ability_definition import AbilityDefinition


def can_select(definition: AbilityDefinition, current_specialization_id: str | None) -> bool:
    """Whether ``definition`` may be learned or upgraded as the player's class.

    Only the active specialization itself may advance while one is set;
    switching classes requires a full reset.
    """

    if not definition.is_specialization:
        return False
    if current_specialization_id is None:
        return True
    return definition.id == current_specialization_id


def conflicts_with(definition: AbilityDefinition, current_specialization_id: str | None) -> bool:
    return definition.is_specialization and not can_select(definition, current_specialization_id)
