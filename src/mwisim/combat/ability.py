"""Ability and consumable slots.

Every food, drink and ability slot runs a small state machine:

    IDLE --(all triggers hold)--> TRIGGERED --(end of tick)--> ON_COOLDOWN --> IDLE

Slots are evaluated in declaration order (food, drinks, abilities) and several
may fire on the same tick. Random draws happen in that same order.
"""

import random
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, List, Optional

from mwisim.core.constants import seconds_to_ticks
from mwisim.data.models.ability import Ability, AbilityEffect, AbilityEffectType, AbilityTarget
from mwisim.data.models.config import PlayerConfig
from mwisim.data.models.game_data import GameData
from mwisim.data.models.item import Item
from mwisim.data.models.monster import Monster
from mwisim.data.models.trigger import Trigger
from mwisim.combat.attack import AttackOutcome, resolve_attack
from mwisim.combat.combat_unit import CombatUnit
from mwisim.combat.sim_result import SimResult
from mwisim.combat.triggers import TriggerContext, triggers_hold


class SlotState(Enum):
    """State of an action slot."""

    IDLE = auto()  # Ready to fire
    TRIGGERED = auto()  # Fired this tick
    ON_COOLDOWN = auto()  # Waiting for its cooldown


class SlotKind(Enum):
    FOOD = auto()
    DRINK = auto()
    ABILITY = auto()


@dataclass
class ActionSlot:
    """
    A food, drink or ability slot of a unit.

    Attributes:
        kind: What the slot holds.
        hrid: Item or ability hrid.
        triggers: Conditions that must all hold to fire; empty fires whenever idle.
        cooldown_seconds: Unhasted cooldown.
        level: Ability level (1 for consumables).
        item: Consumable definition, for food and drink slots.
        ability: Ability definition, for ability slots.
    """

    kind: SlotKind
    hrid: str
    triggers: List[Trigger] = field(default_factory=list)
    cooldown_seconds: float = 0.0
    level: int = 1
    item: Optional[Item] = None
    ability: Optional[Ability] = None

    state: SlotState = SlotState.IDLE
    cooldown_remaining: int = 0

    @property
    def is_ready(self) -> bool:
        return self.state is SlotState.IDLE

    def fire(self, cooldown_ticks: int) -> None:
        self.state = SlotState.TRIGGERED
        self.cooldown_remaining = cooldown_ticks

    def end_tick(self) -> None:
        """Advance the cooldown by one tick."""
        if self.state is SlotState.IDLE:
            return
        self.state = SlotState.ON_COOLDOWN
        self.cooldown_remaining -= 1
        if self.cooldown_remaining <= 0:
            self.cooldown_remaining = 0
            self.state = SlotState.IDLE

    def hasted_cooldown(self, unit: CombatUnit, tick: int) -> float:
        """Cooldown in seconds after haste."""
        stats = unit.stats(tick)
        if self.kind is SlotKind.FOOD:
            return self.cooldown_seconds / (1 + stats.get("foodHaste"))
        if self.kind is SlotKind.DRINK:
            return self.cooldown_seconds / (1 + stats.get("drinkConcentration"))
        # Ability haste is rated in points
        return self.cooldown_seconds * 100 / (100 + stats.get("abilityHaste"))


# =============================================================================
# SLOT CONSTRUCTION
# =============================================================================

def _consumable_slot(kind: SlotKind, item: Item, triggers: Optional[List[Trigger]]) -> ActionSlot:
    detail = item.consumable_detail
    return ActionSlot(
        kind=kind,
        hrid=item.hrid,
        triggers=list(triggers) if triggers else list(detail.default_combat_triggers),
        cooldown_seconds=detail.cooldown_duration,
        item=item,
    )


def _ability_slot(ability: Ability, level: int, triggers: Optional[List[Trigger]]) -> ActionSlot:
    return ActionSlot(
        kind=SlotKind.ABILITY,
        hrid=ability.hrid,
        triggers=list(triggers) if triggers else list(ability.default_combat_triggers),
        cooldown_seconds=ability.cooldown_duration,
        level=level,
        ability=ability,
    )


def build_player_slots(player: PlayerConfig, game_data: GameData) -> List[ActionSlot]:
    """Slots of a player in evaluation order: food, drinks, abilities."""
    slots = []
    for kind, configured in ((SlotKind.FOOD, player.food), (SlotKind.DRINK, player.drinks)):
        for slot in configured:
            if slot is not None:
                slots.append(_consumable_slot(kind, game_data.get_item(slot.item_hrid), slot.triggers))
    for slot in player.abilities:
        if slot is not None:
            slots.append(_ability_slot(game_data.get_ability(slot.ability_hrid), slot.level, slot.triggers))
    return slots


def build_monster_slots(monster: Monster, game_data: GameData) -> List[ActionSlot]:
    return [
        _ability_slot(game_data.get_ability(entry.ability_hrid), entry.level, None)
        for entry in monster.abilities
    ]


# =============================================================================
# EXECUTION
# =============================================================================

# Applies a resolved attack: (attacker, defender, ability hrid, outcome)
ApplyOutcome = Callable[[CombatUnit, CombatUnit, str, AttackOutcome], None]


class ActionExecutor:
    """
    Fires slots and applies their effects.

    Usage:
        executor = ActionExecutor(rng, result, apply_outcome)
        fired = executor.try_fire(slot, unit, ctx)
    """

    def __init__(self, rng: random.Random, result: SimResult, apply_outcome: ApplyOutcome):
        self.rng = rng
        self.result = result
        self.apply_outcome = apply_outcome

    def try_fire(self, slot: ActionSlot, unit: CombatUnit, ctx: TriggerContext) -> bool:
        """
        Fire ``slot`` if it is idle and its triggers hold.

        Abilities the unit cannot pay for do not fire and flag the unit as
        out of mana.

        Returns:
            True if the slot fired.
        """
        if not slot.is_ready or not unit.is_alive:
            return False
        if not triggers_hold(slot.triggers, ctx):
            return False

        if slot.kind is SlotKind.ABILITY:
            if not self._cast(slot, unit, ctx):
                return False
        else:
            self._consume(slot, unit, ctx.tick)

        slot.fire(seconds_to_ticks(slot.hasted_cooldown(unit, ctx.tick)))
        return True

    # -------------------------------------------------------------------------
    # Consumables
    # -------------------------------------------------------------------------

    def _consume(self, slot: ActionSlot, unit: CombatUnit, tick: int) -> None:
        detail = slot.item.consumable_detail
        self.result.record_consumable(unit.hrid, slot.hrid)

        if detail.recovery_duration > 0:
            unit.status_effects.add_recovery(
                slot.hrid,
                detail.hitpoint_restore,
                detail.manapoint_restore,
                seconds_to_ticks(detail.recovery_duration),
            )
        else:
            self.result.record_hitpoints(unit.hrid, slot.hrid, unit.heal(detail.hitpoint_restore))
            self.result.record_manapoints(unit.hrid, slot.hrid, unit.restore_mana(detail.manapoint_restore))

        for buff in detail.buffs:
            unit.status_effects.apply_buff(buff, level=1, source=slot.hrid, tick=tick)
        if detail.buffs:
            unit.mark_dirty()

    # -------------------------------------------------------------------------
    # Abilities
    # -------------------------------------------------------------------------

    def _cast(self, slot: ActionSlot, unit: CombatUnit, ctx: TriggerContext) -> bool:
        ability = slot.ability
        if not unit.spend_mana(ability.mana_cost):
            if unit.is_player:
                self.result.player_ran_out_of_mana[unit.hrid] = True
            return False
        if unit.is_player:
            self.result.record_mana(unit.hrid, ability.hrid, ability.mana_cost)

        for effect in ability.ability_effects:
            if effect.effect_type is AbilityEffectType.DAMAGE:
                self._damage(effect, slot, unit, ctx)
            elif effect.effect_type is AbilityEffectType.HEAL:
                self._heal(effect, slot, unit, ctx)
            else:
                self._buff(effect, slot, unit, ctx)
        return True

    def _enemy_targets(self, effect: AbilityEffect, ctx: TriggerContext) -> List[CombatUnit]:
        if effect.target_type is AbilityTarget.ALL_ENEMIES:
            return [enemy for enemy in ctx.enemies if enemy.is_alive]
        if ctx.target is not None and ctx.target.is_alive:
            return [ctx.target]
        return []

    def _ally_targets(self, effect: AbilityEffect, unit: CombatUnit, ctx: TriggerContext) -> List[CombatUnit]:
        alive = [ally for ally in ctx.allies if ally.is_alive]
        if effect.target_type is AbilityTarget.ALL_ALLIES:
            return alive
        if effect.target_type is AbilityTarget.LOWEST_HP_ALLY and alive:
            return [min(alive, key=lambda ally: ally.current_hp / ally.max_hp if ally.max_hp else 0.0)]
        return [unit]

    def _damage(self, effect: AbilityEffect, slot: ActionSlot, unit: CombatUnit, ctx: TriggerContext) -> None:
        stats = unit.stats(ctx.tick)
        style = effect.combat_style_hrid or stats.combat_style
        base = effect.base_amount(stats.max_damage.get(style, 0.0), slot.level)
        for target in self._enemy_targets(effect, ctx):
            outcome = resolve_attack(
                stats,
                target.stats(ctx.tick),
                style,
                self.rng,
                base_damage=base,
                damage_type=effect.damage_type or stats.damage_type,
                is_ability=True,
            )
            self.apply_outcome(unit, target, slot.hrid, outcome)

    def _heal(self, effect: AbilityEffect, slot: ActionSlot, unit: CombatUnit, ctx: TriggerContext) -> None:
        stats = unit.stats(ctx.tick)
        style = effect.combat_style_hrid or stats.combat_style
        amount = effect.base_amount(stats.max_damage.get(style, 0.0), slot.level)
        amount *= 1 + stats.get("healingAmplify")
        for target in self._ally_targets(effect, unit, ctx):
            self.result.record_hitpoints(target.hrid, slot.hrid, target.heal(amount))

    def _buff(self, effect: AbilityEffect, slot: ActionSlot, unit: CombatUnit, ctx: TriggerContext) -> None:
        if effect.target_type in (AbilityTarget.ENEMY, AbilityTarget.ALL_ENEMIES):
            targets = self._enemy_targets(effect, ctx)
        else:
            targets = self._ally_targets(effect, unit, ctx)
        for target in targets:
            for buff in effect.buffs:
                target.status_effects.apply_buff(buff, level=slot.level, source=slot.hrid, tick=ctx.tick)
            target.mark_dirty()
