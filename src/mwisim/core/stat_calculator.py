"""Stat Calculator.

Derives a combat unit's base combat stats from skill levels, equipment (with
enhancement bonuses) and combat style, then layers buff totals on top.
"""

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from mwisim.core.buffs import AppliedBuff, BuffTotals, combat_level
from mwisim.core.constants import (
    ATTACK_LEVEL_SPEED_DIVISOR,
    BASE_HP_REGEN,
    BASE_MP_REGEN,
    BASE_THREAT,
    DEFAULT_ATTACK_INTERVAL,
    PRIMARY_SKILL_BY_STYLE,
    RESISTANCE_PER_DEFENSE_LEVEL,
    WEAPON_SLOTS,
    CombatStyle,
    DamageType,
    EquipmentType,
    Skill,
)
from mwisim.data.models.buff import BuffType
from mwisim.data.models.config import PlayerConfig
from mwisim.data.models.game_data import GameData
from mwisim.data.models.monster import Monster
from mwisim.data.models.zone import CombatZone


# Stats that buffs modify directly, by buff channel
BUFFED_VALUES: Dict[BuffType, str] = {
    BuffType.WISDOM: "combatExperience",
    BuffType.COMBAT_DROP_QUANTITY: "combatDropQuantity",
    BuffType.COMBAT_DROP_RATE: "combatDropRate",
    BuffType.COMBAT_RARE_FIND: "combatRareFind",
    BuffType.ATTACK_SPEED: "attackSpeed",
    BuffType.CAST_SPEED: "castSpeed",
    BuffType.CRITICAL_RATE: "criticalRate",
    BuffType.CRITICAL_DAMAGE: "criticalDamage",
    BuffType.ARMOR_PENETRATION: "armorPenetration",
    BuffType.WATER_PENETRATION: "waterPenetration",
    BuffType.NATURE_PENETRATION: "naturePenetration",
    BuffType.FIRE_PENETRATION: "firePenetration",
    BuffType.PHYSICAL_AMPLIFY: "physicalAmplify",
    BuffType.WATER_AMPLIFY: "waterAmplify",
    BuffType.NATURE_AMPLIFY: "natureAmplify",
    BuffType.FIRE_AMPLIFY: "fireAmplify",
    BuffType.HEALING_AMPLIFY: "healingAmplify",
    BuffType.LIFE_STEAL: "lifeSteal",
    BuffType.MANA_LEECH: "manaLeech",
    BuffType.ABILITY_HASTE: "abilityHaste",
    BuffType.ARMOR: "armor",
    BuffType.WATER_RESISTANCE: "waterResistance",
    BuffType.NATURE_RESISTANCE: "natureResistance",
    BuffType.FIRE_RESISTANCE: "fireResistance",
    BuffType.PHYSICAL_THORNS: "physicalThorns",
    BuffType.ELEMENTAL_THORNS: "elementalThorns",
    BuffType.RETALIATION: "retaliation",
    BuffType.THREAT: "threat",
    BuffType.MAX_HITPOINTS: "maxHitpoints",
    BuffType.MAX_MANAPOINTS: "maxManapoints",
    BuffType.HP_REGEN: "hpRegenPer10",
    BuffType.MP_REGEN: "mpRegenPer10",
    BuffType.FOOD_HASTE: "foodHaste",
    BuffType.DRINK_CONCENTRATION: "drinkConcentration",
}

@dataclass
class UnitStats:
    """Combat stats of a unit.

    Accuracy, max damage and evasion are rated per combat style; every other
    stat lives in ``values`` under its camelCase name.
    """

    combat_style: CombatStyle = CombatStyle.SMASH
    damage_type: DamageType = DamageType.PHYSICAL
    base_attack_interval: float = DEFAULT_ATTACK_INTERVAL  # Before attack speed
    accuracy: Dict[CombatStyle, float] = field(default_factory=dict)
    max_damage: Dict[CombatStyle, float] = field(default_factory=dict)
    evasion: Dict[CombatStyle, float] = field(default_factory=dict)
    values: Dict[str, float] = field(default_factory=dict)
    focus_skill: Optional[Skill] = None

    def get(self, stat: str) -> float:
        return self.values.get(stat, 0.0)

    @property
    def attack_interval(self) -> float:
        """Seconds between auto attacks."""
        return self.base_attack_interval / (1 + self.get("attackSpeed"))

    @property
    def max_hitpoints(self) -> float:
        return self.get("maxHitpoints")

    @property
    def max_manapoints(self) -> float:
        return self.get("maxManapoints")

    def resistance(self, damage_type: DamageType) -> float:
        if damage_type is DamageType.PHYSICAL:
            return self.get("armor")
        return self.get(f"{damage_type.key}Resistance")

    def penetration(self, damage_type: DamageType) -> float:
        if damage_type is DamageType.PHYSICAL:
            return self.get("armorPenetration")
        return self.get(f"{damage_type.key}Penetration")

    def amplify(self, damage_type: DamageType) -> float:
        return self.get(f"{damage_type.key}Amplify")

    def thorns(self, damage_type: DamageType) -> float:
        if damage_type is DamageType.PHYSICAL:
            return self.get("physicalThorns")
        return self.get("elementalThorns")


def compute_unit_stats(
    levels: Dict[Skill, int],
    equipment_stats: Dict[str, float],
    combat_style: CombatStyle = CombatStyle.SMASH,
    damage_type: DamageType = DamageType.PHYSICAL,
    weapon_interval: float = DEFAULT_ATTACK_INTERVAL,
) -> UnitStats:
    """
    Base combat stats from skill levels and summed equipment stats.

    Args:
        levels: Level of every combat skill.
        equipment_stats: camelCase stat name -> summed value.
        combat_style: Style of the main weapon.
        damage_type: Damage type of the main weapon.
        weapon_interval: Weapon attack interval in seconds.

    Returns:
        Unbuffed stats.
    """
    def stat(name: str) -> float:
        return equipment_stats.get(name, 0.0)

    attack = levels.get(Skill.ATTACK, 1)
    defense = levels.get(Skill.DEFENSE, 1)

    accuracy = {}
    max_damage = {}
    evasion = {}
    for style in CombatStyle:
        skill_level = levels.get(PRIMARY_SKILL_BY_STYLE[style], 1)
        accuracy[style] = (10 + attack) * (1 + stat(f"{style.key}Accuracy"))
        max_damage[style] = (10 + skill_level) * (1 + stat(f"{style.key}Damage"))
        evasion[style] = (10 + defense) * (1 + stat(f"{style.key}Evasion"))

    values = dict(equipment_stats)
    values["maxHitpoints"] = 10 * (10 + levels.get(Skill.STAMINA, 1)) + stat("maxHitpoints")
    values["maxManapoints"] = 10 * (10 + levels.get(Skill.INTELLIGENCE, 1)) + stat("maxManapoints")
    values["armor"] = RESISTANCE_PER_DEFENSE_LEVEL * defense + stat("armor")
    for element in (DamageType.WATER, DamageType.NATURE, DamageType.FIRE):
        key = f"{element.key}Resistance"
        values[key] = RESISTANCE_PER_DEFENSE_LEVEL * defense + stat(key)
    values["hpRegenPer10"] = BASE_HP_REGEN + stat("hpRegenPer10")
    values["mpRegenPer10"] = BASE_MP_REGEN + stat("mpRegenPer10")
    values["threat"] = BASE_THREAT + stat("threat")

    return UnitStats(
        combat_style=combat_style,
        damage_type=damage_type,
        base_attack_interval=weapon_interval / (1 + attack / ATTACK_LEVEL_SPEED_DIVISOR),
        accuracy=accuracy,
        max_damage=max_damage,
        evasion=evasion,
        values=values,
    )


def apply_buffs(base: UnitStats, totals: Dict[BuffType, BuffTotals]) -> UnitStats:
    """Effective stats: each buffed stat becomes ``base * (1 + ratio) + flat``."""
    if not totals:
        return base

    def per_style(ratings: Dict[CombatStyle, float], buff_type: BuffType) -> Dict[CombatStyle, float]:
        buff = totals.get(buff_type)
        if buff is None:
            return dict(ratings)
        return {style: buff.apply(value) for style, value in ratings.items()}

    values = dict(base.values)
    for buff_type, stat in BUFFED_VALUES.items():
        buff = totals.get(buff_type)
        if buff is not None:
            values[stat] = buff.apply(values.get(stat, 0.0))

    return replace(
        base,
        accuracy=per_style(base.accuracy, BuffType.ACCURACY),
        max_damage=per_style(base.max_damage, BuffType.DAMAGE),
        evasion=per_style(base.evasion, BuffType.EVASION),
        values=values,
    )


class StatCalculator:
    """
    Build base stats and permanent buffs for players and monsters.

    Usage:
        calculator = StatCalculator(game_data)
        stats = calculator.player_stats(player_config)
    """

    def __init__(self, game_data: GameData):
        self.game_data = game_data

    def equipment_stats(self, player: PlayerConfig) -> Dict[str, float]:
        """Sum every equipped item's combat stats, enhancement included."""
        totals: Dict[str, float] = {}
        for slot in player.equipment.values():
            detail = self.game_data.get_item(slot.item_hrid).equipment_detail
            if detail is None:
                continue
            multiplier = self.game_data.enhancement_multiplier(slot.enhancement_level)
            names = set(detail.combat_stats.values) | set(detail.combat_enhancement_bonuses)
            for name in names:
                totals[name] = totals.get(name, 0.0) + detail.stat_at(name, multiplier)
        return totals

    def player_stats(self, player: PlayerConfig) -> UnitStats:
        combat_style = CombatStyle.SMASH
        damage_type = DamageType.PHYSICAL
        interval = DEFAULT_ATTACK_INTERVAL
        for slot_type in WEAPON_SLOTS:
            slot = player.equipment.get(slot_type)
            if slot is None:
                continue
            detail = self.game_data.get_item(slot.item_hrid).equipment_detail
            if detail is None:
                continue
            combat_style = detail.combat_stats.combat_style or combat_style
            damage_type = detail.combat_stats.damage_type or damage_type
            interval = detail.combat_stats.interval_seconds
            break

        stats = compute_unit_stats(
            player_levels(player),
            self.equipment_stats(player),
            combat_style,
            damage_type,
            interval,
        )
        charm = player.equipment.get(EquipmentType.CHARM)
        if charm is not None:
            detail = self.game_data.get_item(charm.item_hrid).equipment_detail
            if detail is not None:
                stats.focus_skill = detail.focus_skill_hrid
        return stats

    def monster_stats(self, monster: Monster) -> UnitStats:
        details = monster.combat_details
        combat_stats = details.combat_stats
        levels = {
            Skill.STAMINA: details.stamina_level,
            Skill.INTELLIGENCE: details.intelligence_level,
            Skill.ATTACK: details.attack_level,
            Skill.MELEE: details.melee_level,
            Skill.DEFENSE: details.defense_level,
            Skill.RANGED: details.ranged_level,
            Skill.MAGIC: details.magic_level,
        }
        return compute_unit_stats(
            levels,
            dict(combat_stats.values),
            combat_stats.combat_style or CombatStyle.SMASH,
            combat_stats.damage_type or DamageType.PHYSICAL,
            combat_stats.interval_seconds,
        )

    def permanent_buffs(self, player: PlayerConfig, zone: Optional[CombatZone] = None) -> List[AppliedBuff]:
        """Buffs active for the whole run: zone, achievements, house rooms, equipment."""
        applied: List[AppliedBuff] = []
        if zone is not None:
            applied.extend(AppliedBuff(buff, source=zone.hrid) for buff in zone.buffs)

        completed = set(player.achievements)
        tiers: Dict[str, List[str]] = {}
        for achievement in self.game_data.achievement_detail_map.values():
            tiers.setdefault(achievement.tier_hrid, []).append(achievement.hrid)
        for tier_hrid, members in tiers.items():
            tier = self.game_data.achievement_tier_detail_map.get(tier_hrid)
            if tier is not None and completed.issuperset(members):
                applied.extend(AppliedBuff(buff, source=tier_hrid) for buff in tier.buffs)

        for room_hrid, level in player.house_rooms.items():
            room = self.game_data.house_room_detail_map.get(room_hrid)
            if room is None or level <= 0:
                continue
            applied.extend(AppliedBuff(buff, level=level, source=room_hrid) for buff in room.combat_buffs())

        for slot in player.equipment.values():
            detail = self.game_data.get_item(slot.item_hrid).equipment_detail
            if detail is not None:
                applied.extend(AppliedBuff(buff, source=slot.item_hrid) for buff in detail.buffs)

        return applied


def player_levels(player: PlayerConfig) -> Dict[Skill, int]:
    return {
        Skill.STAMINA: player.stamina_level,
        Skill.INTELLIGENCE: player.intelligence_level,
        Skill.ATTACK: player.attack_level,
        Skill.MELEE: player.melee_level,
        Skill.DEFENSE: player.defense_level,
        Skill.RANGED: player.ranged_level,
        Skill.MAGIC: player.magic_level,
    }


def player_combat_level(player: PlayerConfig) -> float:
    return combat_level(
        player.stamina_level,
        player.intelligence_level,
        player.attack_level,
        player.defense_level,
        player.melee_level,
        player.ranged_level,
        player.magic_level,
    )
