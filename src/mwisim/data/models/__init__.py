from .buff import Buff, BuffType
from .trigger import Trigger, TriggerComparator, TriggerCondition, TriggerDependency
from .item import CombatStats, ConsumableDetail, EquipmentDetail, Item
from .monster import CombatDetails, DropTableEntry, Monster, MonsterAbility
from .ability import Ability, AbilityEffect, AbilityEffectType, AbilityTarget
from .zone import CombatZone, CombatZoneInfo, DungeonInfo, FightInfo, MonsterSpawn, RandomSpawnInfo
from .house import Achievement, AchievementTier, HouseRoom
from .config import (
    AbilitySlot,
    ConsumableSlot,
    EquipmentSlot,
    PlayerConfig,
    RngMode,
    SimulationConfig,
    SimulationSettings,
)
from .results import SimulationResults
from .game_data import GameData

__all__ = [
    "Ability",
    "AbilityEffect",
    "AbilityEffectType",
    "AbilitySlot",
    "AbilityTarget",
    "Achievement",
    "AchievementTier",
    "Buff",
    "BuffType",
    "CombatDetails",
    "CombatStats",
    "CombatZone",
    "CombatZoneInfo",
    "ConsumableDetail",
    "ConsumableSlot",
    "DropTableEntry",
    "DungeonInfo",
    "EquipmentDetail",
    "EquipmentSlot",
    "FightInfo",
    "GameData",
    "HouseRoom",
    "Item",
    "Monster",
    "MonsterAbility",
    "MonsterSpawn",
    "PlayerConfig",
    "RandomSpawnInfo",
    "RngMode",
    "SimulationConfig",
    "SimulationResults",
    "SimulationSettings",
    "Trigger",
    "TriggerComparator",
    "TriggerCondition",
    "TriggerDependency",
]
