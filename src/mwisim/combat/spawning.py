"""Spawn policies: which monsters make up the next encounter."""

import random
from abc import ABC, abstractmethod
from typing import List

from mwisim.data.models.zone import CombatZone, DungeonInfo, FightInfo, MonsterSpawn, RandomSpawnInfo


def draw_from_table(table: RandomSpawnInfo, rng: random.Random) -> List[MonsterSpawn]:
    """
    Rate-weighted draws until the spawn count or total strength is exhausted.

    The first monster is always kept so an encounter is never empty.
    """
    spawns = [spawn for spawn in table.spawns if spawn.rate > 0]
    if not spawns:
        return []

    weights = [spawn.rate for spawn in spawns]
    encounter: List[MonsterSpawn] = []
    total_strength = 0.0
    while len(encounter) < table.max_spawn_count:
        spawn = rng.choices(spawns, weights=weights)[0]
        if encounter and total_strength + spawn.strength > table.max_total_strength:
            break
        encounter.append(spawn)
        total_strength += spawn.strength
    return encounter


class SpawnPolicy(ABC):
    """Chooses the monsters of each encounter."""

    @abstractmethod
    def next_encounter(self, encounter_index: int, rng: random.Random) -> List[MonsterSpawn]:
        """
        Monsters of the encounter with 0-based ``encounter_index``.

        For dungeons the index is the 1-based wave number.
        """


class RandomSpawnPolicy(SpawnPolicy):
    """Open zones: weighted random encounters with a boss every N battles."""

    def __init__(self, fight_info: FightInfo):
        self.fight_info = fight_info

    def is_boss_encounter(self, encounter_index: int) -> bool:
        battles = self.fight_info.battles_per_boss
        return bool(battles) and bool(self.fight_info.boss_spawns) and (encounter_index + 1) % battles == 0

    def next_encounter(self, encounter_index: int, rng: random.Random) -> List[MonsterSpawn]:
        if self.is_boss_encounter(encounter_index):
            return list(self.fight_info.boss_spawns)
        return draw_from_table(self.fight_info.random_spawn_info, rng)


class DungeonSpawnPolicy(SpawnPolicy):
    """Dungeons: fixed waves where listed, otherwise the latest spawn table."""

    def __init__(self, dungeon_info: DungeonInfo):
        self.dungeon_info = dungeon_info

    @property
    def max_waves(self) -> int:
        return self.dungeon_info.max_waves

    def next_encounter(self, encounter_index: int, rng: random.Random) -> List[MonsterSpawn]:
        wave = encounter_index
        fixed = self.dungeon_info.fixed_spawns_map.get(wave)
        if fixed:
            return list(fixed)
        table = self.dungeon_info.spawn_table_for(wave)
        if table is None:
            return []
        return draw_from_table(table, rng)


def spawn_policy_for(zone: CombatZone) -> SpawnPolicy:
    info = zone.combat_zone_info
    if info.is_dungeon and info.dungeon_info is not None:
        return DungeonSpawnPolicy(info.dungeon_info)
    return RandomSpawnPolicy(info.fight_info)
