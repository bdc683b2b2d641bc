"""Combat Engine.

The tick-driven simulation loop. One engine instance runs one configuration
on the calling thread and returns the raw counters of the run.

Each tick, in order:

1. Revive players whose respawn timer ran out
2. Spawn the pending encounter once its respawn delay is over
3. Expire timed buffs
4. Regenerate HP/MP (every 10 s) and apply recovery-over-time effects
5. Evaluate food, drink and ability slots (only while an encounter is active)
6. Auto attacks, players first, then monsters
7. Check pool invariants and count down every timer

Deaths are handled as soon as they happen: a monster death resolves its loot
and experience, a cleared encounter schedules the next one, and a party wipe
ends the encounter without loot.
"""

import logging
import math
import random
from enum import Enum, auto
from typing import Callable, Dict, List, Optional, Protocol

from mwisim.core.buffs import party_level_gap_debuffs
from mwisim.core.constants import (
    ENEMY_RESPAWN_SECONDS,
    PLAYER_RESPAWN_SECONDS,
    PRIMARY_SKILL_BY_STYLE,
    PRIMARY_TRAINING_SHARE,
    PROGRESS_STEPS,
    REGEN_INTERVAL_SECONDS,
    SECONDARY_TRAINING_SHARE,
    SECONDS_PER_HOUR,
    SKILL_EXP_MAP,
    TICK_RATE,
    seconds_to_ticks,
)
from mwisim.core.stat_calculator import StatCalculator, UnitStats, player_combat_level
from mwisim.data.models.buff import BuffType
from mwisim.data.models.config import SimulationConfig
from mwisim.data.models.game_data import GameData
from mwisim.data.models.monster import Monster
from mwisim.data.models.zone import MonsterSpawn
from mwisim.errors import SimulationCancelled, SimulationFault
from mwisim.combat.ability import ActionExecutor, build_monster_slots, build_player_slots
from mwisim.combat.attack import AUTO_ATTACK, AttackOutcome, resolve_attack
from mwisim.combat.combat_unit import CombatUnit, UnitSide
from mwisim.combat.loot import LootEngine
from mwisim.combat.sim_result import SimResult
from mwisim.combat.spawning import DungeonSpawnPolicy, SpawnPolicy, spawn_policy_for
from mwisim.combat.triggers import TriggerContext


logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]

REGEN_SOURCE = "regen"
THORNS_SOURCE = "thorns"
LIFE_STEAL_SOURCE = "lifeSteal"
MANA_LEECH_SOURCE = "manaLeech"


class CancelToken(Protocol):
    """Anything with ``is_set()``, e.g. :class:`threading.Event`."""

    def is_set(self) -> bool:
        ...


class RunState(Enum):
    """Run state. Only TIME_EXHAUSTED is terminal."""

    RUNNING = auto()
    PARTY_WIPED = auto()
    DUNGEON_FAILED = auto()
    DUNGEON_COMPLETE = auto()
    TIME_EXHAUSTED = auto()


class CombatEngine:
    """
    Main combat simulation engine.

    Usage:
        engine = CombatEngine(config, game_data)
        sim_result = engine.run(progress_callback=print)

    Or step-by-step:
        while engine.tick < engine.total_ticks:
            engine.step()
            engine.tick += 1
    """

    def __init__(
        self,
        config: SimulationConfig,
        game_data: GameData,
        rng: Optional[random.Random] = None,
        spawn_policy: Optional[SpawnPolicy] = None,
    ):
        """
        Initialize the engine for one run.

        Args:
            config: Validated run configuration.
            game_data: Reference data.
            rng: Random source; seeded from ``config.seed`` when omitted.
            spawn_policy: Encounter selection; derived from the zone when omitted.
        """
        self.config = config
        self.game_data = game_data
        self.rng = rng or random.Random(config.seed)
        self.zone = game_data.get_zone(config.zone_hrid)
        self.is_dungeon = self.zone.is_dungeon
        self.spawn_policy = spawn_policy or spawn_policy_for(self.zone)

        self.calculator = StatCalculator(game_data)
        # Loot draws come from their own stream so toggling the realised track
        # never shifts combat rolls
        self.loot = LootEngine(random.Random(self.rng.getrandbits(64)))
        self.result = SimResult(
            zone_hrid=self.zone.hrid,
            is_dungeon=self.is_dungeon,
            difficulty_tier=config.difficulty_tier,
            number_of_players=len(config.players),
        )
        self.executor = ActionExecutor(self.rng, self.result, self._apply_outcome)

        self.state = RunState.RUNNING
        self.tick = 0
        self.total_ticks = config.duration_hours * SECONDS_PER_HOUR * TICK_RATE
        self.regen_ticks = seconds_to_ticks(REGEN_INTERVAL_SECONDS)
        self.enemy_respawn_ticks = seconds_to_ticks(ENEMY_RESPAWN_SECONDS)
        self.player_respawn_ticks = seconds_to_ticks(PLAYER_RESPAWN_SECONDS)

        # Encounter tracking
        self.monsters: List[CombatUnit] = []
        self.spawn_timer = 0  # Ticks until the next encounter spawns
        self.encounter_index = 0
        self.encounter_start_tick = 0
        self.wave = 0

        self._monster_definitions: Dict[str, Monster] = {}
        self._monster_stats: Dict[str, UnitStats] = {}
        self._targets: Dict[str, CombatUnit] = {}

        self.players = self._build_players()

    # =========================================================================
    # SETUP
    # =========================================================================

    def _build_players(self) -> List[CombatUnit]:
        levels = {player.hrid: player_combat_level(player) for player in self.config.players}
        debuffs = party_level_gap_debuffs(levels)

        players = []
        for player in self.config.players:
            unit = CombatUnit(
                id=player.hrid,
                hrid=player.hrid,
                name=player.display_name,
                side=UnitSide.PLAYER,
                base_stats=self.calculator.player_stats(player),
                settings=self.config.settings,
                permanent_buffs=self.calculator.permanent_buffs(player, self.zone),
                debuff_on_level_gap=debuffs[player.hrid],
            )
            unit.slots = build_player_slots(player, self.game_data)
            unit.revive(0)
            players.append(unit)
            self.result.player_names[player.hrid] = player.display_name
            self.result.player_ran_out_of_mana[player.hrid] = False
            logger.debug(
                "Player %s: combat level %.1f, level gap debuff %.2f, %d slots",
                player.hrid, levels[player.hrid], unit.debuff_on_level_gap, len(unit.slots),
            )
        return players

    def _monster_definition(self, hrid: str) -> Monster:
        if hrid not in self._monster_definitions:
            monster = self.game_data.get_monster(hrid)
            self._monster_definitions[hrid] = monster
            self._monster_stats[hrid] = self.calculator.monster_stats(monster)
        return self._monster_definitions[hrid]

    def _make_monster(self, spawn: MonsterSpawn, index: int) -> CombatUnit:
        definition = self._monster_definition(spawn.combat_monster_hrid)
        stats = self._monster_stats[definition.hrid]
        unit = CombatUnit(
            id=f"{definition.hrid}#{index}",
            hrid=definition.hrid,
            name=definition.name or definition.hrid,
            side=UnitSide.MONSTER,
            base_stats=stats,
            spawn_index=index,
        )
        unit.slots = build_monster_slots(definition, self.game_data)
        unit.attack_cooldown = seconds_to_ticks(stats.attack_interval)
        return unit

    # =========================================================================
    # MAIN LOOP
    # =========================================================================

    def run(
        self,
        progress_callback: Optional[ProgressCallback] = None,
        cancel_event: Optional[CancelToken] = None,
    ) -> SimResult:
        """
        Run until the time budget is exhausted.

        Args:
            progress_callback: Called with a fraction in [0, 1] every 1% of ticks.
            cancel_event: Checked every tick; when set the run stops.

        Returns:
            Raw counters of the run.

        Raises:
            SimulationCancelled: If ``cancel_event`` was set.
            SimulationFault: If an invariant broke during the run.
        """
        logger.info(
            "Simulating %s for %d h with %d player(s)",
            self.zone.hrid, self.config.duration_hours, len(self.players),
        )
        report_every = max(1, self.total_ticks // PROGRESS_STEPS)
        last_reported = 0.0

        for tick in range(self.total_ticks):
            if cancel_event is not None and cancel_event.is_set():
                logger.info("Simulation of %s cancelled at tick %d", self.zone.hrid, tick)
                raise SimulationCancelled(tick)
            self.tick = tick
            self.step()
            if progress_callback is not None and (tick + 1) % report_every == 0:
                last_reported = min(1.0, (tick + 1) / self.total_ticks)
                progress_callback(last_reported)

        self.state = RunState.TIME_EXHAUSTED
        self.result.simulated_ticks = self.total_ticks
        if progress_callback is not None and last_reported < 1.0:
            progress_callback(1.0)

        logger.info(
            "Finished %s: %d encounters, %d player deaths",
            self.zone.hrid,
            self.result.encounters,
            sum(self.result.deaths[player.hrid] for player in self.players),
        )
        return self.result

    def step(self) -> None:
        """Advance the simulation by one tick."""
        tick = self.tick
        self._revive_players()

        if not self.monsters and self.spawn_timer <= 0 and self._players_alive():
            self._spawn_encounter()

        for unit in self._all_units():
            if unit.status_effects.expire(tick):
                unit.mark_dirty()

        self._regenerate()

        if self._encounter_active():
            self._targets.clear()
            self._run_slots(self.players, self.monsters)
            self._run_slots(self.monsters, self.players)
            self._auto_attacks(self.players)
            self._auto_attacks(self.monsters)

        self._check_invariants()
        self._end_tick()

    # =========================================================================
    # ENCOUNTERS
    # =========================================================================

    def _spawn_encounter(self) -> None:
        if self.is_dungeon:
            self.wave += 1
            if self.wave == 1:
                self._use_dungeon_keys()
            spawns = self.spawn_policy.next_encounter(self.wave, self.rng)
            self.result.max_wave_reached = max(self.result.max_wave_reached, self.wave)
        else:
            spawns = self.spawn_policy.next_encounter(self.encounter_index, self.rng)
            self.encounter_index += 1

        if not spawns:
            raise SimulationFault(f"Zone {self.zone.hrid} produced an empty encounter", tick=self.tick)

        self.monsters = [self._make_monster(spawn, index) for index, spawn in enumerate(spawns)]
        for monster in self.monsters:
            monster.revive(self.tick)
        self.encounter_start_tick = self.tick
        self.state = RunState.RUNNING
        logger.debug(
            "Tick %d: spawned %s%s",
            self.tick,
            ", ".join(monster.hrid for monster in self.monsters),
            f" (wave {self.wave})" if self.is_dungeon else "",
        )

    def _encounter_active(self) -> bool:
        return self._players_alive() and any(monster.is_alive for monster in self.monsters)

    def _players_alive(self) -> bool:
        return any(player.is_alive for player in self.players)

    def _all_units(self) -> List[CombatUnit]:
        return self.players + self.monsters

    def _encounter_cleared(self) -> None:
        self.result.encounters += 1
        self.monsters = []
        self.spawn_timer = self.enemy_respawn_ticks

        if not self.is_dungeon:
            return
        if self.wave >= self._max_waves():
            self.result.dungeons_completed += 1
            self.state = RunState.DUNGEON_COMPLETE
            self._grant_dungeon_rewards()
            logger.debug("Tick %d: dungeon completed", self.tick)
            self.wave = 0

    def _max_waves(self) -> int:
        if isinstance(self.spawn_policy, DungeonSpawnPolicy):
            return self.spawn_policy.max_waves
        return 1

    def _party_wiped(self) -> None:
        self.monsters = []
        if self.is_dungeon:
            self.result.dungeons_failed += 1
            self.state = RunState.DUNGEON_FAILED
            self.wave = 0
        else:
            self.state = RunState.PARTY_WIPED
        for player in self.players:
            player.respawn_timer = self.player_respawn_ticks
        self.spawn_timer = self.player_respawn_ticks
        logger.debug("Tick %d: party wiped (%s)", self.tick, self.state.name)

    def _revive_players(self) -> None:
        for player in self.players:
            if not player.is_alive and player.respawn_timer <= 0:
                player.revive(self.tick)

    # =========================================================================
    # REGENERATION
    # =========================================================================

    def _regenerate(self) -> None:
        tick = self.tick
        regen_tick = tick > 0 and tick % self.regen_ticks == 0
        for unit in self._all_units():
            if not unit.is_alive:
                continue
            for source, hitpoints, manapoints in unit.status_effects.tick_recoveries():
                self.result.record_hitpoints(unit.hrid, source, unit.heal(hitpoints))
                self.result.record_manapoints(unit.hrid, source, unit.restore_mana(manapoints))
            if regen_tick:
                stats = unit.stats(tick)
                hp = unit.heal(stats.max_hitpoints * stats.get("hpRegenPer10"))
                mp = unit.restore_mana(stats.max_manapoints * stats.get("mpRegenPer10"))
                if unit.is_player:
                    self.result.record_hitpoints(unit.hrid, REGEN_SOURCE, hp)
                    self.result.record_manapoints(unit.hrid, REGEN_SOURCE, mp)

    # =========================================================================
    # ACTIONS
    # =========================================================================

    def _choose_target(self, unit: CombatUnit, enemies: List[CombatUnit]) -> Optional[CombatUnit]:
        """Players pick uniformly; monsters pick weighted by player threat."""
        current = self._targets.get(unit.id)
        if current is not None and current.is_alive:
            return current
        alive = [enemy for enemy in enemies if enemy.is_alive]
        if not alive:
            return None
        if unit.is_player:
            target = self.rng.choice(alive)
        else:
            weights = [enemy.stats(self.tick).get("threat") for enemy in alive]
            if sum(weights) > 0:
                target = self.rng.choices(alive, weights=weights)[0]
            else:
                target = self.rng.choice(alive)
        self._targets[unit.id] = target
        return target

    def _run_slots(self, units: List[CombatUnit], enemies: List[CombatUnit]) -> None:
        for unit in units:
            if not unit.slots or not unit.is_alive:
                continue
            for slot in unit.slots:
                if not self._encounter_active():
                    return
                ctx = TriggerContext(
                    source=unit,
                    target=self._choose_target(unit, enemies),
                    allies=units,
                    enemies=enemies,
                    tick=self.tick,
                    encounter_start_tick=self.encounter_start_tick,
                )
                self.executor.try_fire(slot, unit, ctx)

    def _auto_attacks(self, units: List[CombatUnit]) -> None:
        for unit in list(units):
            if not self._encounter_active():
                return
            if not unit.is_alive or unit.attack_cooldown > 0:
                continue
            enemies = self.monsters if unit.is_player else self.players
            target = self._choose_target(unit, enemies)
            if target is None:
                continue
            stats = unit.stats(self.tick)
            outcome = resolve_attack(stats, target.stats(self.tick), stats.combat_style, self.rng)
            unit.attack_cooldown = seconds_to_ticks(stats.attack_interval)
            self._apply_outcome(unit, target, AUTO_ATTACK, outcome)

    def _apply_outcome(self, attacker: CombatUnit, defender: CombatUnit, ability: str, outcome: AttackOutcome) -> None:
        """Apply a resolved attack and its side effects, then handle deaths."""
        self.result.record_attack(attacker.hrid, defender.hrid, ability, outcome.hit, outcome.damage)
        if not outcome.hit:
            return

        lost = defender.take_damage(outcome.damage)
        side_effects = outcome.side_effects

        reflected = 0.0
        if side_effects.reflected > 0 and attacker.is_alive:
            reflected = attacker.take_damage(side_effects.reflected)
            self.result.record_attack(defender.hrid, attacker.hrid, THORNS_SOURCE, True, reflected)
        if side_effects.life_steal > 0:
            healed = attacker.heal(side_effects.life_steal)
            self.result.record_hitpoints(attacker.hrid, LIFE_STEAL_SOURCE, healed)
        if side_effects.mana_leech > 0:
            restored = attacker.restore_mana(side_effects.mana_leech)
            self.result.record_manapoints(attacker.hrid, MANA_LEECH_SOURCE, restored)

        if lost > 0 and not defender.is_alive:
            self._on_death(defender)
        if reflected > 0 and not attacker.is_alive:
            self._on_death(attacker)

    # =========================================================================
    # DEATHS
    # =========================================================================

    def _on_death(self, unit: CombatUnit) -> None:
        if not unit.is_player and all(monster is not unit for monster in self.monsters):
            # Encounter already ended by a wipe on the same hit
            unit.die()
            return
        unit.die()
        self.result.record_death(unit.hrid)

        if unit.is_player:
            unit.respawn_timer = self.player_respawn_ticks
            if not self._players_alive():
                self._party_wiped()
            return

        self._on_monster_killed(unit)
        if self.monsters and not any(monster.is_alive for monster in self.monsters):
            self._encounter_cleared()

    def _on_monster_killed(self, monster: CombatUnit) -> None:
        definition = self._monster_definitions[monster.hrid]
        party_size = len(self.players)
        for player in self.players:
            self._grant_experience(player, definition)
            self._grant_loot(player, definition, party_size)

    def _grant_experience(self, player: CombatUnit, monster: Monster) -> None:
        """Split kill experience 30/70 between the primary skill and the rest."""
        tick = self.tick
        stats = player.stats(tick)
        level_gap = player.buff_total(BuffType.LEVEL_GAP, tick).flat_boost
        experience = monster.experience * (1 + stats.get("combatExperience")) * (1 + level_gap)
        if experience <= 0:
            return

        shares = {PRIMARY_SKILL_BY_STYLE[stats.combat_style]: experience * PRIMARY_TRAINING_SHARE}
        secondary = experience * SECONDARY_TRAINING_SHARE
        if stats.focus_skill is not None:
            targets = [stats.focus_skill]
        else:
            targets = list(SKILL_EXP_MAP[stats.combat_style])
        for skill in targets:
            shares[skill] = shares.get(skill, 0.0) + secondary / len(targets)

        for skill, amount in shares.items():
            amount *= 1 + stats.get(f"{skill.key}Experience")
            self.result.record_experience(player.hrid, skill.key, amount)

    def _grant_loot(self, player: CombatUnit, monster: Monster, party_size: int) -> None:
        tick = self.tick
        stats = player.stats(tick)
        loot = self.loot.resolve_drops(
            monster,
            rare_find_bonus=stats.get("combatRareFind"),
            drop_quantity_bonus=stats.get("combatDropQuantity"),
            rng_mode=self.config.rng_mode,
            drop_rate_bonus=stats.get("combatDropRate"),
            level_gap=player.buff_total(BuffType.LEVEL_GAP, tick).flat_boost,
            difficulty_tier=self.config.difficulty_tier,
        )
        for drop in loot.stochastic:
            self.result.record_drop(drop.item_hrid, drop.count / party_size, expected=False, is_rare=drop.is_rare)
        for drop in loot.expected:
            self.result.record_drop(drop.item_hrid, drop.count / party_size, expected=True, is_rare=drop.is_rare)

    def _grant_dungeon_rewards(self) -> None:
        """Each member opens the completion reward table once."""
        dungeon_info = self.zone.combat_zone_info.dungeon_info
        if dungeon_info is None or not dungeon_info.reward_drop_table:
            return
        party_size = len(self.players)
        for _ in self.players:
            loot = self.loot.resolve_rewards(
                dungeon_info.reward_drop_table,
                rng_mode=self.config.rng_mode,
                difficulty_tier=self.config.difficulty_tier,
            )
            for drop in loot.stochastic:
                self.result.record_drop(drop.item_hrid, drop.count / party_size, expected=False)
            for drop in loot.expected:
                self.result.record_drop(drop.item_hrid, drop.count / party_size, expected=True)

    def _use_dungeon_keys(self) -> None:
        dungeon_info = self.zone.combat_zone_info.dungeon_info
        if dungeon_info is None or dungeon_info.key_item_hrid is None:
            return
        for player in self.players:
            self.result.record_consumable(player.hrid, dungeon_info.key_item_hrid)

    # =========================================================================
    # TICK BOOKKEEPING
    # =========================================================================

    def _check_invariants(self) -> None:
        for unit in self._all_units():
            for name, value in (("HP", unit.current_hp), ("MP", unit.current_mp)):
                if not math.isfinite(value) or value < 0:
                    raise SimulationFault(f"{unit.id} has invalid {name} {value}", tick=self.tick)

    def _end_tick(self) -> None:
        if self.spawn_timer > 0:
            self.spawn_timer -= 1
        for unit in self._all_units():
            if unit.attack_cooldown > 0:
                unit.attack_cooldown -= 1
            if not unit.is_alive and unit.respawn_timer > 0:
                unit.respawn_timer -= 1
            for slot in unit.slots:
                slot.end_tick()
