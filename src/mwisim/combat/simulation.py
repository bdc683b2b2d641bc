"""Simulation entry points.

``run_simulation`` validates a configuration, runs one engine and turns its
raw counters into per-hour :class:`SimulationResults`. ``simulate_many`` runs
independent configurations in parallel, one engine per worker thread.
"""

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence

from mwisim.core.constants import (
    MAX_ABILITY_SLOTS,
    MAX_DIFFICULTY_TIER,
    MAX_DRINK_SLOTS,
    MAX_DURATION_HOURS,
    MAX_FOOD_SLOTS,
    MIN_DURATION_HOURS,
    SECONDS_PER_HOUR,
    ticks_to_seconds,
)
from mwisim.core.buffs import global_buffs
from mwisim.data.loaders.market_loader import MarketData, get_item_price
from mwisim.data.models.config import PlayerConfig, SimulationConfig
from mwisim.data.models.game_data import GameData
from mwisim.data.models.results import (
    ConsumableRow,
    DamageRow,
    DropRow,
    KillsPerHour,
    ManaRow,
    RestoreRow,
    SimulationResults,
)
from mwisim.errors import ConfigurationError, SimulationFault
from mwisim.combat.attack import AUTO_ATTACK
from mwisim.combat.combat_engine import CancelToken, CombatEngine, ProgressCallback
from mwisim.combat.sim_result import AttackTally, SimResult


logger = logging.getLogger(__name__)


# =============================================================================
# VALIDATION
# =============================================================================

def validate_config(config: SimulationConfig, game_data: GameData) -> None:
    """
    Check a configuration against the game data before any tick runs.

    Raises:
        ConfigurationError: On the first problem found.
    """
    if not config.players:
        raise ConfigurationError("At least one player is required")
    if not MIN_DURATION_HOURS <= config.duration_hours <= MAX_DURATION_HOURS:
        raise ConfigurationError(
            f"Duration must be between {MIN_DURATION_HOURS} and {MAX_DURATION_HOURS} hours, "
            f"got {config.duration_hours}"
        )
    if not 0 <= config.difficulty_tier <= MAX_DIFFICULTY_TIER:
        raise ConfigurationError(f"Difficulty tier must be between 0 and {MAX_DIFFICULTY_TIER}")

    hrids = [player.hrid for player in config.players]
    if len(set(hrids)) != len(hrids):
        raise ConfigurationError("Player hrids must be unique")

    zone = game_data.get_zone(config.zone_hrid)
    for monster_hrid in zone.monster_hrids:
        game_data.get_monster(monster_hrid)

    # Community tiers are range-checked by the buff factories
    global_buffs(config.settings)

    for player in config.players:
        _validate_player(player, game_data)


def _validate_player(player: PlayerConfig, game_data: GameData) -> None:
    if len(player.food) > MAX_FOOD_SLOTS:
        raise ConfigurationError(f"{player.hrid}: at most {MAX_FOOD_SLOTS} food slots")
    if len(player.drinks) > MAX_DRINK_SLOTS:
        raise ConfigurationError(f"{player.hrid}: at most {MAX_DRINK_SLOTS} drink slots")
    if len(player.abilities) > MAX_ABILITY_SLOTS:
        raise ConfigurationError(f"{player.hrid}: at most {MAX_ABILITY_SLOTS} ability slots")

    for slot_type, slot in player.equipment.items():
        item = game_data.get_item(slot.item_hrid)
        if item.equipment_detail is None:
            raise ConfigurationError(f"{player.hrid}: {slot.item_hrid} is not equipment")
        if item.equipment_detail.type is not slot_type:
            raise ConfigurationError(
                f"{player.hrid}: {slot.item_hrid} does not fit the {slot_type.value} slot"
            )

    for slot in [*player.food, *player.drinks]:
        if slot is None:
            continue
        if game_data.get_item(slot.item_hrid).consumable_detail is None:
            raise ConfigurationError(f"{player.hrid}: {slot.item_hrid} is not a consumable")

    for slot in player.abilities:
        if slot is not None:
            game_data.get_ability(slot.ability_hrid)


# =============================================================================
# RUNNING
# =============================================================================

def run_simulation(
    config: SimulationConfig,
    game_data: GameData,
    market: Optional[MarketData] = None,
    progress_callback: Optional[ProgressCallback] = None,
    cancel_event: Optional[CancelToken] = None,
    rng: Optional[random.Random] = None,
) -> SimulationResults:
    """
    Validate, simulate and summarise one configuration.

    Args:
        config: Input snapshot.
        game_data: Reference data.
        market: Marketplace prices; missing prices count as 0.
        progress_callback: Receives progress fractions every 1% of ticks.
        cancel_event: Cancellation flag checked every tick.
        rng: Random source; seeded from ``config.seed`` when omitted.

    Returns:
        Per-hour results.

    Raises:
        ConfigurationError: If the configuration is invalid.
        SimulationFault: If an invariant broke during the run.
        SimulationCancelled: If the run was cancelled.
    """
    validate_config(config, game_data)
    engine = CombatEngine(config, game_data, rng=rng)
    sim_result = engine.run(progress_callback=progress_callback, cancel_event=cancel_event)
    return transform_result(sim_result, game_data, market)


def simulate_many(
    configs: Sequence[SimulationConfig],
    game_data: GameData,
    market: Optional[MarketData] = None,
    max_workers: Optional[int] = None,
    cancel_event: Optional[CancelToken] = None,
) -> List[SimulationResults]:
    """Run independent configurations in parallel, results in input order."""
    logger.info("Running %d simulations (max_workers=%s)", len(configs), max_workers)
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = [
            executor.submit(run_simulation, config, game_data, market, None, cancel_event)
            for config in configs
        ]
        return [future.result() for future in futures]


# =============================================================================
# RESULT TRANSFORM
# =============================================================================

def _display_name(game_data: GameData, hrid: str) -> str:
    if hrid == AUTO_ATTACK:
        return "Auto Attack"
    if hrid in game_data.ability_detail_map and game_data.ability_detail_map[hrid].name:
        return game_data.ability_detail_map[hrid].name
    if hrid.startswith("/"):
        return game_data.item_name(hrid)
    return hrid


def _damage_table(
    tallies: Dict[str, AttackTally],
    simulated_seconds: float,
    game_data: GameData,
) -> List[DamageRow]:
    """Total row followed by one row per source."""
    total_damage = sum(t.damage for t in tallies.values())
    total_hits = sum(t.hits for t in tallies.values())
    total_attempts = sum(t.attempts for t in tallies.values())

    rows = [DamageRow(
        source="Total",
        hit_chance=total_hits / total_attempts * 100 if total_attempts else 0.0,
        dps=total_damage / simulated_seconds if simulated_seconds else 0.0,
        percent=100.0,
    )]
    for source, tally in tallies.items():
        rows.append(DamageRow(
            source=_display_name(game_data, source),
            hit_chance=tally.hits / tally.attempts * 100 if tally.attempts else 0.0,
            dps=tally.damage / simulated_seconds if simulated_seconds else 0.0,
            percent=tally.damage / total_damage * 100 if total_damage else 0.0,
        ))
    return rows


def _players_only(gained: Dict[str, Dict[str, float]], players: set) -> Dict[str, Dict[str, float]]:
    return {unit: sources for unit, sources in gained.items() if unit in players}


def _restore_rows(gained: Dict[str, Dict[str, float]], simulated_seconds: float, game_data: GameData) -> List[RestoreRow]:
    rows = []
    for player_id, sources in gained.items():
        total = sum(sources.values())
        for source, amount in sources.items():
            rows.append(RestoreRow(
                source=_display_name(game_data, source),
                player_id=player_id,
                amount=amount / simulated_seconds if simulated_seconds else 0.0,
                percent=amount / total * 100 if total else 0.0,
            ))
    return rows


def transform_result(
    sim_result: SimResult,
    game_data: GameData,
    market: Optional[MarketData] = None,
) -> SimulationResults:
    """
    Convert raw counters into per-hour results.

    ``profit`` is ``revenue - expense`` where revenue sums realised drop
    counts times price and expense sums consumables used times price.
    ``noRngProfit`` does the same with expected drop counts.
    """
    simulated_seconds = ticks_to_seconds(sim_result.simulated_ticks)
    hours = simulated_seconds / SECONDS_PER_HOUR
    if hours <= 0:
        raise SimulationFault("Simulation did not advance any time")
    players = set(sim_result.player_names)

    kills = {hrid: count / hours for hrid, count in sim_result.deaths.items() if hrid not in players}
    deaths = {hrid: sim_result.deaths.get(hrid, 0) / hours for hrid in sim_result.player_names}
    xp = {
        player: {skill: amount / hours for skill, amount in skills.items()}
        for player, skills in sim_result.experience_gained.items()
    }

    # Drops
    drops_data = []
    revenue = 0.0
    no_rng_revenue = 0.0
    for item_hrid in sorted(set(sim_result.drops) | set(sim_result.expected_drops)):
        price = get_item_price(market, item_hrid)
        count = sim_result.drops.get(item_hrid, 0.0) / hours
        no_rng_count = sim_result.expected_drops.get(item_hrid, 0.0) / hours
        revenue += count * price
        no_rng_revenue += no_rng_count * price
        drops_data.append(DropRow(
            item_hrid=item_hrid,
            name=game_data.item_name(item_hrid),
            count=count,
            no_rng_count=no_rng_count,
            price=price,
            value=count * price,
            no_rng_value=no_rng_count * price,
            is_rare=item_hrid in sim_result.rare_items,
        ))

    # Consumables
    consumables_data = []
    expense = 0.0
    for player_id, items in sim_result.consumables_used.items():
        for item_hrid, used in items.items():
            price = get_item_price(market, item_hrid)
            cost = used * price / hours
            expense += cost
            consumables_data.append(ConsumableRow(
                item_hrid=item_hrid,
                name=game_data.item_name(item_hrid),
                player_id=player_id,
                count=used / hours,
                cost=cost,
            ))

    # Mana
    mana_data = []
    for player_id, abilities in sim_result.mana_used.items():
        for ability_hrid, total in abilities.items():
            casts = int(sim_result.casts[player_id][ability_hrid])
            mana_data.append(ManaRow(
                ability_hrid=ability_hrid,
                name=_display_name(game_data, ability_hrid),
                player_id=player_id,
                casts=casts,
                avg_mana=total / casts if casts else 0.0,
                total=total / hours,
            ))

    # Damage done by players to monsters, and taken by players from monsters
    done: Dict[str, AttackTally] = {}
    taken: Dict[str, AttackTally] = {}
    for (source, target, ability), tally in sim_result.attacks.items():
        if source in players and target not in players:
            bucket = done
        elif source not in players and target in players:
            bucket = taken
        else:
            continue
        merged = bucket.setdefault(ability, AttackTally())
        merged.hits += tally.hits
        merged.misses += tally.misses
        merged.damage += tally.damage

    ran_out = dict(sim_result.player_ran_out_of_mana)
    zone = game_data.action_detail_map.get(sim_result.zone_hrid)
    encounter_name = zone.name if zone is not None and zone.name else sim_result.zone_hrid.rsplit("/", 1)[-1].replace("_", " ")

    return SimulationResults(
        kills_per_hour=KillsPerHour(encounters=sim_result.encounters / hours, by_monster=kills),
        deaths_per_hour=deaths,
        xp_per_hour=xp,
        consumables_data=consumables_data,
        mana_data=mana_data,
        hp_restored_data=_restore_rows(_players_only(sim_result.hitpoints_gained, players), simulated_seconds, game_data),
        mp_restored_data=_restore_rows(_players_only(sim_result.manapoints_gained, players), simulated_seconds, game_data),
        damage_done_total=_damage_table(done, simulated_seconds, game_data),
        damage_taken_total=_damage_table(taken, simulated_seconds, game_data),
        drops_data=drops_data,
        profit=revenue - expense,
        no_rng_profit=no_rng_revenue - expense,
        revenue=revenue,
        no_rng_revenue=no_rng_revenue,
        expense=expense,
        mana_ran_out=any(ran_out.values()),
        player_ran_out_of_mana=ran_out,
        player_name_map=dict(sim_result.player_names),
        simulated_time=simulated_seconds,
        encounters=sim_result.encounters,
        encounter_name=encounter_name,
        is_dungeon=sim_result.is_dungeon,
        dungeons_completed=sim_result.dungeons_completed,
        dungeons_failed=sim_result.dungeons_failed,
        max_wave_reached=sim_result.max_wave_reached,
        difficulty_tier=sim_result.difficulty_tier,
    )
