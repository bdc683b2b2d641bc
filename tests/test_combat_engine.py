"""End-to-end tests for the combat engine."""

import threading

import pytest

from mwisim.combat.attack import AUTO_ATTACK, AttackOutcome, SideEffects
from mwisim.combat.combat_engine import (
    LIFE_STEAL_SOURCE,
    MANA_LEECH_SOURCE,
    THORNS_SOURCE,
    CombatEngine,
    RunState,
)
from mwisim.combat.simulation import run_simulation
from mwisim.core.constants import EquipmentType
from mwisim.data.loaders.game_data_loader import game_data_from_dict
from mwisim.data.models.config import EquipmentSlot, PlayerConfig, RngMode, SimulationSettings
from mwisim.errors import SimulationCancelled, SimulationFault


FIELD = "/actions/combat/test_field"
LAIR = "/actions/combat/test_lair"
CRYPT = "/actions/combat/test_crypt"
COIN = "/items/coin"
KEY = "/items/crypt_key"
DUMMY = "/monsters/test_dummy"
RING = "/items/ring"


class TestSingleSpawnHour:
    """One player against a monster that dies to every auto attack."""

    @pytest.fixture
    def results(self, game_data, market, config_for):
        return run_simulation(config_for(FIELD), game_data, market)

    def test_one_kill_per_three_seconds(self, results):
        # Kills at ticks 0, 30, 60, ... of a 36000-tick hour
        assert results.encounters == 1200
        assert results.kills_per_hour.encounters == pytest.approx(1200)
        assert results.kills_per_hour.by_monster["/monsters/test_dummy"] == pytest.approx(1200)

    def test_no_deaths(self, results):
        assert results.deaths_per_hour == {"player1": 0}

    def test_expected_drops(self, results):
        coin = next(row for row in results.drops_data if row.item_hrid == COIN)
        assert coin.no_rng_count == pytest.approx(1200 * 2 * 0.5)
        assert coin.price == 10
        assert coin.no_rng_value == pytest.approx(12000)

    def test_profit_is_revenue_minus_expense(self, results):
        assert results.expense == 0
        assert results.profit == pytest.approx(results.revenue - results.expense)
        assert results.no_rng_profit == pytest.approx(12000)

    def test_experience_split(self, results):
        xp = results.xp_per_hour["player1"]
        # 30% to melee, 70% across attack, defense, intelligence, melee, stamina
        assert xp["melee"] == pytest.approx(1200 * (3 + 1.4))
        assert xp["attack"] == pytest.approx(1200 * 1.4)
        assert xp["stamina"] == pytest.approx(1200 * 1.4)
        assert sum(xp.values()) == pytest.approx(1200 * 10)

    def test_damage_tables(self, results):
        done = results.damage_done_total
        assert done[0].source == "Total"
        assert done[0].hit_chance == pytest.approx(100)
        assert done[1].source == "Auto Attack"
        assert results.damage_taken_total[0].dps == 0

    def test_metadata(self, results):
        assert results.simulated_time == 3600
        assert results.encounter_name == "Test Field"
        assert not results.is_dungeon
        assert not results.mana_ran_out


class TestEngineBehaviour:
    """Engine-level behaviour."""

    def test_deterministic_with_seed(self, game_data, market, config_for):
        first = run_simulation(config_for(FIELD, seed=9), game_data, market)
        second = run_simulation(config_for(FIELD, seed=9), game_data, market)
        assert first.to_dict() == second.to_dict()

    def test_expected_mode_skips_stochastic_track(self, game_data, config_for):
        results = run_simulation(config_for(FIELD, rng_mode=RngMode.EXPECTED), game_data)
        coin = next(row for row in results.drops_data if row.item_hrid == COIN)
        assert coin.count == 0
        assert coin.no_rng_count > 0

    def test_wisdom_boosts_experience(self, game_data, config_for):
        settings = SimulationSettings(moo_pass=True)
        results = run_simulation(config_for(FIELD, settings=settings), game_data)
        assert sum(results.xp_per_hour["player1"].values()) == pytest.approx(1200 * 10 * 1.05)

    def test_drop_community_buff_scales_quantity(self, game_data, config_for):
        settings = SimulationSettings(community_drop_tier=1)
        results = run_simulation(config_for(FIELD, settings=settings), game_data)
        coin = next(row for row in results.drops_data if row.item_hrid == COIN)
        assert coin.no_rng_count == pytest.approx(1200 * 1.2)

    def test_party_splits_loot(self, game_data, config_for):
        players = [PlayerConfig(hrid="player1"), PlayerConfig(hrid="player2")]
        results = run_simulation(config_for(FIELD, players=players), game_data)
        coin = next(row for row in results.drops_data if row.item_hrid == COIN)
        # Each share is divided by party size; shares add up to one kill's worth
        assert coin.no_rng_count == pytest.approx(results.encounters * 1.0)
        assert set(results.xp_per_hour) == {"player1", "player2"}

    def test_party_wipe(self, game_data, config_for):
        results = run_simulation(config_for(LAIR), game_data)
        assert results.encounters == 0
        assert results.deaths_per_hour["player1"] > 0
        assert results.revenue == 0

    def test_wipe_sets_respawn(self, game_data, config_for):
        engine = CombatEngine(config_for(LAIR), game_data)
        while engine.state is RunState.RUNNING and engine.tick < engine.total_ticks:
            engine.step()
            engine.tick += 1
        assert engine.state is RunState.PARTY_WIPED
        assert engine.monsters == []
        assert engine.spawn_timer == engine.player_respawn_ticks - 1

    def test_dungeon(self, game_data, config_for):
        results = run_simulation(config_for(CRYPT), game_data)
        assert results.is_dungeon
        assert results.encounters == 1200
        assert results.dungeons_completed == 600
        assert results.dungeons_failed == 0
        assert results.max_wave_reached == 2

    def test_invariant_fault(self, game_data, config_for):
        engine = CombatEngine(config_for(FIELD), game_data)
        engine.players[0].current_mp = float("nan")
        with pytest.raises(SimulationFault) as exc_info:
            engine.step()
        assert exc_info.value.tick == 0


class TestProgressAndCancellation:
    """Host-facing progress and cancellation."""

    def test_progress_every_percent(self, game_data, config_for):
        reported = []
        run_simulation(config_for(FIELD), game_data, progress_callback=reported.append)
        assert len(reported) == 100
        assert reported == sorted(reported)
        assert reported[-1] == 1.0
        assert all(0 < value <= 1 for value in reported)

    def test_cancel_before_start(self, game_data, config_for):
        cancel = threading.Event()
        cancel.set()
        reported = []
        with pytest.raises(SimulationCancelled) as exc_info:
            run_simulation(config_for(FIELD), game_data, progress_callback=reported.append, cancel_event=cancel)
        assert exc_info.value.tick == 0
        assert reported == []

    def test_cancel_mid_run_yields_no_result(self, game_data, config_for):
        cancel = threading.Event()
        results = []

        def on_progress(progress):
            if progress >= 0.1:
                cancel.set()

        with pytest.raises(SimulationCancelled) as exc_info:
            results.append(run_simulation(config_for(FIELD), game_data, progress_callback=on_progress, cancel_event=cancel))
        assert exc_info.value.tick > 0
        assert results == []


class TestSideEffects:
    """Thorns, retaliation, life steal and mana leech applied by the engine."""

    def test_reflected_damage_life_steal_and_mana_leech(self, raw_data, config_for):
        raw_data["combatMonsterDetailMap"][DUMMY]["combatDetails"]["combatStats"].update(
            physicalThorns=0.5, retaliation=0.5,
        )
        raw_data["itemDetailMap"][RING]["equipmentDetail"]["combatStats"] = {"lifeSteal": 0.5, "manaLeech": 0.5}
        game_data = game_data_from_dict(raw_data)
        player = PlayerConfig(equipment={EquipmentType.RING: EquipmentSlot(item_hrid=RING)})

        engine = CombatEngine(config_for(FIELD, players=[player]), game_data)
        engine.players[0].current_mp = 0
        engine.step()

        reflected = engine.result.attacks[(DUMMY, "player1", THORNS_SOURCE)]
        assert reflected.hits == 1
        assert reflected.damage > 0
        assert engine.players[0].current_hp < engine.players[0].max_hp
        assert engine.result.hitpoints_gained["player1"][LIFE_STEAL_SOURCE] > 0
        assert engine.result.manapoints_gained["player1"][MANA_LEECH_SOURCE] > 0

    def test_thorns_can_kill_the_attacker(self, raw_data, config_for):
        raw_data["combatMonsterDetailMap"][DUMMY]["combatDetails"]["combatStats"]["physicalThorns"] = 1000
        engine = CombatEngine(config_for(FIELD), game_data_from_dict(raw_data))
        engine.step()

        # The dummy died first, so its kill still counts
        assert engine.result.deaths[DUMMY] == 1
        assert engine.result.deaths["player1"] == 1
        assert engine.state is RunState.PARTY_WIPED
        assert engine.spawn_timer == engine.player_respawn_ticks - 1

    def test_no_kill_credit_after_wipe(self, game_data, config_for):
        engine = CombatEngine(config_for(CRYPT), game_data)
        engine._spawn_encounter()
        player, monster = engine.players[0], engine.monsters[0]
        player.current_hp = 1
        monster.current_hp = 1

        outcome = AttackOutcome(hit=True, damage=50, side_effects=SideEffects(thorns=50))
        engine._apply_outcome(monster, player, AUTO_ATTACK, outcome)

        assert engine.state is RunState.DUNGEON_FAILED
        assert engine.result.dungeons_failed == 1
        assert not monster.is_alive
        assert DUMMY not in engine.result.deaths
        assert not engine.result.experience_gained
        assert not engine.result.expected_drops
        assert not engine.result.drops


class TestRandomTracks:
    """The expected loot track does not depend on the realised one."""

    def test_expected_track_unchanged_by_rng_mode(self, raw_data, config_for):
        stats = raw_data["combatMonsterDetailMap"][DUMMY]["combatDetails"]["combatStats"]
        for key in [key for key in stats if key.endswith("Evasion")]:
            del stats[key]
        game_data = game_data_from_dict(raw_data)

        both = run_simulation(config_for(FIELD, seed=3), game_data)
        expected = run_simulation(config_for(FIELD, seed=3, rng_mode=RngMode.EXPECTED), game_data)

        assert both.damage_done_total[0].hit_chance < 100
        assert both.encounters == expected.encounters
        assert both.xp_per_hour == expected.xp_per_hour
        coin_both = next(row for row in both.drops_data if row.item_hrid == COIN)
        coin_expected = next(row for row in expected.drops_data if row.item_hrid == COIN)
        assert coin_both.no_rng_count == pytest.approx(coin_expected.no_rng_count)


class TestLevelGap:
    """A much weaker party member earns less experience and loot."""

    @pytest.fixture
    def results(self, game_data, config_for):
        strong = {f"{skill}_level": 100 for skill in ("stamina", "intelligence", "attack", "melee", "defense", "ranged", "magic")}
        players = [PlayerConfig(hrid="player1"), PlayerConfig(hrid="player2", **strong)]
        return run_simulation(config_for(FIELD, players=players), game_data)

    def test_weaker_member_experience(self, results):
        weak = sum(results.xp_per_hour["player1"].values())
        strong = sum(results.xp_per_hour["player2"].values())
        assert weak == pytest.approx(strong * 0.1)

    def test_weaker_member_loot(self, results):
        kills = results.kills_per_hour.by_monster[DUMMY]
        coin = next(row for row in results.drops_data if row.item_hrid == COIN)
        # Full share of one coin per kill for the strong member, a tenth for the weak one
        assert coin.no_rng_count == pytest.approx(kills * (0.5 + 0.05))


class TestDungeonRewards:
    """Completion rewards and entry keys."""

    @pytest.fixture
    def results(self, raw_data, market, config_for):
        dungeon = raw_data["actionDetailMap"][CRYPT]["combatZoneInfo"]["dungeonInfo"]
        dungeon["rewardDropTable"] = [{"itemHrid": COIN, "dropRate": 1, "minCount": 2, "maxCount": 2}]
        dungeon["keyItemHrid"] = KEY
        raw_data["itemDetailMap"][KEY] = {"hrid": KEY, "name": "Crypt Key"}
        market = {**market, KEY: {"0": {"a": 100, "b": 90}}}
        return run_simulation(config_for(CRYPT), game_data_from_dict(raw_data), market)

    def test_reward_per_completion(self, results):
        coin = next(row for row in results.drops_data if row.item_hrid == COIN)
        # One coin per kill plus two per completed dungeon
        assert coin.no_rng_count == pytest.approx(1200 * 1.0 + results.dungeons_completed * 2)

    def test_key_used_per_entry(self, results):
        key = next(row for row in results.consumables_data if row.item_hrid == KEY)
        assert key.count == pytest.approx(600)
        assert results.expense == pytest.approx(key.cost)
        assert results.expense > 0
