"""Shared fixtures: a small in-memory game data set."""

import pytest

from mwisim.data.loaders.game_data_loader import game_data_from_dict
from mwisim.data.models.config import PlayerConfig, SimulationConfig


FIELD = "/actions/combat/test_field"
PACK = "/actions/combat/test_pack"
LAIR = "/actions/combat/test_lair"
VOID = "/actions/combat/test_void"
CRYPT = "/actions/combat/test_crypt"

DUMMY = "/monsters/test_dummy"
BRUTE = "/monsters/brute"

COIN = "/items/coin"
CHEESE = "/items/cheese"
COFFEE = "/items/coffee"
SWORD = "/items/sword"
RING = "/items/ring"

STRIKE = "/abilities/strike"
EXPENSIVE = "/abilities/expensive"


def _single_spawn(monster_hrid: str, count: int = 1) -> dict:
    return {
        "maxSpawnCount": count,
        "maxTotalStrength": count,
        "spawns": [{"combatMonsterHrid": monster_hrid, "rate": 1, "strength": 1}],
    }


def _zone(hrid: str, name: str, monster_hrid: str, count: int = 1) -> dict:
    return {
        "hrid": hrid,
        "name": name,
        "type": "/action_types/combat",
        "combatZoneInfo": {"fightInfo": {"randomSpawnInfo": _single_spawn(monster_hrid, count)}},
    }


def raw_game_data() -> dict:
    """Detail maps as they appear in exported game data."""
    # Zero evasion and 10 HP: every player auto attack hits and kills
    dummy_stats = {
        "combatStyleHrids": ["/combat_styles/smash"],
        "damageType": "/damage_types/physical",
        "attackInterval": 3,
        "maxHitpoints": -100,
    }
    for style in ("stab", "slash", "smash", "ranged", "magic"):
        dummy_stats[f"{style}Evasion"] = -1

    return {
        "actionDetailMap": {
            FIELD: _zone(FIELD, "Test Field", DUMMY),
            PACK: _zone(PACK, "Test Pack", DUMMY, count=3),
            LAIR: _zone(LAIR, "Test Lair", BRUTE),
            # Nothing can spawn here
            VOID: {
                "hrid": VOID,
                "name": "Test Void",
                "combatZoneInfo": {"fightInfo": {"randomSpawnInfo": {
                    "spawns": [{"combatMonsterHrid": DUMMY, "rate": 0}],
                }}},
            },
            CRYPT: {
                "hrid": CRYPT,
                "name": "Test Crypt",
                "type": "/action_types/combat",
                "combatZoneInfo": {
                    "isDungeon": True,
                    "dungeonInfo": {
                        "maxWaves": 2,
                        "randomSpawnInfoMap": {"1": _single_spawn(DUMMY)},
                    },
                },
            },
            "/actions/foraging/meadow": {"hrid": "/actions/foraging/meadow", "type": "/action_types/foraging"},
        },
        "combatMonsterDetailMap": {
            DUMMY: {
                "hrid": DUMMY,
                "name": "Test Dummy",
                "combatDetails": {"combatStats": dummy_stats},
                "dropTable": [{"itemHrid": COIN, "dropRate": 0.5, "minCount": 1, "maxCount": 3}],
                "experience": 10,
            },
            BRUTE: {
                "hrid": BRUTE,
                "name": "Brute",
                "combatDetails": {
                    "staminaLevel": 100,
                    "attackLevel": 200,
                    "meleeLevel": 200,
                    "combatStats": {
                        "combatStyleHrids": ["/combat_styles/smash"],
                        "attackInterval": 3,
                    },
                },
                "experience": 100,
            },
        },
        "itemDetailMap": {
            COIN: {"hrid": COIN, "name": "Coin"},
            CHEESE: {
                "hrid": CHEESE,
                "name": "Cheese",
                "categoryHrid": "/item_categories/food",
                "consumableDetail": {"cooldownDuration": 5, "hitpointRestore": 30},
            },
            COFFEE: {
                "hrid": COFFEE,
                "name": "Coffee",
                "categoryHrid": "/item_categories/drink",
                "consumableDetail": {
                    "cooldownDuration": 300000000000,
                    "buffs": [{
                        "uniqueHrid": "/buff_uniques/coffee",
                        "typeHrid": "/buff_types/wisdom",
                        "flatBoost": 0.1,
                        "duration": 300000000000,
                    }],
                },
            },
            SWORD: {
                "hrid": SWORD,
                "name": "Sword",
                "equipmentDetail": {
                    "type": "/equipment_types/main_hand",
                    "combatStats": {
                        "combatStyleHrids": ["/combat_styles/slash"],
                        "attackInterval": 2000000000,
                        "slashDamage": 0.5,
                    },
                    "combatEnhancementBonuses": {"slashDamage": 0.1},
                },
            },
            RING: {
                "hrid": RING,
                "name": "Ring",
                "equipmentDetail": {"type": "/equipment_types/ring", "combatStats": {"armor": 5}},
            },
        },
        "abilityDetailMap": {
            STRIKE: {
                "hrid": STRIKE,
                "name": "Strike",
                "manaCost": 10,
                "cooldownDuration": 5,
                "abilityEffects": [{"effectType": "/ability_effect_types/damage", "baseDamageFlat": 5}],
            },
            EXPENSIVE: {
                "hrid": EXPENSIVE,
                "name": "Expensive",
                "manaCost": 10000,
                "cooldownDuration": 5,
                "abilityEffects": [{"effectType": "/ability_effect_types/damage", "baseDamageFlat": 5}],
            },
        },
        "enhancementLevelTotalBonusMultiplierTable": [0, 1, 2.1, 3.3],
    }


@pytest.fixture
def game_data():
    return game_data_from_dict(raw_game_data())


@pytest.fixture
def market():
    return {
        COIN: {"0": {"a": 10, "b": 8}},
        CHEESE: {"0": {"a": 0, "b": 5}},
    }


@pytest.fixture
def player():
    return PlayerConfig()


def make_config(zone_hrid: str = FIELD, players=None, **kwargs) -> SimulationConfig:
    return SimulationConfig(
        players=players if players is not None else [PlayerConfig()],
        zone_hrid=zone_hrid,
        seed=kwargs.pop("seed", 42),
        **kwargs,
    )


@pytest.fixture
def config_for():
    """Factory for run configurations; one default player unless given."""
    return make_config


@pytest.fixture
def raw_data():
    return raw_game_data()
