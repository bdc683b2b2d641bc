"""Tests for data loaders and reference models."""

import json

import pytest

from mwisim.data.loaders import game_data_from_dict, get_item_price, load_game_data, load_marketplace
from mwisim.data.models.buff import Buff
from mwisim.errors import ConfigurationError, DataUnavailable


class TestGameDataLoader:
    """Game data validation and loading."""

    def test_filters_non_combat_actions(self, game_data):
        assert "/actions/foraging/meadow" not in game_data.action_detail_map
        assert "/actions/combat/test_field" in game_data.action_detail_map

    def test_nanosecond_durations(self, game_data):
        coffee = game_data.get_item("/items/coffee").consumable_detail
        assert coffee.cooldown_duration == pytest.approx(300)
        assert coffee.buffs[0].duration == pytest.approx(300)

    def test_second_durations_kept(self, game_data):
        assert game_data.get_item("/items/cheese").consumable_detail.cooldown_duration == 5

    def test_typed_combat_stats(self, game_data):
        stats = game_data.get_item("/items/sword").equipment_detail.combat_stats
        assert stats.attack_interval == pytest.approx(2)
        assert stats.values == {"slashDamage": 0.5}

    def test_dungeon_wave_keys(self, game_data):
        dungeon = game_data.get_zone("/actions/combat/test_crypt").combat_zone_info.dungeon_info
        assert list(dungeon.random_spawn_info_map) == [1]

    def test_missing_required_map(self, raw_data):
        del raw_data["combatMonsterDetailMap"]
        with pytest.raises(DataUnavailable, match="combatMonsterDetailMap"):
            game_data_from_dict(raw_data)

    def test_unknown_buff_type(self, raw_data):
        raw_data["itemDetailMap"]["/items/coffee"]["consumableDetail"]["buffs"][0]["typeHrid"] = "/buff_types/luck"
        with pytest.raises(DataUnavailable):
            game_data_from_dict(raw_data)

    def test_load_from_file(self, tmp_path, raw_data):
        path = tmp_path / "game_data.json"
        path.write_text(json.dumps(raw_data))
        game_data = load_game_data(path)
        assert game_data.get_monster("/monsters/test_dummy").experience == 10

    def test_load_from_directory(self, tmp_path, raw_data):
        for name, detail_map in raw_data.items():
            (tmp_path / f"{name}.json").write_text(json.dumps(detail_map))
        game_data = load_game_data(tmp_path)
        assert "/abilities/strike" in game_data.ability_detail_map

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataUnavailable):
            load_game_data(tmp_path / "missing.json")

    def test_bundled_sample_data(self):
        game_data = load_game_data()
        assert game_data.get_zone("/actions/combat/chimerical_den").is_dungeon
        assert game_data.get_monster("/monsters/rat").combat_details.melee_level == 5

    def test_lookups_raise(self, game_data):
        with pytest.raises(ConfigurationError):
            game_data.get_monster("/monsters/unknown")
        with pytest.raises(ConfigurationError):
            game_data.get_ability("/abilities/unknown")

    def test_enhancement_multiplier(self, game_data):
        assert game_data.enhancement_multiplier(0) == 0
        assert game_data.enhancement_multiplier(2) == pytest.approx(2.1)
        # Past the end of the table the last value holds
        assert game_data.enhancement_multiplier(20) == pytest.approx(3.3)

    def test_item_name_fallback(self, game_data):
        assert game_data.item_name("/items/coin") == "Coin"
        assert game_data.item_name("/items/rusty_spoon") == "Rusty Spoon"


class TestMarketLoader:
    """Marketplace prices."""

    def test_envelope(self, tmp_path):
        path = tmp_path / "market.json"
        path.write_text(json.dumps({"marketData": {"/items/coin": {"0": {"a": 3, "b": 2}}}}))
        assert get_item_price(load_marketplace(path), "/items/coin") == 3

    def test_bid_when_no_ask(self):
        market = {"/items/quill": {"0": {"a": -1, "b": 180}}}
        assert get_item_price(market, "/items/quill") == 180

    def test_missing_price_is_zero(self):
        assert get_item_price({}, "/items/coin") == 0
        assert get_item_price(None, "/items/coin") == 0

    def test_enhancement_level(self):
        market = {"/items/mace": {"0": {"a": 900}, "5": {"a": 6500}}}
        assert get_item_price(market, "/items/mace", 5) == 6500

    def test_plain_number(self):
        assert get_item_price({"/items/coin": 1}, "/items/coin") == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(DataUnavailable):
            load_marketplace(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "market.json"
        path.write_text("{not json")
        with pytest.raises(DataUnavailable):
            load_marketplace(path)


class TestBuffModel:
    """Buff parsing."""

    def test_timestamp_start_time(self):
        buff = Buff.model_validate({
            "uniqueHrid": "/buff_uniques/x",
            "typeHrid": "/buff_types/wisdom",
            "startTime": "2024-01-01T00:00:00Z",
        })
        assert buff.start_time == 0
        assert buff.is_permanent
