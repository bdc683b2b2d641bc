"""Per-hour simulation results returned to callers."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class KillsPerHour(BaseModel):
    model_config = _camel

    encounters: float = 0.0
    by_monster: dict[str, float] = Field(default_factory=dict)


class DropRow(BaseModel):
    """Drops of one item per hour, realised and expected."""

    model_config = _camel

    item_hrid: str
    name: str
    count: float = 0.0
    no_rng_count: float = 0.0
    price: float = 0.0
    value: float = 0.0
    no_rng_value: float = 0.0
    is_rare: bool = False


class ConsumableRow(BaseModel):
    model_config = _camel

    item_hrid: str
    name: str
    player_id: str
    count: float = Field(default=0.0, description="Uses per hour")
    cost: float = Field(default=0.0, description="Cost per hour")


class ManaRow(BaseModel):
    model_config = _camel

    ability_hrid: str
    name: str
    player_id: str
    casts: int = 0
    avg_mana: float = 0.0
    total: float = Field(default=0.0, description="Mana spent per hour")


class RestoreRow(BaseModel):
    model_config = _camel

    source: str
    player_id: str
    amount: float = Field(default=0.0, description="Points restored per second")
    percent: float = 0.0


class DamageRow(BaseModel):
    """Damage dealt by one source. The first row of a table is the total."""

    model_config = _camel

    source: str
    hit_chance: float = 0.0
    dps: float = 0.0
    percent: float = 0.0


class SimulationResults(BaseModel):
    model_config = _camel

    kills_per_hour: KillsPerHour = Field(default_factory=KillsPerHour)
    deaths_per_hour: dict[str, float] = Field(default_factory=dict)
    xp_per_hour: dict[str, dict[str, float]] = Field(default_factory=dict)
    consumables_data: list[ConsumableRow] = Field(default_factory=list)
    mana_data: list[ManaRow] = Field(default_factory=list)
    hp_restored_data: list[RestoreRow] = Field(default_factory=list)
    mp_restored_data: list[RestoreRow] = Field(default_factory=list)
    damage_done_total: list[DamageRow] = Field(default_factory=list)
    damage_taken_total: list[DamageRow] = Field(default_factory=list)
    drops_data: list[DropRow] = Field(default_factory=list)
    profit: float = 0.0
    no_rng_profit: float = 0.0
    revenue: float = 0.0
    no_rng_revenue: float = 0.0
    expense: float = 0.0
    mana_ran_out: bool = False
    player_ran_out_of_mana: dict[str, bool] = Field(default_factory=dict)
    player_name_map: dict[str, str] = Field(default_factory=dict)
    simulated_time: float = Field(default=0.0, description="Simulated seconds")
    encounters: int = 0
    encounter_name: str = ""
    is_dungeon: bool = False
    dungeons_completed: int = 0
    dungeons_failed: int = 0
    max_wave_reached: int = 0
    difficulty_tier: int = 0

    def to_dict(self) -> dict:
        """camelCase JSON-ready dict."""
        return self.model_dump(by_alias=True)
