"""House room and achievement data models."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .buff import Buff


_camel = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

COMBAT_ACTION_TYPE = "/action_types/combat"


class HouseRoom(BaseModel):
    """A house room. Its buffs scale with the room level."""

    model_config = _camel

    hrid: str
    name: str = ""
    action_type_hrid: str = ""
    action_buffs: list[Buff] = Field(default_factory=list)
    global_buffs: list[Buff] = Field(default_factory=list)

    def combat_buffs(self) -> list[Buff]:
        """Buffs that apply while fighting."""
        buffs = list(self.global_buffs)
        if self.action_type_hrid == COMBAT_ACTION_TYPE:
            buffs.extend(self.action_buffs)
        return buffs


class Achievement(BaseModel):
    model_config = _camel

    hrid: str
    name: str = ""
    tier_hrid: str


class AchievementTier(BaseModel):
    """Tier buffs are granted once every achievement of the tier is completed."""

    model_config = _camel

    hrid: str
    name: str = ""
    buffs: list[Buff] = Field(default_factory=list)
