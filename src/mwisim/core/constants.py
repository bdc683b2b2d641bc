"""Game and engine constants for the combat simulator."""

from enum import StrEnum
from typing import Final


# =============================================================================
# SIMULATED TIME
# =============================================================================
TICK_RATE: Final[int] = 10  # Ticks per simulated second
SECONDS_PER_HOUR: Final[int] = 3600

MIN_DURATION_HOURS: Final[int] = 1
MAX_DURATION_HOURS: Final[int] = 48

# Progress is reported every 1% of the run
PROGRESS_STEPS: Final[int] = 100


def seconds_to_ticks(seconds: float) -> int:
    """Convert a positive duration in seconds to whole ticks (at least one)."""
    if seconds <= 0:
        return 0
    return max(1, int(round(seconds * TICK_RATE)))


def ticks_to_seconds(ticks: int) -> float:
    """Convert a tick count to seconds."""
    return ticks / TICK_RATE


# =============================================================================
# RESPAWN & REGENERATION
# =============================================================================
ENEMY_RESPAWN_SECONDS: Final[float] = 3.0
PLAYER_RESPAWN_SECONDS: Final[float] = 150.0
REGEN_INTERVAL_SECONDS: Final[float] = 10.0
BASE_HP_REGEN: Final[float] = 0.01  # Fraction of max HP per regen interval
BASE_MP_REGEN: Final[float] = 0.01

# =============================================================================
# COMBAT FORMULAS
# =============================================================================
BASE_CRITICAL_MULTIPLIER: Final[float] = 1.5
MITIGATION_PER_POINT: Final[float] = 0.01  # damage /= 1 + resistance * 0.01
DEFAULT_ATTACK_INTERVAL: Final[float] = 3.0  # Unarmed attack interval (seconds)
ATTACK_LEVEL_SPEED_DIVISOR: Final[float] = 2000.0
RESISTANCE_PER_DEFENSE_LEVEL: Final[float] = 0.2
BASE_THREAT: Final[float] = 100.0

# =============================================================================
# BUFFS
# =============================================================================
MOO_PASS_WISDOM_BOOST: Final[float] = 0.05
COMMUNITY_BUFF_BASE: Final[float] = 0.2
COMMUNITY_BUFF_PER_TIER: Final[float] = 0.005
MIN_COMMUNITY_TIER: Final[int] = 0  # 0 disables the buff
MAX_COMMUNITY_TIER: Final[int] = 10

LEVEL_GAP_THRESHOLD: Final[float] = 1.2
LEVEL_GAP_SLOPE: Final[float] = 3.0
MAX_LEVEL_GAP_DEBUFF: Final[float] = 0.9

# =============================================================================
# LOOT
# =============================================================================
DIFFICULTY_DROP_RATE_STEP: Final[float] = 0.1
MAX_DIFFICULTY_TIER: Final[int] = 5

# =============================================================================
# EXPERIENCE
# =============================================================================
PRIMARY_TRAINING_SHARE: Final[float] = 0.3
SECONDARY_TRAINING_SHARE: Final[float] = 0.7


class CombatStyle(StrEnum):
    """Attack styles. Evasion and accuracy are rated per style."""

    STAB = "/combat_styles/stab"
    SLASH = "/combat_styles/slash"
    SMASH = "/combat_styles/smash"
    RANGED = "/combat_styles/ranged"
    MAGIC = "/combat_styles/magic"

    @property
    def key(self) -> str:
        """Short name used as a combat stat prefix (``stab`` -> ``stabAccuracy``)."""
        return self.value.rsplit("/", 1)[-1]


class DamageType(StrEnum):
    """Damage types. Physical damage is mitigated by armor, the rest by resistances."""

    PHYSICAL = "/damage_types/physical"
    WATER = "/damage_types/water"
    NATURE = "/damage_types/nature"
    FIRE = "/damage_types/fire"

    @property
    def key(self) -> str:
        return self.value.rsplit("/", 1)[-1]


class Skill(StrEnum):
    """Combat skills."""

    STAMINA = "/skills/stamina"
    INTELLIGENCE = "/skills/intelligence"
    ATTACK = "/skills/attack"
    DEFENSE = "/skills/defense"
    MELEE = "/skills/melee"
    RANGED = "/skills/ranged"
    MAGIC = "/skills/magic"

    @property
    def key(self) -> str:
        return self.value.rsplit("/", 1)[-1]


# Primary training skill per combat style (receives 30% of combat experience)
PRIMARY_SKILL_BY_STYLE: Final[dict[CombatStyle, Skill]] = {
    CombatStyle.STAB: Skill.MELEE,
    CombatStyle.SLASH: Skill.MELEE,
    CombatStyle.SMASH: Skill.MELEE,
    CombatStyle.RANGED: Skill.RANGED,
    CombatStyle.MAGIC: Skill.MAGIC,
}

# Skills sharing the remaining 70% when no focus skill is set
SKILL_EXP_MAP: Final[dict[CombatStyle, tuple[Skill, ...]]] = {
    style: (Skill.ATTACK, Skill.DEFENSE, Skill.INTELLIGENCE, primary, Skill.STAMINA)
    for style, primary in PRIMARY_SKILL_BY_STYLE.items()
}


class EquipmentType(StrEnum):
    """Equipment slots."""

    HEAD = "/equipment_types/head"
    BODY = "/equipment_types/body"
    LEGS = "/equipment_types/legs"
    FEET = "/equipment_types/feet"
    HANDS = "/equipment_types/hands"
    MAIN_HAND = "/equipment_types/main_hand"
    TWO_HAND = "/equipment_types/two_hand"
    OFF_HAND = "/equipment_types/off_hand"
    POUCH = "/equipment_types/pouch"
    BACK = "/equipment_types/back"
    NECK = "/equipment_types/neck"
    RING = "/equipment_types/ring"
    EARRINGS = "/equipment_types/earrings"
    CHARM = "/equipment_types/charm"


WEAPON_SLOTS: Final[tuple[EquipmentType, ...]] = (
    EquipmentType.MAIN_HAND,
    EquipmentType.TWO_HAND,
)

MAX_FOOD_SLOTS: Final[int] = 3
MAX_DRINK_SLOTS: Final[int] = 3
MAX_ABILITY_SLOTS: Final[int] = 5
