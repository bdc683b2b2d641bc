"""Buff resolver.

Aggregates every modifier active on a player into per-channel totals. Sources
are summed in a fixed order:

1. Global toggles (moo pass)
2. Community buffs
3. Permanent buffs on the unit (zone, achievement tiers, house rooms, equipment)
4. Timed buffs granted by abilities and consumables
5. Level-gap debuff

Same-type buffs always add up, never multiply across sources.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Dict, Iterable, List, Optional, TYPE_CHECKING

from mwisim.core.constants import (
    COMMUNITY_BUFF_BASE,
    COMMUNITY_BUFF_PER_TIER,
    LEVEL_GAP_SLOPE,
    LEVEL_GAP_THRESHOLD,
    MAX_COMMUNITY_TIER,
    MAX_LEVEL_GAP_DEBUFF,
    MIN_COMMUNITY_TIER,
    MOO_PASS_WISDOM_BOOST,
)
from mwisim.data.models.buff import Buff, BuffType
from mwisim.data.models.config import SimulationSettings
from mwisim.errors import ConfigurationError

if TYPE_CHECKING:
    from mwisim.combat.combat_unit import CombatUnit


MOO_PASS_UNIQUE_HRID = "/buff_uniques/experience_moo_pass_buff"


@dataclass
class BuffTotals:
    """Summed boosts of one buff channel."""

    ratio_boost: float = 0.0
    flat_boost: float = 0.0

    def add(self, buff: Buff, level: int = 1) -> None:
        self.ratio_boost += buff.ratio_at(level)
        self.flat_boost += buff.flat_at(level)

    def apply(self, base: float) -> float:
        """Effective value of a stat: ``base * (1 + ratio) + flat``."""
        return base * (1 + self.ratio_boost) + self.flat_boost


@dataclass(frozen=True)
class AppliedBuff:
    """A buff attached to a unit together with the level it was granted at."""

    buff: Buff
    level: int = 1
    source: str = ""


# =============================================================================
# GLOBAL AND COMMUNITY BUFFS
# =============================================================================

class CommunityBuff(StrEnum):
    """Community buffs a player can toggle on."""

    EXPERIENCE = "experience"
    DROP = "drop"


# The drop buff scales quantity, never drop rate.
_COMMUNITY_BUFFS: Dict[CommunityBuff, tuple[str, BuffType]] = {
    CommunityBuff.EXPERIENCE: ("/buff_uniques/experience_community_buff", BuffType.WISDOM),
    CommunityBuff.DROP: ("/buff_uniques/combat_community_buff", BuffType.COMBAT_DROP_QUANTITY),
}


def community_buff_boost(tier: int) -> float:
    """Flat boost of a community buff at ``tier`` (1 -> 0.2, 10 -> 0.245)."""
    return COMMUNITY_BUFF_PER_TIER * (tier - 1) + COMMUNITY_BUFF_BASE


def make_community_buff(kind: CommunityBuff, tier: int) -> Optional[Buff]:
    """Build a community buff, or None when ``tier`` is 0.

    Raises:
        ConfigurationError: If ``tier`` is outside 0-10.
    """
    if not MIN_COMMUNITY_TIER <= tier <= MAX_COMMUNITY_TIER:
        raise ConfigurationError(
            f"Community {kind} tier must be between {MIN_COMMUNITY_TIER} and {MAX_COMMUNITY_TIER}, got {tier}"
        )
    if tier == 0:
        return None
    unique_hrid, type_hrid = _COMMUNITY_BUFFS[kind]
    return Buff(
        unique_hrid=unique_hrid,
        type_hrid=type_hrid,
        flat_boost=community_buff_boost(tier),
    )


def moo_pass_buff() -> Buff:
    return Buff(
        unique_hrid=MOO_PASS_UNIQUE_HRID,
        type_hrid=BuffType.WISDOM,
        flat_boost=MOO_PASS_WISDOM_BOOST,
    )


def global_buffs(settings: SimulationSettings) -> List[Buff]:
    """Buffs switched on by run settings, in precedence order."""
    buffs = []
    if settings.moo_pass:
        buffs.append(moo_pass_buff())
    for kind, tier in (
        (CommunityBuff.EXPERIENCE, settings.community_exp_tier),
        (CommunityBuff.DROP, settings.community_drop_tier),
    ):
        buff = make_community_buff(kind, tier)
        if buff is not None:
            buffs.append(buff)
    return buffs


# =============================================================================
# LEVEL GAP
# =============================================================================

def combat_level(
    stamina: int,
    intelligence: int,
    attack: int,
    defense: int,
    melee: int,
    ranged: int,
    magic: int,
) -> float:
    """Overall combat level from the seven combat skills."""
    return (
        0.1 * (stamina + intelligence + attack + defense + max(melee, ranged, magic))
        + 0.5 * max(attack, defense, melee, ranged, magic)
    )


def level_gap_debuff(max_party_level: float, player_level: float) -> float:
    """Penalty for a player far below the strongest party member.

    0 while ``max_party_level / player_level`` is at most 1.2, then falls by
    3 per unit of ratio, bottoming out at -0.9.
    """
    if player_level <= 0:
        return 0.0
    ratio = max_party_level / player_level
    if ratio <= LEVEL_GAP_THRESHOLD:
        return 0.0
    return -min(MAX_LEVEL_GAP_DEBUFF, LEVEL_GAP_SLOPE * (ratio - LEVEL_GAP_THRESHOLD))


def party_level_gap_debuffs(levels: Dict[str, float]) -> Dict[str, float]:
    """Level-gap debuff per party member, keyed like ``levels``."""
    if not levels:
        return {}
    highest = max(levels.values())
    return {hrid: level_gap_debuff(highest, level) for hrid, level in levels.items()}


# =============================================================================
# RESOLVER
# =============================================================================

def sum_buffs(applied: Iterable[AppliedBuff], totals: Optional[Dict[BuffType, BuffTotals]] = None) -> Dict[BuffType, BuffTotals]:
    """Add applied buffs into per-channel totals."""
    totals = {} if totals is None else totals
    for entry in applied:
        totals.setdefault(entry.buff.type_hrid, BuffTotals()).add(entry.buff, entry.level)
    return totals


def compute_effective_buffs(
    player: "CombatUnit",
    global_settings: SimulationSettings,
    elapsed_time: int,
) -> Dict[BuffType, BuffTotals]:
    """
    Aggregate every buff active on ``player`` at tick ``elapsed_time``.

    Args:
        player: Combat unit carrying permanent buffs, a status effect system
            and its level-gap debuff.
        global_settings: Run-wide toggles.
        elapsed_time: Tick index at which timed buffs are evaluated.

    Returns:
        Totals per buff type. The level-gap debuff appears as a flat boost on
        ``BuffType.LEVEL_GAP``.
    """
    totals: Dict[BuffType, BuffTotals] = {}
    sum_buffs((AppliedBuff(buff, source="settings") for buff in global_buffs(global_settings)), totals)
    sum_buffs(player.permanent_buffs, totals)
    sum_buffs(player.status_effects.active_buffs(elapsed_time), totals)

    if player.debuff_on_level_gap:
        totals.setdefault(BuffType.LEVEL_GAP, BuffTotals()).flat_boost += player.debuff_on_level_gap

    return totals
