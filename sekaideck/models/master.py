"""
Master Data Records.

Typed views over the game's master data tables. Records arrive as
camelCase JSON rows from a DataProvider and are validated here.

INVARIANT: Records are frozen (master data is read-only).
Unknown fields are ignored so newer master data keeps loading.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Unit name of the virtual singers
VIRTUAL_SINGER_UNIT = "piapro"

# supportUnit value for cards without a support unit
NO_SUPPORT_UNIT = "none"


class MasterRecord(BaseModel):
    """Base for master data rows."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class CardParameter(MasterRecord):
    card_level: int
    card_parameter_type: str  # param1, param2, param3
    power: int


class Card(MasterRecord):
    """A collectible card."""

    id: int
    character_id: int
    card_rarity_type: str  # rarity_1..rarity_4, rarity_birthday
    attr: str
    support_unit: str = NO_SUPPORT_UNIT
    skill_id: int
    special_training_skill_id: int | None = None
    card_parameters: tuple[CardParameter, ...] = ()
    special_training_power1_bonus_fixed: int = 0
    special_training_power2_bonus_fixed: int = 0
    special_training_power3_bonus_fixed: int = 0

    @property
    def special_training_power(self) -> int:
        return (
            self.special_training_power1_bonus_fixed
            + self.special_training_power2_bonus_fixed
            + self.special_training_power3_bonus_fixed
        )


class GameCharacter(MasterRecord):
    id: int
    unit: str


class GameCharacterUnit(MasterRecord):
    """A (character, unit) pairing; virtual singers have one per support unit."""

    id: int
    game_character_id: int
    unit: str


class SkillEffectDetail(MasterRecord):
    level: int
    activate_effect_value: float
    activate_effect_value2: float | None = None


class SkillEnhanceCondition(MasterRecord):
    unit: str


class SkillEnhance(MasterRecord):
    """Same-unit stacking bonus attached to a score-up effect."""

    skill_enhance_condition: SkillEnhanceCondition
    activate_effect_value: float


class SkillEffect(MasterRecord):
    id: int
    skill_effect_type: str
    activate_character_rank: int | None = None
    activate_unit_count: int | None = None
    skill_effect_details: tuple[SkillEffectDetail, ...] = ()
    skill_enhance: SkillEnhance | None = None


class Skill(MasterRecord):
    id: int
    skill_effects: tuple[SkillEffect, ...] = ()


class CardEpisode(MasterRecord):
    id: int
    card_id: int
    card_episode_part_type: str = "first_part"
    power1_bonus_fixed: int = 0
    power2_bonus_fixed: int = 0
    power3_bonus_fixed: int = 0

    @property
    def power(self) -> int:
        return self.power1_bonus_fixed + self.power2_bonus_fixed + self.power3_bonus_fixed


class MasterLesson(MasterRecord):
    """Power gained by reaching a master rank (one row per rank step)."""

    card_rarity_type: str
    master_rank: int
    power1_bonus_fixed: int = 0
    power2_bonus_fixed: int = 0
    power3_bonus_fixed: int = 0

    @property
    def power(self) -> int:
        return self.power1_bonus_fixed + self.power2_bonus_fixed + self.power3_bonus_fixed


class AreaItemLevel(MasterRecord):
    """
    Power bonus granted by an area item at a level.

    Exactly one target is set: a character, a unit, or an attribute.
    The all-match rate applies when the full deck shares the target
    unit or attribute.
    """

    area_item_id: int
    level: int
    target_unit: str = "any"
    target_card_attr: str = "any"
    target_game_character_id: int | None = None
    power1_bonus_rate: float = 0.0
    power1_all_match_bonus_rate: float = 0.0


class CharacterRank(MasterRecord):
    character_id: int
    character_rank: int
    power1_bonus_rate: float = 0.0


class HonorLevel(MasterRecord):
    level: int
    bonus: int = 0


class Honor(MasterRecord):
    id: int
    levels: tuple[HonorLevel, ...] = ()


class Event(MasterRecord):
    id: int
    event_type: str  # marathon, cheerful_carnival, world_bloom
    unit: str = "none"
    card_bonus_count_limits: dict[str, int] = Field(default_factory=dict)
    card_bonus_cap: float | None = None


class EventDeckBonus(MasterRecord):
    """Bonus for matching an event's character and/or attribute."""

    event_id: int
    game_character_unit_id: int | None = None
    card_attr: str | None = None
    bonus_rate: float


class EventCard(MasterRecord):
    """A card with an event-specific (limited) bonus."""

    event_id: int
    card_id: int
    bonus_rate: float = 0.0
    leader_bonus_rate: float = 0.0


class EventRarityBonusRate(MasterRecord):
    card_rarity_type: str
    master_rank: int
    bonus_rate: float


class WorldBloomDifferentAttributeBonus(MasterRecord):
    attribute_count: int
    bonus_rate: float


class WorldBloomSupportDeckMasterRankBonus(MasterRecord):
    master_rank: int
    bonus_rate: float


class WorldBloomSupportDeckBonus(MasterRecord):
    card_rarity_type: str
    world_bloom_support_deck_character_type: str  # specific, others
    master_rank_bonuses: tuple[WorldBloomSupportDeckMasterRankBonus, ...] = ()


class MusicMeta(MasterRecord):
    """
    Precomputed scoring metadata for one song difficulty.

    Skill score arrays hold the chart weight of each of the six skill
    activations (five member skills, then the leader's encore).
    """

    music_id: int
    difficulty: str
    music_time: float = 0.0
    event_rate: float = 100.0
    base_score: float
    base_score_auto: float = 0.0
    skill_score_solo: tuple[float, ...] = Field(default=(0.0,) * 6)
    skill_score_auto: tuple[float, ...] = Field(default=(0.0,) * 6)
    skill_score_multi: tuple[float, ...] = Field(default=(0.0,) * 6)
    fever_score: float = 0.0
    tap_count: int = 0
