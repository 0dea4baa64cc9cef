from typing import Any

import pytest

from sekaideck.models.card import NO_SHARED_UNITS, CardDetail, CardEventBonus, CardPowerCases, CardPowerDetail
from sekaideck.models.master import MusicMeta
from sekaideck.models.skill import ANY_CASE, CardSkill, SkillCase, SkillCaseMap
from sekaideck.services.data_provider import InMemoryDataProvider

LIGHT_SOUND = "light_sound"
IDOL = "idol"
STREET = "street"
PIAPRO = "piapro"

MAX_LEVELS = {"rarity_1": 20, "rarity_2": 30, "rarity_3": 50, "rarity_4": 60, "rarity_birthday": 60}


# =============================================================================
# SYNTHETIC MASTER / USER DATA
# =============================================================================


def _levels(*values: float, value2: float | None = None) -> list[dict[str, Any]]:
    """Skill effect details for levels 1..4."""
    rows = []
    for level, value in enumerate(values, start=1):
        row: dict[str, Any] = {"level": level, "activateEffectValue": value}
        if value2 is not None:
            row["activateEffectValue2"] = value2
        rows.append(row)
    return rows


def _card(
    card_id: int,
    character_id: int,
    rarity: str,
    attr: str,
    skill_id: int,
    power: int,
    support_unit: str = "none",
    training_skill_id: int | None = None,
) -> dict[str, Any]:
    """A card with three equal parameters at level 1 and doubled at max level."""
    params = []
    for level, total in ((1, power), (MAX_LEVELS[rarity], power * 2)):
        for i in (1, 2, 3):
            params.append({"cardLevel": level, "cardParameterType": f"param{i}", "power": total // 3})
    row: dict[str, Any] = {
        "id": card_id,
        "characterId": character_id,
        "cardRarityType": rarity,
        "attr": attr,
        "supportUnit": support_unit,
        "skillId": skill_id,
        "cardParameters": params,
        "specialTrainingPower1BonusFixed": 300,
    }
    if training_skill_id is not None:
        row["specialTrainingSkillId"] = training_skill_id
    return row


def _support_rows() -> list[dict[str, Any]]:
    values = {
        "specific": {"rarity_4": 15, "rarity_3": 10, "rarity_2": 5, "rarity_1": 2, "rarity_birthday": 10},
        "others": {"rarity_4": 3, "rarity_3": 2, "rarity_2": 1, "rarity_1": 0.5, "rarity_birthday": 2},
    }
    return [
        {
            "cardRarityType": rarity,
            "worldBloomSupportDeckCharacterType": character_type,
            "masterRankBonuses": [{"masterRank": rank, "bonusRate": value + rank} for rank in range(6)],
        }
        for character_type, by_rarity in values.items()
        for rarity, value in by_rarity.items()
    ]


def build_master_data() -> dict[str, list[dict[str, Any]]]:
    return {
        "gameCharacters": [
            {"id": 1, "unit": LIGHT_SOUND},
            {"id": 2, "unit": LIGHT_SOUND},
            {"id": 3, "unit": IDOL},
            {"id": 4, "unit": IDOL},
            {"id": 5, "unit": STREET},
            {"id": 6, "unit": STREET},
            {"id": 21, "unit": PIAPRO},
        ],
        "gameCharacterUnits": [
            {"id": 1, "gameCharacterId": 1, "unit": LIGHT_SOUND},
            {"id": 2, "gameCharacterId": 2, "unit": LIGHT_SOUND},
            {"id": 3, "gameCharacterId": 3, "unit": IDOL},
            {"id": 4, "gameCharacterId": 4, "unit": IDOL},
            {"id": 5, "gameCharacterId": 5, "unit": STREET},
            {"id": 6, "gameCharacterId": 6, "unit": STREET},
            {"id": 21, "gameCharacterId": 21, "unit": PIAPRO},
            {"id": 22, "gameCharacterId": 21, "unit": LIGHT_SOUND},
        ],
        "skills": [
            {
                "id": 1,
                "skillEffects": [
                    {"id": 11, "skillEffectType": "score_up", "skillEffectDetails": _levels(20, 25, 30, 40)},
                ],
            },
            {
                "id": 2,
                "skillEffects": [
                    {
                        "id": 21,
                        "skillEffectType": "score_up",
                        "skillEffectDetails": _levels(20, 20, 20, 20),
                        "skillEnhance": {
                            "skillEnhanceCondition": {"unit": LIGHT_SOUND},
                            "activateEffectValue": 5,
                        },
                    },
                ],
            },
            {
                "id": 3,
                "skillEffects": [
                    {"id": 31, "skillEffectType": "score_up", "skillEffectDetails": _levels(10, 10, 10, 10)},
                    {
                        "id": 32,
                        "skillEffectType": "other_member_score_up_reference_rate",
                        "skillEffectDetails": _levels(50, 50, 50, 50, value2=30),
                    },
                ],
            },
            {
                "id": 4,
                "skillEffects": [
                    {"id": 41, "skillEffectType": "score_up", "skillEffectDetails": _levels(10, 10, 10, 10)},
                    {"id": 42, "skillEffectType": "life_recovery", "skillEffectDetails": _levels(300, 350, 400, 450)},
                ],
            },
            {
                "id": 5,
                "skillEffects": [
                    {"id": 51, "skillEffectType": "score_up", "skillEffectDetails": _levels(10, 10, 10, 10)},
                    {
                        "id": 52,
                        "skillEffectType": "score_up_unit_count",
                        "activateUnitCount": 1,
                        "skillEffectDetails": _levels(5, 5, 5, 5),
                    },
                    {
                        "id": 53,
                        "skillEffectType": "score_up_unit_count",
                        "activateUnitCount": 2,
                        "skillEffectDetails": _levels(15, 15, 15, 15),
                    },
                ],
            },
            {
                "id": 6,
                "skillEffects": [
                    {"id": 61, "skillEffectType": "score_up", "skillEffectDetails": _levels(20, 20, 20, 20)},
                    {
                        "id": 62,
                        "skillEffectType": "score_up_character_rank",
                        "activateCharacterRank": 10,
                        "skillEffectDetails": _levels(10, 10, 10, 10),
                    },
                ],
            },
        ],
        "cards": [
            _card(101, 1, "rarity_4", "cute", 1, 3000),
            _card(102, 2, "rarity_4", "cute", 2, 3300),
            _card(103, 3, "rarity_3", "cool", 3, 2400),
            _card(104, 4, "rarity_3", "cool", 4, 2100),
            _card(105, 5, "rarity_2", "happy", 5, 1500),
            _card(106, 6, "rarity_4", "pure", 6, 3600, training_skill_id=1),
            _card(107, 21, "rarity_4", "cute", 2, 2700, support_unit=LIGHT_SOUND),
            _card(108, 21, "rarity_1", "mysterious", 1, 900),
            _card(109, 1, "rarity_2", "cute", 1, 1800),
        ],
        "cardEpisodes": [
            {"id": 1011, "cardId": 101, "cardEpisodePartType": "first_part", "power1BonusFixed": 100},
            {"id": 1012, "cardId": 101, "cardEpisodePartType": "second_part", "power1BonusFixed": 100},
        ],
        "masterLessons": [
            {"cardRarityType": "rarity_4", "masterRank": rank, "power1BonusFixed": 50} for rank in range(1, 6)
        ],
        "areaItemLevels": [
            {
                "areaItemId": 1,
                "level": 1,
                "targetUnit": LIGHT_SOUND,
                "power1BonusRate": 5,
                "power1AllMatchBonusRate": 10,
            },
            {
                "areaItemId": 2,
                "level": 1,
                "targetCardAttr": "cute",
                "power1BonusRate": 2,
                "power1AllMatchBonusRate": 4,
            },
        ],
        "characterRanks": [
            {"characterId": 1, "characterRank": 1, "power1BonusRate": 1.0},
        ],
        "honors": [
            {"id": 1, "levels": [{"level": 1, "bonus": 500}, {"level": 2, "bonus": 800}]},
        ],
        "events": [
            {"id": 1, "eventType": "marathon", "cardBonusCountLimits": {"rarity_4": 1}},
            {"id": 2, "eventType": "world_bloom"},
            {"id": 3, "eventType": "cheerful_carnival", "unit": IDOL},
        ],
        "eventDeckBonuses": [
            {"eventId": 1, "gameCharacterUnitId": 1, "bonusRate": 25},
            {"eventId": 1, "gameCharacterUnitId": 3, "bonusRate": 25},
            {"eventId": 1, "cardAttr": "cute", "bonusRate": 25},
            {"eventId": 1, "gameCharacterUnitId": 2, "cardAttr": "cute", "bonusRate": 50},
            {"eventId": 1, "gameCharacterUnitId": 22, "cardAttr": "cute", "bonusRate": 50},
            {"eventId": 2, "gameCharacterUnitId": 1, "bonusRate": 25},
            {"eventId": 2, "cardAttr": "cute", "bonusRate": 25},
            {"eventId": 3, "gameCharacterUnitId": 3, "bonusRate": 25},
            {"eventId": 3, "cardAttr": "cool", "bonusRate": 25},
        ],
        "eventCards": [
            {"eventId": 1, "cardId": 102, "bonusRate": 20},
            {"eventId": 1, "cardId": 107, "bonusRate": 10, "leaderBonusRate": 5},
        ],
        "eventRarityBonusRates": [
            {"cardRarityType": rarity, "masterRank": rank, "bonusRate": rank * 2}
            for rarity in MAX_LEVELS
            for rank in range(6)
        ],
        "worldBloomDifferentAttributeBonuses": [
            {"attributeCount": 1, "bonusRate": 0},
            {"attributeCount": 2, "bonusRate": 1},
            {"attributeCount": 3, "bonusRate": 2},
            {"attributeCount": 4, "bonusRate": 3},
            {"attributeCount": 5, "bonusRate": 5},
        ],
        "worldBloomSupportDeckBonuses": _support_rows(),
    }


def build_user_data() -> dict[str, list[dict[str, Any]]]:
    return {
        "userCards": [
            {"cardId": card_id, "level": 1, "skillLevel": 1, "masterRank": 0}
            for card_id in (101, 102, 103, 104, 105, 106, 107, 108, 109)
        ],
        "userCharacters": [
            {"characterId": 1, "characterRank": 1},
            {"characterId": 2, "characterRank": 1},
            {"characterId": 3, "characterRank": 1},
            {"characterId": 4, "characterRank": 1},
            {"characterId": 5, "characterRank": 1},
            {"characterId": 6, "characterRank": 10},
            {"characterId": 21, "characterRank": 1},
        ],
        "userAreas": [
            {"areaId": 1, "areaItems": [{"areaItemId": 1, "level": 1}, {"areaItemId": 2, "level": 1}]},
        ],
        "userHonors": [{"honorId": 1, "level": 1}],
    }


@pytest.fixture
def master_data() -> dict[str, list[dict[str, Any]]]:
    return build_master_data()


@pytest.fixture
def user_data() -> dict[str, list[dict[str, Any]]]:
    return build_user_data()


@pytest.fixture
def provider(master_data, user_data) -> InMemoryDataProvider:
    return InMemoryDataProvider(master=master_data, user=user_data)


@pytest.fixture
def music_meta() -> MusicMeta:
    return MusicMeta(
        music_id=1,
        difficulty="master",
        base_score=1.0,
        base_score_auto=0.5,
        skill_score_solo=(0.5,) * 6,
        skill_score_auto=(0.25,) * 6,
        skill_score_multi=(0.5,) * 6,
        fever_score=0.5,
    )


# =============================================================================
# HAND-BUILT CARD DETAILS
# =============================================================================


def _make_card(
    card_id: int,
    character_id: int,
    units: tuple[str, ...] = (LIGHT_SOUND,),
    attr: str = "cute",
    rarity: str = "rarity_4",
    power: int = 10000,
    skill: float | SkillCaseMap = 50.0,
    fixed_bonus: float | None = None,
    card_bonus: float = 0.0,
    leader_bonus: float = 0.0,
    support_bonus: float | None = None,
    life_recovery: float = 0.0,
) -> CardDetail:
    """A CardDetail with a single power case and, by default, a flat skill."""
    power_cases = CardPowerCases()
    power_cases.set(NO_SHARED_UNITS, False, CardPowerDetail(base=power, area_item_bonus=0, character_bonus=0))

    if isinstance(skill, SkillCaseMap):
        skill_map = skill
    else:
        skill_map = SkillCaseMap()
        skill_map.set(
            ANY_CASE,
            1,
            1,
            SkillCase(
                skill_id=card_id,
                is_post_training=False,
                fixed_score_bonus=skill,
                score_bonus_when_referenced=skill,
                life_recovery=life_recovery,
            ),
        )

    event_bonus = None
    if fixed_bonus is not None:
        event_bonus = CardEventBonus(fixed_bonus=fixed_bonus, card_bonus=card_bonus, leader_bonus=leader_bonus)

    return CardDetail(
        card_id=card_id,
        character_id=character_id,
        units=units,
        attr=attr,
        rarity=rarity,
        level=1,
        skill_level=1,
        master_rank=0,
        trained=False,
        power=power_cases,
        skill=CardSkill(skill=skill_map),
        event_bonus=event_bonus,
        support_deck_bonus=support_bonus,
    )


@pytest.fixture
def make_card():
    """Factory for hand-built CardDetail records."""
    return _make_card
