"""
Card power calculation.

Power is computed the way the game does it:
- base = parameters at level + training bonus + read episodes + master lessons
- character rank bonus = floor(base * rank rate / 100)
- area item bonus = floor(base * sum of matching item rates / 100)

Area items that target a unit or attribute switch to their "all match"
rate when the full deck shares that unit or attribute, so a card's power
is precomputed for every sharing case.
"""

import logging
import math
from dataclasses import dataclass
from itertools import combinations

from sekaideck.models.card import CardPowerCases, CardPowerDetail
from sekaideck.models.failure import NotFoundError
from sekaideck.models.master import AreaItemLevel, Card, CardEpisode, CharacterRank, Honor, MasterLesson
from sekaideck.models.user import EPISODE_READ, UserArea, UserCard, UserCharacter, UserHonor
from sekaideck.services.data_provider import DataRepository, find_or_raise

logger = logging.getLogger(__name__)

ANY_TARGET = "any"


def unit_subsets(units: tuple[str, ...]) -> list[frozenset[str]]:
    """Every subset of a card's units (cards have at most two)."""
    subsets: list[frozenset[str]] = []
    for size in range(len(units) + 1):
        subsets.extend(frozenset(c) for c in combinations(units, size))
    return subsets


def area_item_rate(
    item: AreaItemLevel,
    character_id: int,
    units: tuple[str, ...],
    attr: str,
    shared_units: frozenset[str],
    shared_attr: bool,
) -> float:
    """Bonus rate one area item grants a card under a sharing case."""
    if item.target_game_character_id is not None:
        return item.power1_bonus_rate if item.target_game_character_id == character_id else 0.0
    if item.target_unit != ANY_TARGET:
        if item.target_unit not in units:
            return 0.0
        if item.target_unit in shared_units:
            return item.power1_all_match_bonus_rate
        return item.power1_bonus_rate
    if item.target_card_attr != ANY_TARGET:
        if item.target_card_attr != attr:
            return 0.0
        return item.power1_all_match_bonus_rate if shared_attr else item.power1_bonus_rate
    return 0.0


@dataclass
class CardPowerCalculator:
    """Computes a card's power cases."""

    repository: DataRepository

    async def get_card_power(
        self,
        user_card: UserCard,
        card: Card,
        units: tuple[str, ...],
        area_item_levels: list[AreaItemLevel],
    ) -> CardPowerCases:
        base = await self.get_base_power(user_card, card)
        rank_rate = await self.get_character_rank_rate(card.character_id)
        character_bonus = math.floor(base * rank_rate / 100)

        cases = CardPowerCases()
        for shared_units in unit_subsets(units):
            for shared_attr in (False, True):
                rate = sum(
                    area_item_rate(
                        item, card.character_id, units, card.attr, shared_units, shared_attr
                    )
                    for item in area_item_levels
                )
                cases.set(
                    shared_units,
                    shared_attr,
                    CardPowerDetail(
                        base=base,
                        area_item_bonus=math.floor(base * rate / 100),
                        character_bonus=character_bonus,
                    ),
                )
        return cases

    async def get_base_power(self, user_card: UserCard, card: Card) -> int:
        """
        Power before percentage bonuses.

        Raises:
            NotFoundError: If the card has no parameters at the owned level
        """
        params = [p for p in card.card_parameters if p.card_level == user_card.level]
        if not params:
            raise NotFoundError("Card parameters", detail=f"card={card.id} level={user_card.level}")
        power = sum(p.power for p in params)

        if user_card.trained:
            power += card.special_training_power

        read_ids = {e.card_episode_id for e in user_card.episodes if e.scenario_status == EPISODE_READ}
        if read_ids:
            episodes = await self.repository.master("cardEpisodes", CardEpisode)
            power += sum(e.power for e in episodes if e.card_id == card.id and e.id in read_ids)

        if user_card.master_rank > 0:
            lessons = await self.repository.master("masterLessons", MasterLesson)
            power += sum(
                lesson.power
                for lesson in lessons
                if lesson.card_rarity_type == card.card_rarity_type
                and lesson.master_rank <= user_card.master_rank
            )
        return power

    async def get_character_rank_rate(self, character_id: int) -> float:
        """
        Power bonus rate from the player's character rank.

        Raises:
            NotFoundError: If the user has no rank record for the character
        """
        user_characters = await self.repository.user("userCharacters", UserCharacter)
        user_character = find_or_raise(
            user_characters,
            lambda c: c.character_id == character_id,
            "User character",
            detail=f"character_id={character_id}",
        )
        ranks = await self.repository.master("characterRanks", CharacterRank)
        for rank in ranks:
            if rank.character_id == character_id and rank.character_rank == user_character.character_rank:
                return rank.power1_bonus_rate
        return 0.0


@dataclass
class AreaItemService:
    """Resolves the player's area items to their level records."""

    repository: DataRepository

    async def get_area_item_levels(self) -> list[AreaItemLevel]:
        user_areas = await self.repository.user("userAreas", UserArea)
        levels = await self.repository.master("areaItemLevels", AreaItemLevel)
        by_key = {(lv.area_item_id, lv.level): lv for lv in levels}

        result: list[AreaItemLevel] = []
        for area in user_areas:
            for item in area.area_items:
                level = by_key.get((item.area_item_id, item.level))
                if level is None:
                    logger.warning(
                        "No level record for area item %d at level %d", item.area_item_id, item.level
                    )
                    continue
                result.append(level)
        return result


@dataclass
class HonorService:
    """Flat deck power from the player's honors."""

    repository: DataRepository

    async def get_honor_bonus_power(self) -> int:
        user_honors = await self.repository.user("userHonors", UserHonor)
        honors = {h.id: h for h in await self.repository.master("honors", Honor)}
        total = 0
        for user_honor in user_honors:
            honor = honors.get(user_honor.honor_id)
            if honor is None:
                continue
            for level in honor.levels:
                if level.level == user_honor.level:
                    total += level.bonus
        return total
