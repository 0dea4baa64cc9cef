"""
Deck search engine.

Two modes over index-ordered combinations of a candidate pool:

Best-deck (branch and bound):
- cards that `limit` same-character cards dominate are dropped first
- pool sorted descending by each card's scalar ceiling so strong decks
  are found early and the pruning threshold rises fast
- per-dimension suffix tables (power, event bonus, skill, life) hold the
  best value of each character in the suffix; the top values of the
  characters not yet in the deck give an optimistic completion, and the
  score function applied to it bounds every deck below the node
- that bound only shrinks as the suffix does, so a node stops trying
  further cards at the first one whose bound cannot beat the K-th best
- each complete combination is aggregated once and scored with every
  member as leader

Bonus-target (constraint DFS):
- pool sorted ascending by each card's maximum bonus
- a partial selection is dropped once its guaranteed bonus exceeds the
  upper end of the target range, or once its best completion falls short
  of the lower end
- one deck per distinct achieved bonus, capped at MAX_BONUS_RESULTS

INVARIANT: A selection never holds two cards of one character (or, for
single-character pools, the same card twice).
INVARIANT: Search state lives in one object per invocation; nothing is
shared between invocations.
"""

import logging
from collections.abc import Callable, Collection, Sequence
from dataclasses import dataclass, field
from functools import lru_cache

from sekaideck.analysis.score import ScoreFunction
from sekaideck.config import BONUS_MATCH_TOLERANCE, BONUS_PRECISION, MAX_BONUS_RESULTS
from sekaideck.filtering.dominance import drop_dominated_cards
from sekaideck.models.card import CardDetail, CardPowerDetail
from sekaideck.models.deck import (
    DeckCardDetail,
    DeckCardSkillDetail,
    DeckDetail,
    DeckPowerDetail,
    RecommendDeck,
)
from sekaideck.models.master import MusicMeta
from sekaideck.services.deck_calculator import (
    DeckBonusRules,
    DeckComposition,
    SupportDeckPool,
)

logger = logging.getLogger(__name__)

DebugLog = Callable[[str], None]

_ZERO_POWER = CardPowerDetail(base=0, area_item_bonus=0, character_bonus=0)


def _no_debug(message: str) -> None:
    pass


def _result_key(deck: RecommendDeck) -> tuple[float, tuple[int, ...]]:
    return (-deck.score, deck.card_ids)


@lru_cache(maxsize=4096)
def _placeholder_member(skill: float) -> DeckCardDetail:
    """A powerless member carrying only a skill value, for optimistic decks."""
    return DeckCardDetail(
        card_id=0,
        character_id=0,
        units=(),
        attr="",
        level=0,
        skill_level=0,
        master_rank=0,
        power=_ZERO_POWER,
        skill=DeckCardSkillDetail(skill_id=0, is_post_training=False, score_up=skill, life_recovery=0.0),
    )


# =============================================================================
# CARD CEILINGS
# =============================================================================


@dataclass(frozen=True, slots=True)
class CardCeiling:
    """Best value a card can reach in any deck, per dimension."""

    power: int
    event_bonus: float
    skill: float
    life_recovery: float


def card_ceiling(card: CardDetail) -> CardCeiling:
    return CardCeiling(
        power=card.power.max_total(),
        event_bonus=card.max_event_bonus(),
        skill=card.skill.max_score_bonus(),
        life_recovery=max(c.life_recovery for m in card.skill.variants() for c in m.cases()),
    )


# (value, group) pairs; a group is a character id, or a pool index when
# characters may repeat
Ranked = list[tuple[float, int]]


def _suffix_top_by_group(values: Sequence[float], groups: Sequence[int], depth: int) -> list[Ranked]:
    """
    Top-`depth` of every suffix, counting each group's best value only.

    Entry i covers values[i:]; the extra final entry is empty.
    """
    tables: list[Ranked] = [[] for _ in range(len(values) + 1)]
    best: dict[int, float] = {}
    for i in range(len(values) - 1, -1, -1):
        if values[i] > best.get(groups[i], float("-inf")):
            best[groups[i]] = values[i]
        ranked = sorted(((v, g) for g, v in best.items()), key=lambda p: (-p[0], p[1]))
        tables[i] = ranked[:depth]
    return tables


def _take(ranked: Ranked, count: int, exclude: Collection[int]) -> list[float] | None:
    """The best `count` values of groups outside `exclude`, or None if too few."""
    taken = [value for value, group in ranked if group not in exclude][:count]
    if len(taken) < count:
        return None
    return taken


@dataclass
class SuffixBounds:
    """Per-dimension suffix tables for optimistic completion."""

    power: list[Ranked]
    event_bonus: list[Ranked]
    skill: list[Ranked]
    life_recovery: list[Ranked]

    @classmethod
    def build(
        cls, ceilings: Sequence[CardCeiling], groups: Sequence[int], depth: int
    ) -> "SuffixBounds":
        return cls(
            power=_suffix_top_by_group([c.power for c in ceilings], groups, depth),
            event_bonus=_suffix_top_by_group([c.event_bonus for c in ceilings], groups, depth),
            skill=_suffix_top_by_group([c.skill for c in ceilings], groups, depth),
            life_recovery=_suffix_top_by_group([c.life_recovery for c in ceilings], groups, depth),
        )


# =============================================================================
# BEST-DECK SEARCH
# =============================================================================


@dataclass
class BestDeckSearchState:
    """Results and counters of one best-deck search."""

    limit: int
    results: list[RecommendDeck] = field(default_factory=list)
    evaluated: int = 0
    pruned: int = 0

    @property
    def full(self) -> bool:
        return len(self.results) >= self.limit

    def threshold(self) -> float | None:
        """Score a new deck must beat, or None while results are not full."""
        if not self.full:
            return None
        return self.results[-1].score

    def offer(self, deck: RecommendDeck) -> None:
        threshold = self.threshold()
        if threshold is not None and deck.score <= threshold:
            return
        self.results.append(deck)
        self.results.sort(key=_result_key)
        del self.results[self.limit :]


@dataclass
class BestDeckSearch:
    """
    Branch-and-bound search for the top decks under a score function.

    Args:
        score_function: Monotone deck scorer
        music_meta: Song being played
        member: Deck size (2-5)
        limit: Number of decks to return
        honor_bonus: Flat honor power
        rules: Event bonus rules
        support_pool: World bloom support candidates, if any
        distinct_characters: False for single-character pools
    """

    score_function: ScoreFunction
    music_meta: MusicMeta
    member: int
    limit: int
    honor_bonus: int = 0
    rules: DeckBonusRules = field(default_factory=DeckBonusRules)
    support_pool: SupportDeckPool | None = None
    distinct_characters: bool = True

    def search(self, cards: Sequence[CardDetail], debug_log: DebugLog = _no_debug) -> list[RecommendDeck]:
        if self.limit <= 0:
            debug_log(f"Nothing to search for: limit is {self.limit}")
            return []
        if len(cards) < self.member:
            debug_log(f"Not enough cards to build a {self.member}-card deck: {len(cards)}")
            return []

        if self.distinct_characters:
            cards = drop_dominated_cards(
                cards, self.limit, compare_support=self.support_pool is not None
            )

        ceilings = {c.card_id: card_ceiling(c) for c in cards}
        pool = sorted(cards, key=lambda c: (-self._card_score(ceilings[c.card_id]), c.card_id))
        pool_ceilings = [ceilings[c.card_id] for c in pool]
        if self.distinct_characters:
            groups = [c.character_id for c in pool]
        else:
            groups = list(range(len(pool)))
        bounds = SuffixBounds.build(pool_ceilings, groups, self.member)

        state = BestDeckSearchState(limit=self.limit)
        self._dfs(pool, pool_ceilings, bounds, state, [], set(), 0)

        logger.debug(
            "Best-deck search: pool=%d evaluated=%d pruned=%d results=%d",
            len(pool),
            state.evaluated,
            state.pruned,
            len(state.results),
        )
        debug_log(f"Searched {len(pool)} cards, evaluated {state.evaluated} decks, found {len(state.results)}")
        return state.results

    def _card_score(self, ceiling: CardCeiling) -> float:
        """Score of a deck made of `member` copies of one card's ceiling."""
        return self.score_function(
            self.music_meta, self._optimistic_deck([ceiling] * self.member)
        )

    def _optimistic_deck(
        self,
        ceilings: Sequence[CardCeiling],
        extra_power: float = 0,
        extra_bonus: float = 0,
        extra_skills: Sequence[float] = (),
        extra_life: float = 0,
    ) -> DeckDetail:
        """A deck no real completion of the selection can beat."""
        skills = sorted([*(c.skill for c in ceilings), *extra_skills], reverse=True)
        members = tuple(_placeholder_member(skill) for skill in skills)
        event_bonus = (
            sum(c.event_bonus for c in ceilings)
            + extra_bonus
            + self.rules.max_different_attribute_bonus()
        )
        return DeckDetail(
            cards=members,
            power=DeckPowerDetail(
                base=int(sum(c.power for c in ceilings) + extra_power),
                honor_bonus=self.honor_bonus,
            ),
            event_bonus=event_bonus,
            support_deck_bonus=self.support_pool.max_bonus() if self.support_pool else None,
            life_recovery=sum(c.life_recovery for c in ceilings) + extra_life,
        )

    def _upper_bound(
        self,
        chosen: Sequence[CardCeiling],
        bounds: SuffixBounds,
        start: int,
        exclude: Collection[int],
    ) -> float | None:
        """Optimistic score of any completion from pool[start:], or None if none exists."""
        remaining = self.member - len(chosen)
        power = _take(bounds.power[start], remaining, exclude)
        if power is None:
            return None
        # Every table ranks the same groups
        deck = self._optimistic_deck(
            chosen,
            extra_power=sum(power),
            extra_bonus=sum(_take(bounds.event_bonus[start], remaining, exclude) or ()),
            extra_skills=_take(bounds.skill[start], remaining, exclude) or (),
            extra_life=sum(_take(bounds.life_recovery[start], remaining, exclude) or ()),
        )
        return self.score_function(self.music_meta, deck)

    def _may_improve(
        self,
        chosen: Sequence[CardCeiling],
        bounds: SuffixBounds,
        start: int,
        exclude: Collection[int],
        state: BestDeckSearchState,
    ) -> bool:
        threshold = state.threshold()
        if threshold is None:
            return True
        bound = self._upper_bound(chosen, bounds, start, exclude)
        return bound is not None and bound > threshold

    def _dfs(
        self,
        pool: Sequence[CardDetail],
        pool_ceilings: Sequence[CardCeiling],
        bounds: SuffixBounds,
        state: BestDeckSearchState,
        selection: list[int],
        used_characters: set[int],
        start: int,
    ) -> None:
        chosen = [pool_ceilings[j] for j in selection]
        if len(selection) == self.member:
            if self._may_improve(chosen, bounds, len(pool), (), state):
                self._evaluate([pool[i] for i in selection], state)
            else:
                state.pruned += 1
            return

        # Suffix groups are pool indices when characters may repeat
        exclude = used_characters if self.distinct_characters else ()
        for i in range(start, len(pool)):
            card = pool[i]
            if self.distinct_characters and card.character_id in used_characters:
                continue
            # Branches i, i+1, ... all complete from pool[i:], and this bound
            # only shrinks as i grows
            if not self._may_improve(chosen, bounds, i, exclude, state):
                state.pruned += 1
                break

            selection.append(i)
            used_characters.add(card.character_id)
            self._dfs(pool, pool_ceilings, bounds, state, selection, used_characters, i + 1)
            used_characters.discard(card.character_id)
            selection.pop()

    def _evaluate(self, cards: list[CardDetail], state: BestDeckSearchState) -> None:
        """Score a combination with each member as leader and keep the best."""
        composition = DeckComposition(
            cards,
            honor_bonus=self.honor_bonus,
            rules=self.rules,
            support_pool=self.support_pool,
        )
        best: RecommendDeck | None = None
        for leader_index in range(len(cards)):
            deck = composition.arrange(leader_index)
            state.evaluated += 1
            candidate = RecommendDeck(deck=deck, score=self.score_function(self.music_meta, deck))
            if best is None or _result_key(candidate) < _result_key(best):
                best = candidate
        if best is not None:
            state.offer(best)


# =============================================================================
# BONUS-TARGET SEARCH
# =============================================================================


def _best_completions(cards: Sequence[CardDetail], member: int) -> list[float]:
    """
    Entry k bounds the bonus any k character-unique cards can add.

    -inf where fewer than k characters are left to pick from.
    """
    best: dict[int, float] = {}
    for card in cards:
        best[card.character_id] = max(best.get(card.character_id, 0.0), card.max_event_bonus())
    ranked = sorted(best.values(), reverse=True)

    completions = [0.0]
    for k in range(1, member + 1):
        completions.append(sum(ranked[:k]) if k <= len(ranked) else float("-inf"))
    return completions


@dataclass
class BonusSearchState:
    """Results, dedup set and reach bounds of one bonus-target search."""

    min_bonus: float
    max_bonus: float
    specific_bonuses: tuple[float, ...] = ()
    found: set[float] = field(default_factory=set)
    results: list[RecommendDeck] = field(default_factory=list)
    # best_completions[k]: most bonus k more cards can add
    best_completions: list[float] = field(default_factory=list)
    # Ceiling on attribute table plus support deck bonus
    extra_bonus: float = 0.0

    @property
    def full(self) -> bool:
        return len(self.results) >= MAX_BONUS_RESULTS

    @property
    def floor(self) -> float:
        """Lowest total bonus an accepted deck can have."""
        if not self.specific_bonuses:
            return self.min_bonus
        return max(self.min_bonus, min(self.specific_bonuses) - BONUS_MATCH_TOLERANCE)

    @property
    def ceiling(self) -> float:
        """Highest total bonus an accepted deck can have."""
        if not self.specific_bonuses:
            return self.max_bonus
        return min(self.max_bonus, max(self.specific_bonuses) + BONUS_MATCH_TOLERANCE)

    def can_reach(self, reach: float, remaining: int) -> bool:
        """True if a selection with `reach` max bonus may still hit the floor."""
        best = reach + self.best_completions[remaining] + self.extra_bonus
        return best + BONUS_MATCH_TOLERANCE >= self.floor

    def accepts(self, bonus: float) -> bool:
        if not self.min_bonus <= bonus <= self.max_bonus:
            return False
        if self.specific_bonuses and not any(
            abs(target - bonus) < BONUS_MATCH_TOLERANCE for target in self.specific_bonuses
        ):
            return False
        return bonus not in self.found

    def offer(self, deck: DeckDetail) -> None:
        bonus = round(deck.total_event_bonus, BONUS_PRECISION)
        if self.full or not self.accepts(bonus):
            return
        self.found.add(bonus)
        self.results.append(RecommendDeck(deck=deck, score=bonus))


@dataclass
class BonusTargetSearch:
    """
    DFS for decks whose total event bonus lands in [min_bonus, max_bonus].

    Args:
        member: Deck size (2-5)
        honor_bonus: Flat honor power
        rules: Event bonus rules
        support_pool: World bloom support candidates, if any
    """

    member: int
    honor_bonus: int = 0
    rules: DeckBonusRules = field(default_factory=DeckBonusRules)
    support_pool: SupportDeckPool | None = None

    def search(
        self,
        cards: Sequence[CardDetail],
        min_bonus: float,
        max_bonus: float,
        specific_bonuses: Sequence[float] | None = None,
        debug_log: DebugLog = _no_debug,
    ) -> list[RecommendDeck]:
        pool = sorted(cards, key=lambda c: (c.max_event_bonus(), c.card_id))
        extra_bonus = self.rules.max_different_attribute_bonus()
        if self.support_pool is not None:
            extra_bonus += self.support_pool.max_bonus()
        state = BonusSearchState(
            min_bonus=min_bonus,
            max_bonus=max_bonus,
            specific_bonuses=tuple(specific_bonuses or ()),
            best_completions=_best_completions(pool, self.member),
            extra_bonus=extra_bonus,
        )

        if state.floor > state.ceiling or not state.can_reach(0.0, self.member):
            debug_log(f"No {self.member}-card deck can reach event bonus [{min_bonus}, {max_bonus}]")
            return []

        self._dfs(pool, state, [], set(), 0, 0.0, 0.0)
        state.results.sort(key=lambda r: (r.score, r.card_ids))
        logger.debug(
            "Bonus search [%s, %s]: pool=%d results=%d",
            min_bonus,
            max_bonus,
            len(pool),
            len(state.results),
        )
        debug_log(f"Found {len(state.results)} deck(s) with event bonus in [{min_bonus}, {max_bonus}]")
        return state.results

    def _dfs(
        self,
        pool: Sequence[CardDetail],
        state: BonusSearchState,
        selection: list[CardDetail],
        used_characters: set[int],
        start: int,
        guaranteed: float,
        reach: float,
    ) -> None:
        if state.full:
            return
        if len(selection) == self.member:
            self._evaluate(selection, state)
            return
        # Best completion still short of the range
        if not state.can_reach(reach, self.member - len(selection)):
            return

        for i in range(start, len(pool)):
            if state.full:
                return
            card = pool[i]
            if card.character_id in used_characters:
                continue
            # Guaranteed bonuses only grow as cards are added
            card_guaranteed = guaranteed + card.min_event_bonus()
            if card_guaranteed > state.ceiling:
                continue

            selection.append(card)
            used_characters.add(card.character_id)
            self._dfs(
                pool,
                state,
                selection,
                used_characters,
                i + 1,
                card_guaranteed,
                reach + card.max_event_bonus(),
            )
            used_characters.discard(card.character_id)
            selection.pop()

    def _evaluate(self, cards: list[CardDetail], state: BonusSearchState) -> None:
        """Try the selection as-is and with each leader-bonus card leading."""
        composition = DeckComposition(
            cards,
            honor_bonus=self.honor_bonus,
            rules=self.rules,
            support_pool=self.support_pool,
        )
        state.offer(composition.arrange(0))
        for index, card in enumerate(cards):
            if index > 0 and card.event_bonus is not None and card.event_bonus.leader_bonus > 0:
                state.offer(composition.arrange(index))
