"""User data records (the player's owned cards, character ranks, areas)."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

EPISODE_READ = "already_read"
TRAINING_DONE = "done"


class UserRecord(BaseModel):
    """Base for user data rows."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class UserCardEpisode(UserRecord):
    card_episode_id: int
    scenario_status: str = "unreleased"


class UserCard(UserRecord):
    card_id: int
    level: int = 1
    skill_level: int = 1
    master_rank: int = 0
    special_training_status: str = "not_doing"
    episodes: tuple[UserCardEpisode, ...] = ()

    @property
    def trained(self) -> bool:
        return self.special_training_status == TRAINING_DONE


class UserCharacter(UserRecord):
    character_id: int
    character_rank: int = 1


class UserAreaItem(UserRecord):
    area_item_id: int
    level: int


class UserArea(UserRecord):
    area_id: int
    area_items: tuple[UserAreaItem, ...] = ()


class UserHonor(UserRecord):
    honor_id: int
    level: int = 1
