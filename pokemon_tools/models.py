from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class PokemonStat(BaseModel):
    name: str
    base_stat: int


class PokemonSprites(BaseModel):
    front_default: Optional[str] = None
    front_shiny: Optional[str] = None


class Pokemon(BaseModel):
    """
    A single Pokemon record, reduced from the raw PokéAPI payload to the
    fields the chat client renders.
    """

    name: str
    id: int
    height: int
    weight: int
    types: List[str]
    abilities: List[str]
    stats: List[PokemonStat]
    sprites: PokemonSprites

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Pokemon":
        """Transforms a raw `/pokemon/{name}` response."""
        sprites = data.get("sprites") or {}
        return cls(
            name=data["name"],
            id=data["id"],
            height=data["height"],
            weight=data["weight"],
            types=[t["type"]["name"] for t in data["types"]],
            abilities=[a["ability"]["name"] for a in data["abilities"]],
            stats=[
                PokemonStat(name=s["stat"]["name"], base_stat=s["base_stat"])
                for s in data["stats"]
            ],
            sprites=PokemonSprites(
                front_default=sprites.get("front_default"),
                front_shiny=sprites.get("front_shiny"),
            ),
        )

    @property
    def total_stats(self) -> int:
        return sum(stat.base_stat for stat in self.stats)

    def get_stat(self, name: str) -> int:
        """Base value of the named stat, 0 if the record does not carry it."""
        for stat in self.stats:
            if stat.name == name:
                return stat.base_stat
        return 0


class TeamPokemon(Pokemon):
    # The chat client reads the concept as camelCase
    model_config = ConfigDict(populate_by_name=True)

    role: str
    team_concept: str = Field(alias="teamConcept")


class PokemonTeam(BaseModel):
    concept: str
    synergy: str
    team: List[TeamPokemon]


class RankingEntry(BaseModel):
    rank: int
    pokemon: Pokemon
    stat_value: int
    total_stats: int


class PokemonRanking(BaseModel):
    criteria: str
    type_filter: Optional[str] = None
    total_found: int
    rankings: List[RankingEntry]


ToolResult = Union[Pokemon, PokemonRanking, PokemonTeam]


class FetchFailure(BaseModel):
    name: str
    reason: str


class FetchReport(BaseModel):
    """
    Outcome of fetching a batch of Pokemon where individual failures are
    tolerated. Only `pokemon` ends up in a tool result; `failures` keeps track
    of who was dropped and why, one entry per failed attempt.
    """

    attempted: List[str] = Field(default_factory=list)
    pokemon: List[Pokemon] = Field(default_factory=list)
    failures: List[FetchFailure] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return len(self.pokemon)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def summary(self) -> str:
        return f"{self.succeeded}/{len(self.attempted)} fetched, {self.failed} dropped"
