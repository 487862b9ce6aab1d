import inspect
import logging
import random
from typing import Any, Callable, Dict, List, Literal, Optional, Type

from pydantic import BaseModel, Field, ValidationError, field_validator

from ai_tools.errors import DispatchError
from ai_tools.schemas import ToolInvocation
from pokemon_tools.models import Pokemon, PokemonRanking, PokemonTeam, ToolResult
from pokemon_tools.pokemon_client import PokemonAPIClient, PokemonAPIError
from pokemon_tools.rankings import get_pokemon_rankings
from pokemon_tools.team_builder import build_pokemon_team

logger = logging.getLogger(__name__)


class GetPokemonDataArgs(BaseModel):
    """Get detailed information about a specific Pokémon including stats, types, abilities, and sprites"""

    pokemon_name: str = Field(description="The name or ID of the Pokémon to look up")

    @field_validator("pokemon_name", mode="before")
    @classmethod
    def parse_pokemon_name(cls, v: Any) -> Any:
        if isinstance(v, int):
            return str(v)
        return v


class GetPokemonRankingsArgs(BaseModel):
    """Get ranked lists of Pokémon based on specific criteria like stats, types, or other attributes. Perfect for 'strongest', 'fastest', 'best' type queries."""

    ranking_criteria: str = Field(
        description="The criteria to rank by: 'attack', 'defense', 'hp', 'special-attack', 'special-defense', 'speed', 'total-stats', or 'overall'"
    )
    pokemon_type: Optional[str] = Field(
        default=None,
        description="Optional: Filter by specific Pokémon type (e.g., 'fire', 'water', 'electric')",
    )
    limit: int = Field(
        default=10,
        ge=1,
        description="Number of Pokémon to return in the ranking (default: 10, max: 20)",
    )
    order: Literal["desc", "asc"] = Field(
        default="desc",
        description="Sort order: 'desc' for strongest/highest first, 'asc' for weakest/lowest first",
    )

    @field_validator("pokemon_type", mode="before")
    @classmethod
    def parse_pokemon_type(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().lower() in ["", "null", "none"]:
            return None
        return v

    @field_validator("limit", mode="before")
    @classmethod
    def parse_limit(cls, v: Any) -> Any:
        if not v:
            return 10
        if isinstance(v, (int, float)) and v < 1:
            return 10
        return v

    @field_validator("order", mode="before")
    @classmethod
    def parse_order(cls, v: Any) -> Any:
        # Anything not asking for descending order sorts ascending
        if not v:
            return "desc"
        if isinstance(v, str) and v.strip().lower().startswith("desc"):
            return "desc"
        return "asc"


class BuildPokemonTeamArgs(BaseModel):
    """Create a strategic Pokémon team based on a concept or preferred types"""

    team_concept: str = Field(
        description="The strategic concept for the team (e.g., 'balanced offense', 'stall team', 'weather team')"
    )
    preferred_types: Optional[List[str]] = Field(
        default=None,
        description="Optional array of preferred Pokémon types for the team",
    )


TOOL_ARGS: Dict[str, Type[BaseModel]] = {
    "get_pokemon_data": GetPokemonDataArgs,
    "get_pokemon_rankings": GetPokemonRankingsArgs,
    "build_pokemon_team": BuildPokemonTeamArgs,
}

# Anthropic tool definitions derived from the argument models
POKEMON_TOOLS: List[Dict[str, Any]] = [
    {
        "name": name,
        "description": inspect.cleandoc(args_model.__doc__ or ""),
        "input_schema": args_model.model_json_schema(),
    }
    for name, args_model in TOOL_ARGS.items()
]


class ToolDispatcher:
    """
    Executes tool invocations against PokéAPI.

    `execute` either returns a result model or raises `DispatchError`; a
    failure never affects other invocations.
    """

    def __init__(self, client: PokemonAPIClient, rng: Optional[random.Random] = None):
        self.client = client
        self.rng = rng if rng is not None else random.Random()
        self._handlers: Dict[str, Callable[[Any], ToolResult]] = {
            "get_pokemon_data": self._get_pokemon_data,
            "get_pokemon_rankings": self._get_pokemon_rankings,
            "build_pokemon_team": self._build_pokemon_team,
        }

    def execute(self, invocation: ToolInvocation) -> ToolResult:
        """
        Runs the operation named by the invocation.

        Raises:
            DispatchError: For an unknown tool, invalid arguments, or a failed lookup.
        """
        handler = self._handlers.get(invocation.name)
        if handler is None:
            logger.warning("Unknown tool requested: %s", invocation.name)
            raise DispatchError(invocation.name, f"Unknown tool: {invocation.name}")

        try:
            args = TOOL_ARGS[invocation.name](**invocation.input)
        except ValidationError as e:
            logger.warning(
                "Invalid arguments for %s %s: %s", invocation.name, invocation.input, e
            )
            raise DispatchError(
                invocation.name, f"Invalid arguments for {invocation.name}"
            ) from e

        logger.info("Executing %s(%s)", invocation.name, invocation.input)
        try:
            return handler(args)
        except PokemonAPIError as e:
            logger.warning(
                "%s failed for pokemon=%s: %s", invocation.name, e.pokemon_name, e
            )
            raise DispatchError(invocation.name, str(e)) from e

    def _get_pokemon_data(self, args: GetPokemonDataArgs) -> Pokemon:
        return self.client.get_pokemon_data(args.pokemon_name)

    def _get_pokemon_rankings(self, args: GetPokemonRankingsArgs) -> PokemonRanking:
        return get_pokemon_rankings(
            self.client,
            args.ranking_criteria,
            pokemon_type=args.pokemon_type,
            limit=args.limit,
            order=args.order,
        )

    def _build_pokemon_team(self, args: BuildPokemonTeamArgs) -> PokemonTeam:
        return build_pokemon_team(
            self.client,
            args.team_concept,
            preferred_types=args.preferred_types,
            rng=self.rng,
        )
