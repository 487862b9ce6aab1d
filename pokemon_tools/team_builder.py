import logging
import random
from typing import List, Optional

from pokemon_tools.models import (
    FetchFailure,
    FetchReport,
    Pokemon,
    PokemonTeam,
    TeamPokemon,
)
from pokemon_tools.pokemon_client import PokemonAPIClient, PokemonAPIError

logger = logging.getLogger(__name__)

MAX_TEAM_SIZE = 6
MAX_POKEMON_PER_TYPE = 10
DEFAULT_TYPES = ["fire", "water", "grass", "electric", "psychic", "dragon"]


def get_type_queries(preferred_types: Optional[List[str]] = None) -> List[str]:
    """Types to draw team members from: the preferred ones, else a balanced default."""
    if preferred_types:
        return list(preferred_types)
    return list(DEFAULT_TYPES)


def fetch_pokemon_by_types(
    client: PokemonAPIClient, type_queries: List[str], rng: random.Random
) -> FetchReport:
    """
    Picks one random Pokemon among the first few members of each type.

    A type whose lookup fails contributes nobody, so the report may hold fewer
    Pokemon than types were attempted. Failures are recorded under the type name.
    """
    report = FetchReport()
    for type_name in type_queries[:MAX_TEAM_SIZE]:
        report.attempted.append(type_name)
        try:
            members = client.get_type_members(type_name)[:MAX_POKEMON_PER_TYPE]
            if not members:
                report.failures.append(
                    FetchFailure(name=type_name, reason="No Pokemon listed for type")
                )
                continue
            report.pokemon.append(client.get_pokemon_data(rng.choice(members)))
        except PokemonAPIError as e:
            logger.error("Error fetching %s Pokemon: %s", type_name, e)
            report.failures.append(FetchFailure(name=type_name, reason=str(e)))
    return report


def get_role(pokemon: Pokemon) -> str:
    primary = pokemon.types[0] if pokemon.types else "versatile"
    return f"{primary[:1].upper()}{primary[1:]} specialist"


def create_team_structure(team_concept: str, report: FetchReport) -> PokemonTeam:
    team = [
        TeamPokemon(
            **pokemon.model_dump(),
            role=get_role(pokemon),
            team_concept=team_concept,
        )
        for pokemon in report.pokemon[:MAX_TEAM_SIZE]
    ]
    return PokemonTeam(
        concept=team_concept,
        team=team,
        synergy=(
            f'This team is built around the concept: "{team_concept}". '
            "Each Pokémon brings unique strengths that complement the overall strategy."
        ),
    )


def build_pokemon_team(
    client: PokemonAPIClient,
    team_concept: str,
    preferred_types: Optional[List[str]] = None,
    rng: Optional[random.Random] = None,
) -> PokemonTeam:
    """
    Builds a team of up to six Pokemon, one per type.

    Pass a seeded `rng` to make the member selection reproducible.
    """
    if rng is None:
        rng = random.Random()

    report = fetch_pokemon_by_types(client, get_type_queries(preferred_types), rng)
    logger.info("Team '%s': %s", team_concept, report.summary())
    return create_team_structure(team_concept, report)
