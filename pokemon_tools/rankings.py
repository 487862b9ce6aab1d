import logging
from typing import Iterable, List, Literal, Optional

from pokemon_tools.models import (
    FetchFailure,
    FetchReport,
    Pokemon,
    PokemonRanking,
    RankingEntry,
)
from pokemon_tools.pokemon_client import PokemonAPIClient, PokemonAPIError

logger = logging.getLogger(__name__)

MAX_RANKING_POOL = 60

STAT_CRITERIA = {
    "attack",
    "defense",
    "hp",
    "special-attack",
    "special-defense",
    "speed",
}

# Used for general rankings and when a type filter cannot be resolved
POPULAR_POKEMON = [
    "charizard", "blastoise", "venusaur", "pikachu", "mewtwo", "mew", "lugia", "ho-oh",
    "celebi", "kyogre", "groudon", "rayquaza", "dialga", "palkia", "giratina", "arceus",
    "reshiram", "zekrom", "kyurem", "xerneas", "yveltal", "zygarde", "solgaleo", "lunala",
    "necrozma", "zacian", "zamazenta", "eternatus", "calyrex", "dragonite", "tyranitar",
    "salamence", "metagross", "garchomp", "lucario", "zoroark", "hydreigon", "volcarona",
    "serperior", "emboar", "samurott", "greninja", "talonflame", "goodra", "noivern",
    "decidueye", "incineroar", "primarina", "lycanroc", "toxapex", "kommo-o", "mimikyu",
    "dragapult", "corviknight", "toxapex", "ferrothorn", "magnezone",
]  # fmt: skip

SortOrder = Literal["desc", "asc"]


def get_stat_value(pokemon: Pokemon, criteria: str) -> int:
    """
    Value a Pokemon is ranked by. Named stats map to their base stat;
    'total-stats', 'overall' and anything unrecognized rank by the stat total.
    """
    key = criteria.strip().lower()
    if key in STAT_CRITERIA:
        return pokemon.get_stat(key)
    return pokemon.total_stats


def fetch_ranking_pool(
    client: PokemonAPIClient, pokemon_type: Optional[str], size: int
) -> List[str]:
    """Candidate names: members of `pokemon_type` if it resolves, else popular Pokemon."""
    if pokemon_type:
        try:
            return client.get_type_members(pokemon_type)[:size]
        except PokemonAPIError as e:
            logger.warning("Falling back to popular Pokemon for ranking: %s", e)
    return POPULAR_POKEMON[:size]


def fetch_pokemon_safely(client: PokemonAPIClient, names: Iterable[str]) -> FetchReport:
    """
    Fetches each Pokemon one at a time. Failures are recorded in the report and
    otherwise dropped.
    """
    report = FetchReport()
    for name in names:
        report.attempted.append(name)
        try:
            report.pokemon.append(client.get_pokemon_data(name))
        except PokemonAPIError as e:
            report.failures.append(FetchFailure(name=name, reason=str(e)))
    return report


def create_ranked_list(
    pokemon_data: List[Pokemon],
    criteria: str,
    type_filter: Optional[str] = None,
    limit: int = 10,
    order: SortOrder = "desc",
) -> PokemonRanking:
    """
    Ranks already fetched Pokemon.

    Sorted by the criteria value in the requested order; ties on that value are
    broken by the higher stat total. Ranks are 1-based and gapless.
    """
    scored = [
        (pokemon, get_stat_value(pokemon, criteria), pokemon.total_stats)
        for pokemon in pokemon_data
    ]
    direction = -1 if order == "desc" else 1
    scored.sort(key=lambda item: (direction * item[1], -item[2]))

    rankings = [
        RankingEntry(rank=i + 1, pokemon=pokemon, stat_value=value, total_stats=total)
        for i, (pokemon, value, total) in enumerate(scored[:limit])
    ]

    return PokemonRanking(
        criteria=criteria,
        type_filter=type_filter,
        total_found=len(pokemon_data),
        rankings=rankings,
    )


def get_pokemon_rankings(
    client: PokemonAPIClient,
    criteria: str,
    pokemon_type: Optional[str] = None,
    limit: int = 10,
    order: SortOrder = "desc",
) -> PokemonRanking:
    """
    Builds a ranking of up to `limit` Pokemon by `criteria`.

    The candidate pool is capped at min(limit * 3, 60). Candidates that cannot
    be fetched are left out of the ranking.
    """
    pool = fetch_ranking_pool(client, pokemon_type, min(limit * 3, MAX_RANKING_POOL))
    report = fetch_pokemon_safely(client, pool)

    logger.info("Ranking by %s: %s", criteria, report.summary())
    for failure in report.failures:
        logger.debug("Dropped %s from ranking: %s", failure.name, failure.reason)

    return create_ranked_list(report.pokemon, criteria, pokemon_type, limit, order)
