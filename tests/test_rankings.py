import os
import sys
import unittest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from fakes import STAT_NAMES, FakePokemonAPIClient, make_pokemon_payload
from pokemon_tools.models import FetchFailure, Pokemon
from pokemon_tools.rankings import (
    MAX_RANKING_POOL,
    POPULAR_POKEMON,
    STAT_CRITERIA,
    create_ranked_list,
    fetch_pokemon_safely,
    get_pokemon_rankings,
    get_stat_value,
)


def pokemon(name, speed, total_padding=0):
    # speed is the last stat; padding shifts the total without touching speed
    return Pokemon.from_api(
        make_pokemon_payload(name, stats=(50 + total_padding, 50, 50, 50, 50, speed))
    )


class TestRankingLogic(unittest.TestCase):
    def setUp(self):
        self.slow = pokemon("slowpoke", 15)
        self.mid = pokemon("pikachu", 90)
        self.fast = pokemon("ninjask", 160)

    def test_descending_by_stat(self):
        ranking = create_ranked_list([self.mid, self.slow, self.fast], "speed")
        self.assertEqual(
            [e.pokemon.name for e in ranking.rankings], ["ninjask", "pikachu", "slowpoke"]
        )
        self.assertEqual([e.rank for e in ranking.rankings], [1, 2, 3])
        self.assertEqual([e.stat_value for e in ranking.rankings], [160, 90, 15])

    def test_ascending_by_stat(self):
        ranking = create_ranked_list([self.mid, self.slow, self.fast], "speed", order="asc")
        self.assertEqual(
            [e.pokemon.name for e in ranking.rankings], ["slowpoke", "pikachu", "ninjask"]
        )

    def test_ties_prefer_higher_total(self):
        low_total = pokemon("plusle", 95)
        high_total = pokemon("minun", 95, total_padding=30)

        for order in ("desc", "asc"):
            ranking = create_ranked_list([low_total, high_total], "speed", order=order)
            self.assertEqual([e.pokemon.name for e in ranking.rankings], ["minun", "plusle"])

    def test_limit_truncates_but_total_found_counts_all(self):
        ranking = create_ranked_list([self.mid, self.slow, self.fast], "speed", limit=2)
        self.assertEqual(len(ranking.rankings), 2)
        self.assertEqual(ranking.total_found, 3)
        self.assertEqual(ranking.rankings[-1].rank, 2)

    def test_entries_carry_total_stats(self):
        ranking = create_ranked_list([self.fast], "speed", type_filter="bug")
        self.assertEqual(ranking.rankings[0].total_stats, self.fast.total_stats)
        self.assertEqual(ranking.type_filter, "bug")
        self.assertEqual(ranking.criteria, "speed")

    def test_criteria_mapping(self):
        self.assertEqual(get_stat_value(self.fast, "speed"), 160)
        self.assertEqual(get_stat_value(self.fast, "Speed"), 160)
        self.assertEqual(get_stat_value(self.fast, "hp"), 50)
        self.assertEqual(get_stat_value(self.fast, "total-stats"), self.fast.total_stats)
        self.assertEqual(get_stat_value(self.fast, "overall"), self.fast.total_stats)
        self.assertEqual(get_stat_value(self.fast, "cuteness"), self.fast.total_stats)

    def test_every_stat_criterion_ranks_by_its_stat(self):
        self.assertEqual(STAT_CRITERIA, set(STAT_NAMES))
        distinct = Pokemon.from_api(make_pokemon_payload("mew", stats=(11, 22, 33, 44, 55, 66)))

        for position, criteria in enumerate(STAT_NAMES):
            with self.subTest(criteria=criteria):
                self.assertEqual(get_stat_value(distinct, criteria), (position + 1) * 11)

                candidates = []
                for name, value in [("low", 30), ("high", 90), ("mid", 60)]:
                    stats = [50] * len(STAT_NAMES)
                    stats[position] = value
                    candidates.append(
                        Pokemon.from_api(make_pokemon_payload(name, stats=stats))
                    )

                ranking = create_ranked_list(candidates, criteria)
                self.assertEqual(
                    [e.pokemon.name for e in ranking.rankings], ["high", "mid", "low"]
                )
                self.assertEqual([e.stat_value for e in ranking.rankings], [90, 60, 30])

    def test_empty_input(self):
        ranking = create_ranked_list([], "attack")
        self.assertEqual(ranking.rankings, [])
        self.assertEqual(ranking.total_found, 0)


class TestGetPokemonRankings(unittest.TestCase):
    def test_general_ranking_uses_popular_pool(self):
        payloads = {
            name: make_pokemon_payload(name, id=i + 1, stats=(50, 50, 50, 50, 50, i))
            for i, name in enumerate(POPULAR_POKEMON)
        }
        client = FakePokemonAPIClient(pokemon=payloads)

        ranking = get_pokemon_rankings(client, "speed", limit=5)

        self.assertEqual(client.requested, POPULAR_POKEMON[:15])
        self.assertEqual(len(ranking.rankings), 5)
        self.assertEqual(ranking.total_found, 15)
        self.assertEqual(ranking.rankings[0].pokemon.name, POPULAR_POKEMON[14])

    def test_pool_is_capped(self):
        client = FakePokemonAPIClient()
        members = [f"mon-{i}" for i in range(100)]
        client.types["water"] = members

        get_pokemon_rankings(client, "defense", pokemon_type="water", limit=50)

        self.assertEqual(len(client.requested), MAX_RANKING_POOL)
        self.assertEqual(client.requested, members[:MAX_RANKING_POOL])

    def test_failed_candidates_are_dropped(self):
        client = FakePokemonAPIClient(
            pokemon={
                "charmander": make_pokemon_payload("charmander", types=("fire",)),
                "vulpix": make_pokemon_payload("vulpix", types=("fire",)),
            },
            types={"fire": ["charmander", "missingno", "vulpix"]},
        )

        ranking = get_pokemon_rankings(client, "attack", pokemon_type="fire", limit=3)

        self.assertEqual(ranking.total_found, 2)
        self.assertEqual(
            sorted(e.pokemon.name for e in ranking.rankings), ["charmander", "vulpix"]
        )
        self.assertEqual(ranking.type_filter, "fire")

    def test_unknown_type_falls_back_to_popular(self):
        client = FakePokemonAPIClient(
            pokemon={"charizard": make_pokemon_payload("charizard")}
        )

        with self.assertLogs("pokemon_tools.rankings", level="WARNING"):
            ranking = get_pokemon_rankings(client, "hp", pokemon_type="shadow", limit=1)

        self.assertEqual(client.requested, POPULAR_POKEMON[:3])
        self.assertEqual([e.pokemon.name for e in ranking.rankings], ["charizard"])

    def test_fetch_report_tracks_failures(self):
        client = FakePokemonAPIClient(pokemon={"mew": make_pokemon_payload("mew")})

        report = fetch_pokemon_safely(client, ["mew", "missingno"])

        self.assertEqual(report.attempted, ["mew", "missingno"])
        self.assertEqual([p.name for p in report.pokemon], ["mew"])
        self.assertEqual(
            report.failures,
            [FetchFailure(name="missingno", reason="Pokemon data not available")],
        )
        self.assertEqual(report.summary(), "1/2 fetched, 1 dropped")

    def test_repeated_failures_are_all_recorded(self):
        report = fetch_pokemon_safely(FakePokemonAPIClient(), ["toxapex", "toxapex"])

        self.assertEqual(report.failed, 2)
        self.assertEqual([f.name for f in report.failures], ["toxapex", "toxapex"])
        self.assertEqual(report.summary(), "0/2 fetched, 2 dropped")


if __name__ == "__main__":
    unittest.main()
