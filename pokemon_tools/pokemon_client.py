"""
PokéAPI v2 client for the chat tools.

Every chat request builds its own client (and with it its own
`requests.Session`), so nothing is cached or shared between requests.
"""

import logging
from typing import Any, Dict, List, Optional, Union

import requests

from pokemon_tools.models import Pokemon

logger = logging.getLogger(__name__)


class PokemonAPIError(Exception):
    """
    Typed failure of a PokéAPI lookup. The message is safe to show to a user;
    transport details only go to the log.
    """

    def __init__(self, message: str, pokemon_name: Optional[str] = None):
        super().__init__(message)
        self.pokemon_name = pokemon_name


class PokemonAPIClient:
    """
    Minimal client for the two PokéAPI resources the chat tools need.

    Fair Use Policy:
    - Do not spam the API with high-frequency polling.
    - Handle errors gracefully.
    """

    BASE_URL = "https://pokeapi.co/api/v2"
    REQUEST_TIMEOUT = 10

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        base_url: Optional[str] = None,
    ):
        self.session = session if session is not None else requests.Session()
        self.base_url = base_url or self.BASE_URL

    def _get_url(self, endpoint: str, identifier: Union[str, int, None] = None) -> str:
        url = f"{self.base_url}/{endpoint}"
        if identifier is not None:
            url = f"{url}/{identifier}"
        return url

    def _get(self, endpoint: str, identifier: Union[str, int]) -> Dict[str, Any]:
        """
        Generic GET request. Raises `requests.HTTPError` for non-2xx responses
        and other `requests` exceptions for transport failures.
        """
        url = self._get_url(endpoint, identifier)
        response = self.session.get(url, timeout=self.REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json()

    def get_pokemon_data(self, name: Union[str, int]) -> Pokemon:
        """
        Retrieves one Pokemon by name or national dex id. The lookup is
        case-insensitive.

        Raises:
            PokemonAPIError: If the Pokemon does not exist or PokéAPI is unreachable.
        """
        identifier = str(name).strip().lower()
        try:
            data = self._get("pokemon", identifier)
        except requests.exceptions.HTTPError:
            logger.warning("Pokemon not found: %s", name)
            raise PokemonAPIError("Pokemon data not available", str(name))
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.error("Error fetching Pokemon %s: %s", name, e)
            raise PokemonAPIError("Pokemon data temporarily unavailable", str(name))

        try:
            return Pokemon.from_api(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Unexpected PokéAPI payload for %s: %s", name, e)
            raise PokemonAPIError("Pokemon data temporarily unavailable", str(name))

    def get_type_members(self, type_name: str) -> List[str]:
        """
        Lists the names of all Pokemon of a type, in PokéAPI order.

        Raises:
            PokemonAPIError: If the type does not exist or PokéAPI is unreachable.
        """
        try:
            data = self._get("type", type_name.strip().lower())
            return [p["pokemon"]["name"] for p in data["pokemon"]]
        except requests.exceptions.HTTPError:
            logger.warning("Type not found: %s", type_name)
            raise PokemonAPIError(f"Type '{type_name}' not available")
        except (requests.exceptions.RequestException, KeyError, TypeError, ValueError) as e:
            logger.error("Error fetching type %s: %s", type_name, e)
            raise PokemonAPIError(f"Type '{type_name}' temporarily unavailable")

    def close(self) -> None:
        self.session.close()
