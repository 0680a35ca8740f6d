"""PokeAPI access: the ``pokemon`` and ``pokemon-species`` endpoints.

Every call returns a :class:`FetchResult` instead of raising, so callers on the
interactive path always get control back.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter

from .core import DEFAULT_POKEAPI_BASE, POKEMON_ENDPOINT, SPECIES_ENDPOINT
from .errors import FetchError

log = logging.getLogger(__name__)

ENDPOINTS = (POKEMON_ENDPOINT, SPECIES_ENDPOINT)


@dataclass(frozen=True)
class FetchResult:
    ok: bool
    value: Any = None
    error: Optional[str] = None
    status_code: Optional[int] = None

    @classmethod
    def success(cls, value):
        return cls(True, value=value)

    @classmethod
    def failure(cls, error, status_code=None):
        return cls(False, error=str(error), status_code=status_code)

    def unwrap(self):
        if not self.ok:
            raise FetchError(self.error or 'fetch failed', status_code=self.status_code)
        return self.value


def _build_session():
    s = requests.Session()
    # no retries: a failed request is reported to the caller as-is
    adapter = HTTPAdapter(pool_connections=10, pool_maxsize=20)
    s.mount('http://', adapter)
    s.mount('https://', adapter)
    s.headers.update({
        'User-Agent': 'pokedex-teams/1.0',
        'Accept': 'application/json',
    })
    return s


class PokeApiClient:
    def __init__(self, base_url=DEFAULT_POKEAPI_BASE, timeout=20.0, session=None, max_workers=8):
        self.base_url = (base_url or DEFAULT_POKEAPI_BASE).rstrip('/')
        self.timeout = timeout
        self.session = session if session is not None else _build_session()
        # both endpoints of one search are fetched side by side here
        self._executor = ThreadPoolExecutor(max_workers=max(2, max_workers), thread_name_prefix='pokeapi')

    def url_for(self, endpoint: str, id_or_name) -> str:
        if endpoint not in ENDPOINTS:
            raise ValueError(f'unknown endpoint {endpoint!r}')
        # a single escaped path segment, so "../type/1" cannot leave the endpoint
        segment = quote(str(id_or_name).strip().lower(), safe='')
        return f"{self.base_url}/{endpoint}/{segment}"

    def fetch_text(self, endpoint: str, id_or_name) -> FetchResult:
        url = self.url_for(endpoint, id_or_name)
        try:
            r = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            log.warning('GET %s failed: %s', url, e)
            return FetchResult.failure(f'Could not reach PokeAPI ({e.__class__.__name__}).')
        if r.status_code == 404:
            return FetchResult.failure(f'No Pokémon found for "{id_or_name}".', status_code=404)
        if not 200 <= r.status_code < 300:
            log.warning('GET %s returned HTTP %s', url, r.status_code)
            return FetchResult.failure(f'PokeAPI returned HTTP {r.status_code}.', status_code=r.status_code)
        return FetchResult.success(r.text)

    def fetch_pokemon(self, id_or_name) -> FetchResult:
        return self.fetch_text(POKEMON_ENDPOINT, id_or_name)

    def fetch_species(self, id_or_name) -> FetchResult:
        return self.fetch_text(SPECIES_ENDPOINT, id_or_name)

    def fetch_pair(self, id_or_name) -> FetchResult:
        """Fetch both endpoints concurrently and wait for both.
        Succeeds with ``(pokemon_text, species_text)`` only if both calls succeeded.
        """
        pkmn_future = self._executor.submit(self.fetch_pokemon, id_or_name)
        species_future = self._executor.submit(self.fetch_species, id_or_name)
        pkmn, species = pkmn_future.result(), species_future.result()
        for res in (pkmn, species):
            if not res.ok:
                return res
        return FetchResult.success((pkmn.value, species.value))

    def close(self):
        self._executor.shutdown(wait=False)
        self.session.close()
