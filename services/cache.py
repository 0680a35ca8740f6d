"""In-process cache of PokeAPI records keyed by Pokémon id.

Entries are write-once: the first stored pair for an id wins and is never
replaced. Concurrent misses for the same key share one download.
"""
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor, wait
from dataclasses import dataclass

from .api import FetchResult
from .dto import PokemonDto, PokemonSpeciesDto
from .errors import DtoError
from .text_utils import normalize_query

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    pokemon: PokemonDto
    species: PokemonSpeciesDto


def _key(id_or_name):
    if isinstance(id_or_name, bool):
        raise TypeError('cache keys are ids or names')
    if isinstance(id_or_name, int):
        return id_or_name
    q = normalize_query(str(id_or_name))
    if q.isascii() and q.isdigit():
        return int(q)
    return q


class PokeCache:
    def __init__(self, client, prefetch_count=10, max_workers=10):
        self.client = client
        self.prefetch_count = prefetch_count
        self._entries = {}  # id -> CacheEntry
        self._names = {}  # lower-case name -> id
        self._in_flight = {}  # key -> Future[FetchResult]
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix='prefetch')
        self._prefetch_futures = []
        self.download_count = 0

    def __len__(self):
        with self._lock:
            return len(self._entries)

    def __contains__(self, id_or_name):
        return self.lookup(id_or_name) is not None

    def ids(self):
        with self._lock:
            return sorted(self._entries)

    def _lookup_locked(self, key):
        if isinstance(key, int):
            return self._entries.get(key)
        pid = self._names.get(key)
        return self._entries.get(pid) if pid is not None else None

    def lookup(self, id_or_name):
        key = _key(id_or_name)
        with self._lock:
            return self._lookup_locked(key)

    def store(self, pokemon_dto, species_dto):
        """Insert if absent; returns whichever entry ends up cached for the id."""
        entry = CacheEntry(pokemon_dto, species_dto)
        with self._lock:
            existing = self._entries.get(pokemon_dto.id)
            if existing is not None:
                return existing
            self._entries[pokemon_dto.id] = entry
            self._names[pokemon_dto.name.lower()] = pokemon_dto.id
        return entry

    def get_or_fetch(self, id_or_name) -> FetchResult:
        key = _key(id_or_name)
        hit = self.lookup(key)
        if hit is not None:
            log.debug('cache hit for %s', key)
            return FetchResult.success(hit)

        with self._lock:
            hit = self._lookup_locked(key)
            if hit is not None:
                return FetchResult.success(hit)
            future = self._in_flight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._in_flight[key] = future
                self.download_count += 1
        if not owner:
            log.debug('joining in-flight fetch for %s', key)
            return future.result()

        try:
            result = self._download(key)
        except Exception as e:  # noqa: BLE001 - waiters must always be released
            log.exception('unexpected failure fetching %s', key)
            result = FetchResult.failure(e)
        finally:
            with self._lock:
                self._in_flight.pop(key, None)
        future.set_result(result)
        return result

    def _download(self, key) -> FetchResult:
        log.info('cache miss for %s, fetching from PokeAPI', key)
        res = self.client.fetch_pair(key)
        if not res.ok:
            return res
        pkmn_text, species_text = res.value
        try:
            pkmn = PokemonDto.from_json(pkmn_text)
            species = PokemonSpeciesDto.from_json(species_text)
        except DtoError as e:
            log.warning('bad payload for %s: %s', key, e)
            return FetchResult.failure(f'Could not read PokeAPI response: {e}')
        # only a matching pair answering the requested key may claim a slot
        requested = pkmn.id if isinstance(key, int) else pkmn.name
        if pkmn.id != species.id or requested != key:
            log.warning('mismatched payloads for %s: pokemon %s/%s, species %s', key, pkmn.id, pkmn.name, species.id)
            return FetchResult.failure(f'PokeAPI returned mismatched data for "{key}".')
        return FetchResult.success(self.store(pkmn, species))

    def _prefetch_one(self, pid):
        res = self.get_or_fetch(pid)
        if not res.ok:
            log.warning('prefetch of %s failed: %s', pid, res.error)
        return res

    def start_prefetch(self, count=None):
        """Download ids 1..count in the background; failures are only logged."""
        n = self.prefetch_count if count is None else count
        futures = [self._executor.submit(self._prefetch_one, pid) for pid in range(1, n + 1)]
        self._prefetch_futures.extend(futures)
        log.info('prefetching %d Pokémon', n)
        return futures

    @property
    def prefetch_done(self) -> bool:
        return all(f.done() for f in self._prefetch_futures)

    def wait_for_prefetch(self, timeout=None) -> bool:
        _, pending = wait(list(self._prefetch_futures), timeout=timeout)
        return not pending

    def shutdown(self):
        self._executor.shutdown(wait=False)
