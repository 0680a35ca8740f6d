"""Screen state for the Pokédex page: search, current Pokémon, team edits.

The controller is framework-free; the Flask views only translate its
:class:`Outcome` values into HTTP responses.
"""
import logging
import threading
from dataclasses import dataclass
from typing import Optional

from .errors import InvalidQueryError, TeamIsFullError
from .models import Pokemon
from .text_utils import parse_query

log = logging.getLogger(__name__)

IDLE = 'idle'
BUSY = 'busy'


@dataclass(frozen=True)
class Outcome:
    kind: str  # ok, input_error, busy, fetch_error, team_full, not_added, not_removed, no_selection, not_found
    message: Optional[str] = None
    pokemon: Optional[Pokemon] = None

    @property
    def ok(self) -> bool:
        return self.kind == 'ok'


class PokedexController:
    def __init__(self, cache, pokedex):
        self.cache = cache
        self.pokedex = pokedex
        self.current_team = pokedex.current_team
        self.current_pokemon: Optional[Pokemon] = None
        self.state = IDLE
        self._state_lock = threading.Lock()
        self._menu = []
        self._menu_lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self.state == BUSY

    @property
    def controls_enabled(self) -> bool:
        return not self.busy

    @property
    def panel_visible(self) -> bool:
        return not self.busy and self.current_pokemon is not None

    def _enter_busy(self) -> bool:
        with self._state_lock:
            if self.state == BUSY:
                return False
            self.state = BUSY
            return True

    def _leave_busy(self):
        with self._state_lock:
            self.state = IDLE

    def search(self, text) -> Outcome:
        try:
            query = parse_query(text)
        except InvalidQueryError as e:
            return Outcome('input_error', str(e))

        if not self._enter_busy():
            return Outcome('busy', 'A search is already running, please wait...')
        try:
            res = self.cache.get_or_fetch(query)
            if not res.ok:
                log.warning('search for %r failed: %s', query, res.error)
                return Outcome('fetch_error', res.error or 'Could not load this Pokémon.')
            entry = res.value
            self.current_pokemon = Pokemon.from_dtos(entry.pokemon, entry.species)
            return Outcome('ok', pokemon=self.current_pokemon)
        finally:
            self._leave_busy()

    def add_current(self) -> Outcome:
        p = self.current_pokemon
        if p is None:
            return Outcome('no_selection', 'Search for a Pokémon first.')
        try:
            added = self.current_team.add(p)
        except TeamIsFullError as e:
            return Outcome('team_full', str(e), pokemon=p)
        if not added:
            return Outcome('not_added', f'{p.name} is already part of this team.', pokemon=p)
        log.info('added %s to %s', p.name, self.current_team.name)
        self._rebuild_menu()
        return Outcome('ok', pokemon=p)

    def remove_current(self) -> Outcome:
        p = self.current_pokemon
        if p is None:
            return Outcome('no_selection', 'Search for a Pokémon first.')
        if not self.current_team.remove(p):
            return Outcome(
                'not_removed',
                f'{p.name} is not on the current team.\nYou can add them using the "Add to team" button.',
                pokemon=p,
            )
        log.info('removed %s from %s', p.name, self.current_team.name)
        self._rebuild_menu()
        return Outcome('ok', pokemon=p)

    def _rebuild_menu(self):
        # built from one locked copy of the roster, so it never mixes two edits
        with self._menu_lock:
            self._menu = [p.name for p in self.current_team.all_pokemon]

    def menu(self):
        with self._menu_lock:
            return list(self._menu)

    def select_member(self, name) -> Outcome:
        p = self.current_team.find(name)
        if p is None:
            return Outcome('not_found', f'{name} is not on the current team.')
        self.current_pokemon = p
        return Outcome('ok', pokemon=p)

    def snapshot(self) -> dict:
        return {
            'state': self.state,
            'controls_enabled': self.controls_enabled,
            'panel_visible': self.panel_visible,
            'current': self.current_pokemon.to_display() if self.current_pokemon else None,
            'team': {
                'name': self.current_team.name,
                'max_size': self.current_team.max_size,
                'members': self.menu(),
            },
            'cache_size': len(self.cache),
        }
