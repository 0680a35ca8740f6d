"""Shared fixtures: a fake requests session serving canned PokeAPI payloads."""
import json
import threading

import pytest
import requests

from services.api import PokeApiClient
from services.cache import PokeCache
from services.controller import PokedexController
from services.models import Pokedex

BASE = 'https://pokeapi.test/api/v2'

PIKACHU_SPRITE = 'https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon/25.png'


def pokemon_payload(pid, name, stats=None, types=None, sprite=None):
    data = {'id': pid, 'name': name, 'sprites': {'front_default': sprite}}
    if stats is not None:
        data['stats'] = [{'base_stat': v, 'effort': 0, 'stat': {'name': k, 'url': ''}} for k, v in stats.items()]
    if types is not None:
        data['types'] = [{'slot': i + 1, 'type': {'name': t, 'url': ''}} for i, t in enumerate(types)]
    return data


def species_payload(pid, name, entries=()):
    return {
        'id': pid,
        'name': name,
        'flavor_text_entries': [
            {'flavor_text': text, 'language': {'name': lang, 'url': ''}, 'version': {'name': 'red', 'url': ''}}
            for lang, text in entries
        ],
    }


PIKACHU = pokemon_payload(
    25, 'pikachu',
    stats={'hp': 35, 'attack': 55, 'defense': 40, 'special-attack': 50, 'speed': 90},
    types=['electric'],
    sprite=PIKACHU_SPRITE,
)
PIKACHU_SPECIES = species_payload(25, 'pikachu', [
    ('ja', 'ほっぺたの りょうがわに ちいさい でんきぶくろを もつ。'),
    ('en', 'When several of\nthese POKéMON\ngather, their\felectricity could\nbuild and cause\nlightning storms.'),
    ('en', 'It keeps its tail raised to monitor its surroundings.'),
])


class FakeResponse:
    def __init__(self, status_code, body):
        self.status_code = status_code
        self.text = body if isinstance(body, str) else json.dumps(body)


class FakeSession:
    """Stand-in for requests.Session; counts GETs per URL."""

    def __init__(self, base=BASE):
        self.base = base
        self.routes = {}
        self.calls = []
        self.first_call = threading.Event()
        self.gate = None  # threading.Event; when set on the instance, GETs block until it fires
        self.fail_with = None
        self._lock = threading.Lock()
        self.closed = False

    def add(self, endpoint, key, body, status=200):
        self.routes[f'{self.base}/{endpoint}/{key}'] = (status, body)

    def add_pokemon(self, pokemon, species):
        for key in (pokemon['id'], pokemon['name']):
            self.add('pokemon', key, pokemon)
            self.add('pokemon-species', key, species)

    def get(self, url, timeout=None):
        with self._lock:
            self.calls.append(url)
        self.first_call.set()
        if self.gate is not None:
            self.gate.wait(5)
        if self.fail_with is not None:
            raise self.fail_with
        status, body = self.routes.get(url, (404, 'Not Found'))
        return FakeResponse(status, body)

    def close(self):
        self.closed = True


@pytest.fixture
def session():
    s = FakeSession()
    s.add_pokemon(PIKACHU, PIKACHU_SPECIES)
    return s


@pytest.fixture
def client(session):
    c = PokeApiClient(BASE, timeout=1, session=session)
    yield c
    c.close()


@pytest.fixture
def cache(client):
    c = PokeCache(client, prefetch_count=0, max_workers=4)
    yield c
    c.shutdown()


@pytest.fixture
def controller(cache):
    return PokedexController(cache, Pokedex(team_size=6))


@pytest.fixture
def connection_error():
    return requests.ConnectionError('connection refused')
