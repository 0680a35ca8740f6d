import pytest

from app import create_app
from services.cache import PokeCache

from .conftest import pokemon_payload, species_payload


@pytest.fixture
def app(client):
    app = create_app(config={'TESTING': True, 'PREFETCH_ENABLED': False, 'TEAM_SIZE': 2}, client=client)
    yield app
    app.extensions['pokedex'].cache.shutdown()


@pytest.fixture
def http(app):
    return app.test_client()


def test_index_renders(http):
    resp = http.get('/')
    assert resp.status_code == 200
    assert b'The very best like no one ever was' in resp.data


def test_search_endpoint(http, session):
    resp = http.post('/api/search', json={'query': '25'})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body['pokemon']['name'] == 'Pikachu'
    assert body['pokemon']['attack'] == '55'
    assert body['pokemon']['types'] == 'electric'

    http.post('/api/search', json={'query': 'pikachu'})
    assert len(session.calls) == 2


def test_search_errors(http):
    resp = http.post('/api/search', json={'query': ''})
    assert resp.status_code == 400
    assert resp.get_json()['kind'] == 'input_error'

    resp = http.post('/api/search', json={'query': 'missingno'})
    assert resp.status_code == 502
    assert resp.get_json()['kind'] == 'fetch_error'

    state = http.get('/api/state').get_json()
    assert state['controls_enabled'] is True


def test_team_flow(http, session):
    session.add_pokemon(pokemon_payload(1, 'bulbasaur'), species_payload(1, 'bulbasaur'))
    session.add_pokemon(pokemon_payload(4, 'charmander'), species_payload(4, 'charmander'))

    assert http.post('/api/team/add').status_code == 400

    http.post('/api/search', json={'query': '25'})
    resp = http.post('/api/team/add')
    assert resp.status_code == 200
    assert resp.get_json()['menu'] == ['Pikachu']
    assert http.post('/api/team/add').get_json()['kind'] == 'not_added'

    http.post('/api/search', json={'query': '1'})
    http.post('/api/team/add')
    http.post('/api/search', json={'query': '4'})
    resp = http.post('/api/team/add')
    assert resp.status_code == 409
    assert resp.get_json()['kind'] == 'team_full'

    resp = http.post('/api/team/remove')
    assert resp.status_code == 404

    resp = http.post('/api/team/select', json={'name': 'Pikachu'})
    assert resp.status_code == 200
    assert resp.get_json()['pokemon']['name'] == 'Pikachu'
    resp = http.post('/api/team/remove')
    assert resp.status_code == 200
    assert http.get('/api/team').get_json()['menu'] == ['Bulbasaur']

    assert http.post('/api/team/select', json={'name': 'Mew'}).status_code == 404
    assert http.post('/api/team/select', json={}).status_code == 400


def test_create_app_prefetches_when_enabled(client, session):
    session.add_pokemon(pokemon_payload(1, 'bulbasaur'), species_payload(1, 'bulbasaur'))
    cache = PokeCache(client, prefetch_count=1, max_workers=1)
    app = create_app(config={'PREFETCH_ENABLED': True, 'PREFETCH_COUNT': 1}, client=client, cache=cache)
    try:
        assert cache.wait_for_prefetch(5)
        assert app.extensions['pokedex'].cache.ids() == [1]
    finally:
        cache.shutdown()


def test_injected_cache_builds_no_client(client, monkeypatch):
    import app as app_module

    def no_client(*args, **kwargs):
        raise AssertionError('PokeApiClient should not be built when a cache is injected')

    monkeypatch.setattr(app_module, 'PokeApiClient', no_client)
    cache = PokeCache(client, prefetch_count=0, max_workers=1)
    try:
        app = create_app(config={'PREFETCH_ENABLED': False}, cache=cache)
        assert app.extensions['pokedex'].cache is cache
    finally:
        cache.shutdown()
