import os

# Constants
DEFAULT_POKEAPI_BASE = 'https://pokeapi.co/api/v2'
POKEMON_ENDPOINT = 'pokemon'
SPECIES_ENDPOINT = 'pokemon-species'

DEFAULT_TEAM_NAME = 'The very best like no one ever was'
NO_DESCRIPTION = 'No description available.'
NOT_AVAILABLE = 'N/A'
DESCRIPTION_LANG = 'en'


def _env_int(name, default):
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name, default):
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def load_settings(overrides=None) -> dict:
    """Read runtime settings from the environment.
    Explicit overrides (e.g. from a test or the app factory) win over env vars.
    """
    settings = {
        'POKEAPI_BASE': (os.environ.get('POKEAPI_BASE') or DEFAULT_POKEAPI_BASE).rstrip('/'),
        # how many ids (1..N) get downloaded in the background at startup
        'PREFETCH_COUNT': _env_int('POKEDEX_PREFETCH_COUNT', 10),
        'PREFETCH_WORKERS': _env_int('POKEDEX_PREFETCH_WORKERS', 10),
        'PREFETCH_ENABLED': os.environ.get('POKEDEX_PREFETCH', '1').strip().lower() not in {'0', 'false', 'no', 'off'},
        'HTTP_TIMEOUT': _env_float('POKEDEX_HTTP_TIMEOUT', 20.0),
        'TEAM_SIZE': _env_int('POKEDEX_TEAM_SIZE', 6),
    }
    if overrides:
        settings.update({k: v for k, v in overrides.items() if k in settings})
    settings['POKEAPI_BASE'] = str(settings['POKEAPI_BASE']).rstrip('/')
    if settings['PREFETCH_COUNT'] < 0:
        settings['PREFETCH_COUNT'] = 0
    if settings['PREFETCH_WORKERS'] < 1:
        settings['PREFETCH_WORKERS'] = 1
    if settings['TEAM_SIZE'] < 1:
        settings['TEAM_SIZE'] = 1
    return settings
