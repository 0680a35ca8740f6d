import os
from flask import Flask

from services.api import PokeApiClient
from services.cache import PokeCache
from services.controller import PokedexController
from services.core import load_settings
from services.models import Pokedex
from views.pokedex import bp as pokedex_bp


def create_app(config=None, client=None, cache=None):
    """Build the Pokédex app.
    `client` and `cache` can be injected (tests); otherwise they are built from settings.
    """
    app = Flask(__name__)
    app.json.sort_keys = False

    settings = load_settings(config)
    app.config.update(settings)
    if config:
        app.config.update(config)

    if cache is None:
        if client is None:
            client = PokeApiClient(settings['POKEAPI_BASE'], timeout=settings['HTTP_TIMEOUT'])
        cache = PokeCache(
            client,
            prefetch_count=settings['PREFETCH_COUNT'],
            max_workers=settings['PREFETCH_WORKERS'],
        )

    pokedex = Pokedex(team_size=settings['TEAM_SIZE'])
    app.extensions['pokedex'] = PokedexController(cache, pokedex)

    app.register_blueprint(pokedex_bp)

    if settings['PREFETCH_ENABLED'] and settings['PREFETCH_COUNT'] > 0:
        cache.start_prefetch()
        app.logger.info(f"Prefetching Pokémon 1..{settings['PREFETCH_COUNT']} from {settings['POKEAPI_BASE']}")

    return app


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5000))
    app = create_app()
    try:
        app.run(host='127.0.0.1', port=port, debug=False)
    finally:
        # release the prefetch pool and the HTTP session on shutdown
        app.extensions['pokedex'].cache.shutdown()
        app.extensions['pokedex'].cache.client.close()
