class PokedexError(Exception):
    """Base class for errors raised by the Pokédex services."""


class InvalidQueryError(PokedexError, ValueError):
    """The search text is empty or not a usable id/name."""


class TeamIsFullError(PokedexError):
    def __init__(self, team_name: str, max_size: int):
        self.team_name = team_name
        self.max_size = max_size
        super().__init__(f"{team_name} already has {max_size} Pokémon. Remove one before adding another.")


class FetchError(PokedexError):
    """Transport failure talking to PokeAPI (connection, timeout, non-2xx)."""

    def __init__(self, message: str, status_code=None, url=None):
        self.status_code = status_code
        self.url = url
        super().__init__(message)


class DtoError(PokedexError, ValueError):
    """Payload could not be turned into a DTO."""
