import threading
from dataclasses import dataclass
from typing import List, Optional

from .core import DEFAULT_TEAM_NAME, DESCRIPTION_LANG, NO_DESCRIPTION, NOT_AVAILABLE
from .errors import TeamIsFullError
from .text_utils import title_case, unescape_flavor_text

UNKNOWN_STAT = -1


@dataclass(frozen=True)
class Pokemon:
    id: int
    name: str
    attack: int = UNKNOWN_STAT
    defense: int = UNKNOWN_STAT
    hp: int = UNKNOWN_STAT
    types: Optional[List[str]] = None
    description: Optional[str] = None
    image_url: Optional[str] = None

    @classmethod
    def from_dtos(cls, dto, species):
        """Map the raw PokeAPI records onto the screen model.
        Stats missing from the payload become -1; description is the first English entry.
        """
        def stat(name):
            value = dto.base_stat(name)
            return UNKNOWN_STAT if value is None else value

        description = species.first_flavor_text(DESCRIPTION_LANG) if species is not None else None
        return cls(
            id=dto.id,
            name=title_case(dto.name),
            attack=stat('attack'),
            defense=stat('defense'),
            hp=stat('hp'),
            types=list(dto.types) if dto.types is not None else None,
            description=unescape_flavor_text(description) if description is not None else None,
            image_url=dto.sprites.front_default if dto.sprites else None,
        )

    def to_display(self) -> dict:
        def fmt(v):
            return NOT_AVAILABLE if v == UNKNOWN_STAT else str(v)

        return {
            'id': self.id,
            'name': self.name,
            'image_url': self.image_url,
            'attack': fmt(self.attack),
            'defense': fmt(self.defense),
            'hp': fmt(self.hp),
            'types': ', '.join(self.types) if self.types is not None else NOT_AVAILABLE,
            'description': self.description or NO_DESCRIPTION,
        }


class Team:
    """A named roster of at most ``max_size`` Pokémon with unique names.
    Safe to share between request threads.
    """

    def __init__(self, name: str, max_size: int = 6):
        if max_size < 1:
            raise ValueError('max_size must be at least 1')
        self.name = name
        self.max_size = max_size
        self._members: List[Pokemon] = []
        self._lock = threading.RLock()

    @property
    def all_pokemon(self) -> List[Pokemon]:
        with self._lock:
            return list(self._members)

    @property
    def is_full(self) -> bool:
        with self._lock:
            return len(self._members) >= self.max_size

    def __len__(self):
        with self._lock:
            return len(self._members)

    def __iter__(self):
        return iter(self.all_pokemon)

    def find(self, name: str) -> Optional[Pokemon]:
        with self._lock:
            for p in self._members:
                if p.name == name:
                    return p
        return None

    def contains(self, pokemon: Pokemon) -> bool:
        with self._lock:
            return pokemon in self._members

    __contains__ = contains

    def add(self, pokemon: Pokemon) -> bool:
        with self._lock:
            # capacity is checked before the duplicate check
            if self.is_full:
                raise TeamIsFullError(self.name, self.max_size)
            if self.find(pokemon.name) is not None:
                return False
            self._members.append(pokemon)
            return True

    def remove(self, pokemon: Pokemon) -> bool:
        with self._lock:
            if pokemon not in self._members:
                return False
            self._members.remove(pokemon)
            return True


class Pokedex:
    """All teams for the lifetime of the process; starts with one default team."""

    def __init__(self, team_size: int = 6, default_team_name: str = DEFAULT_TEAM_NAME):
        self.team_size = team_size
        self.teams: List[Team] = [Team(default_team_name, team_size)]

    @property
    def current_team(self) -> Team:
        return self.teams[0]

    def get_team(self, name: str) -> Optional[Team]:
        for t in self.teams:
            if t.name == name:
                return t
        return None

    def add_team(self, name: str) -> Team:
        existing = self.get_team(name)
        if existing is not None:
            return existing
        team = Team(name, self.team_size)
        self.teams.append(team)
        return team
