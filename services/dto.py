"""Flat records mirroring the PokeAPI ``/pokemon`` and ``/pokemon-species`` payloads.

Only the fields the Pokédex screen reads are kept. Optional parts of the
payload (stats, types, sprites, flavor text) may be missing and are tolerated.
"""
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError, field_validator, model_validator

from .errors import DtoError


def _named(obj):
    # PokeAPI "named resource": {"name": ..., "url": ...}
    if isinstance(obj, dict):
        return obj.get('name')
    return obj


class _Dto(BaseModel):
    model_config = ConfigDict(frozen=True, extra='ignore')

    @classmethod
    def from_dict(cls, data):
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise DtoError(f'{cls.__name__}: {e.error_count()} invalid field(s): {e.errors()[0]["msg"]}') from e

    @classmethod
    def from_json(cls, text):
        try:
            return cls.model_validate_json(text)
        except ValidationError as e:
            raise DtoError(f'{cls.__name__}: {e.error_count()} invalid field(s): {e.errors()[0]["msg"]}') from e
        except TypeError as e:
            raise DtoError(f'{cls.__name__}: payload is not JSON text') from e


class StatDto(_Dto):
    name: str
    base_stat: int

    @model_validator(mode='before')
    @classmethod
    def _flatten(cls, data):
        # {"base_stat": 55, "effort": 0, "stat": {"name": "attack", "url": ...}}
        if isinstance(data, dict) and 'stat' in data:
            return {'name': _named(data['stat']), 'base_stat': data.get('base_stat')}
        return data


class SpritesDto(_Dto):
    front_default: Optional[str] = None


class PokemonDto(_Dto):
    id: StrictInt
    name: str = Field(min_length=1)
    stats: Optional[List[StatDto]] = None
    types: Optional[List[str]] = None
    sprites: SpritesDto = Field(default_factory=SpritesDto)

    @field_validator('types', mode='before')
    @classmethod
    def _type_names(cls, v):
        if not isinstance(v, list):
            return v
        slotted = sorted((t for t in v if isinstance(t, dict)), key=lambda t: t.get('slot') or 0)
        return [_named(t.get('type')) for t in slotted] + [t for t in v if isinstance(t, str)]

    @field_validator('sprites', mode='before')
    @classmethod
    def _no_sprites(cls, v):
        return {} if v is None else v

    def base_stat(self, name: str) -> Optional[int]:
        for s in self.stats or []:
            if s.name == name:
                return s.base_stat
        return None


class FlavorTextDto(_Dto):
    flavor_text: str
    language: str

    @field_validator('language', mode='before')
    @classmethod
    def _language_name(cls, v):
        return _named(v)


class PokemonSpeciesDto(_Dto):
    id: StrictInt
    name: str = Field(min_length=1)
    flavor_text_entries: List[FlavorTextDto] = Field(default_factory=list)

    @field_validator('flavor_text_entries', mode='before')
    @classmethod
    def _no_entries(cls, v):
        return [] if v is None else v

    def first_flavor_text(self, lang: str) -> Optional[str]:
        for e in self.flavor_text_entries:
            if e.language == lang:
                return e.flavor_text
        return None
