"""
Merge strategies for PUT (full update) and PATCH (partial update).

Both return a new Pokemon and leave the existing one untouched. Keys outside
the four languages / six stats are ignored.

Known asymmetry kept on purpose in the full update: names are replaced only
when the new value is truthy, while stats are replaced whenever the key is
present.
"""
from typing import Any

from app.core.language import SUPPORTED_LANGUAGES
from app.models import BaseStats, Pokemon, PokemonUpdate

STAT_NAMES = tuple(BaseStats.model_fields)


def apply_full_update(existing: Pokemon, payload: PokemonUpdate) -> Pokemon:
    new_names = payload.name or {}
    new_stats = payload.base or {}

    name = existing.name.model_copy(update={
        lang: new_names.get(lang) or getattr(existing.name, lang)
        for lang in SUPPORTED_LANGUAGES
    })
    base = existing.base.model_copy(update={
        stat: new_stats[stat] if stat in new_stats else getattr(existing.base, stat)
        for stat in STAT_NAMES
    })

    return existing.model_copy(update={"name": name, "base": base, **_wholesale_fields(payload)})


def apply_partial_update(existing: Pokemon, payload: PokemonUpdate) -> Pokemon:
    name = existing.name.model_copy(update={
        lang: value
        for lang, value in (payload.name or {}).items()
        if lang in SUPPORTED_LANGUAGES and value
    })
    base = existing.base.model_copy(update={
        stat: value
        for stat, value in (payload.base or {}).items()
        if stat in STAT_NAMES
    })

    return existing.model_copy(update={"name": name, "base": base, **_wholesale_fields(payload)})


def _wholesale_fields(payload: PokemonUpdate) -> dict[str, Any]:
    update: dict[str, Any] = {}
    if payload.type is not None:
        update["type"] = list(payload.type)
    if payload.image is not None:
        update["image"] = payload.image
    if payload.cry is not None:
        update["cry"] = payload.cry
    return update
