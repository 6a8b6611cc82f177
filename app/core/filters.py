import logging
import re
from collections.abc import Mapping
from typing import Any

from app.core.language import resolve_language
from app.models import SortSpec

logger = logging.getLogger(__name__)

# sortBy value -> record field path ("name" is resolved per language)
SORT_FIELDS = {
    "hp": "base.HP",
    "attack": "base.Attack",
    "defense": "base.Defense",
    "speed": "base.Speed",
    "id": "id",
}


def build_filters(params: Mapping[str, Any], lang: str | None) -> dict[str, dict[str, Any]]:
    """
    Builds a store filter from raw query parameters.

    Recognised keys: name, type, minHP, maxHP, minAttack. All present keys are
    AND-combined; absent or unusable values impose no constraint.
    """
    filters: dict[str, dict[str, Any]] = {}
    selected_lang = resolve_language(lang)

    # --- NAME: only the display language is searched ---
    name = params.get("name")
    if name:
        filters[f"name.{selected_lang}"] = {"$regex": re.escape(str(name)), "$options": "i"}

    # --- TYPE ---
    types = _as_labels(params.get("type"))
    if types:
        filters["type"] = {"$in": types}

    # --- HP: closed range when both bounds are given ---
    hp_range = {}
    min_hp = _parse_int(params.get("minHP"), "minHP")
    if min_hp is not None:
        hp_range["$gte"] = min_hp
    max_hp = _parse_int(params.get("maxHP"), "maxHP")
    if max_hp is not None:
        hp_range["$lte"] = max_hp
    if hp_range:
        filters["base.HP"] = hp_range

    # --- ATTACK: lower bound only ---
    min_attack = _parse_int(params.get("minAttack"), "minAttack")
    if min_attack is not None:
        filters["base.Attack"] = {"$gte": min_attack}

    return filters


def build_sort(sort_by: str | None, order: str | None, lang: str | None) -> SortSpec:
    """Maps a sortBy/order pair onto a single-key sort, defaulting to ascending id."""
    descending = order == "desc"

    if sort_by == "name":
        return SortSpec(field=f"name.{resolve_language(lang)}", descending=descending)
    if sort_by in SORT_FIELDS:
        return SortSpec(field=SORT_FIELDS[sort_by], descending=descending)

    # Unknown or missing key ignores the requested order
    return SortSpec()


def _as_labels(value: Any) -> list[str]:
    if not value:
        return []
    values = value if isinstance(value, (list, tuple, set)) else [value]
    return [str(label) for label in values if label]


def _parse_int(value: Any, param: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric {param} filter value: {value!r}")
        return None
