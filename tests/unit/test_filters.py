import pytest
from app.core.filters import build_filters, build_sort
from app.models import SortSpec

# --- FILTER BUILDER ---

def test_empty_params_match_everything():
    assert build_filters({}, "english") == {}


def test_hp_bounds_produce_closed_range():
    filters = build_filters({"minHP": "50", "maxHP": "80"}, "english")

    assert filters == {"base.HP": {"$gte": 50, "$lte": 80}}


def test_single_hp_bound():
    assert build_filters({"maxHP": "80"}, "english") == {"base.HP": {"$lte": 80}}
    assert build_filters({"minHP": "0"}, "english") == {"base.HP": {"$gte": 0}}


def test_single_type_is_normalised_to_membership():
    assert build_filters({"type": "Fire"}, "english") == {"type": {"$in": ["Fire"]}}


def test_multiple_types_and_empty_labels():
    filters = build_filters({"type": ["Water", "", "Ice"]}, "english")

    assert filters == {"type": {"$in": ["Water", "Ice"]}}
    # Only blank labels means no constraint at all
    assert build_filters({"type": [""]}, "english") == {}


def test_name_filter_is_scoped_to_resolved_language():
    """
    The name search only targets the requested language. An unknown language
    falls back to english.
    """
    assert "name.french" in build_filters({"name": "sala"}, "french")
    assert "name.english" in build_filters({"name": "char"}, "klingon")

    condition = build_filters({"name": "char"}, "japanese")["name.japanese"]
    assert condition == {"$regex": "char", "$options": "i"}


def test_name_filter_escapes_regex_characters():
    filters = build_filters({"name": "Mr. Mime (.*)"}, "english")

    assert filters["name.english"]["$regex"] == r"Mr\.\ Mime\ \(\.\*\)"


@pytest.mark.parametrize("value", ["abc", "12abc", "4.5", ""])
def test_non_numeric_bounds_are_ignored(value):
    """Unparseable bounds are dropped rather than producing an unusable comparison."""
    filters = build_filters({"minHP": value, "maxHP": "90", "minAttack": value}, "english")

    assert filters == {"base.HP": {"$lte": 90}}


def test_min_attack_is_lower_bound_only():
    filters = build_filters({"minAttack": "100", "maxAttack": "120"}, "english")

    # There is no maxAttack filter
    assert filters == {"base.Attack": {"$gte": 100}}


def test_all_filters_combine():
    filters = build_filters(
        {"name": "saur", "type": "Grass", "minHP": "40", "minAttack": "50"},
        "english",
    )

    assert set(filters) == {"name.english", "type", "base.HP", "base.Attack"}

# --- SORT BUILDER ---

@pytest.mark.parametrize(
    "sort_by, field",
    [
        ("hp", "base.HP"),
        ("attack", "base.Attack"),
        ("defense", "base.Defense"),
        ("speed", "base.Speed"),
        ("id", "id"),
    ],
)
def test_sort_keys_map_to_record_fields(sort_by, field):
    assert build_sort(sort_by, "desc", "english") == SortSpec(field=field, descending=True)
    assert build_sort(sort_by, "asc", "english") == SortSpec(field=field, descending=False)


def test_hp_desc():
    sort = build_sort("hp", "desc", "english")

    assert sort.field == "base.HP"
    assert sort.descending is True


def test_name_sort_uses_resolved_language():
    assert build_sort("name", None, "chinese") == SortSpec(field="name.chinese")
    assert build_sort("name", None, "elvish") == SortSpec(field="name.english")


def test_missing_sort_defaults_to_ascending_id():
    assert build_sort(None, None, "english") == SortSpec(field="id", descending=False)


def test_unknown_sort_key_ignores_order():
    assert build_sort("weight", "desc", "english") == SortSpec(field="id", descending=False)


def test_any_order_other_than_desc_is_ascending():
    assert build_sort("hp", "DESC", "english").descending is False
    assert build_sort("hp", None, "english").descending is False
