import pytest
from app.core.projection import project_pokemon
from app.models import Pokemon

BULBASAUR = Pokemon(
    id=1,
    name={"english": "Bulbasaur", "japanese": "フシギダネ", "chinese": "妙蛙种子", "french": "Bulbizarre"},
    type=["Grass", "Poison"],
    base={"HP": 45, "Attack": 49, "Defense": 49, "SpecialAttack": 65, "SpecialDefense": 65, "Speed": 45},
    image="/assets/images/001.png",
)


@pytest.mark.parametrize(
    "lang, expected",
    [
        ("english", "Bulbasaur"),
        ("french", "Bulbizarre"),
        ("japanese", "フシギダネ"),
        ("chinese", "妙蛙种子"),
        ("spanish", "Bulbasaur"),
        (None, "Bulbasaur"),
    ],
)
def test_name_is_selected_for_language(lang, expected):
    assert project_pokemon(BULBASAUR, lang).name == expected


def test_projection_passes_other_fields_through():
    """Switching languages must never touch id, type, base or image."""
    original = BULBASAUR.model_dump()

    projections = [project_pokemon(BULBASAUR, lang) for lang in ("english", "french", "chinese")]

    for projection in projections:
        assert projection.id == BULBASAUR.id
        assert projection.type == BULBASAUR.type
        assert projection.base == BULBASAUR.base
        assert projection.image == BULBASAUR.image
        assert projection.cry == ""

    # The source record is left as it was
    assert BULBASAUR.model_dump() == original


def test_projection_does_not_share_mutable_state():
    projection = project_pokemon(BULBASAUR, "english")

    projection.type.append("Fire")
    projection.base.HP = 1

    assert BULBASAUR.type == ["Grass", "Poison"]
    assert BULBASAUR.base.HP == 45
