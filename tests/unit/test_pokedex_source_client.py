import pytest
from app.clients.pokedex_source_client import PokedexSourceClient, APIClientError
from app.models import Pokemon

SOURCE_URL = "https://pokedex.example.com/pokedex.json"

MOCK_DATASET = [
    {
        "id": 1,
        "name": {"english": "Bulbasaur", "japanese": "フシギダネ", "chinese": "妙蛙种子", "french": "Bulbizarre"},
        "type": ["Grass", "Poison"],
        "base": {"HP": 45, "Attack": 49, "Defense": 49, "Sp. Attack": 65, "Sp. Defense": 65, "Speed": 45},
        "image": {"thumbnail": "https://img/thumb/001.png", "hires": "https://img/hires/001.png"},
    },
    {
        "id": 4,
        "name": {"english": "Charmander", "japanese": "ヒトカゲ", "chinese": "小火龙", "french": "Salamèche"},
        "type": ["Fire"],
        "base": {"HP": 39, "Attack": 52, "Defense": 43, "Sp. Attack": 60, "Sp. Defense": 50, "Speed": 65},
    },
    {
        # Newer entries in the dataset have no stats yet
        "id": 906,
        "name": {"english": "Sprigatito", "japanese": "ニャオハ", "chinese": "新叶喵", "french": "Poussacha"},
        "type": ["Grass"],
    },
    "not-an-entry",
]


@pytest.fixture
def source_client():
    return PokedexSourceClient(SOURCE_URL, assets_base_url="/assets")


@pytest.mark.asyncio
async def test_dataset_entries_are_mapped_to_records(httpx_mock, source_client):
    """Verifies stat keys are renamed and unusable entries are skipped."""
    # ARRANGE
    httpx_mock.add_response(url=SOURCE_URL, json=MOCK_DATASET, status_code=200)

    # ACT
    pokedex = await source_client.fetch_pokedex()

    # ASSERT
    assert [p.id for p in pokedex] == [1, 4]
    assert all(isinstance(p, Pokemon) for p in pokedex)

    bulbasaur = pokedex[0]
    assert bulbasaur.name.french == "Bulbizarre"
    assert bulbasaur.base.SpecialAttack == 65
    assert bulbasaur.base.SpecialDefense == 65
    # hires image is preferred
    assert bulbasaur.image == "https://img/hires/001.png"


@pytest.mark.asyncio
async def test_missing_image_defaults_from_id(httpx_mock, source_client):
    httpx_mock.add_response(url=SOURCE_URL, json=[MOCK_DATASET[1]], status_code=200)

    pokedex = await source_client.fetch_pokedex()

    assert pokedex[0].image == "/assets/images/004.png"
    assert pokedex[0].cry == ""


@pytest.mark.asyncio
async def test_source_error_raises_503(httpx_mock, source_client):
    """A 5xx from the dataset host is re-mapped to our APIClientError (HTTP 503)."""
    httpx_mock.add_response(url=SOURCE_URL, status_code=500)

    with pytest.raises(APIClientError) as excinfo:
        await source_client.fetch_pokedex()

    assert excinfo.value.status_code == 503
    assert "status 500" in excinfo.value.detail


@pytest.mark.asyncio
async def test_unexpected_payload_raises_503(httpx_mock, source_client):
    httpx_mock.add_response(url=SOURCE_URL, json={"results": []}, status_code=200)

    with pytest.raises(APIClientError) as excinfo:
        await source_client.fetch_pokedex()

    assert excinfo.value.status_code == 503


@pytest.mark.asyncio
async def test_non_json_payload_raises_503(httpx_mock, source_client):
    httpx_mock.add_response(url=SOURCE_URL, text="<html>oops</html>", status_code=200)

    with pytest.raises(APIClientError) as excinfo:
        await source_client.fetch_pokedex()

    assert "unexpected response format" in excinfo.value.detail
