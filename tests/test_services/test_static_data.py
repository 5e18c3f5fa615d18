import copy
from unittest.mock import AsyncMock

from app.exceptions.custom import SupabaseError
from app.services.static_data import StaticDataEnricher, process_images, unique_ids
from app.services.supabase import SupabaseService

STATIC_ROW = {
    "hotel_id": "h1",
    "name": "Hotel One",
    "address": "1 Rue de Rivoli",
    "city": "Paris",
    "country": "France",
    "star_rating": 4,
    "images": [
        "https://cdn.test/{size}/a.jpg",
        {"tmpl": "https://cdn.test/{size}/b.jpg"},
        {"url": "https://cdn.test/c.jpg"},
        "https://cdn.test/{size}/d.jpg",
        "https://cdn.test/{size}/e.jpg",
        "https://cdn.test/{size}/f.jpg",
    ],
    "coordinates": {"lat": 48.86, "lon": 2.33},
}


def _enricher(rows=None, side_effect=None):
    supabase = AsyncMock(spec=SupabaseService)
    supabase.get_static_hotels.return_value = rows if rows is not None else []
    if side_effect is not None:
        supabase.get_static_hotels.side_effect = side_effect
    return StaticDataEnricher(supabase, image_size="640x400"), supabase


def test_process_images_substitutes_size_and_caps_at_five():
    images = process_images(STATIC_ROW["images"], "640x400")

    assert images == [
        "https://cdn.test/640x400/a.jpg",
        "https://cdn.test/640x400/b.jpg",
        "https://cdn.test/c.jpg",
        "https://cdn.test/640x400/d.jpg",
        "https://cdn.test/640x400/e.jpg",
    ]


def test_process_images_drops_unusable_entries():
    assert process_images([{"width": 10}, None, "", "x/{size}.png"], "100x100") == ["x/100x100.png"]


def test_process_images_none():
    assert process_images(None, "640x400") == []


def test_unique_ids_preserves_order():
    assert unique_ids(["b", "a", "b", None, "", 3]) == ["b", "a", "3"]


async def test_enrich_attaches_static_data():
    enricher, supabase = _enricher([STATIC_ROW])
    hotels = [{"hotel_id": "h1", "price": 100}, {"id": "h2"}, {"hotel_id": "h1", "price": 120}]

    result = await enricher.enrich(hotels)

    supabase.get_static_hotels.assert_awaited_once_with(["h1", "h2"])
    assert result[0]["price"] == 100
    assert result[0]["static_data"]["name"] == "Hotel One"
    assert result[0]["static_data"]["star_rating"] == 4
    assert len(result[0]["static_data"]["images"]) == 5
    assert result[0]["static_data"]["coordinates"] == {"lat": 48.86, "lon": 2.33}
    assert result[1] == {"id": "h2"}
    assert result[2]["static_data"]["city"] == "Paris"


async def test_enrich_matches_on_id_field():
    enricher, _ = _enricher([STATIC_ROW])

    result = await enricher.enrich([{"id": "h1"}])

    assert result[0]["static_data"]["address"] == "1 Rue de Rivoli"


async def test_enrich_does_not_mutate_input_and_is_repeatable():
    enricher, _ = _enricher([STATIC_ROW])
    hotels = [{"hotel_id": "h1"}, {"hotel_id": "h2"}]
    original = copy.deepcopy(hotels)

    first = await enricher.enrich(hotels)
    second = await enricher.enrich(hotels)

    assert hotels == original
    assert first == second


async def test_enrich_store_error_returns_input():
    enricher, _ = _enricher(side_effect=SupabaseError("down", status_code=500))
    hotels = [{"hotel_id": "h1"}]

    assert await enricher.enrich(hotels) == hotels


async def test_enrich_empty_lookup_returns_input():
    enricher, _ = _enricher([])
    hotels = [{"hotel_id": "h1"}]

    assert await enricher.enrich(hotels) == hotels


async def test_enrich_without_ids_skips_lookup():
    enricher, supabase = _enricher([STATIC_ROW])

    assert await enricher.enrich([{"name": "nameless"}]) == [{"name": "nameless"}]
    supabase.get_static_hotels.assert_not_awaited()


async def test_enrich_unconfigured_store():
    enricher = StaticDataEnricher(None)
    hotels = [{"hotel_id": "h1"}]

    assert await enricher.enrich(hotels) == hotels


async def test_lookup_details_builds_mapping():
    supabase = AsyncMock(spec=SupabaseService)
    supabase.get_hotel_dump.return_value = [{
        "hotel_id": "h1",
        "name": "Hotel One",
        "latitude": 48.86,
        "longitude": 2.33,
        "amenities": None,
        "check_in_time": "14:00",
    }]
    enricher = StaticDataEnricher(supabase)

    by_id, error = await enricher.lookup_details(["h1", "h1", 2])

    supabase.get_hotel_dump.assert_awaited_once_with(["h1", "2"])
    assert error is None
    assert by_id["h1"]["coordinates"] == {"lat": 48.86, "lon": 2.33}
    assert by_id["h1"]["amenities"] == []
    assert by_id["h1"]["check_in_time"] == "14:00"


async def test_lookup_details_caps_id_count():
    supabase = AsyncMock(spec=SupabaseService)
    supabase.get_hotel_dump.return_value = []
    enricher = StaticDataEnricher(supabase)

    await enricher.lookup_details([f"h{i}" for i in range(250)])

    assert len(supabase.get_hotel_dump.await_args.args[0]) == 200


async def test_lookup_details_error():
    supabase = AsyncMock(spec=SupabaseService)
    supabase.get_hotel_dump.side_effect = SupabaseError("permission denied", status_code=401)
    enricher = StaticDataEnricher(supabase)

    by_id, error = await enricher.lookup_details(["h1"])

    assert by_id == {}
    assert error == "permission denied"


async def test_lookup_details_unconfigured():
    by_id, error = await StaticDataEnricher(None).lookup_details(["h1"])

    assert by_id == {}
    assert error == "No database connection"
