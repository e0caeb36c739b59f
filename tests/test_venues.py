"""End-to-end venue lifecycle against the in-memory API."""

import asyncio

import pytest

from ticketing import (
    BadDataError,
    ResourceExistsError,
    ResourceNotFoundError,
    VenueModel,
)

VENUE_DATA = {
    "name": "Test Venue 1",
    "region": None,
    "longitude": -73.99214,
    "latitude": 40.75518,
    "address": "7th Ave, Manhattan, New York",
}


async def _setup(ticketing):
    region = await ticketing.regions.create({"name": "Venue Region", "country": "New Country"})
    second = await ticketing.venues.create(
        {
            "name": "Test Venue 2",
            "region": region.id,
            "longitude": -70.99214,
            "latitude": 43.75518,
            "address": "Miami Beach, Miami, Florida",
        }
    )
    return region, second, {**VENUE_DATA, "region": region.id}


def test_create_returns_venue_with_input_fields(ticketing) -> None:
    async def run() -> None:
        async with ticketing:
            _, _, data = await _setup(ticketing)
            venue = await ticketing.venues.create(data)

            assert isinstance(venue, VenueModel)
            assert venue.id is not None
            for name, value in data.items():
                assert getattr(venue, name) == value
            assert venue.map.endswith("40.75518,-73.99214")

    asyncio.run(run())


def test_create_then_find_returns_identical_fields(ticketing) -> None:
    async def run() -> None:
        async with ticketing:
            region = await ticketing.regions.create(name="R1", country="C")
            created = await ticketing.venues.create(
                name="V1", region=region.id, longitude=-73.99, latitude=40.75, address="A"
            )
            fetched = await ticketing.venues.find(created.id)

            assert fetched.id == created.id
            assert fetched.name == "V1"
            assert fetched.region == region.id
            assert fetched.longitude == pytest.approx(-73.99)
            assert fetched.latitude == pytest.approx(40.75)
            assert fetched.address == "A"

    asyncio.run(run())


def test_create_with_blank_fields_names_them_in_declaration_order(ticketing, api) -> None:
    async def run() -> None:
        async with ticketing:
            with pytest.raises(BadDataError) as exc_info:
                await ticketing.venues.create(
                    {"name": "", "region": "", "longitude": "", "latitude": "", "address": ""}
                )
            assert str(exc_info.value) == (
                "The following arguments are required, but have not been supplied: "
                "name, region, address, longitude, latitude."
            )
            assert exc_info.value.fields == ["name", "region", "address", "longitude", "latitude"]

    asyncio.run(run())
    assert api.requests == []


def test_create_with_existing_name_raises_resource_exists(ticketing) -> None:
    async def run() -> None:
        async with ticketing:
            _, _, data = await _setup(ticketing)
            await ticketing.venues.create(data)

            with pytest.raises(ResourceExistsError) as exc_info:
                await ticketing.venues.create(data)
            assert str(exc_info.value) == (
                "The following arguments conflict with those of another venue: name."
            )
            assert exc_info.value.fields == ["name"]
            assert exc_info.value.status_code == 409

    asyncio.run(run())


def test_list_filters_by_region_and_last_page_holds_newest(ticketing) -> None:
    async def run() -> None:
        async with ticketing:
            region, _, data = await _setup(ticketing)
            other = await ticketing.regions.create(name="Elsewhere", country="X")
            await ticketing.venues.create(
                name="Far Venue", region=other.id, longitude=1, latitude=1, address="B"
            )
            created = await ticketing.venues.create(data)

            venues = await ticketing.venues.list().filter({"region": region.id})
            assert venues
            assert all(isinstance(v, VenueModel) for v in venues)
            assert all(v.region == region.id for v in venues)

            last = await ticketing.venues.list(1).last()
            assert len(last) == 1
            assert last[0].id == created.id
            assert last[0].name == data["name"]

    asyncio.run(run())


def test_update_persists_changes_and_reports_validation(ticketing) -> None:
    async def run() -> None:
        async with ticketing:
            _, second, data = await _setup(ticketing)
            venue = await ticketing.venues.create(data)

            venue.name = "New Name"
            venue.address = "#1 High St., St. John's"
            assert await venue.save() is True

            fetched = await ticketing.venues.find(venue.id)
            assert fetched.name == "New Name"
            assert fetched.address == "#1 High St., St. John's"

            venue.name = ""
            venue.address = ""
            venue.latitude = ""
            with pytest.raises(BadDataError) as exc_info:
                await venue.save()
            assert str(exc_info.value) == (
                "The following arguments are required, but have not been supplied: "
                "name, address, latitude."
            )

            assert venue.name == "New Name"
            assert venue.address == "#1 High St., St. John's"
            assert venue.latitude == data["latitude"]
            assert not venue.is_dirty

            venue.name = second.name
            with pytest.raises(ResourceExistsError) as exc_info:
                await venue.save()
            assert str(exc_info.value) == (
                "The following arguments conflict with those of another venue: name."
            )

    asyncio.run(run())


def test_delete_makes_venue_unretrievable(ticketing) -> None:
    async def run() -> None:
        async with ticketing:
            _, _, data = await _setup(ticketing)
            venue = await ticketing.venues.create(data)

            assert await venue.delete() is True

            with pytest.raises(ResourceNotFoundError) as exc_info:
                await ticketing.venues.find(venue.id)
            assert str(exc_info.value) == "There is presently no resource with the given URI."

    asyncio.run(run())


def test_find_unknown_id_raises_not_found(ticketing) -> None:
    async def run() -> None:
        async with ticketing:
            with pytest.raises(ResourceNotFoundError):
                await ticketing.venues.find(12345)

    asyncio.run(run())
