from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select

from app.core.dates import tenant_today
from app.core.db import transaction
from app.core.errors import AddressNotFound, ClientNotFound, ReferenceNotFound, ValidationError
from app.modules.addresses.models import Address, ClientAddress
from app.modules.addresses.schemas import AddressCreate, AddressUpdate
from app.modules.addresses.service import ClientAddressService
from app.modules.clients.models import Client

LONG_AGO = date(2000, 1, 1)


async def _count(session, model) -> int:
    return await session.scalar(select(func.count()).select_from(model))


@pytest.fixture
def service(session) -> ClientAddressService:
    return ClientAddressService(session)


@pytest.fixture
async def attached(session, org_id, seeded, service):
    """One address attached to the seeded client, with dates pushed into the past."""
    payload = AddressCreate.model_validate({
        "addressLine1": "1 Main St",
        "city": "Austin",
        "postalCode": "73301",
        "stateProvinceId": "Texas",
        "countryId": str(seeded["USA"]),
        "latitude": "30.2672",
        "longitude": "-97.7431",
    })
    async with transaction(session):
        link, address = await service.attach(org_id, seeded["client"], "Home", payload)
    address.created_on = LONG_AGO
    address.updated_on = LONG_AGO
    await session.commit()
    return link, address


async def test_attach_persists_resolved_references(session, org_id, seeded, service):
    payload = AddressCreate.model_validate({
        "addressLine1": "10 King St",
        "city": "Toronto",
        "stateProvinceId": "Ontario",
        "countryId": "Canada",
        "isActive": True,
    })
    async with transaction(session):
        link, address = await service.attach(org_id, seeded["client"], str(seeded["Office"]), payload)

    assert address.state_province_id == seeded["Ontario"]
    assert address.country_id == seeded["Canada"]
    assert address.created_on == tenant_today(org_id)
    assert address.updated_on == tenant_today(org_id)
    assert link.client_id == seeded["client"]
    assert link.address_id == address.id
    assert link.address_type_id == seeded["Office"]
    assert link.is_active is True


async def test_attach_defaults_to_inactive(session, org_id, seeded, service):
    async with transaction(session):
        link, _ = await service.attach(org_id, seeded["client"], "Home",
                                       AddressCreate.model_validate({"city": "Austin"}))
    assert link.is_active is False


async def test_attach_with_unresolvable_token_persists_nothing(session, org_id, seeded, service):
    payload = AddressCreate.model_validate({"city": "Nowhere", "countryId": "Atlantis"})

    with pytest.raises(ReferenceNotFound):
        async with transaction(session):
            await service.attach(org_id, seeded["client"], "Home", payload)

    assert await _count(session, Address) == 0
    assert await _count(session, ClientAddress) == 0


async def test_attach_with_unknown_type_persists_nothing(session, org_id, seeded, service):
    with pytest.raises(ReferenceNotFound):
        async with transaction(session):
            await service.attach(org_id, seeded["client"], "99999",
                                 AddressCreate.model_validate({"city": "Austin"}))
    assert await _count(session, Address) == 0


@pytest.mark.parametrize(
    "type_key, state_key, country_key",
    [
        ("USA", "Texas", "USA"),      # address type id taken from COUNTRY
        ("Home", "Home", "USA"),      # state id taken from ADDRESS_TYPE
        ("Home", "Texas", "Texas"),   # country id taken from STATE
    ],
)
async def test_attach_rejects_ids_from_another_code(session, org_id, seeded, service,
                                                    type_key, state_key, country_key):
    payload = AddressCreate.model_validate({
        "city": "Austin",
        "stateProvinceId": str(seeded[state_key]),
        "countryId": seeded[country_key],
    })

    with pytest.raises(ReferenceNotFound):
        async with transaction(session):
            await service.attach(org_id, seeded["client"], str(seeded[type_key]), payload)
    assert await _count(session, Address) == 0


async def test_attach_with_oversized_id_is_not_found(session, org_id, seeded, service):
    payload = AddressCreate.model_validate({"city": "Austin", "countryId": "99999999999999999999"})

    with pytest.raises(ReferenceNotFound) as exc:
        async with transaction(session):
            await service.attach(org_id, seeded["client"], "Home", payload)
    assert exc.value.token == 99999999999999999999
    assert await _count(session, Address) == 0


async def test_attach_to_unknown_client_rolls_back_address(session, org_id, seeded, service):
    with pytest.raises(ClientNotFound) as exc:
        async with transaction(session):
            await service.attach(org_id, 4242, "Home", AddressCreate.model_validate({"city": "Austin"}))

    assert "4242" in exc.value.message
    assert await _count(session, Address) == 0


async def test_update_single_field(session, org_id, seeded, service, attached):
    link, address = attached

    async with transaction(session):
        _, changes = await service.update(
            org_id, seeded["client"],
            AddressUpdate.model_validate({"addressId": address.id, "city": "Springfield"}),
        )

    assert changes == {"city": "Springfield"}
    assert address.city == "Springfield"
    assert address.updated_on == tenant_today(org_id)
    assert address.created_on == LONG_AGO
    assert address.address_line_1 == "1 Main St"
    assert address.postal_code == "73301"
    assert address.state_province_id == seeded["Texas"]
    assert address.country_id == seeded["USA"]
    assert address.latitude == Decimal("30.2672")
    assert link.is_active is False


async def test_update_with_blank_string_is_a_no_op(session, org_id, seeded, service, attached):
    _, address = attached

    async with transaction(session):
        _, changes = await service.update(
            org_id, seeded["client"],
            AddressUpdate.model_validate({"addressId": address.id, "city": "", "addressLine2": "   "}),
        )

    assert changes == {}
    assert address.city == "Austin"
    assert address.updated_on == LONG_AGO


async def test_update_with_identical_values_is_a_no_op(session, org_id, seeded, service, attached):
    _, address = attached

    async with transaction(session):
        _, changes = await service.update(
            org_id, seeded["client"],
            AddressUpdate.model_validate({
                "addressId": address.id,
                "city": "Austin",
                "stateProvinceId": "Texas",
                "latitude": "30.2672",
            }),
        )

    assert changes == {}
    assert address.updated_on == LONG_AGO


async def test_resending_a_finer_coordinate_is_a_no_op(session, org_id, seeded, service, attached):
    _, address = attached

    async with transaction(session):
        _, changes = await service.update(
            org_id, seeded["client"],
            # rounds to the stored 30.26720000 at column scale
            AddressUpdate.model_validate({"addressId": address.id, "latitude": "30.267200001"}),
        )

    assert changes == {}
    assert address.updated_on == LONG_AGO


async def test_update_reference_by_label_and_coordinates(session, org_id, seeded, service, attached):
    _, address = attached

    async with transaction(session):
        _, changes = await service.update(
            org_id, seeded["client"],
            AddressUpdate.model_validate({
                "addressId": address.id,
                "stateProvinceId": "Ontario",
                "countryId": seeded["Canada"],
                "longitude": "-79.3832",
            }),
        )

    assert changes == {
        "stateProvinceId": seeded["Ontario"],
        "countryId": seeded["Canada"],
        "longitude": "-79.38320000",
    }
    assert address.state_province_id == seeded["Ontario"]
    assert address.longitude == Decimal("-79.3832")
    assert address.updated_on == tenant_today(org_id)


async def test_update_active_flag_only(session, org_id, seeded, service, attached):
    link, address = attached

    async with transaction(session):
        _, changes = await service.update(
            org_id, seeded["client"],
            AddressUpdate.model_validate({"addressId": address.id, "isActive": True}),
        )

    assert changes == {"isActive": True}
    assert link.is_active is True
    # the address itself was not touched
    assert address.updated_on == LONG_AGO


async def test_update_unresolvable_reference_aborts(session, org_id, seeded, service, attached):
    _, address = attached
    address_id = address.id

    with pytest.raises(ReferenceNotFound):
        async with transaction(session):
            await service.update(
                org_id, seeded["client"],
                AddressUpdate.model_validate({"addressId": address_id, "city": "Dallas", "countryId": "Atlantis"}),
            )

    # the rollback expired every loaded row; read it back from the database
    reloaded = await session.get(Address, address_id)
    assert reloaded.city == "Austin"
    assert reloaded.country_id == seeded["USA"]


async def test_update_unknown_address(session, org_id, seeded, service, attached):
    with pytest.raises(AddressNotFound) as exc:
        await service.update(org_id, seeded["client"],
                             AddressUpdate.model_validate({"addressId": 4242, "city": "Dallas"}))
    assert exc.value.status_code == 404
    assert "4242" in exc.value.message


async def test_attach_bulk_creates_every_address(session, org_id, seeded, service):
    client = await session.get(Client, seeded["client"])
    items = [
        {"addressTypeId": seeded["Home"], "city": "Austin", "stateProvinceId": "Texas"},
        {"addressTypeId": str(seeded["Office"]), "city": "Toronto", "isActive": True},
        {"addressTypeId": "Home", "city": "Houston", "countryId": "USA"},
    ]

    async with transaction(session):
        links = await service.attach_bulk(org_id, client, items)

    assert len(links) == 3
    assert [link.is_active for link in links] == [False, True, False]
    assert await _count(session, Address) == 3
    rows = await service.list_for_client(org_id, client.id)
    assert [row.address.city for row in rows] == ["Austin", "Toronto", "Houston"]
    assert {row.client_id for row in rows} == {client.id}


async def test_attach_bulk_with_invalid_element_commits_nothing(session, org_id, seeded, service):
    client = await session.get(Client, seeded["client"])
    items = [
        {"addressTypeId": "Home", "city": "Austin"},
        {"addressTypeId": "Home", "city": "Waco", "latitude": "north"},
        {"addressTypeId": "Home", "city": "Houston"},
    ]

    with pytest.raises(ValidationError) as exc:
        async with transaction(session):
            await service.attach_bulk(org_id, client, items)

    assert exc.value.errors[0]["index"] == 1
    assert exc.value.errors[0]["field"] == "latitude"
    assert await _count(session, Address) == 0
    assert await _count(session, ClientAddress) == 0


async def test_attach_bulk_requires_address_type(session, org_id, seeded, service):
    client = await session.get(Client, seeded["client"])

    with pytest.raises(ValidationError) as exc:
        async with transaction(session):
            await service.attach_bulk(org_id, client, [{"city": "Austin"}])

    assert exc.value.errors == [{"field": "addressTypeId", "message": "Field required", "index": 0}]


async def test_detach_removes_address_and_association(session, org_id, seeded, service, attached):
    _, address = attached
    address_id = address.id

    async with transaction(session):
        deleted = await service.detach(org_id, seeded["client"], address_id)

    assert deleted.id == address_id
    assert await _count(session, Address) == 0
    assert await _count(session, ClientAddress) == 0
    with pytest.raises(AddressNotFound):
        await service.get(org_id, seeded["client"], address_id)


async def test_detach_other_clients_address(session, org_id, seeded, service, attached):
    _, address = attached
    other = Client(org_id=org_id, display_name="John Roe")
    session.add(other)
    await session.commit()

    with pytest.raises(AddressNotFound):
        async with transaction(session):
            await service.detach(org_id, other.id, address.id)
    assert await _count(session, Address) == 1


async def test_list_filters_by_status(session, org_id, seeded, service):
    client = await session.get(Client, seeded["client"])
    async with transaction(session):
        await service.attach_bulk(org_id, client, [
            {"addressTypeId": "Home", "city": "Austin", "isActive": True},
            {"addressTypeId": "Office", "city": "Dallas"},
        ])

    active = await service.list_for_client(org_id, client.id, True)
    inactive = await service.list_for_client(org_id, client.id, False)
    assert [row.address.city for row in active] == ["Austin"]
    assert [row.address.city for row in inactive] == ["Dallas"]

    with pytest.raises(ClientNotFound):
        await service.list_for_client(org_id, 4242)


def test_blank_text_fields_are_not_marked_as_sent():
    payload = AddressUpdate.model_validate({"addressId": 1, "city": "", "postalCode": None, "street": "Elm"})
    assert payload.model_fields_set == {"address_id", "street"}


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("30.2672", Decimal("30.26720000")),
        ("12.123456785", Decimal("12.12345679")),
        ("-12.123456785", Decimal("-12.12345679")),
        (45, Decimal("45.00000000")),
    ],
)
def test_coordinates_are_rounded_to_column_scale(raw, expected):
    payload = AddressCreate.model_validate({"latitude": raw})
    assert payload.latitude == expected
    assert payload.latitude.as_tuple().exponent == -8


def test_unknown_keys_are_rejected():
    with pytest.raises(Exception):
        AddressCreate.model_validate({"city": "Austin", "planet": "Mars"})
