import uuid
from itertools import product

import pytest

from app.core.errors import NotFoundError, ValidationError
from app.models import TourStatus
from app.services.availability import intervals_overlap
from conftest import at, make_tour


def _enumerated_overlap(new_start, new_end, cur_start, cur_end):
    starts_during = cur_start <= new_start < cur_end
    ends_during = cur_start < new_end <= cur_end
    encompasses = new_start <= cur_start and new_end >= cur_end
    return starts_during or ends_during or encompasses


@pytest.mark.parametrize(
    "new, existing, expected",
    [
        ((10, 11), (10, 11), True),    # identical
        ((10, 11), (11, 12), False),   # new ends where existing starts
        ((11, 12), (10, 11), False),   # new starts where existing ends
        ((9, 12), (10, 11), True),     # encompasses
        ((10, 11), (9, 12), True),     # contained
        ((9, 10), (9, 12), True),      # shared start
        ((11, 12), (9, 12), True),     # shared end
        ((8, 9), (10, 11), False),     # disjoint
    ],
)
def test_overlap_boundaries(new, existing, expected):
    assert intervals_overlap(at(new[0]), at(new[1]), at(existing[0]), at(existing[1])) is expected
    assert _enumerated_overlap(at(new[0]), at(new[1]), at(existing[0]), at(existing[1])) is expected


def test_overlap_agrees_with_case_enumeration():
    points = range(0, 5)
    for s1, e1, s2, e2 in product(points, repeat=4):
        if e1 <= s1 or e2 <= s2:
            continue
        assert intervals_overlap(s1, e1, s2, e2) == _enumerated_overlap(s1, e1, s2, e2), (s1, e1, s2, e2)


@pytest.mark.asyncio
async def test_no_tours_means_available(service, listing):
    assert await service.check_availability(listing.id, at(10), at(11)) is True
    assert await service.check_availability(listing.id, at(0), at(23, 59)) is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "start, end, expected",
    [
        (at(10, 30), at(10, 45), False),
        (at(9, 30), at(10, 30), False),
        (at(9), at(12), False),
        (at(11), at(12), True),
        (at(8), at(9), True),
        (at(9), at(10), True),
    ],
)
async def test_confirmed_tour_blocks_overlapping_slots(service, store, listing, requester, agent, start, end, expected):
    make_tour(store, listing.id, requester.id, agent.id, at(10), at(11), status=TourStatus.confirmed)
    assert await service.check_availability(listing.id, start, end) is expected


@pytest.mark.asyncio
async def test_pending_tour_blocks(service, store, listing, requester, agent):
    make_tour(store, listing.id, requester.id, agent.id, at(10), at(11), status=TourStatus.pending)
    assert await service.check_availability(listing.id, at(10, 15), at(10, 30)) is False


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [TourStatus.canceled, TourStatus.completed])
async def test_inactive_tours_never_block(service, store, listing, requester, agent, status):
    make_tour(store, listing.id, requester.id, agent.id, at(10), at(11), status=status)
    assert await service.check_availability(listing.id, at(10), at(11)) is True
    assert await service.check_availability(listing.id, at(9), at(12)) is True


@pytest.mark.asyncio
async def test_other_property_tours_do_not_block(service, store, listing, requester, agent):
    from conftest import make_property

    elsewhere = make_property(store, title="Elsewhere")
    make_tour(store, elsewhere.id, requester.id, agent.id, at(10), at(11))
    assert await service.check_availability(listing.id, at(10), at(11)) is True


@pytest.mark.asyncio
async def test_unknown_property_is_not_found(service):
    with pytest.raises(NotFoundError) as exc:
        await service.check_availability(uuid.uuid4(), at(10), at(11))
    assert exc.value.resource == "property"


@pytest.mark.asyncio
@pytest.mark.parametrize("start, end", [(at(11), at(10)), (at(10), at(10))])
async def test_malformed_interval_rejected(service, listing, start, end):
    with pytest.raises(ValidationError) as exc:
        await service.check_availability(listing.id, start, end)
    assert exc.value.field == "end_time"


@pytest.mark.asyncio
async def test_naive_datetimes_are_utc(service, store, listing, requester, agent):
    make_tour(store, listing.id, requester.id, agent.id, at(10), at(11))
    naive_start = at(10, 30).replace(tzinfo=None)
    naive_end = at(10, 45).replace(tzinfo=None)
    assert await service.check_availability(listing.id, naive_start, naive_end) is False


@pytest.mark.asyncio
async def test_stored_naive_tour_still_blocks(service, store, listing, requester, agent):
    make_tour(store, listing.id, requester.id, agent.id, at(10).replace(tzinfo=None), at(11).replace(tzinfo=None))

    assert await service.check_availability(listing.id, at(10, 30), at(11, 30)) is False
    assert await service.check_availability(listing.id, at(11), at(12)) is True
