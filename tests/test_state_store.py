from __future__ import annotations

import pytest

from adapters.http_client import PlatformClient
from core.domain.errors import ConflictRetriesExhausted, HttpError, MissingConcurrencyToken, RemoteError
from core.domain.models import InstanceState
from core.services.state_store import StateStore
from tests.fakes import FakePlatform

PATH = "/app/installations/a"


def append(domain: str):
    def mutate(state: InstanceState) -> InstanceState:
        state.domains.append(domain)
        return state

    return mutate


@pytest.mark.asyncio
async def test_set_state_writes_with_read_etag(client: PlatformClient, platform: FakePlatform) -> None:
    platform.add("a", domains=[])
    store = StateStore(client)

    result = await store.set_state("a", append("foo.com"))

    assert result.domains == ["foo.com"]
    assert platform.patch_bodies == [("a", {"state": {"domains": ["foo.com"]}}, '"v1"')]
    assert platform.installations["a"].state == {"domains": ["foo.com"]}


@pytest.mark.asyncio
async def test_conflict_rereads_and_retries(client: PlatformClient, platform: FakePlatform) -> None:
    platform.add("a", domains=[])
    platform.concurrent_write("a", lambda rec: rec.state["domains"].append("other.com"))
    store = StateStore(client)

    result = await store.set_state("a", append("foo.com"))

    assert result.domains == ["other.com", "foo.com"]
    assert len(platform.calls("GET", PATH)) == 2
    etags = [if_match for _, _, if_match in platform.patch_bodies]
    assert etags == ['"v1"', '"v2"']
    assert platform.installations["a"].state == {"domains": ["other.com", "foo.com"]}


@pytest.mark.asyncio
async def test_every_write_uses_the_etag_of_its_own_read(client: PlatformClient, platform: FakePlatform) -> None:
    platform.add("a", domains=[])
    for _ in range(3):
        platform.force_status("PATCH", PATH, 412)
    store = StateStore(client)

    await store.set_state("a", append("foo.com"))

    assert len(platform.calls("GET", PATH)) == 4
    assert len(platform.calls("PATCH", PATH)) == 4
    assert platform.installations["a"].state == {"domains": ["foo.com"]}


@pytest.mark.asyncio
async def test_falsy_mutation_skips_the_write(client: PlatformClient, platform: FakePlatform) -> None:
    platform.add("a", domains=["keep.com"])
    store = StateStore(client)

    result = await store.set_state("a", lambda state: None)

    assert result.domains == ["keep.com"]
    assert platform.calls("PATCH", PATH) == []


@pytest.mark.asyncio
async def test_async_mutator_is_awaited(client: PlatformClient, platform: FakePlatform) -> None:
    platform.add("a", domains=[])
    store = StateStore(client)

    async def mutate(state: InstanceState) -> InstanceState:
        state.domains.append("async.com")
        return state

    result = await store.set_state("a", mutate)

    assert result.domains == ["async.com"]


@pytest.mark.asyncio
async def test_other_http_errors_are_not_retried(client: PlatformClient, platform: FakePlatform) -> None:
    platform.add("a", domains=[])
    platform.force_status("PATCH", PATH, 500)
    store = StateStore(client)

    with pytest.raises(HttpError) as excinfo:
        await store.set_state("a", append("foo.com"))

    assert excinfo.value.status == 500
    assert len(platform.calls("GET", PATH)) == 1


@pytest.mark.asyncio
async def test_read_errors_propagate(client: PlatformClient, platform: FakePlatform) -> None:
    store = StateStore(client)

    with pytest.raises(HttpError) as excinfo:
        await store.set_state("missing", append("foo.com"))

    assert excinfo.value.status == 404


@pytest.mark.asyncio
async def test_retry_ceiling_raises_after_limit(client: PlatformClient, platform: FakePlatform) -> None:
    platform.add("a", domains=[])
    for _ in range(5):
        platform.force_status("PATCH", PATH, 412)
    store = StateStore(client, max_conflict_retries=2)

    with pytest.raises(ConflictRetriesExhausted) as excinfo:
        await store.set_state("a", append("foo.com"))

    assert excinfo.value.status == 412
    assert excinfo.value.attempts == 3
    assert len(platform.calls("PATCH", PATH)) == 3


@pytest.mark.asyncio
async def test_unknown_state_fields_survive_a_write(client: PlatformClient, platform: FakePlatform) -> None:
    platform.add("a", state={"domains": [], "theme": "dark"})
    store = StateStore(client)

    await store.set_state("a", append("foo.com"))

    assert platform.installations["a"].state == {"domains": ["foo.com"], "theme": "dark"}


@pytest.mark.asyncio
async def test_read_without_etag_refuses_to_write(client: PlatformClient, platform: FakePlatform) -> None:
    platform.add("a", domains=[])
    platform.send_etag = False
    platform.concurrent_write("a", lambda rec: rec.state["domains"].append("other.com"))
    store = StateStore(client)

    with pytest.raises(MissingConcurrencyToken) as excinfo:
        await store.set_state("a", append("foo.com"))

    assert isinstance(excinfo.value, RemoteError)
    assert excinfo.value.instance_id == "a"
    assert platform.calls("PATCH", PATH) == []
    assert platform.installations["a"].state == {"domains": []}


@pytest.mark.asyncio
async def test_read_without_etag_is_fine_for_a_noop(client: PlatformClient, platform: FakePlatform) -> None:
    platform.add("a", domains=["keep.com"])
    platform.send_etag = False
    store = StateStore(client)

    result = await store.set_state("a", lambda state: None)

    assert result.domains == ["keep.com"]
    assert platform.calls("PATCH", PATH) == []


@pytest.mark.asyncio
async def test_get_state_is_a_plain_read(client: PlatformClient, platform: FakePlatform) -> None:
    platform.add("a", domains=["x.com"])
    store = StateStore(client)

    state = await store.get_state("a")

    assert state.domains == ["x.com"]
    assert platform.calls("PATCH", PATH) == []
