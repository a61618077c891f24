from __future__ import annotations

import pytest

from adapters.http_client import PlatformClient
from core.domain.models import ClientState, InstanceState, UiAction
from core.services.domain_actions import add_domain, apply_action, remove_domain
from core.services.state_store import StateStore
from tests.fakes import FakePlatform

PATH = "/app/installations/a"


def test_add_domain_appends_in_insertion_order() -> None:
    state = InstanceState(domains=["a.com"])

    assert add_domain("b.com")(state) is state
    assert state.domains == ["a.com", "b.com"]


def test_add_domain_is_noop_when_present_or_empty() -> None:
    state = InstanceState(domains=["a.com"])

    assert add_domain("a.com")(state) is None
    assert add_domain("")(state) is None
    assert add_domain(None)(state) is None
    assert state.domains == ["a.com"]


def test_remove_domain_by_value() -> None:
    state = InstanceState(domains=["a.com", "b.com", "c.com"])

    assert remove_domain("b.com")(state) is state
    assert state.domains == ["a.com", "c.com"]
    assert remove_domain("zzz.com")(state) is None


@pytest.mark.asyncio
async def test_add_action_writes_with_etag_and_retries_once_on_conflict(
    client: PlatformClient, platform: FakePlatform
) -> None:
    platform.add("a", domains=[])
    platform.force_status("PATCH", PATH, 412)
    store = StateStore(client)

    state = await apply_action(store, "a", UiAction(type="add"), ClientState(domain="foo.com"))

    assert state.domains == ["foo.com"]
    patches = platform.calls("PATCH", PATH)
    assert [r.headers["if-match"] for r in patches] == ['"v1"', '"v1"']
    assert platform.patch_bodies == [("a", {"state": {"domains": ["foo.com"]}}, '"v1"')]
    # two conditional reads plus the final display read
    assert len(platform.calls("GET", PATH)) == 3


@pytest.mark.asyncio
async def test_adding_existing_domain_makes_no_write(client: PlatformClient, platform: FakePlatform) -> None:
    platform.add("a", domains=["foo.com"])

    state = await apply_action(StateStore(client), "a", UiAction(type="add"), ClientState(domain="foo.com"))

    assert state.domains == ["foo.com"]
    assert platform.calls("PATCH", PATH) == []


@pytest.mark.asyncio
async def test_delete_action_uses_action_domain(client: PlatformClient, platform: FakePlatform) -> None:
    platform.add("a", domains=["foo.com", "bar.com"])

    state = await apply_action(
        StateStore(client),
        "a",
        UiAction(type="delete", domain="foo.com"),
        ClientState(domain="bar.com"),
    )

    assert state.domains == ["bar.com"]


@pytest.mark.asyncio
async def test_deleting_absent_domain_makes_no_write(client: PlatformClient, platform: FakePlatform) -> None:
    platform.add("a", domains=["bar.com"])

    await apply_action(StateStore(client), "a", UiAction(type="delete", domain="foo.com"), ClientState())

    assert platform.calls("PATCH", PATH) == []


@pytest.mark.asyncio
async def test_no_action_only_reads(client: PlatformClient, platform: FakePlatform) -> None:
    platform.add("a", domains=["bar.com"])

    state = await apply_action(StateStore(client), "a", UiAction(), ClientState())

    assert state.domains == ["bar.com"]
    assert len(platform.calls("GET", PATH)) == 1
    assert platform.calls("PATCH", PATH) == []
