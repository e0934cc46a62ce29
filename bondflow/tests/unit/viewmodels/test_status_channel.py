from __future__ import annotations

from typing import List, Optional

import pytest

from bondflow.domain.entities import StatusEvent
from bondflow.viewmodels.status_channel import StatusChannel


def test_publish_replaces_single_slot() -> None:
    channel = StatusChannel()
    seen: List[Optional[StatusEvent]] = []
    channel.subscribe(seen.append)

    channel.loading("1/4: Updating bond price...")
    channel.success("Done", "0xabc")

    assert channel.latest == StatusEvent("success", "Done", "0xabc")
    assert [ev.kind for ev in seen] == ["loading", "success"]


def test_clear_notifies_with_none() -> None:
    channel = StatusChannel()
    seen: List[Optional[StatusEvent]] = []
    channel.subscribe(seen.append)
    channel.info("hello")

    channel.clear()

    assert channel.latest is None
    assert seen[-1] is None


def test_unsubscribe_stops_delivery() -> None:
    channel = StatusChannel()
    seen: List[Optional[StatusEvent]] = []
    unsubscribe = channel.subscribe(seen.append)
    channel.error("first")
    unsubscribe()
    unsubscribe()
    channel.error("second")
    assert [ev.message for ev in seen] == ["first"]


def test_failing_listener_does_not_block_others() -> None:
    channel = StatusChannel()
    seen: List[Optional[StatusEvent]] = []

    def broken(_: Optional[StatusEvent]) -> None:
        raise RuntimeError("listener bug")

    channel.subscribe(broken)
    channel.subscribe(seen.append)
    channel.info("still delivered")

    assert seen[0].message == "still delivered"


def test_publish_rejects_non_events() -> None:
    with pytest.raises(TypeError):
        StatusChannel().publish("success")  # type: ignore[arg-type]
