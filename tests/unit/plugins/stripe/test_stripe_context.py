from __future__ import annotations

import pytest

from terrastripe.plugins.stripe.context import ResourceData


@pytest.fixture()
def data() -> ResourceData:
    return ResourceData(
        "stripe_price",
        config={
            "nickname": "New",
            "recurring": {"interval": "month"},
            "tier": [{"up_to": 10}],
            "metadata": {},
        },
        state={"nickname": "Old", "recurring": {"interval": "month"}},
        resource_id="price_1",
    )


class TestAccess:
    def test_dotted_paths_reach_nested_values(self, data: ResourceData) -> None:
        assert data.get("recurring.interval") == "month"
        assert data.get("tier.0.up_to") == 10
        assert data.get("tier.3.up_to", "none") == "none"

    def test_get_ok_treats_empty_collections_as_unset(
        self, data: ResourceData
    ) -> None:
        assert data.get_ok("nickname") == ("New", True)
        assert data.get_ok("metadata") == ({}, False)
        assert data.get_ok("lookup_key") == (None, False)

    def test_changes(self, data: ResourceData) -> None:
        assert data.get_change("nickname") == ("Old", "New")
        assert data.has_change("nickname")
        assert not data.has_change("recurring")

    def test_snapshots(self, data: ResourceData) -> None:
        assert data.previous is data.state
        assert data.desired is data.config


class TestState:
    def test_set_writes_top_level_keys(self, data: ResourceData) -> None:
        data.set("nickname", "Recorded")
        assert data.state["nickname"] == "Recorded"

    def test_set_refuses_nested_paths(self, data: ResourceData) -> None:
        with pytest.raises(KeyError):
            data.set("recurring.interval", "year")

    def test_commit_copies_the_tree(self, data: ResourceData) -> None:
        tree = {"recurring": {"interval": "year"}}
        data.commit(tree)
        tree["recurring"]["interval"] = "day"
        assert data.state == {"recurring": {"interval": "year"}}

    def test_id_can_be_cleared(self, data: ResourceData) -> None:
        assert data.id == "price_1"
        data.set_id(None)
        assert data.id == ""
