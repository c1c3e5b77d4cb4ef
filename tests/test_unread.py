import pytest

from slackcli.unread import (
    fetch_unread_messages,
    reconcile_unread,
    select_unread_channels,
    summarize,
)
from slackcli.utils import NotFoundError

from .conftest import unread_channel


@pytest.fixture
def counts():
    return [
        unread_channel("A", 5, mentions=1),
        unread_channel("B", 2, muted=True),
        unread_channel("C", 0),
        unread_channel("D", 7, is_archived=True),
    ]


class TestSelectUnreadChannels:
    def test_muted_and_read_are_filtered(self, counts) -> None:
        selected = select_unread_channels(counts)
        assert [ch["id"] for ch in selected] == ["D", "A"]

    def test_include_muted_sorts_by_count(self, counts) -> None:
        selected = select_unread_channels(counts, include_muted=True)
        assert [ch["id"] for ch in selected] == ["D", "A", "B"]

    def test_ties_keep_snapshot_order(self) -> None:
        counts = [unread_channel("X", 3), unread_channel("Y", 3), unread_channel("Z", 4)]
        assert [ch["id"] for ch in select_unread_channels(counts)] == ["Z", "X", "Y"]

    def test_unknown_target_is_not_found(self, counts) -> None:
        with pytest.raises(NotFoundError):
            select_unread_channels(counts, channel_id="NOPE")

    def test_known_target_without_unread_is_empty(self, counts) -> None:
        assert select_unread_channels(counts, channel_id="C") == []

    def test_muted_target_needs_include_muted(self, counts) -> None:
        assert select_unread_channels(counts, channel_id="B") == []
        assert [ch["id"] for ch in select_unread_channels(counts, "B", include_muted=True)] == ["B"]


class TestSummarize:
    def test_totals(self, counts) -> None:
        selected = select_unread_channels(counts)
        assert summarize(selected) == {"conversations": 2, "unread": 12, "mentions": 1}

    def test_empty(self) -> None:
        assert summarize([]) == {"conversations": 0, "unread": 0, "mentions": 0}


class TestFetchUnreadMessages:
    def test_watermark_message_is_excluded(self, fake_client) -> None:
        fake_client.channel_info["A"] = {"id": "A", "last_read": "1700000000.000100"}
        fake_client.history["A"] = [
            {"ts": "1700000000.000300"},
            {"ts": "1700000000.000200"},
            {"ts": "1700000000.000100"},
        ]

        messages, latest = fetch_unread_messages(fake_client, unread_channel("A", 2))

        assert [m["ts"] for m in messages] == ["1700000000.000200", "1700000000.000300"]
        assert latest == "1700000000.000300"

    def test_limit_is_count_plus_margin_capped(self, fake_client) -> None:
        fetch_unread_messages(fake_client, unread_channel("A", 2))
        fetch_unread_messages(fake_client, unread_channel("B", 500))

        limits = [c[2] for c in fake_client.calls_to("get_conversation_history")]
        assert limits == [7, 100]

    def test_nothing_newer(self, fake_client) -> None:
        fake_client.channel_info["A"] = {"id": "A", "last_read": "5.0"}
        fake_client.history["A"] = [{"ts": "5.0"}]

        assert fetch_unread_messages(fake_client, unread_channel("A", 1)) == ([], None)


class TestReconcileUnread:
    def test_summary_only_does_not_fetch_history(self, fake_client, counts) -> None:
        fake_client.unread_counts = counts

        report = reconcile_unread(fake_client)

        assert report.summary["unread"] == 12
        assert not report.messages_requested
        assert fake_client.calls_to("get_conversation_history") == []

    def test_mark_read_uses_each_channels_own_latest(self, fake_client) -> None:
        fake_client.unread_counts = [unread_channel("A", 2), unread_channel("B", 1)]
        fake_client.channel_info = {
            "A": {"id": "A", "last_read": "10.0"},
            "B": {"id": "B", "last_read": "20.0"},
        }
        fake_client.history = {
            "A": [{"ts": "12.0"}, {"ts": "11.0"}],
            "B": [{"ts": "25.0"}],
        }

        report = reconcile_unread(fake_client, mark_read=True)

        assert sorted(fake_client.calls_to("mark_conversation")) == [
            ("mark_conversation", "A", "12.0"),
            ("mark_conversation", "B", "25.0"),
        ]
        assert sorted(report.marked) == ["A", "B"]
        assert report.messages_shown == 3

    def test_channel_with_nothing_shown_is_not_marked(self, fake_client) -> None:
        fake_client.unread_counts = [unread_channel("A", 1)]
        fake_client.channel_info["A"] = {"id": "A", "last_read": "10.0"}
        fake_client.history["A"] = [{"ts": "10.0"}]

        report = reconcile_unread(fake_client, mark_read=True)

        assert fake_client.calls_to("mark_conversation") == []
        assert report.caught_up

    def test_mark_failure_is_isolated(self, fake_client) -> None:
        fake_client.unread_counts = [unread_channel("A", 1), unread_channel("B", 1)]
        fake_client.history = {"A": [{"ts": "1.0"}], "B": [{"ts": "2.0"}]}
        fake_client.fail_on.add(("mark_conversation", "A", "1.0"))

        report = reconcile_unread(fake_client, mark_read=True)

        assert report.marked == ["B"]
        assert list(report.mark_failures) == ["A"]

    def test_fetch_failure_is_isolated(self, fake_client) -> None:
        fake_client.unread_counts = [unread_channel("A", 2), unread_channel("B", 1)]
        fake_client.history = {"B": [{"ts": "2.0"}]}
        fake_client.fail_on.add(("get_conversation_info", "A"))

        report = reconcile_unread(fake_client, show=True)

        assert list(report.fetch_failures) == ["A"]
        assert list(report.messages) == ["B"]

    def test_all_fetches_failing_is_not_caught_up(self, fake_client) -> None:
        fake_client.unread_counts = [unread_channel("A", 3)]
        fake_client.fail_on.add(("get_conversation_info", "A"))

        report = reconcile_unread(fake_client, show=True)

        assert list(report.fetch_failures) == ["A"]
        assert not report.caught_up

    def test_muted_target_is_flagged(self, fake_client, counts) -> None:
        fake_client.unread_counts = counts

        report = reconcile_unread(fake_client, channel_id="B", show=True)

        assert report.target_is_muted
        assert not report.target_has_no_unread

    def test_target_with_no_unread(self, fake_client, counts) -> None:
        fake_client.unread_counts = counts

        report = reconcile_unread(fake_client, channel_id="C", show=True)

        assert report.target_has_no_unread
        assert report.channels == []
        assert not report.target_is_muted
        assert fake_client.calls_to("get_conversation_history") == []

    def test_unknown_target_raises(self, fake_client, counts) -> None:
        fake_client.unread_counts = counts

        with pytest.raises(NotFoundError):
            reconcile_unread(fake_client, channel_id="NOPE")
