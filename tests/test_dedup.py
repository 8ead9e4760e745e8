"""
Tests for duplicate collapsing.
"""

from datetime import date

from eventfeed.dedup import content_key, deduplicate, identity_key
from eventfeed.models import Occurrence

MONDAY = date(2026, 10, 19)


class TestDeduplicate:
    def test_same_event_fetched_twice(self, make_event, occurrence_of):
        """An event that is both organized and attended appears once."""
        event = make_event(event_id="ev-7")
        result = deduplicate([occurrence_of(event), occurrence_of(event)])
        assert len(result) == 1

    def test_same_content_different_ids(self, make_event, occurrence_of):
        a = make_event(title="Jazz Night", location="Zamalek")
        b = make_event(title="jazz night", location="ZAMALEK")
        result = deduplicate([occurrence_of(a), occurrence_of(b)])
        assert [occ.id for occ in result] == [a.id], "first appearance must win"

    def test_different_days_of_same_series_are_kept(self, make_event):
        event = make_event(pattern="daily")
        occs = [Occurrence(event, MONDAY), Occurrence(event, date(2026, 10, 20))]
        assert len(deduplicate(occs)) == 2

    def test_different_time_is_not_a_duplicate(self, make_event, occurrence_of):
        a = make_event(title="Yoga", time="08:00")
        b = make_event(title="Yoga", time="18:00")
        assert len(deduplicate([occurrence_of(a), occurrence_of(b)])) == 2

    def test_preserves_order(self, dated_pool):
        pool = dated_pool(5)
        shuffled = [pool[3], pool[0], pool[3], pool[4], pool[1], pool[0]]
        result = deduplicate(shuffled)
        assert [occ.id for occ in result] == [pool[3].id, pool[0].id, pool[4].id, pool[1].id]

    def test_no_two_survivors_share_a_key(self, make_event, occurrence_of):
        events = [
            make_event(title="A"),
            make_event(title="A"),
            make_event(title="B", event_id="ev-b"),
            make_event(title="B", event_id="ev-b"),
            make_event(title="C", day=date(2026, 10, 21)),
        ]
        result = deduplicate(occurrence_of(ev) for ev in events)
        assert len({identity_key(o) for o in result}) == len(result)
        assert len({content_key(o) for o in result}) == len(result)
        assert len(result) == 3

    def test_empty(self):
        assert deduplicate([]) == []
