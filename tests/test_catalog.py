"""Unit tests for the catalog year filter and membership partition."""

from studygroups.services.catalog import ALL_YEARS, filter_by_year, partition_by_membership


class TestFilterByYear:
    def test_all_returns_everything_in_order(self, make_group):
        groups = [make_group(year="SD1"), make_group(year="SD3"), make_group(year="SD1")]

        assert filter_by_year(groups, ALL_YEARS) == groups

    def test_empty_year_returns_everything(self, make_group):
        groups = [make_group(year="SD1"), make_group(year="SD2")]

        assert filter_by_year(groups, "") == groups
        assert filter_by_year(groups, None) == groups

    def test_exact_tag_match(self, make_group):
        first, second, third = make_group(year="SD1"), make_group(year="SD2"), make_group(year="SD1")

        assert filter_by_year([first, second, third], "SD1") == [first, third]

    def test_no_match(self, make_group):
        assert filter_by_year([make_group(year="SD1")], "SD4") == []

    def test_accepts_any_iterable(self, make_group):
        groups = [make_group(year="SD2")]

        assert filter_by_year(iter(groups), "SD2") == groups


class TestPartitionByMembership:
    def test_split_preserves_order(self, make_group, creator_id):
        mine_a = make_group()
        theirs = make_group(members=["other"], created_by="other")
        mine_b = make_group(members=["other", creator_id], created_by="other")

        joined, not_joined = partition_by_membership([mine_a, theirs, mine_b], creator_id)

        assert joined == [mine_a, mine_b]
        assert not_joined == [theirs]

    def test_every_group_lands_in_exactly_one_side(self, make_group):
        groups = [make_group(members=[f"u{i}"], created_by=f"u{i}") for i in range(5)]

        joined, not_joined = partition_by_membership(groups, "u2")

        assert len(joined) + len(not_joined) == len(groups)
        assert [g.created_by for g in joined] == ["u2"]

    def test_empty(self):
        assert partition_by_membership([], "anyone") == ([], [])
