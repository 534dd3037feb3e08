"""
Study group catalog filters.

Pure helpers used by the discover and "my groups" listings. Input order is
preserved in every result.
"""

from typing import Iterable, List, Optional, Tuple

from studygroups.models import StudyGroup

ALL_YEARS = "All"


def filter_by_year(groups: Iterable[StudyGroup], year: Optional[str]) -> List[StudyGroup]:
    """Groups tagged with year, or every group when year is "All" or empty."""
    if not year or year == ALL_YEARS:
        return list(groups)
    return [group for group in groups if group.year == year]


def partition_by_membership(
    groups: Iterable[StudyGroup],
    user_id: str,
) -> Tuple[List[StudyGroup], List[StudyGroup]]:
    """Split groups into (joined, not_joined) for user_id."""
    joined: List[StudyGroup] = []
    not_joined: List[StudyGroup] = []
    for group in groups:
        if group.is_member(user_id):
            joined.append(group)
        else:
            not_joined.append(group)
    return joined, not_joined
