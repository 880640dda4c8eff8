import pytest

from library_catalog import DuplicateIdError, Member, MemberStore


def test_register_starts_with_zero_borrowed():
    store = MemberStore()
    member = store.register(1, "Ada")
    assert member.books_borrowed == 0
    assert store.find(1) is member


def test_register_duplicate(members):
    with pytest.raises(DuplicateIdError):
        members.register(100, "Someone Else")
    assert members.find(100).name == "Ada"
    assert len(members) == 2


def test_find_unknown(members):
    assert members.find(555) is None


def test_list_all_order(members):
    members.register(50, "Linus")
    assert [m.id for m in members.list_all()] == [100, 101, 50]


def test_constructor_skips_duplicates():
    store = MemberStore([Member(1, "a"), Member(1, "b"), Member(2, "c")])
    assert [m.name for m in store.list_all()] == ["a", "c"]
