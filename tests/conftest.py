import datetime

import pytest

from library_catalog import CatalogStore, LendingEngine, LibrarySystem, MemberStore

NOW = datetime.datetime(2024, 1, 11, 12, 0, 0)


def fixed_clock():
    return NOW


@pytest.fixture
def catalog():
    store = CatalogStore()
    store.add(1, "Dune", "Frank Herbert", 1)
    store.add(2, "A Brief History of Time", "Stephen Hawking", 3)
    store.add(3, "Matilda", "Roald Dahl", 6)
    return store


@pytest.fixture
def members():
    store = MemberStore()
    store.register(100, "Ada")
    store.register(101, "Grace")
    return store


@pytest.fixture
def engine(catalog, members):
    return LendingEngine(catalog, members, now=fixed_clock)


@pytest.fixture
def lib(tmp_path):
    return LibrarySystem(data_dir=str(tmp_path), now=fixed_clock)
