from console.services.pagination import PageStateService, page_count, paginate


def test_paginate_slices_one_based_pages():
    items = list(range(1, 26))
    assert paginate(items, 1, 10) == list(range(1, 11))
    assert paginate(items, 3, 10) == [21, 22, 23, 24, 25]


def test_out_of_range_page_yields_empty_slice():
    items = list(range(5))
    assert paginate(items, 2, 10) == []
    assert paginate(items, 0, 10) == []
    assert paginate(items, -1, 10) == []
    assert paginate([], 1, 10) == []


def test_page_count_has_at_least_one_page():
    assert page_count(0, 10) == 1
    assert page_count(10, 10) == 1
    assert page_count(11, 10) == 2


def test_clamp_resets_to_first_page_and_persists(store):
    svc = PageStateService(store, "contacts-current-page", page_size=10)
    svc.set_page(3)
    assert not svc.clamp(25)
    assert svc.page == 3
    assert svc.clamp(12)
    assert svc.page == 1
    assert store.get("contacts-current-page") == 1


def test_page_is_restored_from_store(store):
    store.set("users-current-page", 2)
    svc = PageStateService(store, "users-current-page", page_size=5)
    assert svc.page == 2
    assert svc.slice(list(range(12))) == [5, 6, 7, 8, 9]


def test_invalid_persisted_page_falls_back_to_one(store):
    store.set("users-current-page", "two")
    assert PageStateService(store, "users-current-page").page == 1
    store.set("users-current-page", 0)
    assert PageStateService(store, "users-current-page").page == 1
