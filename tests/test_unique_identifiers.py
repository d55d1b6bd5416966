import pytest

from console.errors import UniqueSearchExhaustedError
from console.services.unique_identifiers import (
    PendingValues,
    UniqueIdentifierGenerator,
    generate_unique_name,
    generate_unique_url,
    strip_copy_suffix,
)


def test_first_copy_name_has_plain_suffix():
    assert generate_unique_name("Widget", ["Widget"]) == "Widget (Copy)"


def test_copy_name_counter_skips_taken_values():
    existing = ["Widget", "Widget (Copy)", "Widget (Copy 2)"]
    assert generate_unique_name("Widget", existing) == "Widget (Copy 3)"


def test_pending_values_are_avoided():
    assert generate_unique_name("Widget", [], pending=["Widget (Copy)"]) == "Widget (Copy 2)"


def test_url_suffix_is_stripped_before_generating():
    assert strip_copy_suffix("my-app-copy-2") == "my-app"
    assert strip_copy_suffix("my-app-copy") == "my-app"
    assert strip_copy_suffix("copy-cat") == "copy-cat"
    existing = ["my-app", "my-app-copy"]
    assert generate_unique_url("my-app-copy", existing) == "my-app-copy-2"


def test_custom_suffix_vocabulary():
    assert generate_unique_name("Pool", [], "Duplicate") == "Pool (Duplicate)"
    assert generate_unique_url("pool-dup", ["pool-dup"], "dup") == "pool-dup-2"


def test_search_is_bounded():
    existing = ["W (Copy)", "W (Copy 2)", "W (Copy 3)"]
    with pytest.raises(UniqueSearchExhaustedError):
        generate_unique_name("W", existing, limit=3)


def test_result_never_collides_with_existing_or_pending():
    existing = [f"App (Copy {i})" for i in range(2, 40)] + ["App (Copy)"]
    pending = ["App (Copy 40)"]
    name = generate_unique_name("App", existing, pending=pending)
    assert name == "App (Copy 41)"
    assert name not in existing and name not in pending


def test_generator_reads_item_fields_and_reserves_pending():
    items = [{"name": "Ledger", "url": "ledger"}, {"name": "Ledger (Copy)", "url": "ledger-copy"}]
    gen = UniqueIdentifierGenerator("app")
    pending = PendingValues()
    first = gen.unique_name("Ledger", items, pending)
    first_url = gen.unique_url("ledger", items, pending)
    pending.reserve(first, first_url)
    assert (first, first_url) == ("Ledger (Copy 2)", "ledger-copy-2")
    assert gen.unique_name("Ledger", items, pending) == "Ledger (Copy 3)"
    assert gen.unique_url("ledger", items, pending) == "ledger-copy-3"
