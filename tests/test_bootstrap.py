import asyncio
import logging

from console.app.bootstrap import create_console, parse_api_token
from core.api_client import ApiClient
from domain.models import EntityType


def test_create_console_wires_every_entity_view(gateway, tmp_path):
    ctx = create_console(gateway=gateway, data_dir=str(tmp_path), page_size=5)
    try:
        assert set(ctx.views) == set(EntityType)
        assert ctx.view("app") is ctx.catalog.apps
        assert ctx.view(EntityType.CATEGORY) is ctx.catalog.categories
        assert ctx.view("property").page_size == 5
        assert ctx.metadata["owns_gateway"] is False
        assert any("console bootstrapped" in e.message for e in ctx.logging_service.recent())
    finally:
        asyncio.run(ctx.aclose())


def test_refresh_all_loads_collections(gateway, tmp_path):
    ctx = create_console(gateway=gateway, data_dir=str(tmp_path))
    try:
        asyncio.run(ctx.refresh_all())
        assert len(ctx.catalog.apps.items) == 4
        assert ctx.catalog.category_name(1) == "Finance"
        assert ctx.view("contact").items == []
        listed = [call[1] for call in gateway.calls if call[0] == "list"]
        assert listed[:2] == [EntityType.CATEGORY, EntityType.APP]
    finally:
        asyncio.run(ctx.aclose())


def test_views_share_store_and_event_bus(gateway, tmp_path):
    ctx = create_console(gateway=gateway, data_dir=str(tmp_path))
    seen = []
    ctx.event_bus.subscribe("sort_changed", lambda e: seen.append(e.payload["view"]))
    try:
        ctx.view("user").handle_sort("email")
        ctx.view("property").handle_sort("city")
        assert seen == ["users", "properties"]
        assert ctx.store.get("users-list-sort") == {"key": "email", "direction": "asc"}
    finally:
        asyncio.run(ctx.aclose())


def test_default_gateway_is_api_client(tmp_path):
    ctx = create_console(data_dir=str(tmp_path), api_url="http://api.test", token="abc")
    assert isinstance(ctx.gateway, ApiClient)
    assert ctx.gateway.token == "abc"
    asyncio.run(ctx.aclose())
    logging.getLogger("after").warning("not captured")
    assert not any(e.name == "after" for e in ctx.logging_service.recent())


def test_parse_api_token():
    assert parse_api_token(["--token", "abc"]) == "abc"
    assert parse_api_token(["--token=xyz"]) == "xyz"
    assert parse_api_token(["--verbose"]) is None
