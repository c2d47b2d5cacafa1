from __future__ import annotations

import json
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from wholesale.cli import _parse_items, app
from wholesale.core.db import OrderRepository
from wholesale.documents import document_day

runner = CliRunner()


@pytest.fixture()
def home(tmp_path: Path, monkeypatch) -> Path:  # noqa: ANN001
    monkeypatch.setenv("WHOLESALE_HOME", str(tmp_path))
    for name in ["WHOLESALE_DATA_DIR", "WHOLESALE_DB_PATH", "WHOLESALE_LOG_DIR", "WHOLESALE_EXPORT_DIR"]:
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def test_parse_items() -> None:
    assert _parse_items(["gid://shopify/ProductVariant/1=3", "v-2 = 1"]) == [
        ("gid://shopify/ProductVariant/1", 3),
        ("v-2", 1),
    ]


@pytest.mark.parametrize("value", ["v-1", "v-1=--5", "v-1=abc", "v-1=", "=3", "v-1=2.5"])
def test_parse_items_rejects_malformed_quantity(value: str) -> None:
    with pytest.raises(typer.BadParameter):
        _parse_items([value])


def test_profile_status_and_invoice_flow(home: Path) -> None:
    assert runner.invoke(app, ["init"]).exit_code == 0

    result = runner.invoke(
        app,
        ["profile", "set", "--user", "buyer-1", "--company", "Schoenen Noord B.V.", "--email", "inkoop@noord.nl"],
    )
    assert result.exit_code == 0

    with OrderRepository(home / "data" / "wholesale.sqlite3") as repository:
        profile = repository.get_profile("buyer-1")
        order = repository.insert_order(profile=profile, total_price=260.0, currency="EUR", notes=None)

    result = runner.invoke(app, ["status", "#1", "confirmed"])
    assert result.exit_code == 0
    assert "Bevestigd" in result.output

    result = runner.invoke(app, ["status", "#1", "pending"])
    assert result.exit_code == 1

    result = runner.invoke(app, ["document", "1", "--kind", "invoice", "--json"])
    assert result.exit_code == 0
    payload = json.loads(result.output)
    assert payload["number"] == f"F{document_day(order.created_at).year}-001"
    assert payload["tax"] == 54.6
    assert payload["payment_terms_days"] == 14


def test_document_for_missing_order(home: Path) -> None:
    result = runner.invoke(app, ["document", "#42"])
    assert result.exit_code == 1


def test_order_with_malformed_item_is_a_usage_error(home: Path) -> None:
    result = runner.invoke(app, ["order", "--user", "buyer-1", "--item", "v-1=--5"])

    assert result.exit_code == 2
    assert isinstance(result.exception, SystemExit)
