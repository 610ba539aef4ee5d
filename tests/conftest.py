"""Shared pytest fixtures for the Sigil test suite."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from sigil.lang.parser import parse_source
from sigil.registry import DomainRegistry


ORDER_DOMAIN: Dict[str, Any] = {
    "types": {
        "Email": {"kind": "domain", "underlying": "String"},
        "OrderStatus": {
            "kind": "domain",
            "underlying": "String",
            "values": ["Pending", "Shipped", "Cancelled"],
        },
        "Order": {
            "kind": "record",
            "fields": {
                "id": "String",
                "status": "OrderStatus",
                "customer_email": "Email",
                "total": "Number",
                "placed_at": "DateTime",
                "items": "List of LineItem",
            },
        },
        "LineItem": {
            "kind": "record",
            "fields": {"sku": "String", "quantity": "Number"},
        },
        "Orders": {"kind": "alias", "target": "List of Order"},
    },
    "operations": {
        "send_email": {
            "parameters": [
                {"name": "to", "type": "Email"},
                {"name": "body", "type": "String"},
            ],
        },
        "load_order": {
            "parameters": [{"name": "id", "type": "String"}],
            "returns": "Order",
        },
        "save_order": {
            "parameters": [{"name": "order", "type": "Order"}],
        },
    },
    "helpers": {
        "normalize_email": {
            "parameters": [{"name": "raw", "type": "String"}],
            "returns": "Email",
        },
        "format_total": {
            "parameters": [{"name": "amount", "type": "Number"}],
            "returns": "String",
        },
    },
}


@pytest.fixture
def registry_data() -> Dict[str, Any]:
    """A fresh copy of the order domain registry document."""
    return json.loads(json.dumps(ORDER_DOMAIN))


@pytest.fixture
def registry(registry_data: Dict[str, Any]) -> DomainRegistry:
    return DomainRegistry.from_mapping(registry_data)


@pytest.fixture
def registry_file(tmp_path: Path, registry_data: Dict[str, Any]) -> Path:
    path = tmp_path / "domain.json"
    path.write_text(json.dumps(registry_data), encoding="utf-8")
    return path


@pytest.fixture
def parse_ok():
    """Parse source that is expected to be free of syntax errors."""

    def _parse(source: str):
        result = parse_source(source)
        assert result.diagnostics == [], [str(d) for d in result.diagnostics]
        return result.program

    return _parse
