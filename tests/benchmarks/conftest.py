"""Deterministic configuration documents for performance benchmarks.

All generators produce fixed, reproducible documents. No random values.
Three tiers: a 10-field flat struct, 1000 listener records, and a tagged
enum list of 500 backends.
"""

from __future__ import annotations

from typing import Any

import pytest

from configtree import Value


def generate_flat() -> dict[str, Any]:
    return {
        "name": "svc",
        "host": "localhost",
        "port": 8080,
        "workers": 8,
        "timeout_s": 2.5,
        "debug": False,
        "tags": [f"tag_{i}" for i in range(10)],
        "labels": {f"label_{i}": f"value_{i}" for i in range(10)},
    }


def generate_fleet(count: int) -> dict[str, Any]:
    return {
        "listeners": [
            {"host": f"10.0.{i // 256}.{i % 256}", "port": 1024 + i} for i in range(count)
        ]
    }


def generate_backends(count: int) -> list[dict[str, Any]]:
    return [
        {"type": "postgresql", "host": f"db{i}"}
        if i % 2
        else {"type": "Sqlite", "path": f"/d/{i}"}
        for i in range(count)
    ]


@pytest.fixture
def flat_document() -> Value:
    return Value.from_python(generate_flat())


@pytest.fixture
def fleet_document() -> Value:
    return Value.from_python(generate_fleet(1000))


@pytest.fixture
def backend_documents() -> Value:
    return Value.from_python(generate_backends(500))
