from __future__ import annotations

import json
from pathlib import Path

import pytest

ROUTES = {
    "encoding": "utf-8",
    "routes": [
        {
            "pattern": "/(*)/(*)?/(*)?",
            "constraints": {"controller": {}, "action": {}, "id": {}},
        },
        {
            "pattern": "/book/(*)",
            "controller": "book",
            "action": "show",
            "constraints": {"id": {"type": "int", "ge": 1}},
        },
        {"pattern": "/book", "controller": "book", "action": "list"},
        {"pattern": "/about", "view": "about", "parameters": {"lang": "en"}},
    ],
}


@pytest.fixture
def routes_file(tmp_path: Path) -> Path:
    path = tmp_path / "routes.json"
    path.write_text(json.dumps(ROUTES), encoding="utf-8")
    return path
