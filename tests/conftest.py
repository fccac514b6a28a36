from typing import Any, Dict, List, Optional, Tuple

import pytest

from gliderecord.access import GlideAccess

SYS_ID_A = "a" * 32
SYS_ID_B = "b" * 32
SYS_ID_C = "c" * 32


class FakeAccess:
    """Stand-in for GlideAccess that records calls and returns canned results."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, str, Optional[Dict[str, Any]]]] = []
        self.get_result: Any = []
        self.put_result: Any = True
        self.post_result: Any = False
        self.delete_result: Any = True

    def get(self, path):
        self.calls.append(("GET", path, None))
        return self.get_result

    def put(self, path, body):
        self.calls.append(("PUT", path, body))
        return self.put_result

    def post(self, path, body):
        self.calls.append(("POST", path, body))
        return self.post_result

    def delete(self, path):
        self.calls.append(("DELETE", path, None))
        return self.delete_result


@pytest.fixture(autouse=True)
def clean_glide_env(monkeypatch):
    """No shared accessor and no GLIDE_* settings leak between tests."""
    for var in (
        "GLIDE_INSTANCE",
        "GLIDE_USERNAME",
        "GLIDE_PASSWORD",
        "GLIDE_VERIFY_SSL",
        "GLIDE_LOG_LEVEL",
    ):
        monkeypatch.delenv(var, raising=False)
    GlideAccess.clear_instance()
    yield
    GlideAccess.clear_instance()


@pytest.fixture
def fake_access():
    return FakeAccess()


@pytest.fixture
def incidents():
    return [
        {"sys_id": SYS_ID_A, "number": "INC0001", "short_description": "Printer on fire"},
        {"sys_id": SYS_ID_B, "number": "INC0002", "short_description": "VPN down"},
        {"sys_id": SYS_ID_C, "number": "INC0003", "short_description": "Mouse missing"},
    ]
