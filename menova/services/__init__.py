# Mark services as a package and expose key service modules for tests to monkeypatch.

from . import assistant as assistant  # noqa: F401

__all__ = [
    "assistant",
]
