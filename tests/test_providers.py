"""Tests for the built-in providers and the context provider slot."""

import sys

from searchpath import PathListProvider
from searchpath import PathProvider
from searchpath import SysPathProvider
from searchpath import get_context_provider
from searchpath import reset_context_provider
from searchpath import set_context_provider
from searchpath import use_context_provider


def test_path_list_provider_returns_copy():
    """Test that callers can't mutate the provider's list."""
    provider = PathListProvider(["/a"])

    provider.get_search_path().append("/b")

    assert provider.get_search_path() == ["/a"]


def test_sys_path_provider_is_live(monkeypatch):
    """Test that SysPathProvider reflects sys.path at call time."""
    provider = SysPathProvider()
    monkeypatch.setattr(sys, "path", ["/first", "", "/second"])

    # "" means the current directory
    assert provider.get_search_path() == ["/first", ".", "/second"]


def test_builtin_providers_match_protocol():
    """Test that the built-in providers satisfy PathProvider."""
    assert isinstance(PathListProvider(), PathProvider)
    assert isinstance(SysPathProvider(), PathProvider)
    assert not isinstance(object(), PathProvider)


def test_context_provider_set_and_reset():
    """Test setting and restoring the context provider."""
    provider = PathListProvider(["/ctx"])
    assert get_context_provider() is None

    token = set_context_provider(provider)
    assert get_context_provider() is provider

    reset_context_provider(token)
    assert get_context_provider() is None


def test_use_context_provider_restores_on_error():
    """Test that the context manager restores the previous provider."""
    outer = PathListProvider(["/outer"])
    inner = PathListProvider(["/inner"])

    with use_context_provider(outer):
        try:
            with use_context_provider(inner):
                assert get_context_provider() is inner
                raise ValueError("inside")
        except ValueError:
            pass
        assert get_context_provider() is outer

    assert get_context_provider() is None
