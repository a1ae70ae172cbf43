"""Tests for the erasable password buffer."""

from __future__ import annotations

import pickle

import pytest

from hubconnect.secure import SecurePassword


def test_get_secret_value_round_trips_unicode() -> None:
    password = SecurePassword("pässwörd")

    assert password.get_secret_value() == "pässwörd"
    assert bool(password)


def test_clear_zeroes_buffer() -> None:
    password = SecurePassword("hunter2")

    password.clear()

    assert password.cleared
    assert not password
    assert len(password) == 0
    assert bytes(password._buffer) == bytes(len("hunter2"))
    with pytest.raises(ValueError):
        password.get_secret_value()


def test_context_manager_clears_on_exit() -> None:
    with SecurePassword("hunter2") as password:
        assert password.get_secret_value() == "hunter2"

    assert password.cleared


def test_repr_and_str_are_masked() -> None:
    password = SecurePassword("hunter2")

    assert "hunter2" not in repr(password)
    assert "hunter2" not in str(password)
    assert "hunter2" not in f"{password}"


def test_pickling_is_refused() -> None:
    with pytest.raises(TypeError):
        pickle.dumps(SecurePassword("hunter2"))


@pytest.mark.parametrize("value", [None, "", "   "])
def test_from_setting_ignores_blank_values(value: str | None) -> None:
    assert SecurePassword.from_setting(value) is None


def test_from_setting_wraps_value() -> None:
    password = SecurePassword.from_setting("hunter2")

    assert password is not None
    assert password.get_secret_value() == "hunter2"
