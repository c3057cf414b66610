# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for console message helpers."""

from __future__ import annotations

import pytest

from crossproc.logging import debug_requested, fail, info, ok, warn


@pytest.mark.parametrize(
    ("value", "expected"),
    [("1", True), ("true", True), (" YES ", True), ("on", True), ("0", False), ("", False)],
)
def test_debug_requested(value: str, expected: bool) -> None:
    assert debug_requested({"CROSSPROC_DEBUG": value}) is expected


def test_debug_not_requested_without_variable() -> None:
    assert debug_requested({}) is False


def test_messages_route_to_the_right_stream(capsys: pytest.CaptureFixture[str]) -> None:
    info("resolving", use_color=False)
    ok("resolved", use_color=False)
    warn("careful", use_color=False)
    fail("broken", use_color=False)

    captured = capsys.readouterr()
    assert captured.out.splitlines() == ["resolving", "resolved"]
    assert captured.err.splitlines() == ["careful", "broken"]
