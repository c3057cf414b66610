# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Service interfaces implemented by the platform resolution strategies."""

# pylint: disable=too-few-public-methods -- Protocol definitions intentionally expose minimal method surfaces.

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from .models import LaunchPlan, ResolutionOptions, ResolvedInvocation
from .options import SpawnOptions


@runtime_checkable
class CommandResolver(Protocol):
    """Resolve command tokens and turn the result into a launch payload."""

    name: str

    def snapshot(self, options: SpawnOptions) -> ResolutionOptions:
        """Return the read-only resolution inputs derived from ``options``."""

        raise NotImplementedError

    def resolve(self, command: str, args: Sequence[str], options: ResolutionOptions) -> ResolvedInvocation:
        """Return the executable and argument vector that should run ``command``."""

        raise NotImplementedError

    def build_launch(self, invocation: ResolvedInvocation, options: ResolutionOptions) -> LaunchPlan:
        """Return the payload handed to the native spawn primitive."""

        raise NotImplementedError


__all__ = ["CommandResolver"]
