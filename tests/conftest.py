"""Shared pytest fixtures and configuration for the ssm-connect test suite.

Guidelines
----------
* No AWS access and no network access in any test.
* ``aws``, ``sudo``, ``dpkg`` and the plugin installer are mocked at the
  infra boundary — nothing is ever installed or launched for real.
* Core tests must be pure — no side effects.
"""

from __future__ import annotations

import pytest

from ssm_connect.core.models import InstanceRecord


@pytest.fixture
def three_records() -> tuple[InstanceRecord, ...]:
    """Three instances in the order the inventory returned them."""
    return (
        InstanceRecord("i-0ccc", "web-3"),
        InstanceRecord("i-0aaa", "web-1"),
        InstanceRecord("i-0bbb", ""),
    )
