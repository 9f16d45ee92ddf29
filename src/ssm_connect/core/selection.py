"""Non-interactive instance selection."""

from __future__ import annotations

from collections.abc import Sequence

from ssm_connect.core.models import InstanceRecord
from ssm_connect.exceptions import InputError


def select_first(records: Sequence[InstanceRecord]) -> InstanceRecord:
    """Pick the first record in inventory order.

    The list is never re-sorted: the inventory order is the contract.
    """
    if not records:
        raise InputError("There are no instances to choose from.")
    return records[0]
