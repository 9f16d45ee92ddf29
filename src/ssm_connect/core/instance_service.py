"""Core instance resolution service.

Turns a :data:`~ssm_connect.core.models.TagFilter` into inventory filter
expressions, delegates the query to an injected
:class:`~ssm_connect.core.protocols.InventoryProvider`, and parses the
text result into :class:`~ssm_connect.core.models.InstanceRecord` values.

Guarantees
----------
* Pure orchestration — no I/O, no ``print()``.
* Inventory order is preserved; records are never re-sorted.
* Only :class:`~ssm_connect.exceptions.SsmConnectError` subclasses escape.
"""

from __future__ import annotations

from ssm_connect.core.models import InstanceRecord, TagFilter, TagKey, TagKeyValue
from ssm_connect.core.protocols import Filter, InventoryProvider
from ssm_connect.exceptions import InventoryQueryError, SsmConnectError
from ssm_connect.utils.constants import RUNNING_STATE

# ``--output text`` renders a missing Name tag as the literal "None".
_TEXT_NULL: str = "None"


class InstanceService:
    """Stateless service that resolves tag selectors to running instances.

    Parameters
    ----------
    provider:
        Any object satisfying the :class:`InventoryProvider` protocol.
    """

    def __init__(self, provider: InventoryProvider) -> None:
        self._provider: InventoryProvider = provider

    # ------------------------------------------------------------------
    # Filter construction (pure)
    # ------------------------------------------------------------------

    @staticmethod
    def build_filters(tag_filter: TagFilter) -> list[Filter]:
        """Build ``describe-instances`` filters as ``{"Name", "Values"}`` maps.

        Rules
        -----
        * :class:`TagKey` matches the key regardless of value.
        * :class:`TagKeyValue` matches the exact value of the tag; the
          value is a single list element even when it contains commas.
        * Only instances in the ``running`` state are returned.
        """
        if isinstance(tag_filter, TagKeyValue):
            tag_expr = {"Name": f"tag:{tag_filter.key}", "Values": [tag_filter.value]}
        elif isinstance(tag_filter, TagKey):
            tag_expr = {"Name": "tag-key", "Values": [tag_filter.key]}
        else:
            raise TypeError(f"Unsupported tag filter: {tag_filter!r}")
        return [tag_expr, {"Name": "instance-state-name", "Values": [RUNNING_STATE]}]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(
        self,
        tag_filter: TagFilter,
        region: str,
        profile: str | None = None,
    ) -> tuple[InstanceRecord, ...]:
        """Return running instances matching *tag_filter*, in API order.

        An empty tuple is a normal result, not an error.

        Raises
        ------
        InventoryQueryError
            If the provider fails.
        """
        filters = self.build_filters(tag_filter)
        try:
            output = self._provider.describe_instances(filters, region, profile)
        except SsmConnectError:
            raise
        except Exception as exc:
            raise InventoryQueryError(
                f"Unexpected inventory error: {exc}",
            ) from exc
        return parse_instance_lines(output)


def parse_instance_lines(output: str) -> tuple[InstanceRecord, ...]:
    """Parse ``<id> <name...>`` lines into records.

    The id is the first whitespace-delimited field; the name is the rest
    of the line with surrounding whitespace removed.  Blank lines are
    skipped.
    """
    records: list[InstanceRecord] = []
    for line in output.splitlines():
        fields = line.strip().split(None, 1)
        if not fields:
            continue
        name = fields[1].strip() if len(fields) > 1 else ""
        if name == _TEXT_NULL:
            name = ""
        records.append(InstanceRecord(instance_id=fields[0], name=name))
    return tuple(records)
