"""Canonical field schema for sweep output.

Different search modules contribute different fields, but the success and
failure CSV files need one fixed column set.  :class:`FieldSchema` is that
column set: the base fields every record has, followed by the fields the
search module declares, each with its default value.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from sweep.execution.models import BASE_FIELDS, ResultRecord


@dataclass(frozen=True)
class FieldSchema:
    """Ordered mapping of canonical field name → default value.

    Built once per run; normalization is a plain lookup/merge.
    """

    defaults: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def for_fields(cls, extra_fields: Iterable[str] = ()) -> FieldSchema:
        """Base fields plus a module's declared fields, in declaration order.

        Duplicates (including re-declared base fields) are kept once.
        """
        defaults: dict[str, Any] = {}
        for name in (*BASE_FIELDS, *extra_fields):
            defaults.setdefault(name, None)
        return cls(defaults=defaults)

    @property
    def columns(self) -> list[str]:
        return list(self.defaults)

    def normalize(self, record: ResultRecord | Mapping[str, Any]) -> dict[str, Any]:
        """Return a new row holding exactly the canonical fields, in order.

        Absent fields get their default; fields outside the schema are
        dropped.  The input is never modified.
        """
        values = record.as_dict() if isinstance(record, ResultRecord) else dict(record)
        return {name: values.get(name, default) for name, default in self.defaults.items()}
