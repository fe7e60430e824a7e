"""
Column mapping record — the role → header assignment for one table.

A ColumnMapping is immutable.  Every producer (automatic mapper, role
allocator, manual mapping form) returns a fresh instance; use with_role()
to derive a changed copy.

Public API:
    ColumnMapping
"""

import logging
from dataclasses import dataclass, replace
from typing import Any, Iterator

from config.schema import Role, role_from_name

logger = logging.getLogger(__name__)


# Dataclass field name for each role.
_FIELD_FOR_ROLE: dict[Role, str] = {
    Role.PRODUCT: "product",
    Role.PRODUCT_DETAIL: "product_detail",
    Role.REVENUE: "revenue",
    Role.DATE: "date",
    Role.TIME: "time",
    Role.DATETIME: "datetime",
    Role.TIMESTAMP: "timestamp",
    Role.QUANTITY: "quantity",
    Role.CATEGORY: "category",
    Role.TYPE: "type",
    Role.SIZE: "size",
    Role.STORE_LOCATION: "store_location",
    Role.PAYMENT_TYPE: "payment_type",
    Role.REGION: "region",
}


@dataclass(frozen=True)
class ColumnMapping:
    """Role → header assignment.  None means the role is unmapped."""

    product: str | None = None
    product_detail: str | None = None
    revenue: str | None = None
    date: str | None = None
    time: str | None = None
    datetime: str | None = None
    timestamp: str | None = None
    quantity: str | None = None
    category: str | None = None
    type: str | None = None
    size: str | None = None
    store_location: str | None = None
    payment_type: str | None = None
    region: str | None = None

    # -------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------

    @classmethod
    def from_dict(cls, raw: dict[Any, Any] | None) -> "ColumnMapping":
        """
        Build a mapping from a plain dict keyed by Role or role name.

        Unknown keys and blank values are ignored, so a dict coming from a
        form or an older session can be passed as-is.
        """
        if not raw:
            return cls()

        values: dict[str, str] = {}
        for key, header in raw.items():
            try:
                role = role_from_name(key)
            except ValueError:
                logger.debug(f"Ignoring unknown mapping key '{key}'")
                continue
            if header is None or str(header).strip() == "":
                continue
            values[_FIELD_FOR_ROLE[role]] = str(header)
        return cls(**values)

    def with_role(self, role: Role | str, header: str | None) -> "ColumnMapping":
        """Return a copy with *role* set to *header* (None clears it)."""
        resolved = role_from_name(role)
        return replace(self, **{_FIELD_FOR_ROLE[resolved]: header})

    # -------------------------------------------------------------------
    # Access
    # -------------------------------------------------------------------

    def get(self, role: Role | str) -> str | None:
        return getattr(self, _FIELD_FOR_ROLE[role_from_name(role)])

    def items(self) -> Iterator[tuple[Role, str]]:
        """Yield (role, header) for every mapped role, in declaration order."""
        for role, field_name in _FIELD_FOR_ROLE.items():
            header = getattr(self, field_name)
            if header:
                yield role, header

    def headers(self) -> list[str]:
        """Mapped header names in role order."""
        return [header for _, header in self.items()]

    def as_dict(self) -> dict[str, str]:
        """Mapped roles only, keyed by role value ("storeLocation")."""
        return {role.value: header for role, header in self.items()}

    def product_header(self) -> str | None:
        """The fine-grained product header if present, else the product header."""
        return self.product_detail or self.product

    def is_injective(self) -> bool:
        headers = self.headers()
        return len(headers) == len(set(headers))
