"""
Naming Resolver

Deterministic accessor, receiver and assignment-expression names for
relationship descriptors. Every function here is pure: the same inputs
always give the same names.
"""
from __future__ import annotations

from typing import Collection, List, Optional, Sequence, Tuple

from .inflection import camel_case, singular, snake_case, title_case, trim_suffix
from ..schema.models import SemanticType
from ..utils.logging import get_logger

logger = get_logger(__name__)

ID_SUFFIX = "_id"


def mk_function_name(
    fkey_table_singular: str,
    foreign_table_plural: str,
    fkey_column: str,
    to_join_table: bool,
) -> str:
    """
    Accessor name for a relationship

    When the foreign key column (minus ``_id``) is the table's own singular
    name, or the relationship goes through a join table, the accessor is
    simply the foreign table's plural form. Otherwise the column name
    qualifies it, so two keys into the same table never share a name:

        mk_function_name("invoice", "Customers", "customer_id", False)          -> "Customers"
        mk_function_name("invoice", "Customers", "billing_customer_id", False)  -> "BillingCustomers"
        mk_function_name("customer", "Invoices", "billing_customer_id", False)  -> "BillingCustomerInvoices"
    """
    col_name = trim_suffix(fkey_column, ID_SUFFIX)
    if to_join_table or fkey_table_singular == col_name:
        return foreign_table_plural

    qualifier = title_case(col_name)
    foreign_singular = title_case(singular(snake_case(foreign_table_plural)))
    if foreign_singular and qualifier.endswith(foreign_singular):
        qualifier = qualifier[: -len(foreign_singular)]

    return qualifier + foreign_table_plural


def receiver_name(table_name: str, taken: Collection[str] = ()) -> str:
    """
    Short local identifier for a table: its first letter, lower-cased

    The name is lengthened one character at a time (and finally numbered)
    only when it would clash with a name already in ``taken``.
    """
    base = camel_case(singular(table_name)) or table_name
    for length in range(1, len(base) + 1):
        candidate = base[:length].lower()
        if candidate not in taken:
            return candidate

    suffix = 2
    while f"{base.lower()}{suffix}" in taken:
        suffix += 1
    return f"{base.lower()}{suffix}"


def assignment_expression(
    column_name: str,
    nullable: bool,
    semantic_type: Optional[SemanticType],
) -> str:
    """Field-access expression for a key column; nullable columns reach through their wrapper"""
    field_name = title_case(column_name)
    if nullable and semantic_type is not None:
        return semantic_type.value_expression(field_name)
    return field_name


def make_unique(candidates: Sequence[Tuple[str, str]]) -> List[str]:
    """
    Resolve name clashes within one scope

    Each candidate is ``(preferred, fallback)``. The first occurrence of a
    name keeps it; later ones take their fallback, then a numbered suffix.
    """
    taken = set()
    names: List[str] = []

    for preferred, fallback in candidates:
        name = preferred
        if name in taken:
            name = fallback
        base = name
        suffix = 2
        while name in taken:
            name = f"{base}{suffix}"
            suffix += 1
        if name != preferred:
            logger.debug(f"Renamed clashing accessor {preferred} to {name}")
        taken.add(name)
        names.append(name)

    return names
