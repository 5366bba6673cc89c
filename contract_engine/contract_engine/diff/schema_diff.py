"""Three-way comparison of a table contract against its authoritative snapshot.

Drift categories:

* **missing** -- column declared by the contract but absent from the store.
* **extraneous** -- column present in the store but not in the contract.
* **mismatched** -- column on both sides whose store type does not satisfy
  the contract type under :func:`~contract_engine.contracts.type_normalizer.equivalent`.

Column names match exactly (case-sensitive), as the store reports them.
``missing`` and ``mismatched`` follow contract declaration order;
``extraneous`` follows the store's fetch order.  Identical inputs always
produce an identical report.
"""

from __future__ import annotations

from contract_engine.contracts.type_normalizer import equivalent
from contract_engine.models.columns import TableContract, TableSchemaSnapshot
from contract_engine.models.report import AuditStatus, DiffReport, MismatchedColumn


def compute_diff(contract: TableContract, snapshot: TableSchemaSnapshot) -> DiffReport:
    """Compare *contract* with *snapshot* for the same table.

    Parameters
    ----------
    contract:
        Expected columns, in declaration order.
    snapshot:
        Authoritative columns.  Must not be empty: an empty snapshot is a
        "table not found" condition that callers report as ``NOT_FOUND``
        without diffing.

    Returns
    -------
    DiffReport
        ``PASS`` when no drift was found, ``FAIL`` otherwise.

    Raises
    ------
    ValueError
        If *snapshot* has no columns.
    """
    if snapshot.is_empty:
        raise ValueError(f"Cannot diff table '{contract.table}' against an empty snapshot.")

    actual_types: dict[str, str] = {col.column: col.canonical_type for col in snapshot.columns}
    expected_names = {col.column for col in contract.columns}

    missing = tuple(col for col in contract.columns if col.column not in actual_types)
    extraneous = tuple(col for col in snapshot.columns if col.column not in expected_names)
    mismatched = tuple(
        MismatchedColumn(
            column=col.column,
            expected=col.canonical_type,
            actual=actual_types[col.column],
        )
        for col in contract.columns
        if col.column in actual_types and not equivalent(col.canonical_type, actual_types[col.column])
    )

    status = AuditStatus.PASS if not (missing or extraneous or mismatched) else AuditStatus.FAIL
    return DiffReport(
        table_name=contract.table,
        missing=missing,
        extraneous=extraneous,
        mismatched=mismatched,
        status=status,
    )
