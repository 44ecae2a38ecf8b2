"""Backfill of top-level transaction fields from mock info.

A template may leave `tx.cell_deps` or `tx.inputs` empty and describe the
cells only under `mock_info`. Reconciliation projects them back, in order.
"""

import logging

from mocktx.kernel.mock_tx import ReprMockTransaction


logger = logging.getLogger(__name__)


def reconcile(mock_tx: ReprMockTransaction) -> ReprMockTransaction:
    """
    Backfill empty top-level lists from the mock info projection.

    - If tx.cell_deps is empty: tx.cell_deps = [m.cell_dep for m in mock_info.cell_deps]
    - If tx.inputs is empty: tx.inputs = [m.input for m in mock_info.inputs]
    - Non-empty lists are left untouched

    Args:
        mock_tx: Parsed mock transaction (not modified)

    Returns:
        New ReprMockTransaction with backfilled fields (the input itself when
        nothing needed backfilling)
    """
    update = {}
    if not mock_tx.tx.cell_deps:
        update["cell_deps"] = [m.cell_dep for m in mock_tx.mock_info.cell_deps]
    if not mock_tx.tx.inputs:
        update["inputs"] = [m.input for m in mock_tx.mock_info.inputs]

    if not update:
        return mock_tx

    logger.debug(
        "Backfilled tx fields from mock_info: %s",
        ", ".join(f"{k}={len(v)}" for k, v in update.items()),
    )
    return mock_tx.model_copy(update={"tx": mock_tx.tx.model_copy(update=update)})
