"""Diff renderer for interface plans."""

from __future__ import annotations

from typing import Any

from napalm_gnmi.utils.interface_diff import InterfacePlan


def render_plan(plan: InterfacePlan) -> dict[str, Any]:
    """Serialize *plan* to a JSON-serializable dict.

    Returns:
        A dict with keys:

        - ``"interface"`` — interface name.
        - ``"summary"`` — count of each operation kind.
        - ``"total_operations"`` — total number of operations.
        - ``"changes"`` — list of change dicts (``group``, ``details``).
        - ``"operations"`` — list of operation dicts (``kind``, ``path``,
          ``group``, ``value``).
    """
    return {
        "interface": plan.name,
        "summary": dict(plan.summary),
        "total_operations": len(plan.operations),
        "changes": [{"group": c.group, "details": c.details} for c in plan.changes],
        "operations": [
            {"kind": op.kind, "path": op.path, "group": op.group, "value": op.value}
            for op in plan.operations
        ],
    }
