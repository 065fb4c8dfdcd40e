"""Interface diff / plan engine for napalm-gnmi.

Compares the *current* attributes of an interface (last read from the device,
or last applied) against a *desired* :class:`InterfaceConfig` and produces an
ordered :class:`InterfacePlan` of gNMI Set operations, one group at a time.

Every operation is built, and every declared value validated, before the plan
is returned, so a bad declaration never reaches the device.
"""

from __future__ import annotations

import json
import logging
import warnings
from dataclasses import dataclass, field
from typing import Any, Union

from napalm_gnmi.client.errors import GnmiValidationError
from napalm_gnmi.client.operation import build_operation
from napalm_gnmi.model.gnmi import DocumentPayload, Operation, RawPayload
from napalm_gnmi.model.interface import InterfaceConfig, InterfaceState
from napalm_gnmi.utils.assemble import (
    assemble_interface,
    build_ipv4,
    build_switched_vlan,
    parse_ipv4_cidr,
)
from napalm_gnmi.vendor.openconfig.paths import DEFAULT_PATHS, PathTable

logger = logging.getLogger(__name__)

Attributes = Union[InterfaceConfig, InterfaceState]


@dataclass
class Change:
    """Attribute changes of one group.

    Attributes:
        group: Path group the change is applied through.
        details: Field name to ``{"from": old, "to": new}``.
    """

    group: str
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class InterfacePlan:
    """Ordered operations that move the interface to its desired state.

    Operations on the same path are ordered and must be sent one after the
    other; the ipv4 group is always a ``delete`` followed by a ``replace``.

    Attributes:
        name: Interface name.
        operations: Set operations in apply order.
        changes: Per-group attribute changes behind the operations.
        summary: Count per operation kind.
    """

    name: str
    operations: list[Operation] = field(default_factory=list)
    changes: list[Change] = field(default_factory=list)
    summary: dict[str, int] = field(default_factory=dict)

    def add(self, op: Operation) -> None:
        self.operations.append(op)
        self.summary[op.kind] = self.summary.get(op.kind, 0) + 1


def _new_plan(name: str) -> InterfacePlan:
    return InterfacePlan(name=name, summary={"update": 0, "replace": 0, "delete": 0})


def plan_create(cfg: InterfaceConfig, paths: PathTable = DEFAULT_PATHS) -> InterfacePlan:
    """Plan the creation of *cfg*: one ``update`` of the whole interface.

    Raises:
        GnmiValidationError: If the declaration cannot be assembled.
        GnmiSerializationError: If the subtree cannot be emitted.
    """
    _warn_ignored(cfg)
    node = assemble_interface(cfg)
    plan = _new_plan(cfg.name)
    plan.add(
        build_operation(
            "update",
            paths.resolve("global", cfg.name),
            DocumentPayload(node),
            group="global",
        )
    )
    plan.changes.append(
        Change(
            group="global",
            details={
                f: {"from": None, "to": v}
                for f, v in _relevant(cfg).items()
                if v is not None and v != []
            },
        )
    )
    return plan


def plan_update(
    current: Attributes,
    desired: InterfaceConfig,
    paths: PathTable = DEFAULT_PATHS,
) -> InterfacePlan:
    """Compute the operations that move *current* to *desired*.

    Groups are planned in the order description, ipv4, vlan:

    - description: one ``replace`` with the new string (``""`` clears it).
    - ipv4 (routed only): ``delete`` then ``replace`` with a fresh IPv4 node.
      The device appends addresses on replace, so the old subtree is always
      removed first.
    - vlan (switchport only): one ``replace`` carrying the access VLAN and all
      trunk VLANs, or one ``delete`` when no VLAN is left.

    Raises:
        GnmiValidationError: If *desired* renames the interface, changes its
            switchport mode, or carries a malformed IPv4 address.
    """
    if current.name != desired.name:
        raise GnmiValidationError(
            f"Interface name is immutable: {current.name!r} -> {desired.name!r}"
        )
    if current.switchport is not None and current.switchport != desired.switchport:
        raise GnmiValidationError(
            f"switchport of {desired.name} is immutable "
            f"({current.switchport} -> {desired.switchport}); recreate the interface"
        )
    _warn_ignored(desired)
    if not desired.switchport and desired.ipv4_address:
        parse_ipv4_cidr(desired.ipv4_address)

    name = desired.name
    diffs = diff_attributes(current, desired)
    plan = _new_plan(name)

    if "description" in diffs:
        plan.add(
            build_operation(
                "replace",
                paths.resolve("description", name),
                RawPayload(json.dumps(desired.description or "")),
                group="description",
            )
        )
        plan.changes.append(Change("description", {"description": diffs["description"]}))

    if "ipv4_address" in diffs:
        path = paths.resolve("ipv4", name)
        ipv4 = build_ipv4(desired)
        plan.add(build_operation("delete", path, group="ipv4"))
        plan.add(build_operation("replace", path, DocumentPayload(ipv4), group="ipv4"))
        plan.changes.append(Change("ipv4", {"ipv4_address": diffs["ipv4_address"]}))

    vlan_diffs = {f: diffs[f] for f in ("access_vlan", "trunk_vlans") if f in diffs}
    if vlan_diffs:
        path = paths.resolve("vlan", name)
        vlan = build_switched_vlan(desired)
        if vlan.is_empty():
            plan.add(build_operation("delete", path, group="vlan"))
        else:
            plan.add(build_operation("replace", path, DocumentPayload(vlan), group="vlan"))
        plan.changes.append(Change("vlan", vlan_diffs))

    logger.debug("Planned %d operation(s) for %s: %s", len(plan.operations), name, plan.summary)
    return plan


def plan_delete(name: str, paths: PathTable = DEFAULT_PATHS) -> InterfacePlan:
    """Plan one ``delete`` per attribute group, leaving the interface itself."""
    plan = _new_plan(name)
    for group in paths.groups(exclude=("global",)):
        plan.add(build_operation("delete", paths.resolve(group, name), group=group))
        plan.changes.append(Change(group))
    return plan


def diff_attributes(current: Attributes, desired: InterfaceConfig) -> dict[str, Any]:
    """Return ``{field: {"from": ..., "to": ...}}`` for changed relevant fields.

    Only the fields of the desired switchport mode are compared.  Descriptions
    compare ``None`` and ``""`` as equal; IPv4 addresses compare in canonical
    ``ip/prefix`` form.
    """
    diffs: dict[str, Any] = {}
    for f, to in _relevant(desired).items():
        frm = getattr(current, f)
        if f == "description":
            changed = (frm or None) != (to or None)
        elif f == "trunk_vlans":
            changed = list(frm or []) != list(to or [])
        elif f == "ipv4_address":
            changed = _canonical_cidr(frm) != _canonical_cidr(to)
        else:
            changed = frm != to
        if changed:
            diffs[f] = {"from": frm, "to": to}
    return diffs


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------

def _relevant(cfg: InterfaceConfig) -> dict[str, Any]:
    """Declared fields that apply to the interface's switchport mode."""
    fields: dict[str, Any] = {"description": cfg.description}
    if cfg.switchport:
        fields["access_vlan"] = cfg.access_vlan
        fields["trunk_vlans"] = list(cfg.trunk_vlans)
    else:
        fields["ipv4_address"] = cfg.ipv4_address
    return fields


def _warn_ignored(cfg: InterfaceConfig) -> None:
    ignored = cfg.ignored_fields()
    if ignored:
        mode = "switchport" if cfg.switchport else "routed"
        warnings.warn(
            f"{cfg.name}: {ignored} do not apply to a {mode} interface and are ignored.",
            stacklevel=3,
        )


def _canonical_cidr(value: str | None) -> str | None:
    if not value:
        return None
    try:
        ip, prefix_length = parse_ipv4_cidr(value)
    except GnmiValidationError:
        return value
    return f"{ip}/{prefix_length}"
