#!/usr/bin/env python3
"""Example: create or update one interface on a gNMI device.

The interface is read first; if it has no recorded configuration it is
created, otherwise it is moved to ``DESIRED``.

Usage (check mode, default):

    GNMI_HOST=192.0.2.1 python examples/apply_interface.py

Usage (live apply):

    APPLY=1 GNMI_HOST=192.0.2.1 python examples/apply_interface.py

Environment variables:
    GNMI_HOST        Device IP or hostname (required).
    GNMI_PORT        gNMI port (default: 6030).
    GNMI_USERNAME    Login username (default: admin).
    GNMI_PASSWORD    Login password (default: admin).
    GNMI_TLS         Set to "true" to open a TLS channel (default: false).
    APPLY            Set to "1" to actually apply changes (default: check mode).
"""

from __future__ import annotations

import json
import os
import sys

from napalm_gnmi.driver import GnmiDriver
from napalm_gnmi.model.interface import InterfaceConfig, InterfaceResource

# ---------------------------------------------------------------------------
# Desired interface
# ---------------------------------------------------------------------------
DESIRED = InterfaceConfig(
    name="Ethernet1",
    description="uplink to core",
    switchport=True,
    trunk_vlans=[10, 20, 30],
)

# ---------------------------------------------------------------------------
# Read configuration from environment
# ---------------------------------------------------------------------------
host = os.environ.get("GNMI_HOST", "")
if not host:
    print("ERROR: GNMI_HOST environment variable is required.", file=sys.stderr)
    sys.exit(1)

apply_changes = os.environ.get("APPLY", "0") == "1"

driver = GnmiDriver(
    hostname=host,
    username=os.environ.get("GNMI_USERNAME", "admin"),
    password=os.environ.get("GNMI_PASSWORD", "admin"),
    optional_args={
        "port": int(os.environ.get("GNMI_PORT", "6030")),
        "tls": os.environ.get("GNMI_TLS", "false").lower() == "true",
    },
)

print(f"Target device : {host}")
print(f"Apply changes : {apply_changes}")
print()

try:
    driver.open()

    resource = InterfaceResource(name=DESIRED.name)
    observed = driver.read_interface(resource)
    print("=== OBSERVED ===")
    print(json.dumps(observed, indent=2))
    print()

    if observed["switchport"] is None:
        result = driver.create_interface(DESIRED, check_mode=not apply_changes)
    else:
        result = driver.update_interface(resource, DESIRED, check_mode=not apply_changes)

    print("=== PLAN ===")
    print(json.dumps(result["diff"], indent=2))
    print()

    if not apply_changes:
        print("Check mode only -- set APPLY=1 to apply changes.")
        sys.exit(0)

    print(f"Applied : {result['applied']}")
    if result["stale"]:
        print("WARNING: follow-up read failed; observed state may be stale.")
    print("Done.")

except Exception as exc:  # noqa: BLE001
    print(f"ERROR: {exc}", file=sys.stderr)
    sys.exit(1)
finally:
    driver.close()
