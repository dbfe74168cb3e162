# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release-readiness audit subsystem.

Inspects one ProjectSnapshot (plus the full repository history for the
security scan) and produces an ordered report of pass/warn/fail Findings.
Nothing here writes to disk or talks to the network.
"""
