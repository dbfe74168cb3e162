# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
release-scholar: audit a source-controlled project for release readiness and
package it as a citable, reproducible archive.
"""

__version__ = "0.1.0"
