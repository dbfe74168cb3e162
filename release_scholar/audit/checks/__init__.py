# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The audit categories. Each module exposes one `check_*` function taking a
ProjectSnapshot and the resolved config and returning a list of Findings.
"""
