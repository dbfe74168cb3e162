# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release packaging subsystem.

Turns the tracked files at a release tag into a deterministic archive, a
checksum file, and publication metadata. The same tagged content always
yields byte-identical output.
"""
