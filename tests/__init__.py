# SPDX-FileCopyrightText: 2025 FanaticPythoner
# SPDX-License-Identifier: Apache-2.0

"""
Test suite for BatchAlchemy.

This package contains tests for all components of BatchAlchemy:
- Metadata resolution for single, embedded-id and id-class keys
- Statement building for every insert, update and delete shape
- Sequence reservation and distribution
- Batch planning with and without multi-row rewrite
- End-to-end execution against an in-memory SQLite database
"""
