# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Internal helpers for value escaping and pandas conversion.
"""

__all__ = []
