# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Request building types for the PostgREST client.

- :class:`~PostgREST.Client.models.request_builder.PostgrestRequestBuilder`: Fluent request builder.
- :class:`~PostgREST.Client.models.condition.LogicOperatorCondition`: Condition inside ``and``/``or`` groups.
- :class:`~PostgREST.Client.models.order_column.OrderColumn`: Ordering clause.
- :mod:`~PostgREST.Client.models.enums`: Operator, format and preference tokens.

Note:
    This ``__init__.py`` does NOT import/export models.
    Import directly from the specific module files.
"""

__all__ = []
