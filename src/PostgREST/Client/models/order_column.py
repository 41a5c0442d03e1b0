# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Ordering clause value object."""

from __future__ import annotations

from dataclasses import dataclass

from .enums import OrderDirection, OrderNulls

__all__ = ["OrderColumn"]


@dataclass(frozen=True)
class OrderColumn:
    """
    A column to order by, consumed by
    :meth:`~PostgREST.Client.models.request_builder.PostgrestRequestBuilder.order_by`.

    :param name: Column name.
    :type name: str
    :param direction: Sort direction. Defaults to ascending.
    :type direction: OrderDirection
    :param nulls: Placement of NULL values. ``OrderNulls.NONE`` omits the suffix.
    :type nulls: OrderNulls

    Example::

        OrderColumn("created_at", OrderDirection.DESC, OrderNulls.NULLS_LAST)
        # renders "created_at.desc.nullslast"
    """

    name: str
    direction: OrderDirection = OrderDirection.ASC
    nulls: OrderNulls = OrderNulls.NONE
