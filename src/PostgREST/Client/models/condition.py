# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Standalone conditions for ``and``/``or`` filter groups."""

from __future__ import annotations

from typing import Optional, Union

from ..core import _error_codes as codes
from ..core.errors import FilterLogicError
from .enums import FilterOperator, LogicOperator, OperatorModifier

__all__ = ["LogicOperatorCondition"]


class LogicOperatorCondition:
    """
    A single condition rendered inside an ``and=(...)`` or ``or=(...)`` group.

    The value is rendered as given; escaping is the caller's responsibility.
    Nested logic groups are not supported through this class, pass a raw
    string such as ``"or(a.eq.1,b.eq.2)"`` instead.

    :param column: Column name.
    :param operator: Filter operator.
    :param value: Value to compare against.
    :param negate: Prefix the operator with ``not.``.
    :param modifier: Optional ``any``/``all`` modifier.
    :param language: Optional full text search language.
    :raises FilterLogicError: If both ``modifier`` and ``language`` are given.

    Example::

        str(LogicOperatorCondition("age", FilterOperator.GREATER_THAN, 18, negate=True))
        # 'age.not.gt.18'
    """

    def __init__(
        self,
        column: str,
        operator: FilterOperator,
        value: Union[str, int, float],
        negate: bool = False,
        modifier: Optional[OperatorModifier] = None,
        language: Optional[str] = None,
    ) -> None:
        if modifier and language:
            raise FilterLogicError(FilterLogicError.INVALID_CONDITION, subcode=codes.FILTER_INVALID_CONDITION)
        self.column = column
        self.operator = operator
        self.value = value
        self.negate = negate
        self.modifier = modifier
        self.language = language

    def __str__(self) -> str:
        operator = self.operator.value
        if self.negate:
            operator = f"{LogicOperator.NOT.value}.{operator}"
        if self.modifier:
            operator = f"{operator}({self.modifier.value})"
        if self.language:
            operator = f"{operator}({self.language})"
        return f"{self.column}.{operator}.{self.value}"

    def __repr__(self) -> str:
        return f"LogicOperatorCondition({str(self)!r})"
