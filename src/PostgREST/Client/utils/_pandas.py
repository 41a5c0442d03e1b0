# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Internal pandas helpers"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence

import pandas as pd


def dataframe_to_records(df: pd.DataFrame, na_as_null: bool = False) -> List[Dict[str, Any]]:
    """Convert a DataFrame to a list of dicts, converting Timestamps to ISO strings.

    :param df: Input DataFrame.
    :param na_as_null: When False (default), missing values are omitted from each dict
        so PostgREST applies column defaults (with ``missing_as_default``).
        When True, missing values are included as None (sends null).
    """
    records = []
    for row in df.to_dict(orient="records"):
        clean = {}
        for k, v in row.items():
            if pd.notna(v):
                clean[k] = v.isoformat() if isinstance(v, pd.Timestamp) else v
            elif na_as_null:
                clean[k] = None
        records.append(clean)
    return records


def records_to_csv(records: Sequence[Mapping[str, Any]]) -> str:
    """Serialize records to CSV with a header row.

    The header is the union of all keys in first-seen order. Missing keys and
    ``None`` values are written as empty fields. Values keep their Python types
    (no float promotion of integer columns that contain gaps).
    """
    if not records:
        return ""
    df = pd.DataFrame(list(records), dtype=object)
    return df.to_csv(index=False, lineterminator="\n")


def rows_to_dataframe(rows: Sequence[Mapping[str, Any]]) -> pd.DataFrame:
    """Build a DataFrame from decoded JSON rows."""
    return pd.DataFrame.from_records(list(rows))
