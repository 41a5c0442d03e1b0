# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Unit tests for PostgrestRequestBuilder verbs, headers and request assembly."""

import json
import unittest

import pandas as pd

from PostgREST.Client.core import _error_codes as codes
from PostgREST.Client.core.errors import DataEncodingError, FilterLogicError, NotUnifiedValuesError
from PostgREST.Client.models.enums import (
    CountType,
    DataFormat,
    DuplicateResolution,
    OrderDirection,
    OrderNulls,
    ReturnFormat,
)
from PostgREST.Client.models.order_column import OrderColumn
from PostgREST.Client.models.request_builder import PostgrestRequestBuilder


def _builder():
    return PostgrestRequestBuilder("api", "t")


class TestRequestAssembly(unittest.TestCase):
    def test_profile_headers(self):
        b = _builder()
        self.assertEqual(b.get_header("Accept-Profile"), "api")
        self.assertEqual(b.get_header("Content-Profile"), "api")

    def test_no_verb_defaults_to_get(self):
        self.assertEqual(
            _builder().get_request_data(),
            ("GET", "t", {"Accept-Profile": "api", "Content-Profile": "api"}, ""),
        )

    def test_url_joins_fragments_in_call_order(self):
        b = (
            _builder()
            .select()
            .order_by(OrderColumn("b", OrderDirection.DESC, OrderNulls.NULLS_LAST))
            .limit(5)
            .offset(2)
        )
        method, url, _, body = b.get_request_data()
        self.assertEqual(method, "GET")
        self.assertEqual(url, "t?order=b.desc.nullslast&limit=5&offset=2")
        self.assertEqual(body, "")

    def test_get_request_data_returns_header_copy(self):
        b = _builder()
        _, _, headers, _ = b.get_request_data()
        headers["X-Extra"] = "1"
        self.assertIsNone(b.get_header("X-Extra"))

    def test_set_header(self):
        b = _builder().set_header("Accept", "text/csv")
        self.assertEqual(b.get_header("Accept"), "text/csv")
        self.assertIsNone(b.get_header("Missing"))

    def test_negative_limit_and_offset(self):
        with self.assertRaises(ValueError):
            _builder().limit(-1)
        with self.assertRaises(ValueError):
            _builder().offset(-1)


class TestQueryEncoding(unittest.TestCase):
    def test_fragment_separators_encoded(self):
        _, url, _, _ = _builder().select().eq("name", "C#").eq("co", "A&B").get_request_data()
        self.assertEqual(url, "t?name=eq.C%23&co=eq.A%26B")

    def test_plus_in_timestamp_encoded(self):
        _, url, _, _ = _builder().gte("ts", "2024-01-01T00:00:00+02:00").get_request_data()
        self.assertEqual(url, 't?ts=gte."2024-01-01T00:00:00%2B02:00"')

    def test_quoted_value_keeps_grammar_characters(self):
        _, url, _, _ = _builder().any().eq("a", "x y", "z").get_request_data()
        self.assertEqual(url, 't?a=eq(any).{"x%20y",z}')

    def test_only_first_equals_sign_kept(self):
        _, url, _, _ = _builder().eq("a", "k=v").get_request_data()
        self.assertEqual(url, "t?a=eq.k%3Dv")

    def test_filters_property_stays_unencoded(self):
        b = _builder().eq("co", "A&B")
        self.assertEqual(b.filters, ["co=eq.A&B"])

    def test_raw_fragment_encoded(self):
        _, url, _, _ = _builder().filter_raw("note=eq.100%").get_request_data()
        self.assertEqual(url, "t?note=eq.100%25")


class TestSelect(unittest.TestCase):
    def test_select_columns(self):
        method, url, _, _ = _builder().select("a", "b").eq("a", 1).get_request_data()
        self.assertEqual(method, "GET")
        self.assertEqual(url, "t?select=a,b&a=eq.1")

    def test_select_without_columns(self):
        self.assertEqual(_builder().select().filters, [])

    def test_count(self):
        b = _builder().select().count(CountType.EXACT)
        self.assertEqual(b.get_header("Prefer"), "count=exact")


class TestInsert(unittest.TestCase):
    def test_insert_single_object_json(self):
        method, url, headers, body = _builder().insert({"a": "x"}, data_format=DataFormat.JSON).get_request_data()
        self.assertEqual(method, "POST")
        self.assertEqual(url, "t")
        self.assertEqual(headers["Content-Type"], "application/json")
        self.assertEqual(body, '{"a":"x"}')
        self.assertNotIn("Prefer", headers)

    def test_insert_list(self):
        _, _, _, body = _builder().insert([{"a": 1}, {"a": 2}]).get_request_data()
        self.assertEqual(json.loads(body), [{"a": 1}, {"a": 2}])

    def test_insert_csv(self):
        b = _builder().insert([{"a": "x", "b": 1}, {"a": "y", "b": 2}], data_format=DataFormat.CSV)
        _, _, headers, body = b.get_request_data()
        self.assertEqual(headers["Content-Type"], "text/csv")
        self.assertEqual(body, "a,b\nx,1\ny,2\n")

    def test_insert_csv_single_object(self):
        _, _, _, body = _builder().insert({"a": "x"}, data_format=DataFormat.CSV).get_request_data()
        self.assertEqual(body, "a\nx\n")

    def test_insert_dataframe(self):
        df = pd.DataFrame([{"a": "x", "b": 1}, {"a": "y", "b": None}])
        _, _, _, body = _builder().insert(df).get_request_data()
        self.assertEqual(json.loads(body), [{"a": "x", "b": 1.0}, {"a": "y"}])

    def test_insert_columns_and_prefer_order(self):
        b = _builder().insert(
            [{"a": "x"}],
            columns=["a", "b"],
            missing_as_default=True,
            return_format=ReturnFormat.REPRESENTATION,
        )
        _, url, headers, _ = b.get_request_data()
        self.assertEqual(url, "t?columns=a,b")
        self.assertEqual(headers["Prefer"], "missing=default, return=representation")

    def test_insert_then_count_appends_prefer(self):
        b = _builder().insert({"a": 1}, return_format=ReturnFormat.HEADERS_ONLY).count(CountType.PLANNED)
        self.assertEqual(b.get_header("Prefer"), "return=headers-only, count=planned")

    def test_insert_columns_not_unified(self):
        with self.assertRaises(NotUnifiedValuesError):
            _builder().insert({"a": 1}, columns=["a", 1])

    def test_insert_unencodable_data(self):
        with self.assertRaises(DataEncodingError) as ctx:
            _builder().insert({"a": object()})
        self.assertEqual(ctx.exception.subcode, codes.ENCODING_JSON_FAILED)
        self.assertIsInstance(ctx.exception.__cause__, TypeError)

    def test_insert_nan_rejected(self):
        with self.assertRaises(DataEncodingError):
            _builder().insert({"a": float("nan")})


class TestUpsert(unittest.TestCase):
    def test_upsert_defaults_to_merge(self):
        b = _builder().upsert({"a": 1})
        method, _, headers, _ = b.get_request_data()
        self.assertEqual(method, "POST")
        self.assertEqual(headers["Prefer"], "resolution=merge-duplicates")

    def test_upsert_ignore_with_on_conflict(self):
        b = _builder().upsert(
            [{"a": 1}],
            return_format=ReturnFormat.MINIMAL,
            duplicate_resolution=DuplicateResolution.IGNORE,
            on_conflict=["a", "b"],
        )
        _, url, headers, _ = b.get_request_data()
        self.assertEqual(url, "t?on_conflict=a,b")
        self.assertEqual(headers["Prefer"], "return=minimal, resolution=ignore-duplicates")

    def test_upsert_requires_resolution(self):
        with self.assertRaises(FilterLogicError) as ctx:
            _builder().upsert({"a": 1}, duplicate_resolution=DuplicateResolution.NONE)
        self.assertEqual(ctx.exception.subcode, codes.FILTER_DUPLICATE_RESOLUTION_REQUIRED)
        self.assertEqual(str(ctx.exception), "Duplicate resolution required for upsert()")


class TestUpdateDelete(unittest.TestCase):
    def test_update(self):
        b = _builder().update({"b": 11}, ReturnFormat.REPRESENTATION).eq("a", "test1")
        method, url, headers, body = b.get_request_data()
        self.assertEqual(method, "PATCH")
        self.assertEqual(url, "t?a=eq.test1")
        self.assertEqual(headers["Content-Type"], "application/json")
        self.assertEqual(headers["Prefer"], "return=representation")
        self.assertEqual(body, '{"b":11}')

    def test_update_unencodable(self):
        with self.assertRaises(DataEncodingError):
            _builder().update({"b": {1, 2}})

    def test_delete(self):
        method, url, headers, body = _builder().delete().eq("a", 1).get_request_data()
        self.assertEqual(method, "DELETE")
        self.assertEqual(url, "t?a=eq.1")
        self.assertNotIn("Prefer", headers)
        self.assertEqual(body, "")

    def test_delete_with_return(self):
        b = _builder().delete(ReturnFormat.REPRESENTATION)
        self.assertEqual(b.get_header("Prefer"), "return=representation")


class TestSingleVerb(unittest.TestCase):
    def test_second_verb_raises(self):
        b = _builder().select()
        with self.assertRaises(FilterLogicError) as ctx:
            b.delete()
        self.assertEqual(ctx.exception.subcode, codes.FILTER_METHOD_ALREADY_SET)
        self.assertEqual(b.method, "GET")

    def test_same_verb_twice_raises(self):
        b = _builder().insert({"a": 1})
        with self.assertRaises(FilterLogicError):
            b.insert({"a": 2})


class TestFailedVerbLeavesBuilderUnchanged(unittest.TestCase):
    def test_update_retry_after_encoding_error(self):
        b = _builder()
        with self.assertRaises(DataEncodingError):
            b.update({"x": object()})
        self.assertEqual(b.method, "")
        self.assertIsNone(b.get_header("Content-Type"))
        method, _, _, body = b.update({"x": 1}).get_request_data()
        self.assertEqual(method, "PATCH")
        self.assertEqual(body, '{"x":1}')

    def test_insert_retry_after_encoding_error(self):
        b = _builder()
        with self.assertRaises(DataEncodingError):
            b.insert({"a": float("nan")}, columns=["a"], return_format=ReturnFormat.MINIMAL)
        self.assertEqual(b.method, "")
        self.assertEqual(b.filters, [])
        self.assertIsNone(b.get_header("Prefer"))
        b.insert({"a": 1}, columns=["a"])
        self.assertEqual(b.filters, ["columns=a"])

    def test_second_verb_adds_no_columns_fragment(self):
        b = _builder().select()
        with self.assertRaises(FilterLogicError):
            b.insert({"a": 1}, columns=["a"])
        self.assertEqual(b.filters, [])
        self.assertIsNone(b.get_header("Content-Type"))

    def test_second_verb_adds_no_on_conflict_fragment(self):
        b = _builder().delete()
        with self.assertRaises(FilterLogicError):
            b.upsert({"a": 1}, on_conflict=["a"])
        self.assertEqual(b.filters, [])
        self.assertEqual(b.method, "DELETE")


if __name__ == "__main__":
    unittest.main()
