"""
Tests for the reconciliation layer: id coercion, record conversion,
lookups and writes across the two stores.
"""

from datetime import datetime, timedelta
from unittest.mock import Mock

import pytest
from bson import ObjectId
from pymongo.errors import PyMongoError, ServerSelectionTimeoutError
from sqlalchemy.exc import IntegrityError, OperationalError

from internhub.core.exceptions import StoreUnavailableError, ValidationError
from internhub.services.dual_store import (
    apply_to_both, camel_to_snake, document_to_record, id_candidates,
    lookup_many, lookup_one, record_to_document, snake_to_camel, to_object_id,
    write_with_fallback
)


def primary_error():
    return OperationalError("SELECT 1", {}, Exception("connection refused"))


# ============================================================
# IDS AND CONVERSION
# ============================================================

def test_to_object_id_accepts_hex_strings_and_object_ids():
    oid = ObjectId()
    assert to_object_id(str(oid)) == oid
    assert to_object_id(oid) is oid


def test_to_object_id_rejects_non_hex_values():
    assert to_object_id("not-an-id") is None
    assert to_object_id(None) is None


def test_id_candidates_include_both_forms():
    oid = ObjectId()
    assert id_candidates(str(oid)) == [str(oid), oid]
    assert id_candidates("legacy-7") == ["legacy-7"]
    assert id_candidates(None) == []


def test_case_conversion():
    assert camel_to_snake("applicationDeadline") == "application_deadline"
    assert camel_to_snake("linkedinProfile") == "linkedin_profile"
    assert snake_to_camel("application_deadline") == "applicationDeadline"
    assert snake_to_camel("title") == "title"


def test_document_to_record_stringifies_ids():
    oid, company_oid = ObjectId(), ObjectId()
    record = document_to_record({"_id": oid, "companyId": company_oid, "locationType": "remote"})
    assert record == {"id": str(oid), "company_id": str(company_oid), "location_type": "remote"}


def test_record_to_document_restores_object_id():
    record_id = str(ObjectId())
    doc = record_to_document({"id": record_id, "user_id": "abc", "read": False})
    assert doc == {"_id": ObjectId(record_id), "userId": "abc", "read": False}


# ============================================================
# LOOKUP ONE
# ============================================================

def test_lookup_one_skips_fallback_when_primary_has_record():
    fallback = Mock()
    assert lookup_one(lambda: {"id": "1"}, fallback, "thing") == {"id": "1"}
    fallback.assert_not_called()


def test_lookup_one_falls_back_when_primary_is_empty():
    assert lookup_one(lambda: None, lambda: {"id": "2"}, "thing") == {"id": "2"}


def test_lookup_one_falls_back_when_primary_fails():
    primary = Mock(side_effect=primary_error())
    assert lookup_one(primary, lambda: {"id": "3"}, "thing") == {"id": "3"}


def test_lookup_one_returns_none_when_only_document_store_fails():
    fallback = Mock(side_effect=PyMongoError("boom"))
    assert lookup_one(lambda: None, fallback, "thing") is None


def test_lookup_one_raises_when_both_stores_fail():
    primary = Mock(side_effect=primary_error())
    fallback = Mock(side_effect=ServerSelectionTimeoutError("no servers"))
    with pytest.raises(StoreUnavailableError):
        lookup_one(primary, fallback, "thing")


# ============================================================
# LOOKUP MANY
# ============================================================

def test_lookup_many_uses_primary_only_when_it_has_results():
    fallback = Mock(return_value=[{"id": "b"}])
    records = lookup_many(lambda: [{"id": "a"}], fallback, "things", sort_key=None)
    assert records == [{"id": "a"}]
    fallback.assert_not_called()


def test_lookup_many_falls_back_on_empty_primary():
    records = lookup_many(lambda: [], lambda: [{"id": "b"}], "things", sort_key=None)
    assert records == [{"id": "b"}]


def test_lookup_many_always_merge_dedupes_with_primary_winning():
    primary = [{"id": "a", "source": "primary"}]
    fallback = [{"id": "a", "source": "document"}, {"id": "b", "source": "document"}]
    records = lookup_many(lambda: primary, lambda: fallback, "things",
                          always_merge=True, sort_key=None)
    by_id = {r["id"]: r for r in records}
    assert len(records) == 2
    assert by_id["a"]["source"] == "primary"
    assert by_id["b"]["source"] == "document"


def test_lookup_many_sorts_newest_first_and_undated_last():
    now = datetime.utcnow()
    primary = [{"id": "old", "created_at": now - timedelta(days=1)}]
    fallback = [{"id": "undated"}, {"id": "new", "created_at": now}]
    records = lookup_many(lambda: primary, lambda: fallback, "things", always_merge=True)
    assert [r["id"] for r in records] == ["new", "old", "undated"]


def test_lookup_many_raises_when_both_stores_fail():
    primary = Mock(side_effect=primary_error())
    fallback = Mock(side_effect=PyMongoError("boom"))
    with pytest.raises(StoreUnavailableError):
        lookup_many(primary, fallback, "things")


def test_lookup_many_keeps_primary_results_when_document_store_fails():
    fallback = Mock(side_effect=PyMongoError("boom"))
    records = lookup_many(lambda: [{"id": "a"}], fallback, "things", always_merge=True, sort_key=None)
    assert records == [{"id": "a"}]


# ============================================================
# WRITES
# ============================================================

def test_write_with_fallback_stops_at_applied_primary_write():
    fallback = Mock()
    assert write_with_fallback(lambda: 1, fallback, "thing") == 1
    fallback.assert_not_called()


@pytest.mark.parametrize("primary_result", [None, False, 0])
def test_write_with_fallback_retries_unapplied_write_in_document_store(primary_result):
    fallback = Mock(return_value={"id": "x"})
    assert write_with_fallback(lambda: primary_result, fallback, "thing") == {"id": "x"}
    fallback.assert_called_once()


def test_write_with_fallback_raises_when_both_stores_fail():
    primary = Mock(side_effect=primary_error())
    fallback = Mock(side_effect=PyMongoError("boom"))
    with pytest.raises(StoreUnavailableError):
        write_with_fallback(primary, fallback, "thing")


def test_write_with_fallback_rejects_constraint_violation_without_fallback():
    primary = Mock(side_effect=IntegrityError("UPDATE things", {}, Exception("NOT NULL constraint failed")))
    fallback = Mock()
    with pytest.raises(ValidationError):
        write_with_fallback(primary, fallback, "thing")
    fallback.assert_not_called()


def test_apply_to_both_sums_counts():
    assert apply_to_both(lambda: 2, lambda: 3, "things") == 5


def test_apply_to_both_tolerates_one_failed_store():
    primary = Mock(side_effect=primary_error())
    assert apply_to_both(primary, lambda: 3, "things") == 3
