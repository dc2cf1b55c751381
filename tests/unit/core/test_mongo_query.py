"""
Mongo Query Composition Unit Tests

Conditional clauses, sorting expressions and paging of MongoQuery.
"""
import re

import pytest
from pymongo import ASCENDING, DESCENDING

from core.mongo_query import (
    MongoQuery,
    InvalidSortingError,
    parse_sorting,
    sort_fields,
    to_snake_case,
    is_blank,
    contains_regex,
    starts_with_regex,
)

pytestmark = pytest.mark.unit

FIELDS = sort_fields(["id", "user_name", "email", "creation_time"])


# =============================================================================
# Conditional clauses
# =============================================================================

class TestWhereIf:
    """where_if adds a clause only when its condition holds"""

    def test_no_clauses_gives_empty_filter(self):
        assert MongoQuery().to_filter() == {}

    def test_single_clause_is_not_wrapped(self):
        query = MongoQuery().where_if(True, {"user_name": "alice"})
        assert query.to_filter() == {"user_name": "alice"}

    def test_false_condition_skips_clause(self):
        query = MongoQuery().where_if(False, {"user_name": "alice"})
        assert query.to_filter() == {}

    def test_multiple_clauses_are_anded(self):
        query = (
            MongoQuery({"tenant_id": None})
            .where_if(True, {"is_active": True})
            .where_if(False, {"email": "x"})
        )
        assert query.to_filter() == {"$and": [{"tenant_id": None}, {"is_active": True}]}

    def test_callable_clause_not_evaluated_when_condition_false(self):
        def explode():
            raise AssertionError("should not be evaluated")

        MongoQuery().where_if(False, explode)

    def test_callable_clause_evaluated_when_condition_true(self):
        query = MongoQuery().where_if(True, lambda: {"roles.role_id": "r1"})
        assert query.to_filter() == {"roles.role_id": "r1"}


# =============================================================================
# Paging
# =============================================================================

class TestPageBy:

    def test_defaults_to_no_skip_no_limit(self):
        query = MongoQuery().page_by()
        assert query.skip == 0
        assert query.limit is None

    def test_skip_then_limit(self):
        query = MongoQuery().page_by(20, 10)
        assert query.skip == 20
        assert query.limit == 10

    def test_negative_values_clamped(self):
        query = MongoQuery().page_by(-5, -1)
        assert query.skip == 0
        assert query.limit == 0

    @pytest.mark.asyncio
    async def test_zero_limit_returns_empty_without_querying(self):
        class Collection:
            def find(self, *args, **kwargs):
                raise AssertionError("find should not be called")

        assert await MongoQuery().page_by(0, 0).to_list(Collection()) == []


# =============================================================================
# Sorting
# =============================================================================

class TestParseSorting:

    def test_blank_uses_default(self):
        assert parse_sorting(None, FIELDS, "user_name") == [("user_name", ASCENDING)]
        assert parse_sorting("   ", FIELDS, "user_name") == [("user_name", ASCENDING)]

    def test_pascal_camel_and_snake_case_accepted(self):
        assert parse_sorting("UserName", FIELDS, "id") == [("user_name", ASCENDING)]
        assert parse_sorting("userName", FIELDS, "id") == [("user_name", ASCENDING)]
        assert parse_sorting("user_name", FIELDS, "id") == [("user_name", ASCENDING)]

    def test_directions(self):
        assert parse_sorting("email desc", FIELDS, "id") == [("email", DESCENDING)]
        assert parse_sorting("email DESCENDING", FIELDS, "id") == [("email", DESCENDING)]
        assert parse_sorting("email asc", FIELDS, "id") == [("email", ASCENDING)]

    def test_multiple_fields(self):
        spec = parse_sorting("creationTime desc, userName", FIELDS, "id")
        assert spec == [("creation_time", DESCENDING), ("user_name", ASCENDING)]

    def test_id_maps_to_underscore_id(self):
        assert parse_sorting("Id desc", FIELDS, "user_name") == [("_id", DESCENDING)]

    def test_unknown_field_rejected(self):
        with pytest.raises(InvalidSortingError):
            parse_sorting("password_hash", FIELDS, "id")

    def test_unknown_direction_rejected(self):
        with pytest.raises(InvalidSortingError):
            parse_sorting("email sideways", FIELDS, "id")

    def test_too_many_tokens_rejected(self):
        with pytest.raises(InvalidSortingError):
            parse_sorting("email desc now", FIELDS, "id")

    def test_invalid_sorting_is_value_error(self):
        assert issubclass(InvalidSortingError, ValueError)


# =============================================================================
# Helpers
# =============================================================================

class TestHelpers:

    def test_to_snake_case(self):
        assert to_snake_case("LastModificationTime") == "last_modification_time"
        assert to_snake_case("emailConfirmed") == "email_confirmed"
        assert to_snake_case("surname") == "surname"

    def test_is_blank(self):
        assert is_blank(None)
        assert is_blank("")
        assert is_blank(" \t")
        assert not is_blank("a")

    def test_contains_regex_escapes_metacharacters(self):
        pattern = contains_regex("a.b+c")["$regex"]
        assert re.search(pattern, "xa.b+cx")
        assert not re.search(pattern, "aXbbc")

    def test_contains_regex_is_case_sensitive(self):
        pattern = contains_regex("Alice")["$regex"]
        assert not re.search(pattern, "alice")

    def test_starts_with_regex_is_anchored(self):
        pattern = starts_with_regex("00001.")["$regex"]
        assert re.search(pattern, "00001.00002")
        assert not re.search(pattern, "00002.00001")
