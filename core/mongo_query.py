"""
Mongo Query Composition

Conditional filter composition, dynamic sorting and paging for motor
collections. Repositories build a MongoQuery, optionally adding clauses,
then execute it against a collection.

Usage:
    query = (
        MongoQuery()
        .where_if(not is_blank(filter_text), lambda: {"user_name": contains_regex(filter_text)})
        .where_if(role_id is not None, lambda: {"roles.role_id": role_id})
        .order_by_sorting(sorting, USER_SORT_FIELDS, default="user_name")
        .page_by(skip_count, max_result_count)
    )
    users = await query.to_list(collection)
"""

import re
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from pymongo import ASCENDING, DESCENDING

Clause = Union[Dict[str, Any], Callable[[], Dict[str, Any]]]
SortSpec = List[Tuple[str, int]]

_DIRECTIONS = {
    "asc": ASCENDING,
    "ascending": ASCENDING,
    "desc": DESCENDING,
    "descending": DESCENDING,
}


class InvalidSortingError(ValueError):
    """Sorting expression references an unknown field or direction"""
    pass


def is_blank(value: Optional[str]) -> bool:
    """True for None, empty or whitespace-only strings"""
    return value is None or not value.strip()


def contains_regex(text: str) -> Dict[str, str]:
    """Case-sensitive substring match"""
    return {"$regex": re.escape(text)}


def starts_with_regex(text: str) -> Dict[str, str]:
    """Case-sensitive prefix match"""
    return {"$regex": "^" + re.escape(text)}


def to_snake_case(name: str) -> str:
    """UserName / userName / user_name -> user_name"""
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name.strip()).lower()


def sort_fields(names: Iterable[str], id_field: str = "_id") -> Dict[str, str]:
    """Build a sortable-field map from model field names, mapping id to _id"""
    fields = {name: name for name in names}
    if "id" in fields:
        fields["id"] = id_field
    return fields


def parse_sorting(
    sorting: Optional[str],
    allowed_fields: Mapping[str, str],
    default: str
) -> SortSpec:
    """
    Parse a dynamic sorting expression into a pymongo sort spec

    Args:
        sorting: e.g. "UserName desc, email" (blank falls back to default)
        allowed_fields: snake_case name -> document field
        default: expression used when sorting is blank

    Returns:
        List of (field, direction) tuples

    Raises:
        InvalidSortingError: unknown field or direction
    """
    expression = default if is_blank(sorting) else sorting
    spec: SortSpec = []

    for part in expression.split(","):
        tokens = part.split()
        if not tokens:
            continue
        if len(tokens) > 2:
            raise InvalidSortingError(f"Invalid sorting expression: '{part.strip()}'")

        field = to_snake_case(tokens[0])
        if field not in allowed_fields:
            raise InvalidSortingError(f"Cannot sort by unknown field: '{tokens[0]}'")

        direction = ASCENDING
        if len(tokens) == 2:
            direction = _DIRECTIONS.get(tokens[1].lower())
            if direction is None:
                raise InvalidSortingError(f"Invalid sort direction: '{tokens[1]}'")

        spec.append((allowed_fields[field], direction))

    if not spec:
        raise InvalidSortingError(f"Empty sorting expression: '{expression}'")
    return spec


class MongoQuery:
    """Composable find query: filter clauses, sort and page"""

    def __init__(self, base_filter: Optional[Dict[str, Any]] = None):
        self._clauses: List[Dict[str, Any]] = []
        self._sort: Optional[SortSpec] = None
        self._skip: int = 0
        self._limit: Optional[int] = None
        if base_filter:
            self._clauses.append(base_filter)

    def where(self, clause: Clause) -> 'MongoQuery':
        """Add a clause, evaluating it first when it is a callable"""
        if callable(clause):
            clause = clause()
        self._clauses.append(clause)
        return self

    def where_if(self, condition: bool, clause: Clause) -> 'MongoQuery':
        """Add a clause only when condition holds"""
        if condition:
            self.where(clause)
        return self

    def order_by(self, sort: SortSpec) -> 'MongoQuery':
        self._sort = list(sort)
        return self

    def order_by_sorting(
        self,
        sorting: Optional[str],
        allowed_fields: Mapping[str, str],
        default: str
    ) -> 'MongoQuery':
        """Order by a dynamic sorting expression"""
        return self.order_by(parse_sorting(sorting, allowed_fields, default))

    def page_by(self, skip_count: Optional[int] = 0, max_result_count: Optional[int] = None) -> 'MongoQuery':
        """Skip then take; max_result_count None means no limit"""
        self._skip = max(skip_count or 0, 0)
        self._limit = None if max_result_count is None else max(max_result_count, 0)
        return self

    @property
    def sort(self) -> Optional[SortSpec]:
        return self._sort

    @property
    def skip(self) -> int:
        return self._skip

    @property
    def limit(self) -> Optional[int]:
        return self._limit

    def to_filter(self) -> Dict[str, Any]:
        if not self._clauses:
            return {}
        if len(self._clauses) == 1:
            return dict(self._clauses[0])
        return {"$and": list(self._clauses)}

    async def to_list(self, collection, projection: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        # limit(0) means "no limit" to MongoDB
        if self._limit == 0:
            return []

        cursor = collection.find(self.to_filter(), projection)
        if self._sort:
            cursor = cursor.sort(self._sort)
        if self._skip:
            cursor = cursor.skip(self._skip)
        if self._limit is not None:
            cursor = cursor.limit(self._limit)
        return await cursor.to_list(length=None)

    async def count(self, collection) -> int:
        return await collection.count_documents(self.to_filter())

    async def first_or_none(self, collection) -> Optional[Dict[str, Any]]:
        if self._sort:
            return await collection.find_one(self.to_filter(), sort=self._sort)
        return await collection.find_one(self.to_filter())


__all__ = [
    "MongoQuery",
    "InvalidSortingError",
    "parse_sorting",
    "sort_fields",
    "to_snake_case",
    "is_blank",
    "contains_regex",
    "starts_with_regex",
]
