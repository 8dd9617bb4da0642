"""List filtering and summary counts computed from a store's cached items."""
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

# Text fields matched by the search box of each list view
SEARCH_FIELDS = {
    "academies": ["name", "type", "location", "email"],
    "courts": ["name", "location", "type"],
    "sports": ["name", "category", "description"],
    "stores": ["name", "location"],
    "products": ["name", "category", "sku", "description"],
    "orders": ["orderNumber", "userName", "userEmail"],
    "gatePasses": ["passNumber", "visitorName", "visitorEmail", "purpose"],
    "notifications": ["title", "message", "category"],
    "users": ["firstName", "lastName", "email", "phone"],
    "shops": ["name", "location"],
    "bookings": ["userName", "userEmail", "notes"],
    "events": ["name", "description", "location", "category"],
}


def matches_search(item: Mapping[str, Any], term: Optional[str], fields: Sequence[str]) -> bool:
    """Case-insensitive substring match of ``term`` against any of ``fields``."""
    if not term or not term.strip():
        return True
    needle = term.strip().lower()
    for field in fields:
        value = item.get(field)
        if value is not None and needle in str(value).lower():
            return True
    return False


def matches_filters(item: Mapping[str, Any], filters: Optional[Mapping[str, Any]]) -> bool:
    """Equality match on every filter; ``None``, ``""`` and ``"all"`` disable a filter."""
    for field, expected in (filters or {}).items():
        if expected is None or expected == "" or expected == "all":
            continue
        actual = item.get(field)
        if isinstance(expected, bool) or isinstance(actual, bool):
            if bool(actual) != _as_bool(expected):
                return False
        elif str(actual) != str(expected):
            return False
    return True


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "active")
    return bool(value)


def filter_items(
    items: Iterable[Mapping[str, Any]],
    search: Optional[str] = None,
    fields: Sequence[str] = (),
    filters: Optional[Mapping[str, Any]] = None,
) -> List[Mapping[str, Any]]:
    """
    Apply a search term and equality filters to a list.

    Args:
        items: Cached items
        search: Search term, matched against ``fields``
        fields: Text fields to search
        filters: Field -> expected value

    Returns:
        Matching items in their original order
    """
    return [
        item for item in items
        if matches_search(item, search, fields) and matches_filters(item, filters)
    ]


def count_by(items: Iterable[Mapping[str, Any]], field: str) -> Dict[str, int]:
    """Number of items per distinct value of ``field``."""
    return dict(Counter(str(item.get(field)) for item in items if item.get(field) is not None))


def active_split(items: Iterable[Mapping[str, Any]], field: str = "active") -> Dict[str, int]:
    items = list(items)
    active = sum(1 for item in items if item.get(field))
    return {"total": len(items), "active": active, "inactive": len(items) - active}


def stock_level(product: Mapping[str, Any]) -> str:
    """Classify a product as ``out_of_stock``, ``low_stock`` or ``in_stock``."""
    quantity = product.get("stockQuantity") or 0
    if quantity == 0:
        return "out_of_stock"
    if quantity <= (product.get("minStockLevel") or 0):
        return "low_stock"
    return "in_stock"
