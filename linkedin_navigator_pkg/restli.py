"""Query-string helpers for the Rest-li style the internal API expects.

Rest-li nests structures inside parentheses and wraps collections as
`List(a,b)`, so these pieces are joined by hand rather than via urlencode.
"""
from typing import Iterable, List, Optional, Sequence, Tuple
from urllib.parse import quote


def encode_component(value) -> str:
    """Percent-encode like JavaScript's encodeURIComponent."""
    return quote(str(value), safe="-_.!~*'()")


def restli_list(values: Iterable[str]) -> str:
    return f"List({','.join(str(v) for v in values)})"


def join_query(params: Sequence[Tuple[str, object]]) -> str:
    return "&".join(f"{key}={value}" for key, value in params)


def search_clusters_query(
    keywords: Optional[str],
    result_type: str,
    filters: Sequence[Tuple[str, Optional[Sequence[str]]]],
    start: int,
    count: int,
) -> str:
    """Build the query for `/voyager/api/search/dash/clusters`.

    Empty filters are dropped; each remaining one becomes `name:List(...)`.
    """
    inner: List[str] = []
    if keywords:
        inner.append(f"keywords:{encode_component(keywords)}")
    inner.append("flagshipSearchIntent:SEARCH_SRP")

    parts = [f"resultType:{restli_list([result_type])}"]
    for name, values in filters:
        if values:
            parts.append(f"{name}:{restli_list(values)}")
    inner.append(f"queryParameters:({','.join(parts)})")

    return join_query([
        ("decorationId", "com.linkedin.voyager.dash.deco.search.SearchClusterCollection-186"),
        ("origin", "GLOBAL_SEARCH_HEADER"),
        ("q", "all"),
        ("query", f"({','.join(inner)})"),
        ("start", start),
        ("count", count),
    ])


def sales_search_query(
    keywords: Optional[str],
    filters: Sequence[Tuple[str, Optional[str]]],
    start: int,
    count: int,
) -> str:
    """Build the query for the Sales API lead/account search endpoints."""
    params: List[Tuple[str, object]] = [
        ("q", "searchQuery"),
        ("start", start),
        ("count", count),
    ]
    if keywords:
        params.append(("query", f"(keywords:{encode_component(keywords)})"))
    entries = [
        f"(type:{kind},values:{restli_list([value])})"
        for kind, value in filters
        if value
    ]
    if entries:
        params.append(("filters", restli_list(entries)))
    return join_query(params)
