"""Query-string parameters shared by the list endpoints."""

from fastapi import Query


def list_params(
    where: str | None = Query(None, description='JSON filter, e.g. {"completed": true}'),
    sort: str | None = Query(None, description='JSON sort, e.g. {"name": 1}'),
    select: str | None = Query(None, description='JSON projection, e.g. {"_id": 0}'),
    skip: str | None = Query(None, description="Number of documents to skip"),
    limit: str | None = Query(None, description="Maximum number of documents"),
    count: str | None = Query(None, description='"true" returns the number of matches'),
) -> dict[str, str | None]:
    """Collect the raw list parameters; interpretation is left to the query builder."""
    return {
        "where": where,
        "sort": sort,
        "select": select,
        "skip": skip,
        "limit": limit,
        "count": count,
    }
