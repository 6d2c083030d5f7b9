"""
FastAPI dependencies (shared across routes).
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Query


async def list_params(
    skip: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    searchtext: Optional[str] = Query(None),
    role: Optional[str] = Query(None, description="USER, ADMIN or GUEST"),
    sortorder: Optional[str] = Query(None, description="ASC or DESC"),
    sortkey: Optional[str] = Query(None, description="createdAt, updatedAt, firstName or email"),
) -> Dict[str, Any]:
    """Collect the listing query string as raw wire-named params.

    Values stay strings so ``build_plan`` owns parsing and reports bad
    paging or sort values in the uniform failure shape.
    """
    return {
        "skip": skip,
        "limit": limit,
        "searchtext": searchtext,
        "role": role,
        "sortorder": sortorder,
        "sortkey": sortkey,
    }
