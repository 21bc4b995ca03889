"""
core.pagination: ``page`` / ``limit`` pagination for list endpoints.

Responses look like::

    {
        "results": [...],
        "pagination": {"page": 1, "limit": 10, "total": 42, "pages": 5}
    }
"""

from __future__ import annotations

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


class PageLimitPagination(PageNumberPagination):
    page_size = DEFAULT_PAGE_SIZE
    page_query_param = "page"
    page_size_query_param = "limit"
    max_page_size = MAX_PAGE_SIZE

    def get_paginated_response(self, data) -> Response:
        paginator = self.page.paginator
        return Response({
            "results": data,
            "pagination": {
                "page": self.page.number,
                "limit": paginator.per_page,
                "total": paginator.count,
                "pages": paginator.num_pages,
            },
        })

    def get_paginated_response_schema(self, schema: dict) -> dict:
        return {
            "type": "object",
            "required": ["results", "pagination"],
            "properties": {
                "results": schema,
                "pagination": {
                    "type": "object",
                    "properties": {
                        "page": {"type": "integer"},
                        "limit": {"type": "integer"},
                        "total": {"type": "integer"},
                        "pages": {"type": "integer"},
                    },
                },
            },
        }
