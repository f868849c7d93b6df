"""Offset pagination driven by `page` and `limit` query parameters."""

from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response

from LearningHubApp.core.conf import get_setting


class PageLimitPagination(PageNumberPagination):
    """Returns `{items, total, page, limit}`; `total` counts the whole filtered queryset.

    A page past the end yields an empty `items` list instead of a 404.
    """
    page_query_param = "page"
    page_size_query_param = "limit"

    def __init__(self) -> None:
        self.page_size = get_setting("SUBMISSIONS_PAGE_SIZE")
        self.max_page_size = get_setting("SUBMISSIONS_MAX_PAGE_SIZE")

    def get_page_number(self, request, paginator=None) -> int:
        try:
            number = int(request.query_params.get(self.page_query_param, 1))
        except (TypeError, ValueError):
            return 1
        return max(number, 1)

    def paginate_queryset(self, queryset, request, view=None) -> list:
        self.request = request
        self.limit = self.get_page_size(request)
        self.number = self.get_page_number(request)
        self.total = queryset.count()
        offset = (self.number - 1) * self.limit
        return list(queryset[offset:offset + self.limit])

    def get_paginated_response(self, data) -> Response:
        return Response({
            "items": data,
            "total": self.total,
            "page": self.number,
            "limit": self.limit,
        })

    def get_paginated_response_schema(self, schema: dict) -> dict:
        return {
            "type": "object",
            "required": ["items", "total", "page", "limit"],
            "properties": {
                "items": schema,
                "total": {"type": "integer", "example": 45},
                "page": {"type": "integer", "example": 1},
                "limit": {"type": "integer", "example": 20},
            },
        }
