from django.conf import settings
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class AcademyPagination(PageNumberPagination):
    """
    Pagination mit der Antwortform ``{total, pageCount, pageSize, result}``.

    Query-Parameter: ``page``, ``pageSize``.
    """

    page_size = getattr(settings, "DEFAULT_PAGINATION_SIZE", 10)
    page_size_query_param = "pageSize"
    max_page_size = 100

    def get_paginated_response(self, data):
        total = self.page.paginator.count
        page_size = self.page.paginator.per_page
        return Response(
            {
                "total": total,
                "pageCount": max(self.page.paginator.num_pages, 1),
                "pageSize": page_size,
                "result": data,
            }
        )
