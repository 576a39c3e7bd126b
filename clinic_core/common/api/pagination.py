# clinic_core/common/api/pagination.py
from __future__ import annotations

from django.conf import settings
from django.db.models import QuerySet
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class DefaultPagination(PageNumberPagination):
    page_size = getattr(settings, "API_PAGE_SIZE", 20)
    page_size_query_param = "page_size"
    max_page_size = getattr(settings, "API_MAX_PAGE_SIZE", 200)


def paginate(request, queryset, serializer_class, *, paginator: PageNumberPagination | None = None) -> Response:
    """
    List endpoints all answer { count, next, previous, results }.
    Unordered querysets get a primary-key ordering so pages are stable.
    """
    if isinstance(queryset, QuerySet) and not queryset.ordered:
        queryset = queryset.order_by("pk")

    p = paginator or DefaultPagination()
    page = p.paginate_queryset(queryset, request)
    if page is None:
        return Response(serializer_class(queryset, many=True).data)
    return p.get_paginated_response(serializer_class(page, many=True).data)
