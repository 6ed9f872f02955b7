from rest_framework.pagination import PageNumberPagination


class StandardResultsPagination(PageNumberPagination):
    """Page-number pagination driven by ``page`` and ``limit`` query params"""
    page_size = 20
    page_size_query_param = 'limit'
    max_page_size = 100
