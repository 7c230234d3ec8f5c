from rest_framework.pagination import PageNumberPagination


class StandardResultsSetPagination(PageNumberPagination):
    """
    Page-number pagination honouring client `page` / `limit` parameters.

    `limit` is capped at 100 rows per page.
    """

    page_size = 20
    page_size_query_param = "limit"
    max_page_size = 100
