import django_filters
from django.db.models import Q

from .models import Bill


class BillFilter(django_filters.FilterSet):
    """
    Query filters for bill listings.

    `search` matches the operation id, client, site, tariff code or task of
    the group's workers; `dateStart`/`dateEnd` bound the operation start date.
    """

    search = django_filters.CharFilter(method="filter_search")
    status = django_filters.ChoiceFilter(choices=Bill._meta.get_field("status").choices)
    dateStart = django_filters.DateFilter(field_name="operation__date_start", lookup_expr="gte")
    dateEnd = django_filters.DateFilter(field_name="operation__date_start", lookup_expr="lte")
    operation = django_filters.NumberFilter(field_name="operation_id")
    site = django_filters.CharFilter(field_name="operation__site", lookup_expr="iexact")
    sub_site = django_filters.CharFilter(field_name="operation__sub_site", lookup_expr="iexact")

    class Meta:
        model = Bill
        fields = ["group_id"]

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset

        query = (
            Q(operation__client__icontains=value)
            | Q(operation__site__icontains=value)
            | Q(operation__sub_site__icontains=value)
            | Q(details__operation_worker__tariff__code__icontains=value)
            | Q(details__operation_worker__task__icontains=value)
        )
        if value.isdigit():
            query |= Q(operation_id=int(value))
        return queryset.filter(query).distinct()
