from django.urls import path

from . import views

urlpatterns = [
    path("", views.bill_list, name="bill-list"),
    path("paginated/", views.bill_paginated, name="bill-paginated"),
    path("search-stats/", views.bill_search_stats, name="bill-search-stats"),
    path(
        "recalculate-group-hours/",
        views.recalculate_group_hours,
        name="bill-recalculate-group-hours",
    ),
    path("<int:pk>/", views.bill_detail, name="bill-detail"),
    path("<int:pk>/status/", views.bill_status, name="bill-status"),
]
