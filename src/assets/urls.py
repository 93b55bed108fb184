from django.urls import path

from . import views

app_name = "assets"

urlpatterns = [
    path("assets/", views.asset_collection, name="asset_list"),
    path(
        "assets/bulk-approve/",
        views.asset_bulk_approve,
        name="asset_bulk_approve",
    ),
    path("assets/<int:pk>/", views.asset_detail, name="asset_detail"),
    path(
        "assets/<int:pk>/approve/",
        views.asset_approve,
        name="asset_approve",
    ),
    path(
        "assets/<int:pk>/reject/",
        views.asset_reject,
        name="asset_reject",
    ),
    path(
        "assets/<int:pk>/resubmit/",
        views.asset_resubmit,
        name="asset_resubmit",
    ),
    path(
        "reports/ministries/",
        views.ministry_report,
        name="ministry_report",
    ),
]
