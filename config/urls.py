from django.urls import include, path

urlpatterns = [
    path("", include("recall.api.urls")),
]
