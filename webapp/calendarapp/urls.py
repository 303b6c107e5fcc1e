"""
urls.py
=======

Маршруты (URL patterns) приложения `calendarapp`.

Текущие маршруты:
- `/` — сетка месяца (?y=&m=);
- `/health/` — healthcheck;
- `/login/`, `/logout/` — вход/выход администратора;
- `/events/create/`, `/events/<id>/update/`, `/events/<id>/delete/` — изменения;
- `/export/csv/` — резервная копия в CSV.
"""
from django.urls import path
from . import views

app_name = "calendarapp"

urlpatterns = [
    path("", views.month_view, name="month"),
    path("health/", views.healthcheck, name="healthcheck"),
    path("login/", views.login_view, name="login"),
    path("logout/", views.logout_view, name="logout"),
    path("events/create/", views.create_event, name="create_event"),
    path("events/<int:event_id>/update/", views.update_event, name="update_event"),
    path("events/<int:event_id>/delete/", views.delete_event, name="delete_event"),
    path("export/csv/", views.export_csv, name="export_csv"),
]
