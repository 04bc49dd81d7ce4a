"""Account routes grouped under /api/v1/account/."""

from django.urls import path

from .views import current_user, register

urlpatterns = [
    path("profile/", current_user, name="profile"),
    path("register/", register, name="register"),
]
