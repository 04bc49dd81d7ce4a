"""Authentication routes grouped under /api/v1/auth/.

Includes sign-in (JWT obtain), token refresh and sign-out.
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .views import SignInView, SignOutView

urlpatterns = [
    path("signin/", SignInView.as_view(), name="signin"),
    path("refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("signout/", SignOutView.as_view(), name="signout"),
]
