"""Users app API views.

Endpoints include:
- profile: returns the current authenticated user's profile.
- register: creates a customer account and signs it in.
- signin: exchanges email/password for a JWT pair.
- signout: blacklists an optional refresh token and forgets the stored identity.

Sign-in and registration also write the identity record and access token to
the visitor's session so checkout can find them on later requests.
"""

from common.storage import SessionStorage
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken, TokenError

from .identity import Identity, IdentityStore
from .logging import log_auth_event
from .serializers import (
    RegistrationSerializer,
    SignInSerializer,
    SignOutSerializer,
    UserMeSerializer,
    issue_tokens,
)


def _auth_response(request, user, code: int) -> Response:
    tokens = issue_tokens(user)
    IdentityStore(SessionStorage(request.session)).login(Identity.from_user(user, token=tokens["access"]))
    return Response({"user": UserMeSerializer(user).data, **tokens}, status=code)


@extend_schema(
    operation_id="users_current_user",
    summary="Get current user profile",
    description=(
        "Returns the current authenticated user's profile.\n\n"
        "Auth: Requires JWT (Authorization: Bearer <token>) or session auth.\n\n"
        "Errors: 401 if authentication credentials are missing or invalid."
    ),
    tags=["User Endpoints"],
    responses={
        200: OpenApiResponse(description="User profile", response=UserMeSerializer),
        401: OpenApiResponse(description="Unauthorized"),
    },
)
@api_view(["GET"])
@permission_classes([IsAuthenticated])
@throttle_classes([ScopedRateThrottle])
def current_user(request):
    """Return the authenticated user's profile fields."""
    log_auth_event("profile", request, user=request.user)
    return Response(UserMeSerializer(request.user).data)


current_user.throttle_scope = "profile"


@extend_schema(
    tags=["User Endpoints"],
    summary="Register",
    request=RegistrationSerializer,
    responses={
        201: OpenApiResponse(description="User and JWT pair"),
        400: OpenApiResponse(description="Invalid"),
        409: OpenApiResponse(description="Email already registered"),
    },
)
@api_view(["POST"])
@permission_classes([AllowAny])
@throttle_classes([ScopedRateThrottle])
def register(request):
    """Register a new customer and return a JWT pair."""
    serializer = RegistrationSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        log_auth_event("register", request, user=user, status="success")
        return _auth_response(request, user, status.HTTP_201_CREATED)
    if any(getattr(err, "code", None) == "duplicate" for err in serializer.errors.get("email", [])):
        log_auth_event("register", request, status="conflict")
        return Response({"detail": "Email already registered."}, status=status.HTTP_409_CONFLICT)
    log_auth_event("register", request, status="invalid")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


register.throttle_scope = "register"


class SignInView(APIView):
    """Exchange email/password for access and refresh tokens."""

    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signin"

    @extend_schema(
        tags=["Auth Endpoints"],
        summary="Sign in",
        request=SignInSerializer,
        responses={
            200: OpenApiResponse(description="User and JWT pair"),
            401: OpenApiResponse(description="Invalid credentials"),
        },
    )
    def post(self, request):
        serializer = SignInSerializer(data=request.data)
        if not serializer.is_valid():
            log_auth_event("signin", request, status="invalid", extra={"email": request.data.get("email")})
            return Response({"detail": "Invalid credentials."}, status=status.HTTP_401_UNAUTHORIZED)
        user = serializer.validated_data["user"]
        log_auth_event("signin", request, user=user)
        return _auth_response(request, user, status.HTTP_200_OK)


class SignOutView(APIView):
    """Blacklist the refresh token (when given) and clear the stored identity."""

    permission_classes = [AllowAny]
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signout"

    @extend_schema(
        tags=["Auth Endpoints"],
        summary="Sign out",
        request=SignOutSerializer,
        responses={200: OpenApiResponse(description="Signed out"), 400: OpenApiResponse(description="Bad token")},
    )
    def post(self, request):
        serializer = SignOutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        refresh = serializer.validated_data.get("refresh")
        if refresh:
            try:
                RefreshToken(refresh).blacklist()
            except TokenError:
                log_auth_event("signout", request, status="invalid_token")
                return Response({"detail": "Invalid refresh token."}, status=status.HTTP_400_BAD_REQUEST)
        IdentityStore(SessionStorage(request.session)).logout()
        log_auth_event("signout", request, user=request.user if request.user.is_authenticated else None)
        return Response({"detail": "Signed out."}, status=status.HTTP_200_OK)
