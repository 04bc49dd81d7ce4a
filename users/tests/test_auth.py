import json

from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase
from users.identity import TOKEN_STORAGE_KEY, USER_STORAGE_KEY


class AuthFlowTests(APITestCase):
    def setUp(self):
        self.User = get_user_model()
        self.password = "StrongPass123!"
        self.user = self.User.objects.create_user(
            username="jdoe@example.com",
            email="jdoe@example.com",
            password=self.password,
            first_name="John",
            last_name="Doe",
        )

    def _signin(self, email=None, password=None):
        return self.client.post(
            "/api/v1/auth/signin/",
            {"email": email or self.user.email, "password": password or self.password},
            format="json",
        )

    def test_signin_returns_tokens_and_user(self):
        resp = self._signin()
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertIn("access", resp.data)
        self.assertIn("refresh", resp.data)
        self.assertEqual(resp.data["user"]["email"], "jdoe@example.com")
        self.assertEqual(resp.data["user"]["role"], "customer")

    def test_signin_is_case_insensitive_on_email(self):
        resp = self._signin(email="JDoe@Example.com")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

    def test_signin_wrong_password_is_401(self):
        resp = self._signin(password="nope-nope-nope")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(resp.data["detail"], "Invalid credentials.")

    def test_signin_unknown_email_is_401(self):
        resp = self._signin(email="ghost@example.com")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_signin_writes_identity_pair_to_session(self):
        resp = self._signin()
        session = self.client.session
        record = json.loads(session[USER_STORAGE_KEY])
        self.assertEqual(record["email"], self.user.email)
        self.assertNotIn("token", record)
        self.assertEqual(session[TOKEN_STORAGE_KEY], resp.data["access"])

    def test_profile_requires_auth(self):
        resp = self.client.get("/api/v1/account/profile/")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_profile_with_access_token(self):
        access = self._signin().data["access"]
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        resp = self.client.get("/api/v1/account/profile/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["email"], self.user.email)

    def test_signout_blacklists_refresh_and_clears_identity(self):
        refresh = self._signin().data["refresh"]
        resp = self.client.post("/api/v1/auth/signout/", {"refresh": refresh}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        session = self.client.session
        self.assertNotIn(USER_STORAGE_KEY, session)
        self.assertNotIn(TOKEN_STORAGE_KEY, session)
        resp2 = self.client.post("/api/v1/auth/refresh/", {"refresh": refresh}, format="json")
        self.assertEqual(resp2.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_signout_with_garbage_refresh_is_400(self):
        resp = self.client.post("/api/v1/auth/signout/", {"refresh": "not-a-token"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_signout_without_refresh_still_clears_session(self):
        self._signin()
        resp = self.client.post("/api/v1/auth/signout/", {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertNotIn(TOKEN_STORAGE_KEY, self.client.session)
