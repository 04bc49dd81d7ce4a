from rest_framework.test import APITestCase


class HealthTests(APITestCase):
    def test_health_is_public(self):
        resp = self.client.get("/health/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.data, {"status": "ok", "service": "buildmart-api"})

    def test_schema_lists_cart_and_orders(self):
        resp = self.client.get("/api/schema/?format=json")
        self.assertEqual(resp.status_code, 200)
        paths = resp.json()["paths"]
        self.assertIn("/api/v1/cart/checkout/", paths)
        self.assertIn("/api/v1/orders/{order_id}/", paths)
