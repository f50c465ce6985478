from locust import HttpUser, task, between
import random


class Shopper(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        # Register and log in a buyer for this simulated client
        email = f"user_{random.randint(1, 1_000_000)}@load.test"
        self.client.post("/api/register", json={"name": "Load Shopper", "email": email, "password": "secret"})
        r = self.client.post("/api/login", json={"email": email, "password": "secret"})
        self.token = r.json().get("token") if r.status_code == 200 else None
        self.product_ids = []

    @task(3)
    def browse(self):
        r = self.client.get("/api/products")
        if r.status_code == 200:
            self.product_ids = [p["id"] for p in r.json()]

    @task(2)
    def place_order(self):
        if not self.token or not self.product_ids:
            return
        product_id = random.choice(self.product_ids)
        quantity = random.randint(1, 3)
        self.client.post(
            "/api/orders",
            json={
                "items": [{"productId": product_id, "quantity": quantity}],
                "totalAmount": str(round(random.random() * 100, 2)),
                "address": "Load test lane",
            },
            headers={"Authorization": self.token},
        )

    @task(1)
    def my_orders(self):
        if not self.token:
            return
        self.client.get("/api/orders", headers={"Authorization": self.token})
