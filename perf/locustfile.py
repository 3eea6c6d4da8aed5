"""Locust load script for the CRUMBLE BFF.
Usage:
  locust -f perf/locustfile.py --host http://localhost:3001
"""
import os
from locust import HttpUser, task, between

ITEM_ID = os.getenv("CRUMBLE_ITEM_ID", "tt0111161")
CATEGORIES = os.getenv("CRUMBLE_CATEGORIES", "top,trending,year").split(",")


class FrontendUser(HttpUser):
    wait_time = between(0.2, 1.0)

    @task(1)
    def health(self):
        self.client.get("/api/health")

    @task(3)
    def discover_movies(self):
        self.client.get("/api/content/discover/movie/top")

    @task(3)
    def discover_series(self):
        self.client.get("/api/content/discover/series/top")

    @task(2)
    def meta_and_streams(self):
        self.client.get(f"/api/content/meta/{ITEM_ID}", name="/api/content/meta/[id]")
        self.client.get(f"/api/content/stream/{ITEM_ID}", name="/api/content/stream/[id]")

    @task(1)
    def sweep_categories(self):
        # Hit several catalogs to exercise cache spread
        for category in CATEGORIES:
            self.client.get(f"/api/content/discover/movie/{category}", name="/api/content/discover/movie/[category]")
