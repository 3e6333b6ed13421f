# learnplatform/client.py
"""
HTTP client for the LearnPlatform API.

Responses are returned as the camelCase dictionaries the server sends. The
cart and favorite helpers compose the same derived values the web front end
shows (membership checks, cart totals) on top of those dictionaries.
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

import requests

from .config import DEFAULT_PATH_PRICE
from .views import cart_total

logger = logging.getLogger(__name__)

ALL = "all"


class ApiError(Exception):
    """Non-2xx response; carries the server's ``error`` message."""

    def __init__(self, status_code: int, message: str, payload: Any = None):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.payload = payload


def filter_courses(courses: Iterable[Dict], query: str = "", category: str = ALL, level: str = ALL) -> List[Dict]:
    """Catalog search: substring of title or description, exact category and level."""
    needle = (query or "").lower()
    result = []
    for course in courses:
        matches_search = needle in course.get("title", "").lower() or needle in course.get("description", "").lower()
        matches_category = category in (None, ALL) or course.get("category") == category
        matches_level = level in (None, ALL) or course.get("level") == level
        if matches_search and matches_category and matches_level:
            result.append(course)
    return result


def distinct_values(courses: Iterable[Dict], field: str) -> List[str]:
    """Filter options for ``category`` or ``level``, in first-seen order."""
    return list(dict.fromkeys(c[field] for c in courses if c.get(field)))


class LearnPlatformClient:
    def __init__(self, base_url: str = "http://127.0.0.1:8000", session=None, token: Optional[str] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.token = token
        self.user: Optional[Dict] = None

    # --- transport ---

    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def _request(self, method: str, path: str, **kwargs):
        url = f"{self.base_url}{path}"
        headers = {**self._headers(), **kwargs.pop("headers", {})}
        response = self.session.request(method, url, headers=headers, **kwargs)
        if response.status_code >= 400:
            try:
                payload = response.json()
                message = payload.get("error", response.text)
            except ValueError:
                payload, message = None, response.text
            logger.debug("%s %s failed with %d: %s", method, path, response.status_code, message)
            raise ApiError(response.status_code, message, payload)
        if not response.content:
            return None
        return response.json()

    def get(self, path: str, **params):
        return self._request("GET", path, params=params or None)

    def post(self, path: str, json: Any = None):
        return self._request("POST", path, json=json)

    def patch(self, path: str, json: Any = None):
        return self._request("PATCH", path, json=json)

    def delete(self, path: str):
        return self._request("DELETE", path)

    # --- auth ---

    def _store_auth(self, result: Dict) -> Dict:
        self.token = result["token"]
        self.user = result["user"]
        return self.user

    def login(self, username: str, password: str) -> Dict:
        return self._store_auth(self.post("/api/auth/login", {"username": username, "password": password}))

    def register(self, username: str, password: str, email: str, name: str) -> Dict:
        payload = {"username": username, "password": password, "email": email, "name": name}
        return self._store_auth(self.post("/api/auth/register", payload))

    def logout(self):
        self.token = None
        self.user = None

    def me(self) -> Dict:
        return self.get("/api/auth/me")

    # --- catalog ---

    def courses(self) -> List[Dict]:
        return self.get("/api/courses")

    def course(self, course_id: str) -> Dict:
        return self.get(f"/api/courses/{course_id}")

    def course_content(self, course_id: str) -> Dict:
        return self.get(f"/api/courses/{course_id}/content")

    def search_courses(self, query: str = "", category: str = ALL, level: str = ALL) -> List[Dict]:
        return filter_courses(self.courses(), query, category, level)

    def labs(self) -> List[Dict]:
        return self.get("/api/labs")

    def learning_paths(self) -> List[Dict]:
        return self.get("/api/learning-paths")

    def learning_path(self, path_id: str) -> Dict:
        return self.get(f"/api/learning-paths/{path_id}")

    def homepage_content(self) -> Dict[str, Any]:
        """Visible homepage blocks keyed by ``key``, values decoded by type."""
        return {block["key"]: block["parsedValue"] for block in self.get("/api/homepage-content")}

    # --- cart ---

    def cart(self) -> List[Dict]:
        return self.get("/api/cart")

    def add_to_cart(self, item_id: str, item_type: str) -> Dict:
        return self.post("/api/cart", {"itemId": item_id, "itemType": item_type})

    def remove_from_cart(self, cart_item_id: str):
        return self.delete(f"/api/cart/{cart_item_id}")

    def clear_cart(self):
        return self.delete("/api/cart")

    def is_in_cart(self, item_id: str, item_type: str, items: Optional[List[Dict]] = None) -> bool:
        items = self.cart() if items is None else items
        return any(i["itemId"] == item_id and i["itemType"] == item_type for i in items)

    def cart_total(self, items: Optional[List[Dict]] = None, default_path_price: float = DEFAULT_PATH_PRICE) -> float:
        return cart_total(self.cart() if items is None else items, default_path_price)

    def checkout(self, payment_method: str, contact_name: Optional[str] = None,
                 contact_email: Optional[str] = None, contact_phone: Optional[str] = None) -> Dict:
        return self.post("/api/checkout", self._payment(payment_method, contact_name, contact_email, contact_phone))

    @staticmethod
    def _payment(payment_method, contact_name, contact_email, contact_phone) -> Dict:
        payload = {"paymentMethod": payment_method}
        for key, value in (("contactName", contact_name), ("contactEmail", contact_email),
                           ("contactPhone", contact_phone)):
            if value is not None:
                payload[key] = value
        return payload

    # --- favorites ---

    def favorites(self) -> List[Dict]:
        return self.get("/api/favorites")

    def add_favorite(self, item_id: str, item_type: str) -> Dict:
        return self.post("/api/favorites", {"itemId": item_id, "itemType": item_type})

    def remove_favorite(self, favorite_id: str):
        return self.delete(f"/api/favorites/{favorite_id}")

    def is_favorite(self, item_id: str, item_type: str) -> bool:
        return self.get("/api/favorites/check", itemId=item_id, itemType=item_type)["isFavorite"]

    def toggle_favorite(self, item_id: str, item_type: str) -> bool:
        """Add or remove the item; returns whether it is a favorite afterwards."""
        check = self.get("/api/favorites/check", itemId=item_id, itemType=item_type)
        if check["isFavorite"]:
            self.remove_favorite(check["favoriteId"])
            return False
        self.add_favorite(item_id, item_type)
        return True

    # --- enrollments ---

    def enroll(self, course_id: str, payment_method: str, contact_name: Optional[str] = None,
               contact_email: Optional[str] = None, contact_phone: Optional[str] = None) -> Dict:
        payload = {"courseId": course_id, **self._payment(payment_method, contact_name, contact_email, contact_phone)}
        return self.post("/api/enrollments", payload)

    def my_enrollments(self) -> List[Dict]:
        if not self.user:
            raise ApiError(401, "غير مصرح - يرجى تسجيل الدخول")
        return self.get(f"/api/users/{self.user['id']}/enrollments")
