import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import requests
from fastapi.testclient import TestClient

from blog_backend.app import create_app
from blog_backend.dependencies import get_post_store
from blog_backend.posts import PostStore
from blog_backend.storage import InMemoryBlobStore
from blog_client.backends import ServerlessBackend
from blog_client.config import ClientConfig
from blog_client.facade import PostsFacade
from blog_client.results import StoreStatus
from blog_shared.api import PostDraft


class SteppingClock:
    def __init__(self, start=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> str:
        value = self.current.isoformat(timespec="milliseconds").replace("+00:00", "Z")
        self.current += timedelta(seconds=1)
        return value


def _response(status_code, body=None):
    response = MagicMock()
    response.status_code = status_code
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


class ServerlessFacadeTests(unittest.TestCase):
    """Runs the facade against the real posts app through the FastAPI test client."""

    def setUp(self):
        self.store = InMemoryBlobStore()
        self.clock = SteppingClock()
        app = create_app()
        app.dependency_overrides[get_post_store] = lambda: PostStore(
            self.store, clock=self.clock
        )
        config = ClientConfig(
            backend="serverless", functions_base_url="http://testserver", _env_file=None
        )
        self.facade = PostsFacade.from_config(config, session=TestClient(app))

    def test_create_list_delete_scenario(self):
        post_a = self.facade.create_post(
            PostDraft(title="XYZ", content="0123456789", author="Bob")
        )
        self.assertTrue(post_a.id)
        self.assertEqual(post_a.created_at, post_a.updated_at)
        self.assertEqual(post_a.tags, [])

        post_b = self.facade.create_post(
            PostDraft(title="Second", content="abcdefghij", author="Ann", tags=["x"])
        )
        self.assertEqual(
            [p.id for p in self.facade.get_all_posts()], [post_b.id, post_a.id]
        )

        self.assertTrue(self.facade.delete_post(post_a.id))
        self.assertEqual([p.id for p in self.facade.get_all_posts()], [post_b.id])
        self.assertIsNone(self.facade.get_post_by_id(post_a.id))
        self.assertFalse(self.facade.delete_post(post_a.id))

    def test_round_trip_and_slug_lookup(self):
        created = self.facade.create_post(
            PostDraft(
                title="Hello, World! 2024",
                content="<p>Hello <b>world</b></p>",
                author="Bob",
                tags=["intro"],
            )
        )
        fetched = self.facade.get_post_by_id(created.id)
        self.assertEqual(fetched, created)
        self.assertEqual(self.facade.get_post("hello-world-2024"), created)
        self.assertEqual(fetched.excerpt(5), "Hello...")

    def test_delete_with_empty_or_unusual_id_is_not_found(self):
        created = self.facade.create_post(
            PostDraft(title="Keep me", content="0123456789", author="Bob")
        )
        self.assertFalse(self.facade.delete_post(""))
        self.assertFalse(self.facade.delete_post(f"{created.id}?x"))
        self.assertEqual([p.id for p in self.facade.get_all_posts()], [created.id])


class ServerlessBackendTests(unittest.TestCase):
    def setUp(self):
        self.session = MagicMock()
        self.backend = ServerlessBackend(
            "http://posts.test/", request_timeout=5.0, session=self.session
        )

    def test_urls_and_timeouts(self):
        self.session.request.return_value = _response(200, [])
        self.assertTrue(self.backend.list_posts().is_ok)
        self.session.request.assert_called_once_with(
            "GET", "http://posts.test/posts", timeout=5.0
        )

    def test_status_mapping(self):
        cases = [
            (_response(404, {"error": "Post not found"}), StoreStatus.NOT_FOUND),
            (_response(400, {"error": "Title, content, and author are required"}), StoreStatus.INVALID),
            (_response(503, ValueError("no json")), StoreStatus.UNAVAILABLE),
            (_response(500, {"error": "Internal server error"}), StoreStatus.INTERNAL_ERROR),
            (_response(200, ValueError("no json")), StoreStatus.INTERNAL_ERROR),
            (_response(200, {"id": "only-an-id"}), StoreStatus.INTERNAL_ERROR),
        ]
        for response, expected in cases:
            with self.subTest(status=response.status_code, expected=expected):
                self.session.request.return_value = response
                self.assertEqual(self.backend.get_post("abc").status, expected)

    def test_invalid_keeps_server_message(self):
        self.session.request.return_value = _response(
            400, {"error": "Title, content, and author are required"}
        )
        result = self.backend.create_post(PostDraft(title="", content="", author=""))
        self.assertEqual(result.message, "Title, content, and author are required")

    def test_missing_collection_means_unavailable(self):
        self.session.request.return_value = _response(404, {"error": "Not Found"})
        self.assertEqual(self.backend.list_posts().status, StoreStatus.UNAVAILABLE)

    def test_list_rejects_non_array(self):
        self.session.request.return_value = _response(200, {"posts": []})
        self.assertEqual(self.backend.list_posts().status, StoreStatus.INTERNAL_ERROR)

    def test_transport_errors(self):
        self.session.request.side_effect = requests.ConnectionError("refused")
        self.assertEqual(self.backend.list_posts().status, StoreStatus.UNAVAILABLE)
        self.assertFalse(self.backend.ping())

        self.session.request.side_effect = requests.TooManyRedirects("loop")
        self.assertEqual(self.backend.list_posts().status, StoreStatus.INTERNAL_ERROR)

    def test_ping_checks_status(self):
        self.session.request.return_value = _response(200)
        self.assertTrue(self.backend.ping())
        self.session.request.return_value = _response(404)
        self.assertFalse(self.backend.ping())

    def test_slug_and_update_are_not_supported(self):
        self.assertEqual(
            self.backend.get_post_by_slug("hello").status, StoreStatus.INTERNAL_ERROR
        )
        self.assertEqual(
            self.backend.update_post("abc", None).status, StoreStatus.INTERNAL_ERROR
        )
        self.session.request.assert_not_called()

    def test_post_ids_are_quoted_in_urls(self):
        self.session.request.return_value = _response(200, {"message": "ok"})
        self.backend.delete_post("x?y")
        self.session.request.assert_called_once_with(
            "DELETE", "http://posts.test/posts/x%3Fy", timeout=5.0
        )
        self.session.request.reset_mock()
        self.session.request.return_value = _response(404, {"error": "Post not found"})
        self.backend.get_post("a/b")
        self.session.request.assert_called_once_with(
            "GET", "http://posts.test/posts/a%2Fb", timeout=5.0
        )


if __name__ == "__main__":
    unittest.main()
