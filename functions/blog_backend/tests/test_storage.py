import io
import unittest
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError

from blog_backend import dependencies
from blog_backend.config import Settings
from blog_backend.storage import InMemoryBlobStore, RedisBlobStore, S3BlobStore


def _client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "GetObject")


class InMemoryBlobStoreTests(unittest.TestCase):
    def test_set_get_delete_list(self):
        store = InMemoryBlobStore()
        store.set("a", '{"id": "a"}')
        store.set("b", '{"id": "b"}')
        self.assertEqual(store.get("a"), '{"id": "a"}')
        self.assertEqual(store.list_keys(), ["a", "b"])

        store.delete("a")
        self.assertIsNone(store.get("a"))
        store.delete("a")
        self.assertEqual(store.list_keys(), ["b"])

        store.reset()
        self.assertEqual(store.list_keys(), [])


class S3BlobStoreTests(unittest.TestCase):
    def setUp(self):
        patcher = patch("blog_backend.storage.boto3.client")
        self.addCleanup(patcher.stop)
        self.boto_client = patcher.start()
        self.s3 = MagicMock()
        self.boto_client.return_value = self.s3
        self.store = S3BlobStore(bucket="bucket", store_name="posts")

    def test_keys_are_prefixed_with_store_name(self):
        self.store.set("abc", '{"id": "abc"}')
        self.s3.put_object.assert_called_once_with(
            Bucket="bucket",
            Key="posts/abc",
            Body=b'{"id": "abc"}',
            ContentType="application/json",
        )

        self.store.delete("abc")
        self.s3.delete_object.assert_called_once_with(Bucket="bucket", Key="posts/abc")

    def test_get_decodes_body(self):
        self.s3.get_object.return_value = {"Body": io.BytesIO(b'{"id": "abc"}')}
        self.assertEqual(self.store.get("abc"), '{"id": "abc"}')
        self.s3.get_object.assert_called_once_with(Bucket="bucket", Key="posts/abc")

    def test_missing_object_is_none(self):
        self.s3.get_object.side_effect = _client_error("NoSuchKey")
        self.assertIsNone(self.store.get("missing"))

    def test_other_errors_propagate(self):
        self.s3.get_object.side_effect = _client_error("AccessDenied")
        with self.assertRaises(ClientError):
            self.store.get("abc")

    def test_list_keys_strips_prefix_across_pages(self):
        paginator = MagicMock()
        paginator.paginate.return_value = [
            {"Contents": [{"Key": "posts/a"}, {"Key": "posts/b"}]},
            {"Contents": [{"Key": "posts/c"}]},
            {},
        ]
        self.s3.get_paginator.return_value = paginator

        self.assertEqual(self.store.list_keys(), ["a", "b", "c"])
        self.s3.get_paginator.assert_called_once_with("list_objects_v2")
        paginator.paginate.assert_called_once_with(Bucket="bucket", Prefix="posts/")


class RedisBlobStoreTests(unittest.TestCase):
    @patch("blog_backend.storage.redis.Redis.from_url")
    def test_uses_one_hash_per_store(self, from_url):
        client = MagicMock()
        from_url.return_value = client
        client.hget.return_value = '{"id": "a"}'
        client.hkeys.return_value = ["a", "b"]

        store = RedisBlobStore(url="redis://localhost:6379/0", store_name="posts")
        from_url.assert_called_once_with(
            "redis://localhost:6379/0", decode_responses=True
        )

        store.set("a", '{"id": "a"}')
        client.hset.assert_called_once_with("posts", "a", '{"id": "a"}')
        self.assertEqual(store.get("a"), '{"id": "a"}')
        client.hget.assert_called_once_with("posts", "a")
        self.assertEqual(store.list_keys(), ["a", "b"])
        store.delete("a")
        client.hdel.assert_called_once_with("posts", "a")


class BlobStoreSelectionTests(unittest.TestCase):
    def setUp(self):
        dependencies._blob_store = None
        self.addCleanup(setattr, dependencies, "_blob_store", None)

    def _select(self, **overrides):
        settings = Settings(_env_file=None, **overrides)
        with patch("blog_backend.dependencies.get_settings", return_value=settings):
            return dependencies.get_blob_store()

    def test_defaults_to_memory(self):
        self.assertIsInstance(self._select(), InMemoryBlobStore)

    def test_in_memory_toggle_wins(self):
        store = self._select(use_in_memory_backends=True, redis_url="redis://x:6379/0")
        self.assertIsInstance(store, InMemoryBlobStore)

    @patch("blog_backend.storage.redis.Redis.from_url")
    def test_redis_before_s3(self, from_url):
        store = self._select(redis_url="redis://x:6379/0", s3_bucket="bucket")
        self.assertIsInstance(store, RedisBlobStore)

    @patch("blog_backend.storage.boto3.client")
    def test_s3_when_bucket_set(self, boto_client):
        self.assertIsInstance(self._select(s3_bucket="bucket"), S3BlobStore)

    def test_singleton(self):
        self.assertIs(self._select(), self._select())


if __name__ == "__main__":
    unittest.main()
