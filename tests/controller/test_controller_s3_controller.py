import io
import unittest
from datetime import datetime, timezone
from unittest.mock import Mock, patch

from botocore.exceptions import ClientError, EndpointConnectionError, NoCredentialsError

from reposync.controller.s3_controller import S3Controller, _RetryPolicy
from reposync.errors import (
    AccessDeniedError,
    ApiError,
    NetworkError,
    NotFoundError,
    RateLimitError,
)


def _client_error(code: str, status: int, operation: str = "GetObject") -> ClientError:
    return ClientError(
        {
            "Error": {"Code": code, "Message": f"{code} happened"},
            "ResponseMetadata": {"HTTPStatusCode": status},
        },
        operation,
    )


class TestS3ControllerList(unittest.TestCase):
    def test_list_keys_paginates_and_filters(self) -> None:
        client = Mock()
        paginator = Mock()
        client.get_paginator.return_value = paginator
        paginator.paginate.return_value = [
            {
                "Contents": [
                    {"Key": "dist/php-8.3.0.composer.json"},
                    {"Key": "dist/php-8.3.0.tar.gz"},
                ],
                "CommonPrefixes": [{"Prefix": "dist/sub/"}],
            },
            {"Contents": [{"Key": "dist/ext-a.composer.json"}]},
            {},
        ]
        controller = S3Controller.from_client(client)

        keys = controller.list_keys("bucket", "dist/", ".composer.json")

        self.assertEqual(keys, ["ext-a.composer.json", "php-8.3.0.composer.json"])
        client.get_paginator.assert_called_once_with("list_objects_v2")
        kwargs = paginator.paginate.call_args.kwargs
        self.assertEqual(kwargs["Bucket"], "bucket")
        self.assertEqual(kwargs["Prefix"], "dist/")
        self.assertEqual(kwargs["Delimiter"], "/")

    def test_list_keys_missing_bucket(self) -> None:
        client = Mock()
        client.get_paginator.return_value.paginate.side_effect = _client_error(
            "NoSuchBucket", 404, "ListObjectsV2"
        )
        controller = S3Controller.from_client(client)

        with self.assertRaises(NotFoundError) as cm:
            controller.list_keys("nope", "dist/")
        self.assertEqual(cm.exception.details["bucket"], "nope")
        self.assertEqual(cm.exception.details["code"], "NoSuchBucket")


class TestS3ControllerObjects(unittest.TestCase):
    def test_get_returns_stored_object(self) -> None:
        client = Mock()
        mtime = datetime(2025, 1, 1, tzinfo=timezone.utc)
        client.get_object.return_value = {
            "Body": io.BytesIO(b"{}"),
            "LastModified": mtime,
            "ContentType": "application/json",
        }
        controller = S3Controller.from_client(client)

        obj = controller.get("bucket", "dist/", "packages.json")

        client.get_object.assert_called_once_with(Bucket="bucket", Key="dist/packages.json")
        self.assertEqual(obj.key, "packages.json")
        self.assertEqual(obj.body, b"{}")
        self.assertEqual(obj.last_modified, mtime)
        self.assertEqual(obj.content_type, "application/json")

    def test_get_maps_no_such_key_to_not_found(self) -> None:
        client = Mock()
        client.get_object.side_effect = _client_error("NoSuchKey", 404)
        controller = S3Controller.from_client(client)

        with self.assertRaises(NotFoundError) as cm:
            controller.get("bucket", "dist/", "packages.json")
        self.assertEqual(cm.exception.details["key"], "dist/packages.json")
        self.assertIsInstance(cm.exception.cause, ClientError)

    def test_put_sets_content_type(self) -> None:
        client = Mock()
        controller = S3Controller.from_client(client)

        controller.put("bucket", "stable/", "a.composer.json", b"{}", "application/json")
        client.put_object.assert_called_once_with(
            Bucket="bucket", Key="stable/a.composer.json", Body=b"{}", ContentType="application/json"
        )

        client.reset_mock()
        controller.put("bucket", "stable/", "a.tar.gz", b"x")
        client.put_object.assert_called_once_with(Bucket="bucket", Key="stable/a.tar.gz", Body=b"x")

    def test_remove(self) -> None:
        client = Mock()
        S3Controller.from_client(client).remove("bucket", "stable/", "a.tar.gz")
        client.delete_object.assert_called_once_with(Bucket="bucket", Key="stable/a.tar.gz")

    def test_copy_is_server_side(self) -> None:
        client = Mock()
        S3Controller.from_client(client).copy("src", "dist/", "a.tar.gz", "dst", "stable/")
        client.copy_object.assert_called_once_with(
            CopySource={"Bucket": "src", "Key": "dist/a.tar.gz"},
            Bucket="dst",
            Key="stable/a.tar.gz",
        )

    def test_access_denied(self) -> None:
        client = Mock()
        client.copy_object.side_effect = _client_error("AccessDenied", 403, "CopyObject")
        controller = S3Controller.from_client(client)

        with self.assertRaises(AccessDeniedError):
            controller.copy("src", "", "a", "dst", "")
        self.assertEqual(client.copy_object.call_count, 1)

    def test_no_credentials(self) -> None:
        client = Mock()
        client.delete_object.side_effect = NoCredentialsError()
        controller = S3Controller.from_client(client)

        with self.assertRaises(AccessDeniedError):
            controller.remove("bucket", "", "a")


class TestS3ControllerRetry(unittest.TestCase):
    def test_retry_on_slow_down(self) -> None:
        client = Mock()
        slow_down = _client_error("SlowDown", 503, "PutObject")
        client.put_object.side_effect = [slow_down, slow_down, {}]
        controller = S3Controller.from_client(client)

        with patch("time.sleep", return_value=None) as sleep:
            controller.put("bucket", "", "a", b"x")

        self.assertEqual(client.put_object.call_count, 3)
        self.assertEqual([c.args[0] for c in sleep.call_args_list], [1.0, 2.0])

    def test_gives_up_after_max_retries(self) -> None:
        client = Mock()
        client.get_object.side_effect = _client_error("SlowDown", 503)
        controller = S3Controller.from_client(
            client, retry_policy=_RetryPolicy(max_retries=2, initial_delay_sec=0.0)
        )

        with patch("time.sleep", return_value=None):
            with self.assertRaises(RateLimitError):
                controller.get("bucket", "", "a")
        self.assertEqual(client.get_object.call_count, 3)

    def test_retry_on_5xx(self) -> None:
        client = Mock()
        client.delete_object.side_effect = [_client_error("InternalError", 500, "DeleteObject"), {}]
        controller = S3Controller.from_client(client)

        with patch("time.sleep", return_value=None):
            controller.remove("bucket", "", "a")
        self.assertEqual(client.delete_object.call_count, 2)

    def test_network_error_is_retried_then_raised(self) -> None:
        client = Mock()
        client.get_object.side_effect = EndpointConnectionError(endpoint_url="https://s3.amazonaws.com")
        controller = S3Controller.from_client(
            client, retry_policy=_RetryPolicy(max_retries=1, initial_delay_sec=0.0)
        )

        with patch("time.sleep", return_value=None):
            with self.assertRaises(NetworkError):
                controller.get("bucket", "", "a")
        self.assertEqual(client.get_object.call_count, 2)

    def test_not_found_is_not_retried(self) -> None:
        client = Mock()
        client.get_object.side_effect = _client_error("NoSuchKey", 404)
        controller = S3Controller.from_client(client)

        with patch("time.sleep", return_value=None) as sleep:
            with self.assertRaises(NotFoundError):
                controller.get("bucket", "", "a")
        sleep.assert_not_called()

    def test_unknown_exception_maps_to_api_error(self) -> None:
        client = Mock()
        client.get_object.side_effect = KeyError("Body")
        controller = S3Controller.from_client(client)

        with self.assertRaises(ApiError) as cm:
            controller.get("bucket", "", "a")
        self.assertIsInstance(cm.exception.cause, KeyError)


if __name__ == "__main__":
    unittest.main()
