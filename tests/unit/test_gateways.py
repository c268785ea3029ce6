"""Tests for S3ObjectStoreGateway."""

from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from thumbnails_pipeline.core.exceptions import FetchError, UploadError
from thumbnails_pipeline.core.gateways import S3ObjectStoreGateway
from thumbnails_pipeline.testing.fakes import FakeS3Client, create_test_image


def _client_error(code, operation):
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class TestFetch:
    """Tests for S3ObjectStoreGateway.fetch."""

    def test_fetch_writes_object_to_path(self, tmp_path):
        fake_s3 = FakeS3Client()
        data = create_test_image(120, 80)
        fake_s3.create_bucket("originals").add_object("p/a.jpg", data)
        destination = tmp_path / "a.jpg"

        size = S3ObjectStoreGateway(fake_s3).fetch("originals", "p/a.jpg", str(destination))

        assert size == len(data)
        assert destination.read_bytes() == data

    def test_fetch_overwrites_existing_file(self, tmp_path):
        fake_s3 = FakeS3Client()
        fake_s3.create_bucket("originals").add_object("p/a.jpg", b"new contents")
        destination = tmp_path / "a.jpg"
        destination.write_bytes(b"stale contents that are longer")

        S3ObjectStoreGateway(fake_s3).fetch("originals", "p/a.jpg", str(destination))

        assert destination.read_bytes() == b"new contents"

    def test_fetch_client_error_becomes_fetch_error(self, tmp_path):
        client = Mock()
        client.get_object.side_effect = _client_error("NoSuchKey", "GetObject")

        with pytest.raises(FetchError, match="NoSuchKey"):
            S3ObjectStoreGateway(client).fetch("originals", "missing.jpg", str(tmp_path / "m.jpg"))

    def test_fetch_local_write_error_becomes_fetch_error(self, tmp_path):
        fake_s3 = FakeS3Client()
        fake_s3.create_bucket("originals").add_object("p/a.jpg", b"data")

        with pytest.raises(FetchError):
            S3ObjectStoreGateway(fake_s3).fetch(
                "originals", "p/a.jpg", str(tmp_path / "no-such-dir" / "a.jpg")
            )

    def test_fetch_closes_body(self, tmp_path):
        body = Mock()
        body.read.side_effect = [b"abc", b""]
        client = Mock()
        client.get_object.return_value = {"Body": body}

        S3ObjectStoreGateway(client).fetch("originals", "a.jpg", str(tmp_path / "a.jpg"))

        body.close.assert_called_once()


class TestStore:
    """Tests for S3ObjectStoreGateway.store."""

    def test_store_passes_all_parameters(self):
        client = Mock()
        client.put_object.return_value = {"ETag": '"abc"'}

        response = S3ObjectStoreGateway(client).store(
            "derivatives", "a/thumbnail.jpg", b"bytes", 5, "image/jpeg", "public-read"
        )

        assert response == {"ETag": '"abc"'}
        client.put_object.assert_called_once_with(
            Bucket="derivatives",
            Key="a/thumbnail.jpg",
            Body=b"bytes",
            ContentLength=5,
            ContentType="image/jpeg",
            ACL="public-read",
        )

    def test_store_without_acl(self):
        client = Mock()

        S3ObjectStoreGateway(client).store("derivatives", "a/t.jpg", b"x", 1, "image/jpeg")

        assert "ACL" not in client.put_object.call_args.kwargs

    def test_store_client_error_becomes_upload_error(self):
        client = Mock()
        client.put_object.side_effect = _client_error("AccessDenied", "PutObject")

        with pytest.raises(UploadError, match="AccessDenied"):
            S3ObjectStoreGateway(client).store("derivatives", "a/t.jpg", b"x", 1, "image/jpeg")
