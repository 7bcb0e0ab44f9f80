"""Tests for S3Config and S3Transporter.

The boto3 client is replaced by a MagicMock; no network access happens.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError
from hypothesis import given
from hypothesis import strategies as st

from transit.errors import TransitConfigurationError, TransitTransportationError
from transit.file import File
from transit.transporter import S3Config, S3Transporter, Transporter

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _client_error(operation: str = "PutObject") -> ClientError:
    return ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}},
        operation,
    )


def _make_transporter(**overrides) -> tuple[S3Transporter, MagicMock]:
    settings = dict(bucket="mybucket", access_key="AKIAEXAMPLE", secret_key="supersecretvalue")
    settings.update(overrides)
    client = MagicMock()
    return S3Transporter(S3Config(**settings), client=client), client


# =========================================================================
# Config
# =========================================================================

class TestS3Config:
    def test_bucket_required(self):
        with pytest.raises(TransitConfigurationError, match="S3 bucket"):
            S3Config()

    def test_repr_masks_credentials(self):
        config = S3Config(bucket="b", access_key="AKIAEXAMPLE", secret_key="supersecretvalue")
        text = repr(config)
        assert "supersecretvalue" not in text
        assert "AKIAEXAMPLE" not in text
        assert "bucket='b'" in text

    def test_endpoint_trailing_slash_stripped(self):
        assert S3Config(bucket="b", endpoint="http://localhost:9000/").endpoint == "http://localhost:9000"

    def test_client_built_from_config(self):
        with patch("transit.transporter.aws.s3.boto3.client") as factory:
            S3Transporter(S3Config(bucket="b", region="eu-west-1", access_key="k", secret_key="s"))
        factory.assert_called_once_with(
            "s3",
            region_name="eu-west-1",
            aws_access_key_id="k",
            aws_secret_access_key="s",
            endpoint_url=None,
        )

    def test_custom_endpoint_passed_to_client(self):
        with patch("transit.transporter.aws.s3.boto3.client") as factory:
            S3Transporter(S3Config(bucket="b", endpoint="http://localhost:9000"))
        assert factory.call_args.kwargs["endpoint_url"] == "http://localhost:9000"
        assert factory.call_args.kwargs["aws_access_key_id"] is None


# =========================================================================
# transport
# =========================================================================

class TestTransport:
    def test_satisfies_protocol(self):
        transporter, _ = _make_transporter()
        assert isinstance(transporter, Transporter)

    def test_success_returns_url_and_deletes_local(self, make_image):
        path = make_image("photo.png")
        transporter, client = _make_transporter(folder="uploads/")

        url = transporter.transport(File(path))

        assert url == "https://s3.amazonaws.com/mybucket/uploads/photo.png"
        assert not path.exists()
        kwargs = client.put_object.call_args.kwargs
        assert kwargs["Bucket"] == "mybucket"
        assert kwargs["Key"] == "uploads/photo.png"
        assert kwargs["ContentType"] == "image/png"
        assert kwargs["ACL"] == "public-read"
        assert kwargs["StorageClass"] == "STANDARD"

    def test_empty_options_dropped(self, make_image):
        transporter, client = _make_transporter()
        transporter.transport(File(make_image()))
        kwargs = client.put_object.call_args.kwargs
        assert "ServerSideEncryption" not in kwargs
        assert "Metadata" not in kwargs

    def test_optional_settings_sent(self, make_image):
        transporter, client = _make_transporter(encryption="AES256", metadata={"owner": "me"})
        transporter.transport(File(make_image()))
        kwargs = client.put_object.call_args.kwargs
        assert kwargs["ServerSideEncryption"] == "AES256"
        assert kwargs["Metadata"] == {"owner": "me"}

    def test_leading_slash_in_folder_stripped(self, make_image):
        transporter, client = _make_transporter(folder="/media/")
        url = transporter.transport(File(make_image("a.png")))
        assert client.put_object.call_args.kwargs["Key"] == "media/a.png"
        assert url.endswith("/mybucket/media/a.png")

    def test_custom_endpoint_in_url(self, make_image):
        transporter, _ = _make_transporter(endpoint="http://localhost:9000")
        url = transporter.transport(File(make_image("a.png")))
        assert url == "http://localhost:9000/mybucket/a.png"

    def test_client_error_raises_and_keeps_local(self, make_image):
        path = make_image("photo.png")
        transporter, client = _make_transporter()
        client.put_object.side_effect = _client_error()

        with pytest.raises(TransitTransportationError) as exc_info:
            transporter.transport(File(path))

        assert "photo.png" in exc_info.value.message
        assert isinstance(exc_info.value.cause, ClientError)
        assert path.exists()

    def test_connection_error_raises(self, make_image):
        transporter, client = _make_transporter()
        client.put_object.side_effect = EndpointConnectionError(endpoint_url="https://s3.amazonaws.com")
        with pytest.raises(TransitTransportationError):
            transporter.transport(File(make_image()))


# =========================================================================
# delete
# =========================================================================

class TestDelete:
    def test_delete_by_url(self):
        transporter, client = _make_transporter()
        assert transporter.delete("https://s3.amazonaws.com/other/a/b.png") is True
        client.delete_object.assert_called_once_with(Bucket="other", Key="a/b.png")

    def test_delete_by_key(self):
        transporter, client = _make_transporter()
        transporter.delete("/uploads/b.png")
        client.delete_object.assert_called_once_with(Bucket="mybucket", Key="uploads/b.png")

    def test_delete_error_returns_false(self):
        transporter, client = _make_transporter()
        client.delete_object.side_effect = _client_error("DeleteObject")
        assert transporter.delete("key.png") is False


# =========================================================================
# parse_url
# =========================================================================

class TestParseUrl:
    @pytest.mark.parametrize(
        "url",
        [
            "https://s3.amazonaws.com/mybucket/path/to/key.jpg",
            "https://mybucket.s3.amazonaws.com/path/to/key.jpg",
            "http://s3.amazonaws.com/mybucket/path/to/key.jpg",
            "https://s3.us-west-2.amazonaws.com/mybucket/path/to/key.jpg",
            "https://s3-us-west-2.amazonaws.com/mybucket/path/to/key.jpg",
            "https://mybucket.s3.eu-central-1.amazonaws.com/path/to/key.jpg",
        ],
    )
    def test_url_forms(self, url):
        transporter, _ = _make_transporter(bucket="default")
        assert transporter.parse_url(url) == ("mybucket", "path/to/key.jpg")

    def test_plain_key_uses_configured_bucket(self):
        transporter, _ = _make_transporter(bucket="default")
        assert transporter.parse_url("/path/to/key.jpg") == ("default", "path/to/key.jpg")

    def test_foreign_url_treated_as_key(self):
        transporter, _ = _make_transporter(bucket="default")
        bucket, key = transporter.parse_url("https://example.com/a.jpg")
        assert bucket == "default"
        assert key == "https://example.com/a.jpg"

    def test_custom_endpoint_path_style(self):
        transporter, _ = _make_transporter(bucket="default", endpoint="http://localhost:9000")
        assert transporter.parse_url("http://localhost:9000/media/a/b.png") == ("media", "a/b.png")

    @given(
        bucket=st.from_regex(r"[a-z0-9][a-z0-9-]{2,30}", fullmatch=True),
        segments=st.lists(
            st.from_regex(r"[A-Za-z0-9_.-]{1,12}", fullmatch=True),
            min_size=1,
            max_size=4,
        ),
    )
    def test_returned_url_round_trips(self, bucket, segments):
        transporter, _ = _make_transporter(bucket="default")
        key = "/".join(segments)
        path_style = f"https://s3.amazonaws.com/{bucket}/{key}"
        virtual = f"https://{bucket}.s3.amazonaws.com/{key}"
        expected = (bucket, key.strip("/"))
        assert transporter.parse_url(path_style) == expected
        assert transporter.parse_url(virtual) == expected
