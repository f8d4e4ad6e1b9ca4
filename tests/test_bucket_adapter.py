import io
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock, patch
from urllib.parse import parse_qs, urlparse

import pytest

from bucketfs.infrastructure.exceptions import InvalidListingArgument, ObjectNotFoundError
from bucketfs.infrastructure.filesystem import BucketAdapter
from bucketfs.infrastructure.storage.object_storage import (
    FileHandle,
    InMemoryStorageClient,
    StorageClientInterface,
)
from tests.consts import TEST_BUCKET_NAME


def _paths(listing):
    return [entry['path'] for entry in listing]


def test_write_then_read_returns_same_contents(adapter):
    adapter.write("notes/today.txt", b"hello bucket")

    assert adapter.read("notes/today.txt") == {'contents': b"hello bucket"}


def test_write_returns_normalized_file_info(adapter):
    info = adapter.write("a.txt", b"12345")

    assert info['type'] == 'file'
    assert info['path'] == 'a.txt'
    assert info['size'] == 5
    assert isinstance(info['timestamp'], int)


def test_update_overwrites_existing_object(adapter):
    adapter.write("a.txt", b"first")
    adapter.update("a.txt", b"second")

    assert adapter.read("a.txt")['contents'] == b"second"
    assert _paths(adapter.list_contents("", True)) == ["a.txt"]


def test_write_stream_and_read_stream(adapter):
    adapter.write_stream("data/blob.bin", io.BytesIO(b"\x00\x01\x02"))

    result = adapter.read_stream("data/blob.bin")

    assert result['stream'].read() == b"\x00\x01\x02"
    result['stream'].close()


def test_update_stream_replaces_content(adapter):
    adapter.write("data/blob.bin", b"old")
    adapter.update_stream("data/blob.bin", io.BytesIO(b"new"))

    assert adapter.read("data/blob.bin")['contents'] == b"new"


def test_has_follows_write_and_delete(adapter):
    assert adapter.has("a.txt") is False

    adapter.write("a.txt", b"x")
    assert adapter.has("a.txt") is True

    assert adapter.delete("a.txt") is True
    assert adapter.has("a.txt") is False


def test_read_fetches_file_id_before_download():
    client = Mock(spec=StorageClientInterface)
    client.get_file.return_value = FileHandle(id="4_z123", name="a.txt", size=3, upload_timestamp=1000)
    client.download.return_value = b"abc"
    adapter = BucketAdapter(client, TEST_BUCKET_NAME)

    assert adapter.read("a.txt") == {'contents': b"abc"}
    client.get_file.assert_called_once_with(TEST_BUCKET_NAME, "a.txt")
    client.download.assert_called_once_with(file_id="4_z123")


def test_read_missing_file_propagates_client_error(adapter):
    with pytest.raises(ObjectNotFoundError):
        adapter.read("missing.txt")


def test_read_stream_returns_false_when_download_fails(storage_client, adapter):
    adapter.write("a.txt", b"x")

    with patch.object(storage_client, 'download', return_value=False):
        assert adapter.read_stream("a.txt") is False


def test_read_stream_returns_false_when_buffer_cannot_be_rewound():
    class ClosingClient(InMemoryStorageClient):
        def download(self, *args, save_as=None, **kwargs):
            result = super().download(*args, save_as=save_as, **kwargs)
            if save_as is not None:
                save_as.close()
            return result

    client = ClosingClient()
    client.upload(TEST_BUCKET_NAME, "a.txt", b"x")
    adapter = BucketAdapter(client, TEST_BUCKET_NAME)

    assert adapter.read_stream("a.txt") is False


def test_read_stream_propagates_client_error(adapter):
    with pytest.raises(ObjectNotFoundError):
        adapter.read_stream("missing.txt")


@pytest.mark.parametrize("source, target", [
    ("a.txt", "b.txt"),
    ("missing.txt", "b.txt"),
    ("a.txt", "a.txt"),
    ("", ""),
])
def test_rename_is_never_supported(adapter, source, target):
    adapter.write("a.txt", b"x")

    assert adapter.rename(source, target) is False


def test_rename_leaves_objects_untouched(adapter):
    adapter.write("a.txt", b"x")
    adapter.rename("a.txt", "b.txt")

    assert adapter.has("a.txt") is True
    assert adapter.has("b.txt") is False


def test_copy_reads_source_from_bucket(adapter):
    adapter.write("docs/a.txt", b"payload")

    info = adapter.copy("docs/a.txt", "backup/a.txt")

    assert info['path'] == "backup/a.txt"
    assert adapter.read("backup/a.txt")['contents'] == b"payload"
    assert adapter.has("docs/a.txt") is True


def test_copy_of_missing_source_raises(adapter):
    with pytest.raises(ObjectNotFoundError):
        adapter.copy("missing.txt", "b.txt")


def test_create_dir_uploads_empty_placeholder(storage_client, adapter):
    assert adapter.create_dir("docs") == {'type': 'dir', 'path': 'docs'}

    placeholder = storage_client.get_file(TEST_BUCKET_NAME, "docs")
    assert placeholder.size == 0
    assert adapter.has("docs") is True


def test_delete_dir_removes_only_the_exact_key(adapter):
    adapter.create_dir("docs")
    adapter.write("docs/b.txt", b"b")

    assert adapter.delete_dir("docs") is True

    assert adapter.has("docs") is False
    assert adapter.has("docs/b.txt") is True


@pytest.mark.parametrize("path", ["a.txt", "missing.txt", "docs/"])
def test_metadata_and_mimetype_are_unsupported(adapter, path):
    adapter.write("a.txt", b"x")

    assert adapter.get_metadata(path) is False
    assert adapter.get_mimetype(path) is False


def test_visibility_is_unsupported(adapter):
    adapter.write("a.txt", b"x")

    assert adapter.get_visibility("a.txt") is False
    assert adapter.set_visibility("a.txt", "public") is False


def test_size_and_timestamp_strip_milliseconds():
    client = Mock(spec=StorageClientInterface)
    client.get_file.return_value = FileHandle(
        id="id-1", name="a.txt", size=42, upload_timestamp=1700000000987
    )
    adapter = BucketAdapter(client, TEST_BUCKET_NAME)

    expected = {'type': 'file', 'path': 'a.txt', 'timestamp': 1700000000, 'size': 42}
    assert adapter.get_size("a.txt") == expected
    assert adapter.get_timestamp("a.txt") == expected


class TestListContents:

    def test_root_non_recursive_returns_top_level_keys(self, docs_bucket):
        assert _paths(docs_bucket.list_contents("", False)) == ["a.txt"]

    def test_named_non_recursive_returns_direct_children(self, docs_bucket):
        assert _paths(docs_bucket.list_contents("docs", False)) == ["docs/b.txt"]

    def test_named_recursive_returns_all_descendants(self, docs_bucket):
        assert _paths(docs_bucket.list_contents("docs", True)) == ["docs/b.txt", "docs/sub/c.txt"]

    def test_root_recursive_returns_every_key(self, docs_bucket):
        assert _paths(docs_bucket.list_contents("", True)) == ["a.txt", "docs/b.txt", "docs/sub/c.txt"]

    def test_defaults_list_root_non_recursively(self, docs_bucket):
        assert _paths(docs_bucket.list_contents()) == ["a.txt"]

    def test_entries_are_normalized_file_info(self, docs_bucket):
        entry = docs_bucket.list_contents("docs", False)[0]

        assert set(entry) == {'type', 'path', 'timestamp', 'size'}
        assert entry['type'] == 'file'
        assert entry['size'] == len(b"docs/b.txt")

    def test_directory_name_must_match_whole_segment(self, storage_client, docs_bucket):
        storage_client.upload(TEST_BUCKET_NAME, "docsarchive/old.txt", b"x")

        assert _paths(docs_bucket.list_contents("docs", True)) == ["docs/b.txt", "docs/sub/c.txt"]

    def test_nested_directory(self, docs_bucket):
        assert _paths(docs_bucket.list_contents("docs/sub", False)) == ["docs/sub/c.txt"]

    def test_slashes_around_directory_are_ignored(self, docs_bucket):
        assert _paths(docs_bucket.list_contents("/docs/", False)) == ["docs/b.txt"]
        assert _paths(docs_bucket.list_contents("/", False)) == ["a.txt"]

    def test_regex_metacharacters_are_literal(self, storage_client, adapter):
        for name in ("a.b/one.txt", "axb/two.txt", "a.b/deep/three.txt"):
            storage_client.upload(TEST_BUCKET_NAME, name, b"x")

        assert _paths(adapter.list_contents("a.b", False)) == ["a.b/one.txt"]
        assert _paths(adapter.list_contents("a.b", True)) == ["a.b/deep/three.txt", "a.b/one.txt"]

    def test_placeholder_directory_shows_as_top_level_entry(self, adapter):
        adapter.create_dir("docs")
        adapter.write("docs/b.txt", b"b")

        assert _paths(adapter.list_contents("", False)) == ["docs"]

    def test_empty_bucket(self, adapter):
        assert adapter.list_contents("", True) == []

    def test_listing_preserves_client_order(self):
        client = Mock(spec=StorageClientInterface)
        client.list_files.return_value = [
            FileHandle(id="1", name="z.txt", size=1, upload_timestamp=2000),
            FileHandle(id="2", name="dir/x.txt", size=1, upload_timestamp=2000),
            FileHandle(id="3", name="a.txt", size=1, upload_timestamp=2000),
        ]
        adapter = BucketAdapter(client, TEST_BUCKET_NAME)

        listing = adapter.list_contents("", False)

        assert _paths(listing) == ["z.txt", "a.txt"]
        client.list_files.assert_called_once_with(TEST_BUCKET_NAME, prefix="")

    @pytest.mark.parametrize("directory, recursive", [
        ("docs", None),
        ("", "yes"),
        ("docs", 1),
        (None, True),
    ])
    def test_invalid_arguments_raise(self, docs_bucket, directory, recursive):
        with pytest.raises(InvalidListingArgument):
            docs_bucket.list_contents(directory, recursive)

    def test_invalid_argument_is_a_value_error(self, docs_bucket):
        with pytest.raises(ValueError):
            docs_bucket.list_contents("docs", None)


class TestPathPrefix:

    @pytest.fixture
    def prefixed(self, storage_client):
        return BucketAdapter(storage_client, TEST_BUCKET_NAME, path_prefix="tenant-1/")

    def test_prefix_is_normalized(self, storage_client):
        assert BucketAdapter(storage_client, TEST_BUCKET_NAME, path_prefix="tenant-1").get_path_prefix() == "tenant-1/"
        assert BucketAdapter(storage_client, TEST_BUCKET_NAME, path_prefix="tenant-1//").get_path_prefix() == "tenant-1/"
        assert BucketAdapter(storage_client, TEST_BUCKET_NAME, path_prefix="").get_path_prefix() is None
        assert BucketAdapter(storage_client, TEST_BUCKET_NAME).get_path_prefix() is None

    def test_apply_and_remove_prefix(self, prefixed):
        assert prefixed.apply_path_prefix("/docs/a.txt") == "tenant-1/docs/a.txt"
        assert prefixed.remove_path_prefix("tenant-1/docs/a.txt") == "docs/a.txt"

    def test_keys_are_stored_under_prefix(self, storage_client, prefixed):
        info = prefixed.write("docs/a.txt", b"x")

        assert storage_client.file_exists(TEST_BUCKET_NAME, "tenant-1/docs/a.txt")
        assert info['path'] == "docs/a.txt"
        assert prefixed.has("docs/a.txt") is True

    def test_listing_is_scoped_to_prefix(self, storage_client, prefixed):
        storage_client.upload(TEST_BUCKET_NAME, "other/a.txt", b"x")
        storage_client.upload(TEST_BUCKET_NAME, "top.txt", b"x")
        prefixed.write("a.txt", b"x")
        prefixed.write("docs/b.txt", b"x")
        prefixed.write("docs/sub/c.txt", b"x")

        assert _paths(prefixed.list_contents("", False)) == ["a.txt"]
        assert _paths(prefixed.list_contents("docs", False)) == ["docs/b.txt"]
        assert _paths(prefixed.list_contents("", True)) == ["a.txt", "docs/b.txt", "docs/sub/c.txt"]

    def test_mount_point_object_is_not_listed(self, storage_client, prefixed):
        prefixed.create_dir("")
        prefixed.write("a.txt", b"x")
        prefixed.write("docs/b.txt", b"x")

        assert storage_client.file_exists(TEST_BUCKET_NAME, "tenant-1/")
        assert _paths(prefixed.list_contents("", False)) == ["a.txt"]
        assert _paths(prefixed.list_contents("", True)) == ["a.txt", "docs/b.txt"]

    def test_temporary_url_authorizes_prefix(self, storage_client, prefixed):
        prefixed.write("a.txt", b"x")

        url = prefixed.get_temporary_url("a.txt", datetime.now(timezone.utc) + timedelta(minutes=5))

        assert urlparse(url).path == "/file/test-bucket/tenant-1/a.txt"
        assert storage_client.authorizations[-1]['fileNamePrefix'] == "tenant-1/"


class TestTemporaryUrl:

    def test_url_carries_authorization_token(self, storage_client, adapter):
        adapter.write("docs/a.txt", b"x")

        url = adapter.get_temporary_url("docs/a.txt", datetime.now(timezone.utc) + timedelta(seconds=30))

        parsed = urlparse(url)
        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == "https://f004.example.com/file/test-bucket/docs/a.txt"
        token = parse_qs(parsed.query)['Authorization'][0]
        assert token
        assert token == storage_client.authorizations[-1]['authorizationToken']

    def test_duration_uses_total_seconds(self, storage_client, adapter):
        adapter.get_temporary_url("a.txt", datetime.now(timezone.utc) + timedelta(hours=2, seconds=30))

        duration = storage_client.authorizations[-1]['validDurationInSeconds']
        assert 7229 <= duration <= 7230

    def test_short_duration(self, storage_client, adapter):
        adapter.get_temporary_url("a.txt", datetime.now(timezone.utc) + timedelta(seconds=30))

        assert 29 <= storage_client.authorizations[-1]['validDurationInSeconds'] <= 30

    def test_naive_expiration_is_local_time(self, storage_client, adapter):
        adapter.get_temporary_url("a.txt", datetime.now() + timedelta(minutes=1))

        assert 59 <= storage_client.authorizations[-1]['validDurationInSeconds'] <= 60

    def test_past_expiration_is_clamped_to_minimum(self, storage_client, adapter):
        adapter.get_temporary_url("a.txt", datetime.now(timezone.utc) - timedelta(hours=1))

        assert storage_client.authorizations[-1]['validDurationInSeconds'] == 1

    def test_long_expiration_is_clamped_to_maximum(self, storage_client):
        adapter = BucketAdapter(storage_client, TEST_BUCKET_NAME, max_authorization_seconds=3600)

        adapter.get_temporary_url("a.txt", datetime.now(timezone.utc) + timedelta(days=30))

        assert storage_client.authorizations[-1]['validDurationInSeconds'] == 3600

    def test_authorization_scope_without_prefix(self, storage_client, adapter):
        adapter.get_temporary_url("a.txt", datetime.now(timezone.utc) + timedelta(seconds=30), {'ignored': True})

        authorization = storage_client.authorizations[-1]
        assert authorization['bucketName'] == TEST_BUCKET_NAME
        assert authorization['fileNamePrefix'] == ""


def test_adapter_exposes_bound_client_and_bucket(storage_client, adapter):
    assert adapter.get_client() is storage_client
    assert adapter.bucket_name == TEST_BUCKET_NAME
