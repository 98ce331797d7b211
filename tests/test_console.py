"""Tests for console output."""

import datetime
from io import StringIO
from unittest.mock import MagicMock

import pytest
from rich.console import Console

from s3cli.console import ConsoleWriter
from s3cli.errors import PartUploadFailed
from s3cli.models import MultipartUploadSession, PartResult


@pytest.fixture
def out():
    return StringIO()


@pytest.fixture
def err():
    return StringIO()


def make_writer(out, err, verbose=False) -> ConsoleWriter:
    return ConsoleWriter(
        verbose=verbose,
        console=Console(file=out, width=200, color_system=None),
        err_console=Console(file=err, width=200, color_system=None),
    )


class TestPrintResult:
    """Tests for print_result dispatch."""

    def test_url_printed_verbatim(self, out, err):
        """Presigned URLs are printed on one line without markup."""
        url = "http://host:9000/bucket/key?AWSAccessKeyId=AK&Expires=1&Signature=a%2Bb%3D"

        make_writer(out, err).print_result(url)

        assert out.getvalue() == url + "\n"

    def test_render_used_when_not_verbose(self, out, err):
        """A summary renderer is used in normal mode."""
        render = MagicMock()

        make_writer(out, err).print_result({"Buckets": []}, render)

        render.assert_called_once_with({"Buckets": []})

    def test_verbose_prints_whole_response(self, out, err):
        """Verbose mode prints the response without ResponseMetadata."""
        render = MagicMock()
        response = {"ETag": '"abc"', "ResponseMetadata": {"RequestId": "req-1"}}

        make_writer(out, err, verbose=True).print_result(response, render)

        render.assert_not_called()
        assert "abc" in out.getvalue()
        assert "req-1" not in out.getvalue()

    def test_silent_without_render(self, out, err):
        """Responses without a summary print nothing in normal mode."""
        make_writer(out, err).print_result({"ETag": '"abc"'})

        assert out.getvalue() == ""


class TestListings:
    """Tests for bucket and object listings."""

    def test_print_buckets(self, out, err):
        """One bucket name per line."""
        make_writer(out, err).print_buckets({"Buckets": [{"Name": "a"}, {"Name": "b"}]})

        assert out.getvalue() == "a\nb\n"

    def test_print_objects_prefixes_first(self, out, err):
        """Common prefixes are printed before keys."""
        response = {
            "CommonPrefixes": [{"Prefix": "dir/"}],
            "Contents": [{"Key": "file1"}, {"Key": "file2"}],
        }

        make_writer(out, err).print_objects(response)

        assert out.getvalue() == "dir/\nfile1\nfile2\n"

    def test_print_objects_with_index(self, out, err):
        """Index mode numbers keys from zero."""
        make_writer(out, err).print_objects({"Contents": [{"Key": "a"}, {"Key": "b"}]}, index=True)

        assert out.getvalue() == "0\ta\n1\tb\n"


class TestPrintHeadObject:
    """Tests for head output."""

    MODIFIED = datetime.datetime(2019, 1, 2, 3, 4, 5, tzinfo=datetime.timezone.utc)

    def test_size_and_mtime(self, out, err):
        """Default output is size and mtime."""
        make_writer(out, err).print_head_object(
            {"ContentLength": 42, "LastModified": self.MODIFIED}
        )

        assert out.getvalue() == f"42\t{self.MODIFIED}\n"

    def test_mtimestamp(self, out, err):
        """Timestamp mode prints Unix seconds."""
        make_writer(out, err).print_head_object(
            {"ContentLength": 42, "LastModified": self.MODIFIED}, mtimestamp=True
        )

        assert out.getvalue() == f"{int(self.MODIFIED.timestamp())}\n"


class TestMultipartOutput:
    """Tests for multipart output."""

    def test_upload_session(self, out, err):
        """Session identifiers are printed one per line."""
        make_writer(out, err).print_upload_session(
            MultipartUploadSession("bucket", "key", "upload-1")
        )

        assert out.getvalue() == "Bucket: bucket\nKey: key\nUploadId: upload-1\n"

    def test_part_results_table(self, out, err):
        """Each part gets a row with its ETag or its failure cause."""
        results = [
            PartResult(1, etag='"etag-1"'),
            PartResult(2, error=PartUploadFailed(2, FileNotFoundError("no such file: part2"))),
        ]

        make_writer(out, err).print_part_results(results)

        text = out.getvalue()
        assert '"etag-1"' in text
        assert "OK" in text
        assert "FAIL" in text
        assert "no such file: part2" in text


class TestPrintError:
    """Tests for error output."""

    def test_errors_go_to_stderr(self, out, err):
        """Errors are written to the error console only."""
        make_writer(out, err).print_error("get failed: [NoSuchKey] missing")

        assert out.getvalue() == ""
        assert "get failed: [NoSuchKey] missing" in err.getvalue()
