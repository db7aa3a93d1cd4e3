"""Tests for the bucket access commands."""

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from gcsman.commands.bucket import app


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def photos(storage_server, storage, temp_config_dir):
    for i in range(10):
        storage_server.add_object("photos", f"img/{i}.jpg")
    with patch("gcsman.commands.bucket.get_storage", return_value=storage):
        yield storage_server


class TestMakePublic:
    """Test cases for 'bucket make-public'."""

    def test_bucket_only(self, runner, photos):
        result = runner.invoke(app, ["make-public", "photos"])

        assert result.exit_code == 0
        assert "gs://photos is now publicly readable" in result.stdout
        assert "Summary" not in result.stdout
        assert photos.bucket_acls["photos"][0]["entity"] == "allUsers"
        assert photos.default_acls["photos"][0]["entity"] == "allUsers"
        assert photos.object_acls == {}

    def test_include_files(self, runner, photos):
        result = runner.invoke(app, ["make-public", "gs://photos", "--include-files"])

        assert result.exit_code == 0
        assert "Bulk Make Public Summary" in result.stdout
        assert len(photos.object_acls) == 10

    def test_include_files_force_with_failures(self, runner, photos):
        photos.fail("POST", "img/4.jpg", status_code=403)

        result = runner.invoke(app, ["make-public", "photos", "--include-files", "--force"])

        assert result.exit_code == 1
        assert len(photos.requests_for("POST")) == 12

    def test_missing_bucket(self, runner, photos):
        result = runner.invoke(app, ["make-public", "nope"])

        assert result.exit_code == 1
        assert "not found" in result.stdout


class TestMakePrivate:
    """Test cases for 'bucket make-private'."""

    def test_bucket_only(self, runner, photos):
        result = runner.invoke(app, ["make-private", "photos"])

        assert result.exit_code == 0
        assert "gs://photos is now private to its project" in result.stdout
        (request,) = photos.requests_for("PATCH")
        assert request.url.params["predefinedAcl"] == "projectPrivate"

    def test_strict_include_files(self, runner, photos):
        """Test --strict applies 'private' to objects while the bucket stays projectPrivate."""
        result = runner.invoke(app, ["make-private", "photos", "--include-files", "--strict"])

        assert result.exit_code == 0
        predefined = [request.url.params["predefinedAcl"] for request in photos.requests_for("PATCH")]
        assert predefined[0] == "projectPrivate"
        assert predefined[1:] == ["private"] * 10

    def test_fail_fast(self, runner, photos):
        photos.fail("PATCH", "img/2.jpg")

        result = runner.invoke(app, ["make-private", "photos", "--include-files", "-c", "1"])

        assert result.exit_code == 1
        assert "Stopped after first failure" in result.stdout
        assert "2 object(s) were processed before stopping." in result.stdout
