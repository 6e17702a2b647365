"""
Tests unitaires pour OSSStorage.

Le SDK oss2 est remplace par un MagicMock : ces tests verifient la
construction des cles et des URL publiques, le passage par le bucket
et la conversion des erreurs OSS en StorageError.
"""

from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import oss2
import pytest
import respx

from src.adapters.storage.oss_storage import OSSStorage, generate_file_path
from src.core.exceptions import ServiceUnavailableError, StorageError


@pytest.fixture
def storage() -> OSSStorage:
    return OSSStorage(
        access_key_id="ak",
        access_key_secret="sk",
        bucket_name="watchlist",
        region="oss-cn-hangzhou",
    )


@pytest.fixture
def mock_bucket(storage: OSSStorage) -> MagicMock:
    """Bucket oss2 simule, injecte a l'ouverture."""
    bucket = MagicMock(spec=oss2.Bucket)
    with patch("src.adapters.storage.oss_storage.oss2.Bucket", return_value=bucket):
        yield bucket


class TestGenerateFilePath:
    def test_builds_key(self) -> None:
        assert generate_file_path("movie", 12, ".JPG") == "movie/12.jpg"
        assert generate_file_path("actor", "abc", "png") == "actor/abc.png"


class TestOSSStorageUrls:
    """Tests des URL publiques."""

    def test_default_url_uses_bucket_domain(self, storage: OSSStorage) -> None:
        assert (
            storage.public_url("movie/1/poster.jpg")
            == "https://watchlist.oss-cn-hangzhou.aliyuncs.com/movie/1/poster.jpg"
        )

    def test_custom_domain_forced_to_https(self) -> None:
        storage = OSSStorage("ak", "sk", "watchlist", public_base_url="http://img.example.com/")
        assert storage.public_url("/a.jpg") == "https://img.example.com/a.jpg"

    def test_key_from_url(self, storage: OSSStorage) -> None:
        url = storage.public_url("tv/5/backdrop.jpg")
        assert storage.key_from_url(url) == "tv/5/backdrop.jpg"
        assert storage.key_from_url("https://elsewhere.com/tv/5.jpg") is None
        assert storage.key_from_url("/movie/1.jpg") == "movie/1.jpg"

    def test_disabled_without_credentials(self) -> None:
        storage = OSSStorage(None, None, None)
        assert not storage.enabled


class TestOSSStorageOperations:
    """Tests des operations sur le bucket."""

    @pytest.mark.asyncio
    async def test_unconfigured_storage_raises(self) -> None:
        with pytest.raises(ServiceUnavailableError):
            await OSSStorage(None, None, None).upload_bytes("a.jpg", b"data")

    @pytest.mark.asyncio
    async def test_upload_bytes(self, storage: OSSStorage, mock_bucket: MagicMock) -> None:
        """upload_bytes() depose l'objet avec son type MIME."""
        url = await storage.upload_bytes("movie/1.png", b"data")

        mock_bucket.put_object.assert_called_once_with(
            "movie/1.png", b"data", headers={"Content-Type": "image/png"}
        )
        assert url.endswith("/movie/1.png")

    @pytest.mark.asyncio
    async def test_upload_file(
        self, storage: OSSStorage, mock_bucket: MagicMock, tmp_path: Path
    ) -> None:
        path = tmp_path / "backup.json"
        path.write_text("{}")

        await storage.upload_file(path, "backups/backup.json")

        mock_bucket.put_object_from_file.assert_called_once_with("backups/backup.json", str(path))

    @pytest.mark.asyncio
    async def test_oss_error_becomes_storage_error(
        self, storage: OSSStorage, mock_bucket: MagicMock
    ) -> None:
        mock_bucket.delete_object.side_effect = oss2.exceptions.OssError(
            500, {}, b"", {}
        )

        with pytest.raises(StorageError):
            await storage.delete("movie/1.jpg")

    @pytest.mark.asyncio
    @respx.mock
    async def test_upload_from_url(self, storage: OSSStorage, mock_bucket: MagicMock) -> None:
        """upload_from_url() telecharge puis depose l'image."""
        respx.get("https://image.tmdb.org/t/p/w500/abc.jpg").mock(
            return_value=httpx.Response(
                200, content=b"jpeg", headers={"Content-Type": "image/jpeg"}
            )
        )

        url = await storage.upload_from_url(
            "https://image.tmdb.org/t/p/w500/abc.jpg", "movie/1/poster.jpg"
        )

        mock_bucket.put_object.assert_called_once_with(
            "movie/1/poster.jpg", b"jpeg", headers={"Content-Type": "image/jpeg"}
        )
        assert url.endswith("/movie/1/poster.jpg")

    @pytest.mark.asyncio
    @respx.mock
    async def test_download_failure_becomes_storage_error(
        self, storage: OSSStorage, mock_bucket: MagicMock
    ) -> None:
        respx.get("https://image.tmdb.org/t/p/w500/missing.jpg").mock(
            return_value=httpx.Response(404)
        )

        with pytest.raises(StorageError):
            await storage.upload_from_url(
                "https://image.tmdb.org/t/p/w500/missing.jpg", "movie/2/poster.jpg"
            )
        mock_bucket.put_object.assert_not_called()
