"""
Stockage objet sur Aliyun OSS via le SDK oss2.

Le SDK est synchrone : chaque appel est execute dans un thread
(asyncio.to_thread) pour ne pas bloquer la boucle du serveur.

Les URL publiques sont toujours en https, qu'elles soient construites a
partir du domaine du bucket ou d'un domaine personnalise.
"""

import asyncio
import mimetypes
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import httpx
import oss2
from loguru import logger

from src.adapters.api.retry import RateLimitError, TransientAPIError, request_with_retry
from src.core.exceptions import ServiceUnavailableError, StorageError
from src.core.ports.storage import IObjectStorage


def generate_file_path(kind: str, identifier: str | int, extension: str) -> str:
    """Cle d'un fichier uploade : "{kind}/{identifier}.{ext}"."""
    return f"{kind}/{identifier}.{extension.lstrip('.').lower()}"


class OSSStorage(IObjectStorage):
    """
    Implementation IObjectStorage sur un bucket OSS.

    Le bucket n'est ouvert qu'au premier appel : une instance peut etre
    creee sans configuration, elle leve ServiceUnavailableError a l'usage.
    """

    def __init__(
        self,
        access_key_id: Optional[str],
        access_key_secret: Optional[str],
        bucket_name: Optional[str],
        region: Optional[str] = None,
        endpoint: Optional[str] = None,
        public_base_url: Optional[str] = None,
    ) -> None:
        self._access_key_id = access_key_id
        self._access_key_secret = access_key_secret
        self._bucket_name = bucket_name
        self._region = region
        self._endpoint = endpoint or (f"https://{region}.aliyuncs.com" if region else None)
        self._public_base_url = public_base_url
        self._bucket: Optional[oss2.Bucket] = None

    @property
    def enabled(self) -> bool:
        return all(
            (self._access_key_id, self._access_key_secret, self._bucket_name, self._endpoint)
        )

    def _get_bucket(self) -> oss2.Bucket:
        if not self.enabled:
            raise ServiceUnavailableError("Object storage is not configured")
        if self._bucket is None:
            auth = oss2.Auth(self._access_key_id, self._access_key_secret)
            self._bucket = oss2.Bucket(auth, self._endpoint, self._bucket_name)
        return self._bucket

    def _base_url(self) -> str:
        if self._public_base_url:
            base = self._public_base_url.rstrip("/")
        else:
            host = urlparse(self._endpoint).netloc or self._endpoint
            base = f"https://{self._bucket_name}.{host}"
        if base.startswith("http://"):
            base = "https://" + base[len("http://"):]
        return base

    def public_url(self, key: str) -> str:
        return f"{self._base_url()}/{key.lstrip('/')}"

    def key_from_url(self, url: str) -> Optional[str]:
        """Cle d'un objet a partir de son URL publique, None si URL etrangere."""
        if not url:
            return None
        if not url.startswith(("http://", "https://")):
            return url.lstrip("/")
        base = urlparse(self._base_url())
        parsed = urlparse(url)
        if parsed.netloc != base.netloc:
            return None
        return parsed.path.lstrip("/") or None

    async def upload_bytes(
        self, key: str, data: bytes, content_type: Optional[str] = None
    ) -> str:
        bucket = self._get_bucket()
        content_type = content_type or mimetypes.guess_type(key)[0] or "application/octet-stream"
        try:
            await asyncio.to_thread(
                bucket.put_object, key, data, headers={"Content-Type": content_type}
            )
        except oss2.exceptions.OssError as e:
            raise StorageError(f"Upload failed for {key}: {e}") from e
        logger.debug("Objet depose", key=key, size=len(data))
        return self.public_url(key)

    async def upload_from_url(self, url: str, key: str) -> str:
        async with httpx.AsyncClient(timeout=60.0, follow_redirects=True) as client:
            try:
                response = await request_with_retry(client, "GET", url, max_attempts=3)
            except (httpx.HTTPError, RateLimitError, TransientAPIError) as e:
                raise StorageError(f"Download failed for {url}: {e}") from e
        content_type = response.headers.get("Content-Type", "").split(";")[0] or None
        return await self.upload_bytes(key, response.content, content_type)

    async def upload_file(self, path: Path, key: str) -> str:
        bucket = self._get_bucket()
        try:
            await asyncio.to_thread(bucket.put_object_from_file, key, str(path))
        except oss2.exceptions.OssError as e:
            raise StorageError(f"Upload failed for {key}: {e}") from e
        logger.debug("Fichier depose", key=key, path=str(path))
        return self.public_url(key)

    async def delete(self, key: str) -> None:
        bucket = self._get_bucket()
        try:
            await asyncio.to_thread(bucket.delete_object, key)
        except oss2.exceptions.OssError as e:
            raise StorageError(f"Delete failed for {key}: {e}") from e
        logger.debug("Objet supprime", key=key)
