"""Blob storage for project files.

Two backends share the `BlobStore` contract:

- `LocalBlobStore` keeps blobs under a directory and hands out JWT-signed
  links served by the API itself (`/api/v1/files/download`).
- `S3BlobStore` talks to any S3-compatible service through boto3 and hands
  out presigned URLs.

boto3 and the filesystem are blocking, so every call runs in a worker thread.
"""

import asyncio
from pathlib import Path, PurePosixPath
from typing import Protocol
from urllib.parse import urlencode

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from src.app.core.config import Settings, get_settings
from src.app.core.logging import get_logger
from src.app.core.security import TokenType, create_download_token, decode_token

logger = get_logger(__name__)


class BlobStoreError(Exception):
    """A blob store call failed.

    `failed_paths` lists the storage keys a `remove` could not delete; empty
    for other calls.
    """

    def __init__(self, message: str, failed_paths: list[str] | None = None):
        super().__init__(message)
        self.failed_paths = failed_paths or []


class BlobStore(Protocol):
    async def put(self, path: str, data: bytes, content_type: str | None = None) -> None: ...

    async def remove(self, paths: list[str]) -> None:
        """Delete blobs; raises `BlobStoreError` naming the keys left behind."""
        ...

    async def signed_url(self, path: str, ttl_seconds: int) -> str: ...


def _normalize_path(path: str) -> str:
    """Reject absolute paths and parent references; return a clean relative key."""
    pure = PurePosixPath(path)
    if pure.is_absolute() or ".." in pure.parts or not pure.parts:
        raise BlobStoreError(f"Invalid blob path: {path!r}")
    return str(pure)


class LocalBlobStore:
    """Filesystem-backed blob store."""

    def __init__(self, root: str | Path, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _resolve(self, path: str) -> Path:
        return self.root / _normalize_path(path)

    async def put(self, path: str, data: bytes, content_type: str | None = None) -> None:
        target = self._resolve(path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            raise BlobStoreError(f"Could not store {path}: {e}") from e

    async def remove(self, paths: list[str]) -> None:
        keys = [_normalize_path(p) for p in paths]

        def _unlink() -> list[str]:
            failed = []
            for key in keys:
                try:
                    (self.root / key).unlink(missing_ok=True)
                except OSError:
                    failed.append(key)
            return failed

        failed = await asyncio.to_thread(_unlink)
        if failed:
            raise BlobStoreError(
                f"Could not remove {len(failed)} blob(s): {', '.join(failed)}", failed
            )

    async def signed_url(self, path: str, ttl_seconds: int) -> str:
        token = create_download_token(_normalize_path(path), ttl_seconds)
        return f"{self.base_url}/api/v1/files/download?{urlencode({'token': token})}"

    async def read(self, path: str) -> bytes:
        target = self._resolve(path)
        try:
            return await asyncio.to_thread(target.read_bytes)
        except FileNotFoundError as e:
            raise BlobStoreError(f"Blob not found: {path}") from e

    def path_from_token(self, token: str) -> str | None:
        """Return the blob path a download token grants, or None if invalid/expired."""
        payload = decode_token(token)
        if payload is None or payload.get("type") != TokenType.DOWNLOAD:
            return None
        path = payload.get("sub")
        return path if isinstance(path, str) else None


class S3BlobStore:
    """S3-compatible blob store (AWS S3, Cloudflare R2, MinIO, Supabase storage)."""

    def __init__(
        self,
        bucket: str,
        endpoint_url: str | None = None,
        region_name: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
    ):
        self.bucket = bucket
        self.client = boto3.client(
            "s3",
            endpoint_url=endpoint_url,
            region_name=region_name,
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
        )

    async def put(self, path: str, data: bytes, content_type: str | None = None) -> None:
        key = _normalize_path(path)
        extra = {"ContentType": content_type} if content_type else {}
        try:
            await asyncio.to_thread(
                self.client.put_object, Bucket=self.bucket, Key=key, Body=data, **extra
            )
        except (BotoCoreError, ClientError) as e:
            raise BlobStoreError(f"Could not store {path}: {e}") from e

    async def remove(self, paths: list[str]) -> None:
        if not paths:
            return
        objects = [{"Key": _normalize_path(p)} for p in paths]
        try:
            response = await asyncio.to_thread(
                self.client.delete_objects,
                Bucket=self.bucket,
                Delete={"Objects": objects, "Quiet": True},
            )
        except (BotoCoreError, ClientError) as e:
            raise BlobStoreError(
                f"Could not remove blobs: {e}", [obj["Key"] for obj in objects]
            ) from e

        errors = response.get("Errors") or []
        if errors:
            failed = [err["Key"] for err in errors if "Key" in err]
            raise BlobStoreError(
                f"Could not remove {len(errors)} blob(s): {', '.join(failed)}", failed
            )

    async def signed_url(self, path: str, ttl_seconds: int) -> str:
        try:
            return await asyncio.to_thread(
                self.client.generate_presigned_url,
                "get_object",
                Params={"Bucket": self.bucket, "Key": _normalize_path(path)},
                ExpiresIn=ttl_seconds,
            )
        except (BotoCoreError, ClientError) as e:
            raise BlobStoreError(f"Could not sign URL for {path}: {e}") from e


def create_blob_store(settings: Settings) -> BlobStore:
    """Build the configured blob store backend."""
    if settings.blob_backend == "s3":
        logger.info("Blob store using S3 backend", bucket=settings.blob_bucket)
        return S3BlobStore(
            bucket=settings.blob_bucket,
            endpoint_url=settings.blob_s3_endpoint_url,
            region_name=settings.blob_s3_region,
            access_key_id=settings.blob_s3_access_key_id,
            secret_access_key=settings.blob_s3_secret_access_key,
        )

    logger.info("Blob store using local backend", root=settings.blob_local_root)
    return LocalBlobStore(settings.blob_local_root, settings.public_base_url)


_blob_store: BlobStore | None = None


def get_blob_store() -> BlobStore:
    """Get or create the blob store singleton."""
    global _blob_store
    if _blob_store is None:
        _blob_store = create_blob_store(get_settings())
    return _blob_store


def reset_blob_store() -> None:
    """Drop the singleton (tests, reconfiguration)."""
    global _blob_store
    _blob_store = None
