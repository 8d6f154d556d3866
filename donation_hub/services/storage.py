"""S3 / MinIO object storage for transfer proofs and accountability photos.

Objects are written under a destination prefix chosen by the server
(``transfer-proofs/`` or ``accountability/``), never by the client, and
exposed through their public URL.
"""

import logging
import os
import uuid
from urllib.parse import urlparse

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from donation_hub.core.config import settings
from donation_hub.core.exceptions import FieldValidationError, UpstreamError

logger = logging.getLogger(__name__)

TRANSFER_PROOF_PREFIX = "transfer-proofs"
ACCOUNTABILITY_PREFIX = "accountability"

IMAGE_CONTENT_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})
TRANSFER_PROOF_CONTENT_TYPES = IMAGE_CONTENT_TYPES | {"application/pdf"}

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "application/pdf": "pdf",
}

_minio_cred_warned = False


def _get_s3_client():  # type: ignore[no-untyped-def]
    global _minio_cred_warned  # noqa: PLW0603
    config_kwargs: dict = {"signature_version": "s3v4"}
    if settings.S3_ENDPOINT_URL:
        config_kwargs["s3"] = {"addressing_style": "path"}
    kwargs: dict = {
        "service_name": "s3",
        "region_name": settings.AWS_REGION,
        "config": Config(**config_kwargs),
    }
    if settings.S3_ENDPOINT_URL:
        kwargs["endpoint_url"] = settings.S3_ENDPOINT_URL
    if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
        kwargs["aws_access_key_id"] = settings.AWS_ACCESS_KEY_ID
        kwargs["aws_secret_access_key"] = settings.AWS_SECRET_ACCESS_KEY

    if settings.S3_ENDPOINT_URL and not _minio_cred_warned:
        env_key = os.environ.get("AWS_ACCESS_KEY_ID", "")
        if env_key.startswith("AKIA") and (
            not settings.AWS_ACCESS_KEY_ID or settings.AWS_ACCESS_KEY_ID.startswith("AKIA")
        ):
            logger.warning(
                "S3_ENDPOINT_URL points to MinIO but AWS_ACCESS_KEY_ID "
                "looks like a real AWS key (AKIA...). Uploads will be "
                "signed with AWS creds and fail against MinIO."
            )
        _minio_cred_warned = True

    return boto3.client(**kwargs)


def validate_upload(
    size: int,
    content_type: str | None,
    allowed: frozenset[str],
    field: str = "file",
) -> None:
    """Reject a file before any upload is attempted."""
    errors: list[str] = []
    if size <= 0:
        errors.append("File is empty")
    elif size > settings.MAX_UPLOAD_SIZE:
        limit_mb = settings.MAX_UPLOAD_SIZE // (1024 * 1024)
        errors.append(f"File too large (max {limit_mb}MB)")
    if content_type not in allowed:
        errors.append(f"Unsupported file type, expected one of: {', '.join(sorted(allowed))}")
    if errors:
        raise FieldValidationError({field: errors})


def build_object_key(destination_hint: str, content_type: str) -> str:
    """``{prefix}/{uuid}.{ext}``; the hint is reduced to a safe prefix."""
    prefix = "/".join(
        part for part in destination_hint.strip("/").split("/") if part not in ("", ".", "..")
    )
    ext = _EXTENSIONS.get(content_type, "bin")
    return f"{prefix}/{uuid.uuid4()}.{ext}"


def public_url(key: str) -> str:
    if settings.S3_PUBLIC_ENDPOINT:
        return f"{settings.S3_PUBLIC_ENDPOINT.rstrip('/')}/{settings.S3_BUCKET}/{key}"
    if settings.S3_ENDPOINT_URL:
        return f"{settings.S3_ENDPOINT_URL.rstrip('/')}/{settings.S3_BUCKET}/{key}"
    return f"https://{settings.S3_BUCKET}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"


def key_from_reference(reference: str) -> str:
    """Accept either an object key or a public URL produced by ``public_url``."""
    if "://" not in reference:
        return reference.lstrip("/")
    path = urlparse(reference).path.lstrip("/")
    bucket_prefix = f"{settings.S3_BUCKET}/"
    if path.startswith(bucket_prefix):
        path = path[len(bucket_prefix) :]
    return path


async def upload(data: bytes, content_type: str, destination_hint: str) -> str:
    """Store ``data`` and return its public URL."""
    key = build_object_key(destination_hint, content_type)
    client = _get_s3_client()
    try:
        await run_in_threadpool(
            client.put_object,
            Bucket=settings.S3_BUCKET,
            Key=key,
            Body=data,
            ContentType=content_type,
            CacheControl="max-age=3600",
        )
    except (BotoCoreError, ClientError) as exc:
        logger.error("Upload of %s failed", key, exc_info=exc)
        raise UpstreamError("upload", "Could not store the file") from exc

    logger.info("Uploaded %s (%d bytes, %s)", key, len(data), content_type)
    return public_url(key)


async def delete(reference: str) -> None:
    """Delete an object by key or public URL."""
    key = key_from_reference(reference)
    client = _get_s3_client()
    try:
        await run_in_threadpool(client.delete_object, Bucket=settings.S3_BUCKET, Key=key)
    except (BotoCoreError, ClientError) as exc:
        logger.error("Delete of %s failed", key, exc_info=exc)
        raise UpstreamError("delete_file", "Could not delete the file") from exc
    logger.info("Deleted %s", key)
