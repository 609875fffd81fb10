#!/usr/bin/env python3
"""
Connect to an S3-compatible bucket (Cellar, AWS S3, MinIO) and list its objects.

Usage:
    s3-connect                 # Ask for the bucket name
    s3-connect my-bucket       # List objects in my-bucket

Credentials come from CELLAR_ADDON_HOST, CELLAR_ADDON_KEY_ID and
CELLAR_ADDON_KEY_SECRET; anything missing is asked for interactively.
"""

import argparse
import sys
from typing import List, Optional, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from addons.logging_config import setup_logging, get_logger
from addons.prompts import ask_text, ask_secret, PromptCancelled, CANCELLED_MESSAGE
from addons.schemas import BucketObject, S3Settings
from addons.utils import get_optional_env

logger = get_logger(__name__)

DEFAULT_ENDPOINT = "cellar-fr-north-hds-c1.services.clever-cloud.com"

# Error codes that mean the bucket can't be reached with these credentials
BUCKET_ACCESS_ERRORS = {"NoSuchBucket", "AccessDenied"}


def resolve_settings(bucket: Optional[str] = None) -> S3Settings:
    """
    Resolve endpoint, credentials and bucket from the environment or prompts.

    Args:
        bucket: Bucket name, asked for when not given

    Returns:
        S3Settings with every field filled in
    """
    endpoint = get_optional_env("CELLAR_ADDON_HOST")
    access_key_id = get_optional_env("CELLAR_ADDON_KEY_ID")
    secret_access_key = get_optional_env("CELLAR_ADDON_KEY_SECRET")

    if not endpoint:
        endpoint = ask_text("S3 Endpoint:", default=DEFAULT_ENDPOINT)

    if not access_key_id:
        access_key_id = ask_text("Access Key ID:")

    if not secret_access_key:
        secret_access_key = ask_secret("Secret Access Key:")

    if not bucket:
        bucket = ask_text("Bucket name:")

    return S3Settings(
        endpoint=endpoint,
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        bucket=bucket,
    )


def get_client(settings: S3Settings):
    """Create a boto3 S3 client for the resolved settings."""
    logger.info("Using S3 endpoint %s", settings.endpoint_url)
    return boto3.client(
        "s3",
        endpoint_url=settings.endpoint_url,
        aws_access_key_id=settings.access_key_id,
        aws_secret_access_key=settings.secret_access_key,
    )


def s3_connect(bucket: Optional[str] = None) -> Tuple[object, S3Settings]:
    """Resolve settings and build a client. Returns (client, settings)."""
    settings = resolve_settings(bucket)
    return get_client(settings), settings


def list_objects(client, bucket: str) -> List[BucketObject]:
    """List every object in a bucket, following continuation tokens."""
    objects = []
    kwargs = {"Bucket": bucket}

    while True:
        response = client.list_objects_v2(**kwargs)
        for item in response.get("Contents", []):
            objects.append(BucketObject(
                key=item["Key"],
                size=item.get("Size", 0),
                last_modified=item.get("LastModified"),
            ))

        if not response.get("IsTruncated"):
            break
        kwargs["ContinuationToken"] = response["NextContinuationToken"]

    logger.debug("Listed %d object(s) in %s", len(objects), bucket)
    return objects


def print_objects(bucket: str, objects: List[BucketObject], empty_hint: str = None):
    """Print a bucket listing, one line per object."""
    if not objects:
        print(f'📂 Bucket "{bucket}" is empty{empty_hint or ""}')
        return

    print(f'📂 Objects in bucket "{bucket}" ({len(objects)} objects):')
    for obj in objects:
        print(f"   📄 {obj.key} ({obj.size_label}, {obj.date_label})")


def error_code(error: Exception) -> Optional[str]:
    """Get the S3 error code from a botocore ClientError."""
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code")
    return None


def main(argv: List[str] = None):
    parser = argparse.ArgumentParser(prog="s3-connect", description="List objects in an S3 bucket")
    parser.add_argument("bucket", nargs="?", help="Bucket name (asked for when omitted)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    args = parser.parse_args(argv)
    setup_logging("DEBUG" if args.verbose else None)

    try:
        client, settings = s3_connect(args.bucket)
    except PromptCancelled:
        print(CANCELLED_MESSAGE)
        sys.exit(0)
    except (BotoCoreError, ValueError) as e:
        print(f"❌ Invalid S3 settings: {e}", file=sys.stderr)
        sys.exit(1)

    bucket = settings.bucket
    print(f"🔗 Connected to S3 bucket: {bucket}")

    try:
        objects = list_objects(client, bucket)
    except (ClientError, BotoCoreError) as e:
        if error_code(e) in BUCKET_ACCESS_ERRORS:
            print(f"❌ Bucket '{bucket}' does not exist or access denied", file=sys.stderr)
        else:
            print(f"❌ Failed to list objects: {e}", file=sys.stderr)
        sys.exit(1)

    print_objects(bucket, objects)


if __name__ == "__main__":
    main()
