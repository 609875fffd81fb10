#!/usr/bin/env python3
"""
S3 demo: upload, inspect, presign and delete objects in a bucket.

Usage:
    s3-demo <bucket>                          - Run full demo
    s3-demo <bucket> list                     - List files in bucket
    s3-demo <bucket> upload <file>            - Upload a file
    s3-demo <bucket> delete <file>            - Delete a file
    s3-demo <bucket> presign <file> [seconds] - Generate presigned URL
    s3-demo <bucket> print <file>             - Print file content
    s3-demo <bucket> info <file>              - Print file info
    s3-demo help                              - Show this help
"""

import argparse
import json
import mimetypes
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from botocore.exceptions import BotoCoreError, ClientError

from addons.logging_config import setup_logging, get_logger
from addons.prompts import ask_confirm, PromptCancelled, CANCELLED_MESSAGE
from addons.s3_connect import s3_connect, list_objects, print_objects, error_code
from addons.schemas import BucketObject, DemoFile

logger = get_logger(__name__)

# head_object reports a missing key as a bare 404
MISSING_KEY_ERRORS = {"404", "NoSuchKey", "NotFound"}


class ObjectNotFoundError(LookupError):
    """Raised when a key does not exist in the bucket."""


class S3Demo:
    DEFAULT_PRESIGN_EXPIRES = 300

    def __init__(self, client, bucket: str):
        self.client = client
        self.bucket = bucket

    def check_file_exists(self, key: str) -> dict:
        """Return the object's head response, or raise ObjectNotFoundError."""
        try:
            return self.client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if error_code(e) in MISSING_KEY_ERRORS:
                raise ObjectNotFoundError(
                    f'File "{key}" does not exist in bucket "{self.bucket}"'
                ) from e
            raise

    def upload_file(self, key: str, content: Union[str, bytes], content_type: str = "text/plain"):
        body = content.encode("utf-8") if isinstance(content, str) else content
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=body,
            ContentType=content_type,
        )
        print(f'✅ Uploaded {key} to bucket "{self.bucket}"')

    def print_file(self, key: str):
        """Print an object's content; JSON objects are pretty-printed."""
        self.check_file_exists(key)
        response = self.client.get_object(Bucket=self.bucket, Key=key)
        body = response["Body"].read()
        content_type = response.get("ContentType", "")

        if content_type.split(";")[0].strip() == "application/json":
            print(json.dumps(json.loads(body), indent=2))
        else:
            print(body.decode("utf-8", errors="replace"))

    def print_file_info(self, key: str):
        head = self.check_file_exists(key)
        last_modified = head.get("LastModified")
        etag = head.get("ETag", "").strip('"')

        print(f"   Key:           {key}")
        print(f"   Size:          {BucketObject(key=key, size=head.get('ContentLength', 0)).size_label}")
        print(f"   Content type:  {head.get('ContentType', 'unknown')}")
        print(f"   ETag:          {etag}")
        print(f"   Last modified: {last_modified.isoformat() if last_modified else 'Unknown'}")

        metadata = head.get("Metadata") or {}
        if metadata:
            print("   Metadata:")
            for name, value in metadata.items():
                print(f"     {name}: {value}")

    def list_files(self) -> List[BucketObject]:
        objects = list_objects(self.client, self.bucket)
        print_objects(
            self.bucket,
            objects,
            empty_hint=f", run `s3-demo {self.bucket}` for full demo with file uploads!",
        )
        return objects

    def delete_file(self, key: str, confirm_delete: bool = True) -> bool:
        """Delete an object, asking first unless confirm_delete is False."""
        self.check_file_exists(key)

        if confirm_delete:
            should_delete = ask_confirm(
                f'Are you sure you want to delete "{key}" from bucket "{self.bucket}"?',
                default=False,
            )
            if not should_delete:
                print("Delete cancelled")
                return False

        self.client.delete_object(Bucket=self.bucket, Key=key)
        print(f'🗑️ Deleted {key} from bucket "{self.bucket}"')
        return True

    def presign_file(self, key: str, expires_in: int = DEFAULT_PRESIGN_EXPIRES) -> str:
        self.check_file_exists(key)
        url = self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=expires_in,
        )
        print(f"🔗 Generated presigned URL for {key} (expires in {expires_in} seconds): {url}")
        return url

    def demo_files(self) -> List[DemoFile]:
        data = {
            "message": "S3 from Python rocks!",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": "1.0",
        }
        return [
            DemoFile(
                key="demo.txt",
                content="Hello from the S3 demo! This is a simple text file.",
                content_type="text/plain",
            ),
            DemoFile(
                key="data.json",
                content=json.dumps(data, indent=2),
                content_type="application/json",
            ),
            DemoFile(
                key="readme.md",
                content="# S3 Demo\n\nThis file was uploaded using boto3.\n\n- Fast\n- Simple\n- Portable",
                content_type="text/markdown",
            ),
        ]

    def run_demo(self, assume_yes: bool = False) -> bool:
        """Upload demo files, inspect them, clean up and presign what's left."""
        print("🚀 S3 API Demo - Starting…\n")

        should_proceed = assume_yes or ask_confirm(
            f'This demo will upload files to bucket "{self.bucket}" and then clean them up. Continue?',
            default=False,
        )
        if not should_proceed:
            print("Demo cancelled")
            return False

        demo_files = self.demo_files()

        self.list_files()

        print("\n📤 Uploading demo files…")
        for demo_file in demo_files:
            self.upload_file(demo_file.key, demo_file.content, demo_file.content_type)

        print("\n📋 Files after upload:")
        self.list_files()

        print("\n📥 Testing file content:")
        self.print_file("data.json")
        self.print_file_info("data.json")

        print("\n🗑️ Cleaning up demo files (keeping demo.txt)…")
        for demo_file in demo_files[1:]:
            self.delete_file(demo_file.key, confirm_delete=False)

        print("\n📋 Final state:")
        self.list_files()

        print("")
        self.presign_file("demo.txt")

        print("\n✅ Demo completed successfully!")
        print(f"💡 Use `s3-demo {self.bucket} list` to see remaining files anytime!")
        return True


def show_help():
    print("\n📚 S3 Demo - Usage:")
    print("   s3-demo <bucket>                          - Run full demo")
    print("   s3-demo <bucket> list                     - List files in bucket")
    print("   s3-demo <bucket> upload <file>            - Upload a file")
    print("   s3-demo <bucket> delete <file>            - Delete a file")
    print("   s3-demo <bucket> presign <file> [seconds] - Generate presigned URL")
    print("   s3-demo <bucket> print <file>             - Print file content")
    print("   s3-demo <bucket> info <file>              - Print file info")
    print("   s3-demo help                              - Show this help")


def parse_expiry(raw: Optional[str]) -> int:
    """Parse the presign expiry in seconds; raises ValueError unless positive."""
    if raw is None:
        return S3Demo.DEFAULT_PRESIGN_EXPIRES
    try:
        seconds = int(raw)
    except ValueError:
        seconds = 0
    if seconds <= 0:
        raise ValueError("Expiry must be a positive number of seconds")
    return seconds


def upload_local_file(demo: S3Demo, path: str):
    """Upload a local file, keyed by the path it was given as."""
    file_path = Path(path)
    content_type = mimetypes.guess_type(file_path.name)[0] or "text/plain"
    demo.upload_file(path, file_path.read_bytes(), content_type)


def dispatch(demo: S3Demo, command: Optional[str], args: List[str], assume_yes: bool = False):
    """Run one subcommand against the bucket."""
    if command is None:
        demo.run_demo(assume_yes=assume_yes)
        return

    key = args[0] if args else None

    if command == "list":
        demo.list_files()
    elif command == "upload":
        if not key:
            print("❌ Please provide a file path to upload")
            return
        upload_local_file(demo, key)
    elif command == "info":
        if not key:
            print("❌ Please provide a file key to get info")
            return
        demo.print_file_info(key)
    elif command == "print":
        if not key:
            print("❌ Please provide a file key to print")
            return
        demo.print_file(key)
    elif command == "delete":
        if not key:
            print("❌ Please provide a file key to delete")
            return
        demo.delete_file(key, confirm_delete=not assume_yes)
    elif command == "presign":
        if not key:
            print("❌ Please provide a file key to presign")
            return
        expires_in = parse_expiry(args[1] if len(args) > 1 else None)
        demo.presign_file(key, expires_in)
    else:
        show_help()


def main(argv: List[str] = None):
    parser = argparse.ArgumentParser(prog="s3-demo", description="S3 bucket demo", add_help=False)
    parser.add_argument("bucket", nargs="?")
    parser.add_argument("command", nargs="?")
    parser.add_argument("args", nargs="*")
    parser.add_argument("-y", "--yes", action="store_true", help="Skip confirmation prompts")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-h", "--help", action="store_true")

    args = parser.parse_intermixed_args(argv)
    setup_logging("DEBUG" if args.verbose else None)

    if args.help or not args.bucket or args.bucket == "help" or args.command == "help":
        show_help()
        return

    try:
        client, settings = s3_connect(args.bucket)
        demo = S3Demo(client, settings.bucket)
        logger.debug("Dispatching %s on %s", args.command or "demo", settings.bucket)
        dispatch(demo, args.command, args.args, assume_yes=args.yes)
    except PromptCancelled:
        print(CANCELLED_MESSAGE)
        sys.exit(0)
    except (ClientError, BotoCoreError, LookupError, ValueError, OSError) as e:
        print(f"❌ Operation failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
