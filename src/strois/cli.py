"""Command line interface around a single S3 bucket."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from .bucket import Bucket
from .config import Builder
from .constants import DEFAULT_REGION
from .errors import DecodeError, S3Error, S3ErrorCode, StroisError, UnexpectedResponseError
from .logging import level_from_verbosity, setup_structured_logging
from .utils.errors import sanitize_exception

logger = logging.getLogger("strois.cli")


def _add_global_options(parser: argparse.ArgumentParser, with_defaults: bool) -> None:
    """Declare the connection options.

    Subcommands declare them again with suppressed defaults, so that an option
    given after the subcommand overrides the one given before it and an
    absent one leaves it untouched.
    """

    def default(value):
        return value if with_defaults else argparse.SUPPRESS

    shown = " (default: %(default)s)" if with_defaults else ""

    parser.add_argument(
        "-a", "--addr", default=default("http://localhost:9000"), help=f"The addr of the s3 server{shown}"
    )
    parser.add_argument("-b", "--bucket", default=default("strois"), help=f"The bucket name{shown}")
    parser.add_argument("--region", default=default(DEFAULT_REGION), help=f"The region{shown}")
    parser.add_argument("--key", default=default("minioadmin"), help=f"Access key{shown}")
    parser.add_argument("--secret", default=default("minioadmin"), help=f"Secret key{shown}")
    parser.add_argument("--token", default=default(None), help="Security token")
    parser.add_argument(
        "--virtual-host-style",
        action="store_true",
        default=default(False),
        help="Use http://bucket.url.com/ instead of http://url.com/bucket/ (does not work with localhost)",
    )
    parser.add_argument("-v", dest="verbose", action="count", default=default(0), help="Increase verbosity")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="strois", description="Cli around S3")
    _add_global_options(parser, with_defaults=True)

    global_options = argparse.ArgumentParser(add_help=False)
    _add_global_options(global_options, with_defaults=False)

    commands = parser.add_subparsers(dest="command", required=True)

    ls = commands.add_parser("ls", aliases=["list", "l"], parents=[global_options], help="List directory contents")
    ls.add_argument("path", nargs="?", default="", help="List directory contents from the given path")

    cat = commands.add_parser("cat", aliases=["bat"], parents=[global_options], help="Print file")
    cat.add_argument("file", help="Path of the file to cat")
    cat.add_argument("-r", "--raw", action="store_true", help="Send the raw data to stdout without any validation")

    rm = commands.add_parser("rm", aliases=["rmdir"], parents=[global_options], help="Remove directory entries")
    rm.add_argument("paths", nargs="+", help="Path of the files to remove")

    write = commands.add_parser(
        "write",
        aliases=["set"],
        parents=[global_options],
        help="Write the content of stdin or argv to the specified path",
    )
    write.add_argument("path", help="Path of the file to write")
    write.add_argument("content", nargs="?", default=None, help="Content to write in the file")
    write.add_argument(
        "-f", "--force", action="store_true", help="Write an empty file when no content is given"
    )

    bucket = commands.add_parser(
        "bucket", aliases=["b"], parents=[global_options], help="Commands related to the buckets"
    )
    bucket_commands = bucket.add_subparsers(dest="bucket_command", required=True)
    create = bucket_commands.add_parser("create", parents=[global_options], help="Create a bucket")
    create.add_argument(
        "-i", "--ignore-if-exists", action="store_true", help="Don't fail if the bucket already exists"
    )
    delete = bucket_commands.add_parser("delete", parents=[global_options], help="Delete a bucket")
    delete.add_argument(
        "-i",
        "--ignore-if-does-not-exist",
        action="store_true",
        help="Don't fail if the bucket doesn't exist",
    )

    return parser


def sanitize_path(path: str) -> str:
    if path.startswith("/"):
        logger.warning("Invalid path, trimming the `/` at the start of your path")
        return path.lstrip("/")
    return path


def _ls(bucket: Bucket, args: argparse.Namespace) -> int:
    keys = [entry.key for entry in bucket.list_objects(sanitize_path(args.path))]
    print(" ".join(keys))
    return 0


def _cat(bucket: Bucket, args: argparse.Namespace) -> int:
    path = sanitize_path(args.file)
    if args.raw or not sys.stdout.isatty():
        sys.stdout.flush()
        bucket.get_object_to_writer(path, sys.stdout.buffer)
        sys.stdout.buffer.flush()
        return 0
    try:
        print(bucket.get_object_string(path))
    except DecodeError as e:
        if isinstance(e, UnexpectedResponseError):
            raise
        print(
            "Object contains non utf-8 character. To print it use the `--raw` flag.",
            file=sys.stderr,
        )
        return 1
    return 0


def _rm(bucket: Bucket, args: argparse.Namespace) -> int:
    failed = 0
    for path in args.paths:
        try:
            bucket.delete_object(sanitize_path(path))
        except StroisError as e:
            logger.error(f"`{path}`: {sanitize_exception(e)}")
            failed += 1
    return 1 if failed else 0


def _write(bucket: Bucket, args: argparse.Namespace) -> int:
    path = sanitize_path(args.path)
    if args.content is not None:
        bucket.put_object(path, args.content.encode("utf-8"))
    elif not sys.stdin.isatty():
        bucket.put_object(path, sys.stdin.buffer.read())
    elif args.force:
        bucket.put_object(path, b"")
    else:
        print(
            "Did you forget to pipe something in the command? "
            "If you wanted to reset the content of the file use `--force` or `-f`.",
            file=sys.stderr,
        )
        return 1
    return 0


def _bucket(bucket: Bucket, args: argparse.Namespace) -> int:
    if args.bucket_command == "create":
        try:
            bucket.create()
        except S3Error as e:
            if args.ignore_if_exists and e.code in (
                S3ErrorCode.BucketAlreadyExists,
                S3ErrorCode.BucketAlreadyOwnedByYou,
            ):
                logger.info("Bucket already exists")
                return 0
            raise
    else:
        try:
            bucket.delete()
        except S3Error as e:
            if args.ignore_if_does_not_exist and e.code == S3ErrorCode.NoSuchBucket:
                logger.info("Bucket does not exist")
                return 0
            raise
    return 0


COMMANDS = {
    "ls": _ls,
    "list": _ls,
    "l": _ls,
    "cat": _cat,
    "bat": _cat,
    "rm": _rm,
    "rmdir": _rm,
    "write": _write,
    "set": _write,
    "bucket": _bucket,
    "b": _bucket,
}


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return its exit code."""
    args = build_parser().parse_args(argv)
    setup_structured_logging(level_from_verbosity(args.verbose))

    try:
        bucket = (
            Builder(args.addr)
            .key(args.key)
            .secret(args.secret)
            .maybe_token(args.token)
            .region(args.region)
            .with_url_path_style(not args.virtual_host_style)
            .bucket(args.bucket)
        )
        with bucket.client:
            return COMMANDS[args.command](bucket, args)
    except StroisError as e:
        print(f"Error: {sanitize_exception(e)}", file=sys.stderr)
        return 1
