"""Command-line interface for s3cli.

Provides argument parsing, sub-command handlers and the main entry point.
Handlers return an exit code; only main() is reached by the process exit.
"""

import argparse
import logging
import os
import shutil
import sys
from dataclasses import dataclass
from typing import Any, Callable, Optional
from urllib.parse import unquote, urlsplit, urlunsplit

from botocore.exceptions import BotoCoreError, ClientError

from s3cli import __version__
from s3cli.config import DEFAULT_EXPIRY, DEFAULT_REGION, ConfigError, load_config
from s3cli.console import ConsoleWriter
from s3cli.credentials import SessionCredentialProvider
from s3cli.errors import InvalidArgument, InvalidEndpoint, PartUploadFailed, S3CliError
from s3cli.log import configure_logging
from s3cli.models import (
    BucketCannedACL,
    ClientConfig,
    HttpMethod,
    MultipartUploadSession,
    ObjectCannedACL,
    PartResult,
    PathStyle,
    PresignRequest,
    VersioningStatus,
    parse_choice,
)
from s3cli.multipart import MultipartUploadCoordinator
from s3cli.operations import S3Operations, split_bucket_key
from s3cli.retry import RetryExhausted, is_retryable_error, retry_with_backoff
from s3cli.s3_client import build_s3_client, build_session
from s3cli.signing import Presigner

logger = logging.getLogger(__name__)

# Delays between re-submissions of a failed part
PART_RETRY_DELAYS = (1.0, 2.0, 4.0)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


@dataclass
class CommandContext:
    """Everything a sub-command handler needs."""

    config: ClientConfig
    session: Any
    s3_client: Any
    writer: ConsoleWriter

    @property
    def operations(self) -> S3Operations:
        return S3Operations(self.s3_client, self.config)


Handler = Callable[[argparse.Namespace, CommandContext], int]


# Presign

def split_presign_target(target: str, endpoint: Optional[str]) -> tuple[Optional[str], str]:
    """Accept either "bucket/key" or a full "http://host:port/bucket/key".

    A full URL supplies its own endpoint. Its path is percent-decoded into
    the bucket/key and its query stays on the endpoint. When the URL is on
    the configured endpoint's host, that endpoint's path prefix is kept
    out of the bucket/key.

    Returns:
        (endpoint, bucket_key)
    """
    if "://" not in target:
        return endpoint, target

    parts = urlsplit(target)
    path = unquote(parts.path)
    prefix = ""
    if endpoint:
        configured = urlsplit(endpoint)
        configured_prefix = unquote(configured.path).rstrip("/")
        same_host = (configured.scheme, configured.netloc) == (parts.scheme, parts.netloc)
        if same_host and configured_prefix and path.startswith(configured_prefix + "/"):
            prefix = configured_prefix

    rest = path[len(prefix):]
    bucket_key = rest[1:] if rest.startswith("/") else rest
    return urlunsplit((parts.scheme, parts.netloc, prefix, parts.query, "")), bucket_key


def cmd_presign(args: argparse.Namespace, ctx: CommandContext) -> int:
    method = parse_choice(HttpMethod, args.method.upper(), "method")
    default_endpoint = ctx.config.endpoint or ctx.s3_client.meta.endpoint_url
    endpoint, bucket_key = split_presign_target(args.target, default_endpoint)

    presigner = Presigner(endpoint, SessionCredentialProvider(ctx.session))
    url = presigner.presign(
        PresignRequest(method, bucket_key, args.content_type, ctx.config.presign_expiry),
        PathStyle.RAW if args.raw else PathStyle.ESCAPED,
    )
    ctx.writer.print_url(url)
    return EXIT_OK


# Buckets

def cmd_bucket_create(args: argparse.Namespace, ctx: CommandContext) -> int:
    for result in ctx.operations.create_buckets(args.buckets):
        ctx.writer.print_result(result)
    return EXIT_OK


def cmd_bucket_list(args: argparse.Namespace, ctx: CommandContext) -> int:
    ctx.writer.print_result(ctx.operations.list_buckets(), ctx.writer.print_buckets)
    return EXIT_OK


def cmd_bucket_head(args: argparse.Namespace, ctx: CommandContext) -> int:
    ctx.writer.print_result(ctx.operations.head_bucket(args.bucket), ctx.writer.print_response)
    return EXIT_OK


def _bucket_acl(ctx: CommandContext, bucket: str, acl: Optional[str]) -> int:
    if acl is None:
        result = ctx.operations.get_bucket_acl(bucket)
    else:
        canned = parse_choice(BucketCannedACL, acl, "ACL")
        result = ctx.operations.put_bucket_acl(bucket, canned)
    ctx.writer.print_result(result, ctx.writer.print_response)
    return EXIT_OK


def cmd_bucket_acl(args: argparse.Namespace, ctx: CommandContext) -> int:
    return _bucket_acl(ctx, args.bucket, args.acl)


def cmd_bucket_policy(args: argparse.Namespace, ctx: CommandContext) -> int:
    if args.policy is None:
        result = ctx.operations.get_bucket_policy(args.bucket)
        ctx.writer.print_result(result, lambda r: ctx.writer.print_value(r.get("Policy", "")))
    else:
        ctx.writer.print_result(ctx.operations.put_bucket_policy(args.bucket, args.policy))
    return EXIT_OK


def cmd_bucket_version(args: argparse.Namespace, ctx: CommandContext) -> int:
    if args.status is None:
        result = ctx.operations.get_bucket_versioning(args.bucket)
        ctx.writer.print_result(
            result,
            lambda r: ctx.writer.print_value(f"BucketVersioning: {r.get('Status', '')}"),
        )
    else:
        status = parse_choice(VersioningStatus, args.status, "versioning status")
        ctx.writer.print_result(ctx.operations.put_bucket_versioning(args.bucket, status))
    return EXIT_OK


def cmd_bucket_delete(args: argparse.Namespace, ctx: CommandContext) -> int:
    ctx.writer.print_result(ctx.operations.delete_bucket(args.bucket))
    return EXIT_OK


# Objects

def cmd_put(args: argparse.Namespace, ctx: CommandContext) -> int:
    bucket, key = split_bucket_key(args.target)
    if not args.files:
        ctx.writer.print_result(ctx.operations.put_object(bucket, key))
        return EXIT_OK

    exit_code = EXIT_OK
    for path in args.files:
        # A key ending in "/" (or empty) is a prefix for the file's base name
        object_key = f"{key}{os.path.basename(path)}"
        try:
            with open(path, "rb") as body:
                result = ctx.operations.put_object(bucket, object_key, body)
        except OSError as e:
            ctx.writer.print_error(f"open file {path} failed: {e}")
            exit_code = EXIT_FAILED
            continue
        except (ClientError, BotoCoreError) as e:
            ctx.writer.print_error(f"put Object {object_key} failed: {e}")
            exit_code = EXIT_FAILED
            continue
        ctx.writer.print_result(result)
    return exit_code


def cmd_head(args: argparse.Namespace, ctx: CommandContext) -> int:
    bucket, key = split_bucket_key(args.target)
    if not key:
        ctx.writer.print_result(ctx.operations.head_bucket(bucket), ctx.writer.print_response)
        return EXIT_OK

    ctx.writer.print_result(
        ctx.operations.head_object(bucket, key),
        lambda r: ctx.writer.print_head_object(r, args.mtime, args.mtimestamp),
    )
    return EXIT_OK


def cmd_acl(args: argparse.Namespace, ctx: CommandContext) -> int:
    bucket, key = split_bucket_key(args.target)
    if not key:
        return _bucket_acl(ctx, bucket, args.acl)

    if args.acl is None:
        result = ctx.operations.get_object_acl(bucket, key)
    else:
        canned = parse_choice(ObjectCannedACL, args.acl, "ACL")
        result = ctx.operations.put_object_acl(bucket, key, canned)
    ctx.writer.print_result(result, ctx.writer.print_response)
    return EXIT_OK


def cmd_list(args: argparse.Namespace, ctx: CommandContext) -> int:
    if not args.target:
        return cmd_bucket_list(args, ctx)

    bucket, prefix = split_bucket_key(args.target)
    if args.all:
        keys = (obj["Key"] for obj in ctx.operations.iter_all_objects(bucket, prefix, args.delimiter))
        ctx.writer.print_lines(keys, index=args.index)
        return EXIT_OK

    result = ctx.operations.list_objects(
        bucket, prefix, args.delimiter, args.marker, args.maxkeys
    )
    ctx.writer.print_result(result, lambda r: ctx.writer.print_objects(r, index=args.index))
    return EXIT_OK


def cmd_list_versions(args: argparse.Namespace, ctx: CommandContext) -> int:
    bucket, prefix = split_bucket_key(args.target)
    ctx.writer.print_result(
        ctx.operations.list_object_versions(bucket, prefix), ctx.writer.print_response
    )
    return EXIT_OK


def cmd_get(args: argparse.Namespace, ctx: CommandContext) -> int:
    bucket, key = split_bucket_key(args.target)
    if not key:
        raise InvalidArgument(f"missing object key: {args.target!r}")

    destination = args.destination or os.path.basename(key)
    if not ctx.config.presign and os.path.exists(destination) and not args.overwrite:
        raise InvalidArgument(f"{destination} exists, use --overwrite to replace it")

    result = ctx.operations.get_object(bucket, key, args.range, args.version)
    if isinstance(result, str):
        ctx.writer.print_url(result)
        return EXIT_OK

    with open(destination, "wb") as fd:
        shutil.copyfileobj(result["Body"], fd)
    logger.info("downloaded %s/%s to %s", bucket, key, destination)
    return EXIT_OK


def cmd_cat(args: argparse.Namespace, ctx: CommandContext) -> int:
    bucket, key = split_bucket_key(args.target)
    if not key:
        raise InvalidArgument(f"missing object key: {args.target!r}")
    result = ctx.operations.get_object(bucket, key, args.range, args.version)
    if isinstance(result, str):
        ctx.writer.print_url(result)
        return EXIT_OK

    shutil.copyfileobj(result["Body"], sys.stdout.buffer)
    sys.stdout.buffer.flush()
    return EXIT_OK


def cmd_copy(args: argparse.Namespace, ctx: CommandContext) -> int:
    bucket, key = split_bucket_key(args.destination)
    if not key:
        _, key = split_bucket_key(args.source)
    ctx.writer.print_result(ctx.operations.copy_object(args.source, bucket, key))
    return EXIT_OK


def cmd_delete(args: argparse.Namespace, ctx: CommandContext) -> int:
    bucket, key = split_bucket_key(args.target)
    if args.prefix:
        deleted = ctx.operations.delete_objects(bucket, key)
        if ctx.config.verbose:
            ctx.writer.print_value(f"{deleted} Objects deleted")
    elif key:
        ctx.writer.print_result(ctx.operations.delete_object(bucket, key, args.version))
    else:
        ctx.writer.print_result(ctx.operations.delete_bucket_and_objects(bucket, args.force))
    return EXIT_OK


# Multipart uploads

def parse_part_files(values: list[str]) -> dict[int, str]:
    """Turn ["1", "a.bin", "2", "b.bin"] into {1: "a.bin", 2: "b.bin"}.

    Raises:
        InvalidArgument: On an odd count, a non-integer or repeated part.
    """
    if not values or len(values) % 2:
        raise InvalidArgument("expected <part-num> <file> pairs")

    parts: dict[int, str] = {}
    for number_text, path in zip(values[::2], values[1::2]):
        try:
            number = int(number_text)
        except ValueError:
            raise InvalidArgument(f"invalid part number: {number_text!r}") from None
        if number in parts:
            raise InvalidArgument(f"duplicate part number: {number}")
        parts[number] = path
    return parts


def retry_failed_parts(
    coordinator: MultipartUploadCoordinator,
    session: MultipartUploadSession,
    parts: dict[int, str],
    results: list[PartResult],
    attempts: int,
    delays: tuple = PART_RETRY_DELAYS,
) -> list[PartResult]:
    """Re-submit parts whose failure looks transient, one part at a time.

    Returns:
        The results with retried parts replaced by their latest outcome.
    """
    updated = []
    for result in results:
        if result.ok or not is_retryable_error(result.error):
            updated.append(result)
            continue

        number = result.part_number
        logger.info("retrying part %d", number)
        try:
            etag = retry_with_backoff(
                coordinator.upload_part,
                max_attempts=attempts,
                delays=delays,
                args=(session, number, parts[number]),
            )
        except RetryExhausted as e:
            updated.append(PartResult(number, error=e.last_error))
        except PartUploadFailed as e:
            updated.append(PartResult(number, error=e))
        else:
            updated.append(PartResult(number, etag=etag))
    return updated


def _session(target: str, upload_id: str) -> MultipartUploadSession:
    bucket, key = split_bucket_key(target)
    return MultipartUploadSession(bucket, key, upload_id)


def cmd_mpu_create(args: argparse.Namespace, ctx: CommandContext) -> int:
    bucket, key = split_bucket_key(args.target)
    if ctx.config.presign:
        ctx.writer.print_url(ctx.operations.send("create_multipart_upload", Bucket=bucket, Key=key))
        return EXIT_OK

    session = MultipartUploadCoordinator(ctx.s3_client).create(bucket, key)
    ctx.writer.print_upload_session(session)
    return EXIT_OK


def cmd_mpu_upload(args: argparse.Namespace, ctx: CommandContext) -> int:
    parts = parse_part_files(args.parts)
    session = _session(args.target, args.upload_id)
    coordinator = MultipartUploadCoordinator(ctx.s3_client, max_workers=args.workers)

    results = coordinator.dispatch(session, parts)
    if args.retries > 0:
        results = retry_failed_parts(coordinator, session, parts, results, args.retries)

    ctx.writer.print_part_results(results)
    return EXIT_OK if all(result.ok for result in results) else EXIT_FAILED


def cmd_mpu_abort(args: argparse.Namespace, ctx: CommandContext) -> int:
    session = _session(args.target, args.upload_id)
    if ctx.config.presign:
        ctx.writer.print_url(ctx.operations.send(
            "abort_multipart_upload",
            Bucket=session.bucket, Key=session.key, UploadId=session.upload_id,
        ))
        return EXIT_OK

    result = MultipartUploadCoordinator(ctx.s3_client).abort(session)
    ctx.writer.print_result(result, ctx.writer.print_response)
    return EXIT_OK


def cmd_mpu_list(args: argparse.Namespace, ctx: CommandContext) -> int:
    bucket, prefix = split_bucket_key(args.target)
    if ctx.config.presign:
        params = {"Bucket": bucket}
        if prefix:
            params["Prefix"] = prefix
        ctx.writer.print_url(ctx.operations.send("list_multipart_uploads", **params))
        return EXIT_OK

    result = MultipartUploadCoordinator(ctx.s3_client).list_uploads(bucket, prefix)
    ctx.writer.print_result(result, ctx.writer.print_response)
    return EXIT_OK


def cmd_mpu_complete(args: argparse.Namespace, ctx: CommandContext) -> int:
    session = _session(args.target, args.upload_id)
    result = MultipartUploadCoordinator(ctx.s3_client).complete(session, args.etags)
    ctx.writer.print_result(result, ctx.writer.print_response)
    return EXIT_OK


# Argument parsing

def _global_options() -> argparse.ArgumentParser:
    """Options accepted before or after any sub-command.

    Every parser gets its own instance. Defaults are suppressed and set
    only on the top-level parser's copy, so a sub-parser never writes a
    default over a value given before the sub-command.
    """
    common = argparse.ArgumentParser(add_help=False)
    suppress = argparse.SUPPRESS
    common.add_argument("--debug", action="store_true", default=suppress, help="print debug log")
    common.add_argument("-v", "--verbose", action="store_true", default=suppress, help="verbose output")
    common.add_argument("--presign", action="store_true", default=suppress, help="presign URL and exit")
    common.add_argument("--expire", default=suppress, metavar="DURATION",
                        help=f"presign URL expiration (default: {DEFAULT_EXPIRY})")
    common.add_argument("-e", "--endpoint", default=suppress, help="S3 endpoint (http://host:port)")
    common.add_argument("-p", "--profile", default=suppress, help="profile in credentials file")
    common.add_argument("-R", "--region", default=suppress, help=f"region (default: {DEFAULT_REGION})")
    common.add_argument("--ak", default=suppress, help="access key")
    common.add_argument("--sk", default=suppress, help="secret key")
    return common


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="s3cli",
        description="S3 command-line tool",
        epilog=(
            "Endpoint is read from S3_ENDPOINT when -e is not set. Credentials are read "
            "from AWS_ACCESS_KEY_ID/AWS_ACCESS_KEY and AWS_SECRET_ACCESS_KEY/AWS_SECRET_KEY "
            "when neither --ak/--sk nor -p is set."
        ),
        parents=[_global_options()],
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.set_defaults(
        debug=False, verbose=False, presign=False, expire=DEFAULT_EXPIRY,
        endpoint=None, profile=None, region=DEFAULT_REGION, ak=None, sk=None,
    )
    commands = parser.add_subparsers(dest="command", metavar="<command>", required=True)

    def leaf(group, name: str, aliases: list[str], help_text: str, handler: Handler):
        sub = group.add_parser(name, aliases=aliases, help=help_text, parents=[_global_options()])
        sub.set_defaults(handler=handler)
        return sub

    # presign
    sub = leaf(commands, "presign", ["ps"], "presign (v2) URL", cmd_presign)
    sub.add_argument("target", metavar="<bucket/key | URL>")
    sub.add_argument("-X", "--method", default=HttpMethod.GET.value, help="http method")
    sub.add_argument("-T", "--content-type", default="", help="http content-type")
    sub.add_argument("--raw", action="store_true",
                     help="sign the raw (unescaped) key; spaces and other bytes not "
                          "allowed in URLs are still percent-encoded in the output")

    # bucket
    bucket = commands.add_parser(
        "bucket", aliases=["b"], help="bucket sub-command", parents=[_global_options()]
    )
    buckets = bucket.add_subparsers(dest="bucket_command", metavar="<command>", required=True)

    sub = leaf(buckets, "create", ["c"], "create Bucket(s)", cmd_bucket_create)
    sub.add_argument("buckets", nargs="+", metavar="bucket")
    leaf(buckets, "list", ["ls"], "list Buckets", cmd_bucket_list)
    sub = leaf(buckets, "head", ["h"], "head Bucket", cmd_bucket_head)
    sub.add_argument("bucket")
    sub = leaf(buckets, "acl", [], "get/set Bucket ACL", cmd_bucket_acl)
    sub.add_argument("bucket")
    sub.add_argument("acl", nargs="?", help=", ".join(a.value for a in BucketCannedACL))
    sub = leaf(buckets, "policy", ["p"], "get/set Bucket Policy", cmd_bucket_policy)
    sub.add_argument("bucket")
    sub.add_argument("policy", nargs="?", help="policy JSON")
    sub = leaf(buckets, "version", ["v"], "get/set Bucket versioning", cmd_bucket_version)
    sub.add_argument("bucket")
    sub.add_argument("status", nargs="?", help=", ".join(s.value for s in VersioningStatus))
    sub = leaf(buckets, "delete", ["d"], "delete Bucket", cmd_bucket_delete)
    sub.add_argument("bucket")

    # objects
    sub = leaf(commands, "put", ["up", "upload"], "put Object(s)", cmd_put)
    sub.add_argument("target", metavar="bucket[/key]")
    sub.add_argument("files", nargs="*", metavar="local-file")

    sub = leaf(commands, "head", [], "head Bucket/Object", cmd_head)
    sub.add_argument("target", metavar="bucket[/key]")
    sub.add_argument("--mtime", action="store_true", help="show Object mtime")
    sub.add_argument("--mtimestamp", action="store_true", help="show Object mtimestamp")

    sub = leaf(commands, "acl", [], "get/set Bucket/Object ACL", cmd_acl)
    sub.add_argument("target", metavar="bucket[/key]")
    sub.add_argument("acl", nargs="?", help=", ".join(a.value for a in ObjectCannedACL))

    sub = leaf(commands, "list", ["ls"], "list Buckets or Bucket", cmd_list)
    sub.add_argument("target", nargs="?", metavar="bucket[/prefix]")
    sub.add_argument("-m", "--marker", default="", help="marker")
    sub.add_argument("-M", "--maxkeys", type=int, default=1000, help="max keys")
    sub.add_argument("-d", "--delimiter", default="", help="Object delimiter")
    sub.add_argument("-i", "--index", action="store_true", help="show Object index")
    sub.add_argument("-a", "--all", action="store_true", help="list all Objects")

    sub = leaf(commands, "listVersion", ["lv"], "list Object versions", cmd_list_versions)
    sub.add_argument("target", metavar="bucket[/prefix]")

    sub = leaf(commands, "get", ["download", "down"], "get Object", cmd_get)
    sub.add_argument("target", metavar="bucket/key")
    sub.add_argument("destination", nargs="?")
    sub.add_argument("-r", "--range", default="", help="byte range, 0-64 means [0, 64]")
    sub.add_argument("--version", dest="version", default="", help="Object version ID")
    sub.add_argument("-w", "--overwrite", action="store_true", help="overwrite file if exist")

    sub = leaf(commands, "cat", [], "cat Object", cmd_cat)
    sub.add_argument("target", metavar="bucket/key")
    sub.add_argument("-r", "--range", default="", help="byte range, 0-64 means [0, 64]")
    sub.add_argument("--version", dest="version", default="", help="Object version ID")

    sub = leaf(commands, "copy", ["cp"], "copy Object", cmd_copy)
    sub.add_argument("source", metavar="bucket/key")
    sub.add_argument("destination", metavar="bucket[/key]")

    sub = leaf(commands, "delete", ["del", "rm"], "delete Object or Bucket", cmd_delete)
    sub.add_argument("target", metavar="bucket[/key]")
    sub.add_argument("--force", action="store_true", help="delete Bucket and all Objects")
    sub.add_argument("--version", dest="version", default="", help="Object version ID to delete")
    sub.add_argument("-x", "--prefix", action="store_true",
                     help="delete Objects starting with the given prefix")

    # mpu
    mpu = commands.add_parser(
        "mpu", help="multipart upload sub-command", parents=[_global_options()]
    )
    mpus = mpu.add_subparsers(dest="mpu_command", metavar="<command>", required=True)

    sub = leaf(mpus, "create", ["c"], "create a multipart upload", cmd_mpu_create)
    sub.add_argument("target", metavar="bucket/key")

    sub = leaf(mpus, "upload", ["put", "up"], "upload multipart parts", cmd_mpu_upload)
    sub.add_argument("target", metavar="bucket/key")
    sub.add_argument("upload_id", metavar="upload-id")
    sub.add_argument("parts", nargs="+", metavar="<part-num> <file>")
    sub.add_argument("--workers", type=int, default=None,
                     help="max concurrent part uploads (default: one per part)")
    sub.add_argument("--retries", type=int, default=0,
                     help="re-submit transiently failed parts up to N times")

    sub = leaf(mpus, "abort", ["a"], "abort a multipart upload", cmd_mpu_abort)
    sub.add_argument("target", metavar="bucket/key")
    sub.add_argument("upload_id", metavar="upload-id")

    sub = leaf(mpus, "list", ["ls"], "list multipart uploads", cmd_mpu_list)
    sub.add_argument("target", metavar="bucket[/prefix]")

    sub = leaf(mpus, "complete", ["cl"], "complete a multipart upload", cmd_mpu_complete)
    sub.add_argument("target", metavar="bucket/key")
    sub.add_argument("upload_id", metavar="upload-id")
    sub.add_argument("etags", nargs="+", metavar="part-etag")

    return parser


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    return build_parser().parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code: 0 for success, 1 for a failed operation, 2 for
        configuration errors
    """
    args = parse_args(argv)
    writer = ConsoleWriter(verbose=args.verbose)

    try:
        config = load_config(
            endpoint=args.endpoint,
            access_key=args.ak,
            secret_key=args.sk,
            profile=args.profile,
            region=args.region,
            presign=args.presign,
            expire=args.expire,
            verbose=args.verbose,
            debug=args.debug,
        )
        configure_logging(config.debug)
        session = build_session(config)
        s3_client = build_s3_client(config, session)
    except (ConfigError, InvalidEndpoint) as e:
        writer.print_error(f"Configuration error: {e}")
        return EXIT_CONFIG

    ctx = CommandContext(config=config, session=session, s3_client=s3_client, writer=writer)

    try:
        return args.handler(args, ctx)
    except (S3CliError, ClientError, BotoCoreError, OSError) as e:
        writer.print_error(f"{args.command} failed: {e}")
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
