"""Console output using the Rich library.

Renders command results:
- Presigned URLs and plain listings (bucket names, object keys)
- A per-part table for multipart uploads
- Full response documents in verbose mode
"""

import datetime
from typing import Any, Callable, Iterable, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.pretty import Pretty
from rich.table import Table

from s3cli.models import MultipartUploadSession, PartResult


class ConsoleWriter:
    """Rich-based writer for command results.

    Args:
        verbose: Print whole response documents instead of summaries.
        console: Console for results (stdout by default).
        err_console: Console for errors (stderr by default).
    """

    def __init__(
        self,
        verbose: bool = False,
        console: Optional[Console] = None,
        err_console: Optional[Console] = None,
    ):
        # Use legacy_windows=True for ASCII-safe output on Windows consoles
        self.console = console or Console(legacy_windows=True)
        self.err_console = err_console or Console(stderr=True, legacy_windows=True)
        self.verbose = verbose

    def _plain(self, text: Any) -> None:
        # Bypasses rendering: URLs stay on one line and tabs are kept
        self.console.file.write(f"{text}\n")

    def print_url(self, url: str) -> None:
        self._plain(url)

    def print_response(self, response: dict) -> None:
        """Pretty-print a response document without transport metadata."""
        document = {k: v for k, v in response.items() if k != "ResponseMetadata"}
        if document:
            self.console.print(Pretty(document))

    def print_result(
        self,
        result: Any,
        render: Optional[Callable[[dict], None]] = None,
    ) -> None:
        """Print a presigned URL, a summary via render, or the whole response.

        Without a render function, responses are only shown in verbose mode.
        """
        if isinstance(result, str):
            self.print_url(result)
        elif self.verbose:
            self.print_response(result)
        elif render is not None:
            render(result)

    def print_lines(self, lines: Iterable[str], index: bool = False) -> None:
        for number, line in enumerate(lines):
            self._plain(f"{number}\t{line}" if index else line)

    def print_buckets(self, response: dict) -> None:
        self.print_lines(bucket["Name"] for bucket in response.get("Buckets", []))

    def print_objects(self, response: dict, index: bool = False) -> None:
        """Print common prefixes, then object keys."""
        self.print_lines(p["Prefix"] for p in response.get("CommonPrefixes", []))
        self.print_lines((obj["Key"] for obj in response.get("Contents", [])), index=index)

    def print_head_object(
        self,
        response: dict,
        mtime: bool = False,
        mtimestamp: bool = False,
    ) -> None:
        """Print size and mtime, or only the mtime when asked."""
        modified = response.get("LastModified")
        if mtime:
            self._plain(modified)
        elif mtimestamp:
            if isinstance(modified, datetime.datetime):
                self._plain(int(modified.timestamp()))
            else:
                self._plain(modified)
        else:
            self._plain(f"{response.get('ContentLength', 0)}\t{modified}")

    def print_value(self, value: Any) -> None:
        self._plain(value)

    def print_upload_session(self, session: MultipartUploadSession) -> None:
        self._plain(f"Bucket: {session.bucket}")
        self._plain(f"Key: {session.key}")
        self._plain(f"UploadId: {session.upload_id}")

    def print_part_results(self, results: list[PartResult]) -> None:
        """Print one row per part: number, status and ETag or error."""
        table = Table(
            show_header=True,
            header_style="bold magenta",
            border_style="dim",
            box=box.ASCII,
        )
        table.add_column("Part", justify="right", no_wrap=True)
        table.add_column("Status", justify="center", no_wrap=True)
        table.add_column("ETag / Error")

        for result in results:
            if result.ok:
                table.add_row(
                    str(result.part_number), "[green]OK[/green]", escape(str(result.etag))
                )
            else:
                cause = getattr(result.error, "cause", result.error)
                table.add_row(
                    str(result.part_number), "[red]FAIL[/red]", escape(str(cause))
                )

        self.console.print(table)

    def print_error(self, message: str) -> None:
        self.err_console.print(f"[red]{escape(message)}[/red]", highlight=False)
