"""Downloader strategies, one per supported hosting scheme.

Re-invocation policy: deterministic overwrite. Every exported entry
replaces the same-named entry under the destination directory, so fetching
unchanged remote content twice leaves byte-identical files behind. Entries
the remote no longer has are left in place.
"""

from __future__ import annotations

import logging
import re
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable
from urllib.parse import unquote, urlsplit

import httpx
from git import GitError, Repo

from sc_component_manager.entities.results import ErrorKind, Result

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger(__name__)

CloneFn = Callable[..., Any]


@runtime_checkable
class Downloader(Protocol):
    """Protocol for hosting-scheme download strategies."""

    def resolve_url(self, address_url: str, target_file: str | None = None) -> str:
        """Build the URL to fetch, appending target_file the scheme's way."""
        ...

    def download(
        self, source_url: str, dest_dir: Path, filename: str | None = None
    ) -> Result[Path]:
        """Fetch source_url under dest_dir, creating it if needed.

        A single fetched file is saved as filename when given.
        """
        ...


def _download_failed(source_url: str, cause: object) -> Result[Path]:
    logger.error("Download of %s failed: %s", source_url, cause)
    return Result.failure(
        ErrorKind.DOWNLOAD_FAILED,
        f"Failed to download {source_url}: {cause}",
        url=source_url,
        cause=str(cause),
    )


def _replace(src: Path, dst: Path) -> None:
    """Copy src over dst, removing whatever dst held before."""
    if dst.is_dir() and not dst.is_symlink():
        shutil.rmtree(dst)
    elif dst.exists() or dst.is_symlink():
        dst.unlink()
    if src.is_dir() and not src.is_symlink():
        shutil.copytree(src, dst, symlinks=True)
    else:
        shutil.copy2(src, dst, follow_symlinks=False)


_GITHUB_URL = re.compile(
    r"^(?:https?://)?(?:www\.)?github\.com/"
    r"(?P<owner>[^/]+)/(?P<repo>[^/]+?)(?:\.git)?(?:/(?P<path>.*?))?/?$"
)


def parse_github_url(url: str) -> tuple[str, str | None, str]:
    """Split a GitHub URL into clone URL, branch and subtree path.

    Handles:
    - https://github.com/owner/repo
    - https://github.com/owner/repo.git
    - https://github.com/owner/repo/path/to/file
    - https://github.com/owner/repo/tree/<branch>/path (also ``blob``)
    - https://github.com/owner/repo/trunk/path (svn-style, default branch)

    Returns:
        Tuple of (clone_url, branch or None for the default, subpath).

    Raises:
        ValueError: If the URL is not a GitHub repository URL.
    """
    match = _GITHUB_URL.match(url.strip())
    if not match:
        msg = f"Could not parse GitHub URL: {url}"
        raise ValueError(msg)

    owner, repo = match.group("owner"), match.group("repo")
    parts = [p for p in (match.group("path") or "").split("/") if p]

    branch: str | None = None
    if len(parts) >= 2 and parts[0] in ("tree", "blob"):
        branch = parts[1]
        parts = parts[2:]
    elif parts and parts[0] == "trunk":
        parts = parts[1:]

    return f"https://github.com/{owner}/{repo}.git", branch, "/".join(parts)


class GitHubDownloader:
    """Source-control export of a repository subtree hosted on GitHub.

    Shallow-clones the repository into a temporary directory and exports
    either one file, one directory's contents, or the whole work tree
    (without ``.git``) into the destination.
    """

    def __init__(self, depth: int = 1, clone_fn: CloneFn | None = None) -> None:
        self._depth = depth
        self._clone_fn: CloneFn = clone_fn or Repo.clone_from

    def resolve_url(self, address_url: str, target_file: str | None = None) -> str:
        if not target_file:
            return address_url
        return f"{address_url.rstrip('/')}/{target_file}"

    def download(
        self, source_url: str, dest_dir: Path, filename: str | None = None
    ) -> Result[Path]:
        try:
            clone_url, branch, subpath = parse_github_url(source_url)
        except ValueError as e:
            return _download_failed(source_url, e)

        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return _download_failed(source_url, e)

        clone_kwargs: dict[str, Any] = {"depth": self._depth}
        if branch:
            clone_kwargs["branch"] = branch

        with tempfile.TemporaryDirectory() as tmpdir:
            checkout = Path(tmpdir) / "checkout"
            try:
                logger.info("Cloning %s into %s", clone_url, checkout)
                self._clone_fn(clone_url, checkout, **clone_kwargs)
            except (GitError, OSError) as e:
                return _download_failed(source_url, e)

            source = checkout / subpath if subpath else checkout
            if not source.exists():
                return _download_failed(source_url, f"'{subpath}' not found in {clone_url}")

            try:
                exported = self._export(source, dest_dir, filename)
            except (OSError, shutil.Error) as e:
                return _download_failed(source_url, e)

        logger.info("Exported %s to %s", source_url, exported)
        return Result.success(exported)

    @staticmethod
    def _export(source: Path, dest_dir: Path, filename: str | None = None) -> Path:
        if source.is_file():
            target = dest_dir / (filename or source.name)
            _replace(source, target)
            return target
        for entry in sorted(source.iterdir()):
            if entry.name == ".git":
                continue
            _replace(entry, dest_dir / entry.name)
        return dest_dir


_CONTENT_DISPOSITION_FILENAME = re.compile(
    r"filename\*=(?:UTF-8'')?(?P<extended>[^;]+)|filename=\"?(?P<plain>[^\";]+)\"?",
    re.IGNORECASE,
)


class HttpDownloader:
    """Fetches a single file over HTTP(S) into the destination directory.

    The body is streamed to disk in chunks.
    """

    CHUNK_SIZE = 64 * 1024

    def __init__(
        self,
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport

    def resolve_url(self, address_url: str, target_file: str | None = None) -> str:
        if not target_file:
            return address_url
        return f"{address_url.rstrip('/')}/{target_file}"

    def download(
        self, source_url: str, dest_dir: Path, filename: str | None = None
    ) -> Result[Path]:
        written = 0
        try:
            dest_dir.mkdir(parents=True, exist_ok=True)
            with self._client() as client, self._open(client, source_url) as response:
                response.raise_for_status()
                problem = self._reject(response)
                if problem is not None:
                    return _download_failed(source_url, problem)
                target = dest_dir / (filename or self._filename(response, source_url))
                with target.open("wb") as f:
                    for chunk in response.iter_bytes(self.CHUNK_SIZE):
                        f.write(chunk)
                        written += len(chunk)
        except (httpx.HTTPError, OSError) as e:
            return _download_failed(source_url, e)

        logger.info("Fetched %s to %s (%d bytes)", source_url, target, written)
        return Result.success(target)

    def _client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self._timeout,
            follow_redirects=True,
            transport=self._transport,
        )

    @contextmanager
    def _open(self, client: httpx.Client, url: str) -> Iterator[httpx.Response]:
        with client.stream("GET", url) as response:
            yield response

    def _reject(self, response: httpx.Response) -> str | None:
        """Return why a successful response is not the wanted file, if it isn't."""
        return None

    def _default_filename(self, source_url: str) -> str:
        name = Path(unquote(urlsplit(source_url).path)).name
        return name or "download"

    def _filename(self, response: httpx.Response, source_url: str) -> str:
        disposition = response.headers.get("content-disposition", "")
        match = _CONTENT_DISPOSITION_FILENAME.search(disposition)
        if match:
            raw = match.group("extended") or match.group("plain")
            # Path(...).name keeps the file inside dest_dir
            name = Path(unquote(raw.strip())).name
            if name:
                return name
        return self._default_filename(source_url)


_DRIVE_FILE_ID_PATTERNS = (
    re.compile(r"/file/d/(?P<id>[\w-]+)"),
    re.compile(r"[?&]id=(?P<id>[\w-]+)"),
)
_DRIVE_CONFIRM_TOKEN = re.compile(r"confirm=(?P<token>[0-9A-Za-z_-]+)")


def extract_drive_file_id(url: str) -> str | None:
    """Return the Google Drive file id from a share or download link."""
    for pattern in _DRIVE_FILE_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group("id")
    return None


def _is_html(response: httpx.Response) -> bool:
    return "text/html" in response.headers.get("content-type", "")


class GoogleDriveDownloader(HttpDownloader):
    """Cloud-drive fetch of a single shared Google Drive file.

    Drive links address one file, so ``resolve_url`` has no path to append
    ``target_file`` to; callers pass it to :meth:`download` as ``filename``
    instead. An HTML answer that is not a confirmation page (sign-in, access
    denied, quota exceeded) is a failed download.
    """

    DOWNLOAD_ENDPOINT = "https://drive.google.com/uc"

    def resolve_url(self, address_url: str, target_file: str | None = None) -> str:
        file_id = extract_drive_file_id(address_url)
        if file_id is None:
            return address_url
        return f"{self.DOWNLOAD_ENDPOINT}?export=download&id={file_id}"

    def download(
        self, source_url: str, dest_dir: Path, filename: str | None = None
    ) -> Result[Path]:
        if extract_drive_file_id(source_url) is None:
            return _download_failed(source_url, "no Google Drive file id in URL")
        return super().download(self.resolve_url(source_url), dest_dir, filename)

    @contextmanager
    def _open(self, client: httpx.Client, url: str) -> Iterator[httpx.Response]:
        with client.stream("GET", url) as response:
            if not _is_html(response):
                yield response
                return
            # Large files answer with a virus-scan warning page first
            response.read()
            token = next(self._confirm_tokens(response), None)
            if token is None:
                yield response
                return

        logger.debug("Confirming Google Drive download with token %s", token)
        with client.stream("GET", url, params={"confirm": token}) as confirmed:
            yield confirmed

    def _reject(self, response: httpx.Response) -> str | None:
        if _is_html(response):
            return "Google Drive returned an HTML page instead of file content"
        return None

    @staticmethod
    def _confirm_tokens(response: httpx.Response) -> Iterator[str]:
        for name, value in response.cookies.items():
            if name.startswith("download_warning"):
                yield value
        match = _DRIVE_CONFIRM_TOKEN.search(response.text)
        if match:
            yield match.group("token")

    def _default_filename(self, source_url: str) -> str:
        return extract_drive_file_id(source_url) or "download"
