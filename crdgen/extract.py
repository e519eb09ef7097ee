"""Copy API source files out of a Go module fetched with git or go mod download."""

from __future__ import annotations

import argparse
import logging
import os
import re
import shutil
import stat
import subprocess
import tempfile
from collections.abc import Iterable, Sequence
from pathlib import Path

log = logging.getLogger(__name__)


class ExtractError(Exception):
    """Raised when the module cannot be fetched or its files cannot be copied."""


def keep(name: str, excludes: Iterable[re.Pattern[str] | str]) -> bool:
    """Return True unless the name matches one of the exclude patterns."""
    return not any(re.search(pattern, name) for pattern in excludes)


def copy_file(src: str | Path, dst: str | Path) -> None:
    """Copy the content of one file to another."""
    log.info("Copy file from=%s to=%s", src, dst)
    Path(dst).write_bytes(Path(src).read_bytes())


def _run(cmd: Sequence[str], what: str, env: dict[str, str] | None = None) -> None:
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, env=env, check=False)
    except OSError as exc:
        raise ExtractError(f"failed to {what}: {exc}") from exc
    log.debug("%s output: %s", cmd[0], result.stdout)
    if result.returncode != 0:
        raise ExtractError(
            f"failed to {what}: exit status {result.returncode}\n"
            f"stdout: {result.stdout}\nstderr: {result.stderr}"
        )


def _make_writable(root: Path) -> None:
    try:
        for dirpath, dirnames, filenames in os.walk(root):
            for name in [dirpath, *(os.path.join(dirpath, n) for n in dirnames + filenames)]:
                mode = os.lstat(name).st_mode
                if not stat.S_ISLNK(mode):
                    os.chmod(name, mode | stat.S_IWUSR)
    except OSError as exc:
        raise ExtractError(f"failed to set permissions: {exc}") from exc


def _fetch_with_git(module: str, tmp: Path) -> Path:
    repo, _, tag = module.partition("@")
    log.info("Cloning module module=%s tmp=%s", module, tmp)
    _run(["git", "clone", "https://" + repo, str(tmp)], "clone module")
    if tag:
        _run(["git", "-C", str(tmp), "checkout", f"refs/tags/{tag}"], f"checkout tag {tag}")
    return tmp


def _fetch_with_go(module: str, tmp: Path) -> Path:
    log.info("Downloading module=%s tmp=%s", module, tmp)
    env = {**os.environ, "GOMODCACHE": str(tmp)}
    _run(["go", "mod", "download", module], "download module", env=env)
    _make_writable(tmp)
    return tmp / module


def extract(
    module: str,
    path: str,
    target: str | Path,
    excludes: Iterable[str] = (),
    clear: bool = False,
    use_git: bool = False,
) -> list[Path]:
    """Fetch a module and copy the files under path that no exclude matches into target."""
    try:
        patterns = [re.compile(p) for p in excludes]
    except re.error as exc:
        raise ExtractError(f"invalid exclude pattern: {exc}") from exc

    target = Path(target)
    log.info(
        "extract-crd-api target=%s path=%s module=%s clear=%s use-git=%s",
        target, path, module, clear, use_git,
    )

    copied: list[Path] = []
    with tempfile.TemporaryDirectory(prefix="extract-crd-api", ignore_cleanup_errors=True) as tmp:
        tmp_dir = Path(tmp)
        module_root = (
            _fetch_with_git(module, tmp_dir) if use_git else _fetch_with_go(module, tmp_dir)
        )
        log.info("Module downloaded successfully!")

        api_path = module_root / path
        try:
            entries = sorted(api_path.iterdir(), key=lambda p: p.name)
        except OSError as exc:
            raise ExtractError(f"failed to read api path {api_path}: {exc}") from exc

        if clear:
            shutil.rmtree(target, ignore_errors=True)
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ExtractError(f"failed to create target dir {target}: {exc}") from exc

        for entry in entries:
            if keep(entry.name, patterns):
                dst = target / entry.name
                try:
                    copy_file(entry, dst)
                except OSError as exc:
                    raise ExtractError(f"failed to copy file {entry.name}: {exc}") from exc
                copied.append(dst)
    return copied


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="extract-crd-api", description="Extract CRD API files from a Go module"
    )
    parser.add_argument("-e", "--exclude", action="append", default=[],
                        help="Regex pattern for file excludes")
    parser.add_argument("-m", "--module", required=True,
                        help="The go module to get the api files from")
    parser.add_argument("-p", "--path", required=True,
                        help="The path within the module to the api files")
    parser.add_argument("-t", "--target", required=True,
                        help="The target directory to copy the files to")
    parser.add_argument("-c", "--clear", action="store_true", help="Clear target dir")
    parser.add_argument("-g", "--use-git", action="store_true",
                        help="Use git instead of go mod (if module is not properly versioned)")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the extract-crd-api command."""
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    excludes = [p for value in args.exclude for p in value.split(",") if p]
    try:
        extract(args.module, args.path, args.target, excludes, args.clear, args.use_git)
    except ExtractError as exc:
        log.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())