import re
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from crdgen.extract import ExtractError, copy_file, extract, keep, main

MODULE = "github.com/example/provider@v1.0.0"
API_PATH = "apis/vault/v1alpha1"
FILES = {
    "zz_types.go": "package v1alpha1\n",
    "zz_secret.managed.go": "managed\n",
    "zz_groupversion_info.go": "gvi\n",
}
EXCLUDES = [r".*\.managed.go", r".*_terraformed.go"]


def _populate(root: Path) -> None:
    api = root / API_PATH
    api.mkdir(parents=True)
    for name, content in FILES.items():
        (api / name).write_text(content, encoding="utf-8")


def _go_fake(calls):
    def fake(cmd, **kwargs):
        calls.append(list(cmd))
        _populate(Path(kwargs["env"]["GOMODCACHE"]) / MODULE)
        return subprocess.CompletedProcess(cmd, 0, "", "")
    return fake


def _git_fake(calls):
    def fake(cmd, **kwargs):
        calls.append(list(cmd))
        if cmd[1] == "clone":
            _populate(Path(cmd[3]))
        return subprocess.CompletedProcess(cmd, 0, "", "")
    return fake


def test_keep_with_patterns():
    patterns = [re.compile(p) for p in EXCLUDES]
    assert keep("zz_types.go", patterns) is True
    assert keep("zz_secret.managed.go", patterns) is False
    assert keep("secret_terraformed.go", patterns) is False


def test_keep_without_excludes():
    assert keep("anything.go", []) is True


def test_keep_accepts_strings():
    assert keep("a.resolvers.go", [r".*\.resolvers.go"]) is False


def test_copy_file_round_trip(tmp_path):
    src = tmp_path / "src.bin"
    src.write_bytes(b"\x00\x01data")
    dst = tmp_path / "dst.bin"
    copy_file(src, dst)
    assert dst.read_bytes() == src.read_bytes()


def test_copy_file_missing_source(tmp_path):
    with pytest.raises(FileNotFoundError):
        copy_file(tmp_path / "missing", tmp_path / "dst")


def test_extract_with_go_mod(tmp_path):
    calls = []
    target = tmp_path / "out"
    with patch("crdgen.extract.subprocess.run", side_effect=_go_fake(calls)):
        copied = extract(MODULE, API_PATH, target, EXCLUDES)
    assert calls == [["go", "mod", "download", MODULE]]
    assert sorted(p.name for p in target.iterdir()) == ["zz_groupversion_info.go", "zz_types.go"]
    assert sorted(p.name for p in copied) == ["zz_groupversion_info.go", "zz_types.go"]
    assert (target / "zz_types.go").read_text(encoding="utf-8") == FILES["zz_types.go"]


def test_extract_with_git_checks_out_tag(tmp_path):
    calls = []
    target = tmp_path / "out"
    with patch("crdgen.extract.subprocess.run", side_effect=_git_fake(calls)):
        extract(MODULE, API_PATH, target, EXCLUDES, use_git=True)
    assert calls[0][:3] == ["git", "clone", "https://github.com/example/provider"]
    assert calls[1][-1] == "refs/tags/v1.0.0"
    assert (target / "zz_groupversion_info.go").read_text(encoding="utf-8") == "gvi\n"


def test_extract_clear_removes_stale_files(tmp_path):
    target = tmp_path / "out"
    target.mkdir()
    (target / "stale.go").write_text("", encoding="utf-8")
    with patch("crdgen.extract.subprocess.run", side_effect=_go_fake([])):
        extract(MODULE, API_PATH, target, EXCLUDES, clear=True)
    assert not (target / "stale.go").exists()
    assert (target / "zz_types.go").exists()


def test_extract_without_clear_keeps_existing(tmp_path):
    target = tmp_path / "out"
    target.mkdir()
    (target / "stale.go").write_text("", encoding="utf-8")
    with patch("crdgen.extract.subprocess.run", side_effect=_go_fake([])):
        extract(MODULE, API_PATH, target, EXCLUDES)
    assert (target / "stale.go").exists()


def test_extract_missing_api_path(tmp_path):
    with patch("crdgen.extract.subprocess.run", side_effect=_go_fake([])):
        with pytest.raises(ExtractError, match="failed to read api path"):
            extract(MODULE, "apis/none", tmp_path / "out")


def test_extract_download_failure(tmp_path):
    def fail(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 1, "out", "boom")

    with patch("crdgen.extract.subprocess.run", side_effect=fail):
        with pytest.raises(ExtractError, match="boom"):
            extract(MODULE, API_PATH, tmp_path / "out")


def test_extract_invalid_pattern(tmp_path):
    with pytest.raises(ExtractError):
        extract(MODULE, API_PATH, tmp_path / "out", ["("])


def test_main_requires_module():
    with pytest.raises(SystemExit) as info:
        main(["--path", API_PATH, "--target", "out"])
    assert info.value.code == 2


def test_main_success_with_comma_excludes(tmp_path):
    target = tmp_path / "out"
    with patch("crdgen.extract.subprocess.run", side_effect=_go_fake([])):
        code = main(
            ["-m", MODULE, "-p", API_PATH, "-t", str(target),
             "-e", r".*\.managed.go,.*_info.go"]
        )
    assert code == 0
    assert [p.name for p in target.iterdir()] == ["zz_types.go"]


def test_main_failure_returns_one(tmp_path):
    def fail(cmd, **kwargs):
        return subprocess.CompletedProcess(cmd, 1, "", "")

    with patch("crdgen.extract.subprocess.run", side_effect=fail):
        code = main(["-m", MODULE, "-p", API_PATH, "-t", str(tmp_path / "out")])
    assert code == 1