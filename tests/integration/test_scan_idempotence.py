from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from dll_scan.cli import main

TARGET = "HDWA.AFS.Client.dll"


def test_repeated_scans_produce_identical_output(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    make_dll: Callable[..., bytes],
    write_zip: Callable[..., Path],
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.chdir(tmp_path)
    root = tmp_path / "tree"
    for name in ("zeta", "alpha", "mid/inner"):
        (root / name).mkdir(parents=True)
        (root / name / TARGET).write_bytes(make_dll(product_version=name))
    write_zip(
        root / "alpha" / "bundle.zip",
        {f"b/{TARGET}": make_dll(product_version="zb"), f"a/{TARGET}": make_dll()},
    )

    assert main([str(root)]) == 0
    first = capsys.readouterr().out
    assert main([str(root)]) == 0
    second = capsys.readouterr().out

    assert first == second
    assert len(first.splitlines()) == 6
