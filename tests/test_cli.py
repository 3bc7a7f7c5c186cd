from __future__ import annotations

import json
from pathlib import Path

import pytest

from gnss_obs.cli import main


def test_estimate_writes_csv(tmp_path: Path) -> None:
    pd = pytest.importorskip("pandas")

    out = tmp_path / "estimates.csv"
    main(["estimate", "--mode", "double", "--csv", str(out)])

    frame = pd.read_csv(out)
    assert len(frame) > 0
    assert {"signal", "obs_type", "estimate", "meas_var"} <= set(frame.columns)


def test_estimate_with_config_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    pytest.importorskip("pandas")

    cfg = tmp_path / "estimator.json"
    cfg.write_text(json.dumps({"ionosphereModel": "None"}), encoding="utf-8")
    main(["estimate", "--config", str(cfg), "--pr-sigma", "1.0"])

    assert "Pseudorange" in capsys.readouterr().out


def test_error_budget_writes_png(tmp_path: Path) -> None:
    pytest.importorskip("matplotlib")

    out = tmp_path / "budget.png"
    main(["error-budget", "--cn0", "40", "--out", str(out)])

    assert out.exists()


def test_unknown_mode_is_rejected() -> None:
    with pytest.raises(SystemExit):
        main(["estimate", "--mode", "triple"])
