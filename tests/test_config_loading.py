from __future__ import annotations

import json
from pathlib import Path

import pytest

from ordensity.config import load_json_config, load_ordensity_config
from ordensity.core.types import ORDensityConfig


def test_load_project_config():
    root = Path(__file__).resolve().parents[1]
    cfg = load_ordensity_config(root / "configs" / "ordensity_default.json")
    assert cfg == ORDensityConfig()
    assert cfg.n_folds == 10


def test_invalid_json_reports_line_and_column(tmp_path: Path):
    bad = tmp_path / "bad.json"
    bad.write_text('{"a": 1,}\n', encoding="utf-8")
    with pytest.raises(ValueError, match=r"line \d+, column \d+"):
        load_json_config(bad)


def test_non_object_json_config_rejected(tmp_path: Path):
    bad = tmp_path / "list.json"
    bad.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    with pytest.raises(ValueError, match="expected JSON object"):
        load_json_config(bad)


def test_non_json_extension_rejected(tmp_path: Path):
    bad = tmp_path / "cfg.yaml"
    bad.write_text("{}", encoding="utf-8")
    with pytest.raises(ValueError, match="Use a .json config file"):
        load_json_config(bad)


def test_missing_config_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_json_config(tmp_path / "absent.json")


def test_unknown_keys_rejected(tmp_path: Path):
    cfg_path = tmp_path / "cfg.json"
    cfg_path.write_text(json.dumps({"B": 20, "bootstrap": True}), encoding="utf-8")
    with pytest.raises(ValueError, match="Unknown ORdensity config keys"):
        load_ordensity_config(cfg_path)


def test_fold_defaults_to_tenth_of_replicates():
    assert ORDensityConfig(B=20).n_folds == 2
    assert ORDensityConfig(B=5).n_folds == 1
    assert ORDensityConfig(B=20, fold=7).n_folds == 7
    assert ORDensityConfig(B=20).with_overrides(B=200).n_folds == 20
    assert ORDensityConfig(B=20, fold=7).with_overrides(B=200).n_folds == 7
    assert ORDensityConfig(B=20).to_dict()["fold"] == 2


def test_explicit_fold_survives_replicate_override():
    cfg = ORDensityConfig(B=100, fold=10).with_overrides(B=20)
    assert cfg.fold == 10
    assert cfg.n_folds == 10
    assert cfg.to_dict()["fold"] == 10


def test_project_config_fold_follows_replicate_override():
    root = Path(__file__).resolve().parents[1]
    cfg = load_ordensity_config(root / "configs" / "ordensity_default.json")
    assert cfg.fold is None
    assert cfg.with_overrides(B=30).n_folds == 3

    pinned = {**cfg.to_dict(), "probs": list(cfg.probs), "weights": list(cfg.weights)}
    assert ORDensityConfig.from_mapping(pinned).with_overrides(B=30).n_folds == 10


def test_config_validation():
    with pytest.raises(ValueError, match="probs and weights lengths"):
        ORDensityConfig(probs=(0.25, 0.75), weights=(1.0,))
    with pytest.raises(ValueError, match="ascending"):
        ORDensityConfig(probs=(0.75, 0.25), weights=(0.5, 0.5))
    with pytest.raises(ValueError, match="alpha"):
        ORDensityConfig(alpha=1.5)
    with pytest.raises(ValueError, match="B must be"):
        ORDensityConfig(B=0)
    with pytest.raises(ValueError, match="numneighbours"):
        ORDensityConfig(numneighbours=0)


def test_config_is_immutable_and_overrides_skip_none():
    cfg = ORDensityConfig()
    with pytest.raises(Exception):
        cfg.B = 3  # type: ignore[misc]
    assert cfg.with_overrides(alpha=None, seed=9).seed == 9
    assert cfg.with_overrides(alpha=None).alpha == 0.05
