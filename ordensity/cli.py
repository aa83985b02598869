"""Command-line interface for ORdensity runs."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Iterable

from ordensity._version import __version__
from ordensity.config import load_ordensity_config
from ordensity.core.types import ORDensityConfig, ORDensityResult
from ordensity.engine import compute_ordensity
from ordensity.pipeline_utils import close_logger, setup_logger
from ordensity.reporting import cluster_labels, preclustered_data
from ordensity.utils import ensure_dir, read_expression_table


def _outputs_root(outdir: str) -> Path:
    return Path(outdir) / "outputs"


def _figure_dir(outdir: str) -> Path:
    return _outputs_root(outdir) / "figures"


def _table_dir(outdir: str) -> Path:
    return _outputs_root(outdir) / "tables"


def _str2bool(value: str) -> bool:
    lowered = str(value).strip().lower()
    if lowered in {"1", "true", "yes", "y"}:
        return True
    if lowered in {"0", "false", "no", "n"}:
        return False
    raise argparse.ArgumentTypeError(f"Expected a boolean value, got '{value}'.")


def _float_list(value: str) -> tuple[float, ...]:
    try:
        return tuple(float(x) for x in value.split(",") if x.strip() != "")
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected comma-separated numbers, got '{value}'.") from exc


def _build_run_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="ORdensity differential expression run")
    parser.add_argument("--cond1", required=True, help="CSV (genes x samples) for condition 1")
    parser.add_argument("--cond2", required=True, help="CSV (genes x samples) for condition 2")
    parser.add_argument("--config", default=None, help="Optional JSON config file")
    parser.add_argument("--outdir", default=".", help="Output directory root")
    parser.add_argument("--B", dest="B", type=int, default=None, help="Number of permutations")
    parser.add_argument("--alpha", type=float, default=None, help="Significance level")
    parser.add_argument("--fold", type=int, default=None, help="Number of fold partitions")
    parser.add_argument("--numneighbours", type=int, default=None, help="Nearest neighbours K")
    parser.add_argument("--numclustoseek", type=int, default=None, help="Largest k tried")
    parser.add_argument("--probs", type=_float_list, default=None, help="e.g. 0.25,0.5,0.75")
    parser.add_argument("--weights", type=_float_list, default=None, help="e.g. 0.25,0.5,0.25")
    parser.add_argument("--scale", type=_str2bool, default=None, help="Scale differences")
    parser.add_argument("--parallel", type=_str2bool, default=None, help="Parallel replicates")
    parser.add_argument("--nprocs", type=int, default=None, help="Workers (0 = all)")
    parser.add_argument("--replicable", type=_str2bool, default=None, help="Fixed seed")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument(
        "--numclusters", type=int, default=None, help="Cluster count (default: silhouette)"
    )
    parser.add_argument("--plot", action="store_true", help="Write the OR vs FP figure")
    return parser


def _config_from_args(args: argparse.Namespace) -> ORDensityConfig:
    base = load_ordensity_config(args.config) if args.config else ORDensityConfig()
    return base.with_overrides(
        B=args.B,
        alpha=args.alpha,
        fold=args.fold,
        numneighbours=args.numneighbours,
        numclustoseek=args.numclustoseek,
        probs=args.probs,
        weights=args.weights,
        scale=args.scale,
        parallel=args.parallel,
        nprocs=args.nprocs,
        replicable=args.replicable,
        seed=args.seed,
    )


def _run_manifest(result: ORDensityResult, args: argparse.Namespace, k: int) -> dict[str, Any]:
    meta = {key: val for key, val in result.metadata.items() if key != "observed_OR"}
    config = dict(meta.pop("config"))
    config["probs"] = list(config["probs"])
    config["weights"] = list(config["weights"])
    return {
        "version": __version__,
        "cond1": str(args.cond1),
        "cond2": str(args.cond2),
        "config": config,
        "n_candidates": int(result.n_candidates),
        "n_exceedances": int(result.n_exceedances),
        "cut_point": float(result.cut_point),
        "p0": float(result.p0),
        "numneighbours": int(result.numneighbours),
        "expectedFalsePositiveNeighbours": float(result.expected_false_positives),
        "numclusters": int(k),
        **meta,
    }


def run_main(argv: Iterable[str] | None = None) -> int:
    """Run ORdensity on two CSV condition matrices.

    Args:
        argv: Command-line arguments (if None, uses sys.argv).

    Returns:
        Exit code (0 for success).
    """
    args = _build_run_parser().parse_args(list(argv) if argv is not None else None)
    config = _config_from_args(args)
    logger = setup_logger(_outputs_root(args.outdir) / "logs" / "ordensity.log", "ordensity")
    try:
        cond1 = read_expression_table(args.cond1)
        cond2 = read_expression_table(args.cond2)
        if not cond1.index.equals(cond2.index):
            logger.warning("Gene ids differ between conditions; rows are matched by position.")
        logger.info(
            "Loaded %d genes, %d + %d samples.", cond1.shape[0], cond1.shape[1], cond2.shape[1]
        )
        result = compute_ordensity(cond1, cond2, config, logger=logger)

        table_dir = _table_dir(args.outdir)
        ensure_dir(table_dir.as_posix())
        result.summary.to_csv(table_dir / "ordensity_summary.csv", index=False)
        precl = preclustered_data(result)
        labels, k = cluster_labels(result, args.numclusters)
        precl["cluster"] = labels + 1
        precl.to_csv(table_dir / "ordensity_preclustered.csv", index=False)
        logger.info(
            "Clusters=%d; strong selection=%d genes; relaxed selection=%d genes.",
            k,
            int((precl["Strong"] == "S").sum()),
            int((precl["Relaxed"] == "R").sum()),
        )

        manifest = _run_manifest(result, args, k)
        if args.plot and len(result) > 0:
            from ordensity.plotting import (
                apply_plot_style,
                plot_candidates_to_file,
                plot_style_dict,
            )

            apply_plot_style()
            out_png = plot_candidates_to_file(
                result, _figure_dir(args.outdir) / "ordensity_candidates.png", numclusters=k
            )
            manifest["plot_style"] = plot_style_dict()
            logger.info("Figure written to %s", out_png.as_posix())

        manifest_path = _outputs_root(args.outdir) / "ordensity_run.json"
        with open(manifest_path, "w", encoding="utf-8") as fh:
            json.dump(manifest, fh, indent=2)
        logger.info("ORdensity run complete. Results in %s", table_dir.as_posix())
    finally:
        close_logger(logger)
    return 0


def main(argv: Iterable[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (if None, uses sys.argv).

    Returns:
        Exit code.
    """
    parser = argparse.ArgumentParser(description="ORdensity CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("run", help="Find potential DE genes between two conditions")

    args, remainder = parser.parse_known_args(list(argv) if argv is not None else None)
    if args.command == "run":
        return run_main(remainder)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
