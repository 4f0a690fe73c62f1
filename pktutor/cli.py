import argparse
import logging
from typing import List, Optional

import numpy as np

from .auc import profile_auc
from .config import settings
from .data import handle_blq, read_warfarin, wrangle
from .errors import SimulationError
from .nca import nca_by_subject
from .regimen import Regimen
from .simulate import WarfarinParameters, add_residual_error, simulate_population, simulate_regimen

LOGGER = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="pktutor - PK data, NCA and warfarin PK/PD simulation")
    parser.add_argument("--log-level", default=settings.log_level, help="Logging level")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_auc = sub.add_parser("auc", help="Trapezoidal AUC of one profile")
    p_auc.add_argument("--times", nargs="+", type=float, required=True, help="Sample times (h)")
    p_auc.add_argument("--obs", nargs="+", type=float, required=True, help="Observations")

    p_wr = sub.add_parser("wrangle", help="Read and reshape the warfarin dataset")
    p_wr.add_argument("--csv", type=str, default=settings.data_path, help="Input CSV")
    p_wr.add_argument("--out", type=str, default="warfarin_wide.csv", help="Output CSV path")

    p_nca = sub.add_parser("nca", help="Per-subject NCA of the warfarin dataset")
    p_nca.add_argument("--csv", type=str, default=settings.data_path, help="Input CSV")
    p_nca.add_argument("--out", type=str, default="nca.csv", help="Output CSV path")
    p_nca.add_argument("--lloq", type=float, default=settings.lloq, help="Lower limit of quantification (mg/L)")
    p_nca.add_argument("--blq", choices=["discard", "drop", "lloq"], default="discard", help="BLQ handling")
    p_nca.add_argument("--terminal-points", type=int, default=3, help="Points used for lambda_z")

    p_sim = sub.add_parser("simulate", help="Warfarin PK/PD simulation")
    p_sim.add_argument("--dose", type=float, required=True, help="Dose amount (mg)")
    p_sim.add_argument("--every", type=float, default=24.0, help="Dosing interval (h)")
    p_sim.add_argument("--n", type=int, default=1, help="Number of doses")
    p_sim.add_argument("--route", choices=["iv", "oral"], default="oral", help="Dosing route")
    p_sim.add_argument("--infusion", type=float, default=0.0, help="Infusion duration (h) if IV infusion")
    p_sim.add_argument("--end", type=float, default=144.0, help="End time (h)")
    p_sim.add_argument("--dt", type=float, default=0.5, help="Output grid spacing (h)")
    p_sim.add_argument("--weight", type=float, help="Body weight (kg) for allometric scaling")
    p_sim.add_argument("--subjects", type=int, default=1, help="Number of subjects (adds IIV when > 1)")
    p_sim.add_argument("--seed", type=int, help="Random seed for IIV")
    p_sim.add_argument("--residual-error", action="store_true", help="Add noisy conc_obs/pca_obs columns")
    p_sim.add_argument("--csv", type=str, default="simulation.csv", help="Output CSV path")
    return parser


def _run(args: argparse.Namespace) -> None:
    if args.cmd == "auc":
        print(f"{profile_auc(args.times, args.obs):.6f}")
        return

    if args.cmd == "wrangle":
        wide = wrangle(read_warfarin(args.csv))
        wide.to_csv(args.out, index=False)
        LOGGER.info("Wrote %d rows to %s", len(wide), args.out)
        return

    if args.cmd == "nca":
        wide = handle_blq(wrangle(read_warfarin(args.csv)), method=args.blq, lloq=args.lloq)
        table = nca_by_subject(wide, n_terminal=args.terminal_points)
        table.to_csv(args.out, index=False)
        LOGGER.info("Wrote NCA for %d subjects to %s", len(table), args.out)
        return

    if args.cmd == "simulate":
        regimen = Regimen.repeated(
            start=0.0,
            every=args.every,
            n=args.n,
            amount=args.dose,
            route=args.route,
            infusion_duration=(args.infusion if args.infusion > 0 else None),
        )
        params = WarfarinParameters()
        if args.subjects > 1:
            weights = [args.weight] * args.subjects if args.weight is not None else None
            result = simulate_population(
                params,
                regimen,
                n_subjects=args.subjects,
                t_end=args.end,
                dt=args.dt,
                weights=weights,
                seed=args.seed,
                simulate_error=args.residual_error,
            )
        else:
            if args.weight is not None:
                params = params.for_weight(args.weight)
            result = simulate_regimen(params, regimen, t_end=args.end, dt=args.dt)
            if args.residual_error:
                result = add_residual_error(result, np.random.default_rng(args.seed))
        result.to_csv(args.csv, index=False)
        LOGGER.info("Wrote %d rows to %s", len(result), args.csv)


def run_cli(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    try:
        _run(args)
    except (ValueError, FileNotFoundError, SimulationError) as exc:
        parser.error(str(exc))


if __name__ == "__main__":
    run_cli()
