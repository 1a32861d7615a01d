"""
Command line entry point: ``regression-mle``.
"""

import argparse
import logging
import os
import sys

from .comparison import run_comparison
from .config import DEFAULT_CONFIG_PATH, load_config
from .errors import RegressionMLEError
from .report import plot_convergence, plot_fits, render_comparison_table, save_comparison_csv
from .utils import log_error, log_message, setup_console


def build_parser():
    parser = argparse.ArgumentParser(
        description='Recover linear-regression parameters by OLS, a genetic algorithm and a particle swarm'
    )
    parser.add_argument('--config', default=DEFAULT_CONFIG_PATH,
                        help=f'Path to the JSON run configuration (default: {DEFAULT_CONFIG_PATH})')
    parser.add_argument('--output-dir', dest='output_dir',
                        help='Directory for the CSV table, plots and history (overrides the config)')
    parser.add_argument('--data-seed', type=int, help='Seed of the simulated dataset')
    parser.add_argument('--ga-seed', type=int, help='Seed of the genetic algorithm')
    parser.add_argument('--pso-seed', type=int, help='Seed of the particle swarm')
    parser.add_argument('--population-size', type=int, help='GA population size')
    parser.add_argument('--generations', type=int, help='GA generation budget')
    parser.add_argument('--particles', type=int, help='PSO swarm size')
    parser.add_argument('--iterations', type=int, help='PSO iteration budget')
    parser.add_argument('--processes', type=int, help='Worker processes for objective evaluation')
    parser.add_argument('--save-history', action='store_true',
                        help='Pickle per-generation histories into the output directory')
    parser.add_argument('--no-plots', action='store_true', help='Skip writing the PNG plots')
    parser.add_argument('--log-file', help='Also write console output to this file')
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    console = setup_console(args.log_file)

    try:
        config = load_config(args.config).with_overrides(**{
            'output_dir': args.output_dir,
            'n_processes': args.processes,
            'data.seed': args.data_seed,
            'ga.seed': args.ga_seed,
            'ga.population_size': args.population_size,
            'ga.max_generations': args.generations,
            'pso.seed': args.pso_seed,
            'pso.n_particles': args.particles,
            'pso.max_iterations': args.iterations,
        })
        history_dir = config.output_dir if args.save_history else None
        comparison = run_comparison(config, console=console, history_dir=history_dir)
    except RegressionMLEError as e:
        log_error(console, "Run aborted", e, log_path=args.log_file)
        return 2

    console.print(render_comparison_table(comparison.table))

    csv_path = save_comparison_csv(comparison.table, os.path.join(config.output_dir, 'comparison.csv'))
    log_message(console, f"Comparison table saved to {csv_path}", emoji="💾", log_path=args.log_file)
    if not args.no_plots:
        fits_path = plot_fits(comparison, os.path.join(config.output_dir, 'fits.png'))
        convergence_path = plot_convergence(comparison, os.path.join(config.output_dir, 'convergence.png'))
        log_message(console, f"Plots saved to {fits_path} and {convergence_path}", emoji="🖌️",
                    log_path=args.log_file)

    log_message(console, "Done", emoji="✅", log_path=args.log_file)
    return 0


if __name__ == "__main__":
    sys.exit(main())
