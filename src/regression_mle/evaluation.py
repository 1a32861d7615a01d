"""
Batch evaluation of candidate positions, serially or on a process pool.

Workers receive ``(position, index)`` pairs and return ``(value, index)``;
results coming back from ``imap_unordered`` are placed by index, so the
order in which workers finish never changes the outcome.
"""

import logging
from multiprocessing import Pool

import numpy as np

logger = logging.getLogger(__name__)

_worker_objective = None


def _init_worker(objective):
    global _worker_objective
    _worker_objective = objective


def _evaluate_indexed(args):
    position, idx = args
    return _worker_objective.evaluate(position), idx


class Evaluator:
    """
    Evaluates batches of positions against one objective and counts calls.

    Parameters
    ----------
    objective : Objective
        Function being searched.
    n_processes : int, optional
        Size of the worker pool. ``None`` or ``1`` evaluates in the calling
        process.

    Attributes
    ----------
    evaluations : int
        Number of objective evaluations so far.
    degenerate_evaluations : int
        How many of those returned the degenerate surrogate value.
    """

    def __init__(self, objective, n_processes=None):
        if n_processes is not None and n_processes < 1:
            raise ValueError(f"n_processes must be >= 1, got {n_processes}")
        self.objective = objective
        self.n_processes = n_processes
        self.evaluations = 0
        self.degenerate_evaluations = 0
        self._pool = None

    def __enter__(self):
        if self.n_processes and self.n_processes > 1:
            self._pool = Pool(
                processes=self.n_processes,
                initializer=_init_worker,
                initargs=(self.objective,),
            )
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def close(self):
        pool, self._pool = self._pool, None
        cleanup_multiprocessing_resources(pool)

    def evaluate(self, positions) -> np.ndarray:
        """
        Evaluate every row of ``positions``.

        Returns
        -------
        np.ndarray
            Objective values in the same order as ``positions``.
        """
        positions = np.asarray(positions, dtype=np.float64)
        values = np.empty(len(positions), dtype=np.float64)

        if self._pool is None:
            for idx, position in enumerate(positions):
                values[idx] = self.objective.evaluate(position)
        else:
            eval_args = [(position, idx) for idx, position in enumerate(positions)]
            for value, idx in self._pool.imap_unordered(_evaluate_indexed, eval_args):
                values[idx] = value

        self.evaluations += len(values)
        self.degenerate_evaluations += int(np.count_nonzero(values == self.objective.sense.worst))
        return values


def cleanup_multiprocessing_resources(pool):
    """
    Clean up multiprocessing pool resources.

    Parameters
    ----------
    pool : multiprocessing.Pool or None
        Pool to clean up
    """
    if pool is None:
        return

    try:
        pool.close()
        pool.join()
        logger.debug("Multiprocessing pool cleaned up successfully")
    except (OSError, ValueError) as e:
        logger.error("Error cleaning up multiprocessing pool: %s", e)
        pool.terminate()
        pool.join()
