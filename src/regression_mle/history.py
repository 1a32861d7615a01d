"""
Per-generation history of an optimizer run.

The history is optional: optimizers accept a ``HistoryTracker`` and record
into it when one is given. It can be pickled to disk for later analysis.
"""

import logging
import os
import pickle

import numpy as np

logger = logging.getLogger(__name__)


class HistoryTracker:
    """
    Track detailed optimization history for analysis.

    Attributes
    ----------
    history_data : dict
        Dictionary containing history data:
        - algorithm: Name of the optimizer
        - sense: "maximize" or "minimize"
        - parameter_names: Names of the search dimensions
        - generation: List of generation/iteration numbers
        - positions: List of position arrays (N x D)
        - values: List of objective value arrays (N,)
        - best_position: List of best-so-far positions
        - best_value: List of best-so-far values
        - diversity: List of normalized population spreads
        - generation_times: List of step durations in seconds
    """

    def __init__(self, algorithm, sense, parameter_names=None, file_path=None):
        """
        Initialize history tracker.

        Parameters
        ----------
        algorithm : str
            Optimizer name stored alongside the data.
        sense : Sense
            Direction of the objective values being recorded.
        parameter_names : sequence of str, optional
            Names of parameters being optimized
        file_path : str, optional
            If given, ``save_to_file`` writes here.
        """
        self.history_data = {
            'algorithm': algorithm,
            'sense': getattr(sense, "value", sense),
            'parameter_names': list(parameter_names) if parameter_names else None,
            'generation': [],
            'positions': [],
            'values': [],
            'best_position': [],
            'best_value': [],
            'diversity': [],
            'generation_times': [],
        }
        self.file_path = file_path

    def __len__(self):
        return len(self.history_data['generation'])

    def record_generation(self, generation, positions, values, best_position,
                          best_value, diversity, generation_time):
        self.history_data['generation'].append(int(generation))
        self.history_data['positions'].append(np.array(positions, dtype=np.float64))
        self.history_data['values'].append(np.array(values, dtype=np.float64))
        self.history_data['best_position'].append([float(v) for v in best_position])
        self.history_data['best_value'].append(float(best_value))
        self.history_data['diversity'].append(float(diversity))
        self.history_data['generation_times'].append(float(generation_time))

    def save_to_file(self, file_path=None):
        """
        Pickle the history.

        Parameters
        ----------
        file_path : str, optional
            Destination, defaults to the path given at construction.

        Returns
        -------
        str or None
            The path written, or ``None`` if no path is known.
        """
        file_path = file_path or self.file_path
        if not file_path:
            return None

        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(file_path, 'wb') as f:
            pickle.dump(self.history_data, f)
        logger.debug("History data saved to %s", file_path)
        return file_path

    @classmethod
    def load_from_file(cls, file_path):
        """Rebuild a tracker from a file written by ``save_to_file``."""
        with open(file_path, 'rb') as f:
            loaded = pickle.load(f)
        tracker = cls(loaded['algorithm'], loaded['sense'], loaded['parameter_names'], file_path)
        tracker.history_data.update(loaded)
        logger.info("History data loaded from %s", file_path)
        return tracker

    def best_values(self):
        return np.array(self.history_data['best_value'], dtype=np.float64)

    def get_statistics(self):
        """
        Summary statistics of the recorded run.

        Returns
        -------
        dict
            - total_generations: Number of recorded steps
            - best_value: Final best-so-far value
            - average_generation_time: Mean step duration
            - total_improvement: |final best - initial best|
            - diversity_trend: Slope of the diversity over the steps
        """
        if not self.history_data['generation']:
            return {}

        best = self.history_data['best_value']
        stats = {
            'total_generations': len(best),
            'best_value': best[-1],
            'average_generation_time': float(np.mean(self.history_data['generation_times'])),
            'total_improvement': abs(best[-1] - best[0]),
        }

        diversity = self.history_data['diversity']
        if len(diversity) > 1:
            stats['diversity_trend'] = float(np.polyfit(np.arange(len(diversity)), diversity, 1)[0])
        else:
            stats['diversity_trend'] = 0.0
        return stats
