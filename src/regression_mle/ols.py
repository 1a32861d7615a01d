"""
Closed-form least-squares fit of the simple linear model.
"""

import math
from dataclasses import dataclass

import numpy as np
from scipy import stats

from .dataset import Dataset, RegressionParameters
from .objective import GaussianLogLikelihood


@dataclass(frozen=True)
class OLSFit:
    """
    Least-squares estimates.

    ``residual_std_error`` divides the residual sum of squares by ``n - 2``;
    ``sigma_mle`` divides it by ``n`` and is the maximum-likelihood estimate
    the optimizers converge to.
    """
    intercept: float
    slope: float
    intercept_stderr: float
    slope_stderr: float
    residual_std_error: float
    sigma_mle: float
    log_likelihood: float
    n: int

    def as_parameters(self) -> RegressionParameters:
        return RegressionParameters(self.intercept, self.slope, self.residual_std_error)

    def mle_parameters(self) -> RegressionParameters:
        return RegressionParameters(self.intercept, self.slope, self.sigma_mle)


def fit_ols(dataset: Dataset) -> OLSFit:
    """Fit ``y = intercept + slope * x`` by ordinary least squares."""
    n = len(dataset)
    if n < 3:
        raise ValueError(f"At least 3 observations are needed for a fit with a residual scale, got {n}")

    fit = stats.linregress(dataset.x, dataset.y)
    residuals = dataset.y - (fit.intercept + fit.slope * dataset.x)
    rss = float(np.dot(residuals, residuals))
    sigma_mle = math.sqrt(rss / n)

    mle = RegressionParameters(float(fit.intercept), float(fit.slope), sigma_mle)
    log_likelihood = GaussianLogLikelihood(dataset).evaluate(mle.as_vector())

    return OLSFit(
        intercept=float(fit.intercept),
        slope=float(fit.slope),
        intercept_stderr=float(fit.intercept_stderr),
        slope_stderr=float(fit.stderr),
        residual_std_error=math.sqrt(rss / (n - 2)),
        sigma_mle=sigma_mle,
        log_likelihood=log_likelihood,
        n=n,
    )
