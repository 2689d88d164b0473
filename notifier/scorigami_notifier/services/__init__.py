"""Scoring decisions for finals and in-progress games."""

from .classification import classify_final, frequency_or_empty, is_low_value
from .forecast import (
    ForecastCache,
    enumerate_outcomes,
    forecast_franchise_scorigami,
    poisson_pmf,
    should_forecast,
)

__all__ = [
    "classify_final",
    "frequency_or_empty",
    "is_low_value",
    "ForecastCache",
    "enumerate_outcomes",
    "forecast_franchise_scorigami",
    "poisson_pmf",
    "should_forecast",
]
