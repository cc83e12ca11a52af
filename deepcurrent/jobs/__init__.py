"""Background jobs run inside the API process."""

from deepcurrent.jobs.analysis import AnalysisFailure, AnalysisQueue

__all__ = ["AnalysisFailure", "AnalysisQueue"]
