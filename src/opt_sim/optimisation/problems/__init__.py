from .base import OptimisationProblem, Problem
from .pymoo_problems import FunctionProblem, PymooProblem

__all__ = ["Problem",
           "OptimisationProblem",
           "PymooProblem",
           "FunctionProblem"]
