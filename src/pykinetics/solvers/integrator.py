from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Optional, Union, Sequence
import numpy as np
from ..core.base import IntegratorComponent
from ..core.log_config import write_log

class ProblemType(IntFlag):
    """Structural solve mode. Values match persisted configurations."""
    DIAG = 1
    DENSE = 2
    NOJAC = 4
    JAC = 8
    GMRES = 16

    @classmethod
    def from_value(cls, value: Union[int, "ProblemType"]) -> "ProblemType":
        """Convert an integer flag sum, rejecting unknown bits"""
        value = int(value)
        allowed = 0
        for flag in cls:
            allowed |= flag.value
        if value < 0 or value & ~allowed:
            raise ValueError(f"Invalid problem type flags: {value}")
        return cls(value)

class MethodType(Enum):
    """Method used to integrate the system. Not all backends support both."""
    BDF = "bdf"      # Backward differentiation
    ADAMS = "adams"  # Adams

class IterType(Enum):
    """Nonlinear iteration used in each step."""
    NEWTON = "newton"
    FUNCTIONAL = "functional"

# Returned by Integrator.solution(k) when no backend overrides it
DUMMY_SOLUTION = 0.0

class FuncEval(ABC):
    """
    Right-hand side of an ODE system dy/dt = f(t, y; p).

    Sensitivity parameters live in ``sens_params``. ``get_rhs`` must read
    them from there so that a backend can perturb them.
    """

    def __init__(self):
        self.sens_params = np.zeros(0)

    @abstractmethod
    def get_rhs(self, t: float, y: np.ndarray) -> np.ndarray:
        """
        Evaluate right-hand side of the ODE system

        Args:
            t: Current time
            y: Current state vector

        Returns:
            np.ndarray: Right-hand side evaluation f(t,y)
        """
        pass

    @abstractmethod
    def n_equations(self) -> int:
        """Number of equations"""
        pass

    @abstractmethod
    def get_initial_conditions(self, t0: float) -> np.ndarray:
        """Initial state at time t0"""
        pass

    def n_sens_params(self) -> int:
        """Number of sensitivity parameters"""
        return len(self.sens_params)

    def get_jacobian(self, t: float, y: np.ndarray) -> Optional[np.ndarray]:
        """Analytic Jacobian df/dy, or None if not available"""
        return None

@dataclass
class IntegratorConfig:
    """Configuration accumulated by an integrator across reinitialization"""
    # Tolerances
    rtol: float = 1e-9
    atol: Union[float, np.ndarray] = 1e-15
    rtol_sens: float = 1e-4
    atol_sens: float = 1e-4

    # Solver structure
    problem_type: ProblemType = ProblemType.DENSE | ProblemType.NOJAC
    method: MethodType = MethodType.BDF
    iterator: IterType = IterType.NEWTON

    # Step control (0 means backend default)
    max_order: int = 0
    max_step: float = 0.0
    min_step: float = 0.0
    max_steps: int = 20000

class Integrator(IntegratorComponent):
    """
    Base class for ODE system integrators.

    Every operation has a default so that driver code can use any backend
    without probing its capabilities. Unless noted otherwise, the default
    writes a warning to the diagnostic log and does nothing. A warning means
    the call had no effect; callers must not take the return value as
    confirmation that anything was configured.
    """

    def __init__(self, config: Optional[IntegratorConfig] = None):
        super().__init__()
        self.config = config if config is not None else IntegratorConfig()

    def _warn(self, method: str) -> None:
        write_log(f">>>> Warning: method {method} of base class "
                  f"Integrator called. Nothing done.")

    def set_tolerances(self, reltol: float,
                       abstol: Union[float, Sequence[float]]) -> None:
        """
        Set error tolerances.

        Args:
            reltol: scalar relative tolerance
            abstol: scalar absolute tolerance, or one value per equation.
                An array is copied on entry.

        Optional capability: degrades to a logged no-op.
        """
        self._warn("set_tolerances")

    def set_sensitivity_tolerances(self, reltol: float, abstol: float) -> None:
        """
        Set tolerances for the sensitivity equations.

        Optional capability: silent no-op when unsupported.
        """
        pass

    def set_problem_type(self, probtype: Union[int, ProblemType]) -> None:
        """Set problem type. Optional capability: logged no-op."""
        self._warn("set_problem_type")

    def initialize(self, t0: float, func: FuncEval) -> None:
        """
        Initialize the integrator for a new problem. Call after all options
        have been set. Discards any prior internal state.

        Args:
            t0: initial time
            func: RHS evaluator for the system of equations
        """
        self._warn("initialize")

    def reinitialize(self, t0: float, func: FuncEval) -> None:
        """Restart from t0 keeping configuration and statistics."""
        self._warn("reinitialize")

    def integrate(self, tout: float) -> None:
        """
        Integrate the system of equations.

        Args:
            tout: integrate to this time. This is the absolute time value,
                not a time interval.
        """
        self._warn("integrate")

    def step(self, tout: float) -> float:
        """
        Take one internal step, not going past tout.

        Returns:
            float: time reached
        """
        self._warn("step")
        return 0.0

    def solution(self, k: Optional[int] = None):
        """
        Current solution. With k, the value of component k; without, the
        whole solution array owned by this integrator.

        The base class returns DUMMY_SOLUTION for any k, and None for the
        whole array.
        """
        self._warn("solution")
        if k is None:
            return None
        return DUMMY_SOLUTION

    def n_equations(self) -> int:
        """The number of equations."""
        self._warn("n_equations")
        return 0

    def n_evals(self) -> int:
        """The number of function evaluations."""
        self._warn("n_evals")
        return 0

    def set_max_order(self, n: int) -> None:
        """Set the maximum integration order that will be used."""
        self._warn("set_max_order")

    def set_method(self, t: MethodType) -> None:
        """Set the solution method."""
        self._warn("set_method")

    def set_iterator(self, t: IterType) -> None:
        """Set the nonlinear iterator."""
        self._warn("set_iterator")

    def set_max_step_size(self, hmax: float) -> None:
        self._warn("set_max_step_size")

    def set_min_step_size(self, hmin: float) -> None:
        self._warn("set_min_step_size")

    def set_max_steps(self, nmax: int) -> None:
        self._warn("set_max_steps")

    def n_sens_params(self) -> int:
        """Number of sensitivity parameters. 0 means no sensitivity support."""
        self._warn("n_sens_params")
        return 0

    def sensitivity(self, k: int, p: int) -> float:
        """Sensitivity of solution component k to parameter p."""
        self._warn("sensitivity")
        return 0.0
