import logging
from typing import Optional, Union, Sequence
import numpy as np
from scipy.integrate import ode
from .integrator import (
    Integrator, IntegratorConfig, FuncEval, ProblemType, MethodType, IterType
)
from ..core.errors import IntegratorError

logger = logging.getLogger(__name__)

# Relative perturbation for finite-difference derivatives
_FD_EPS = np.sqrt(np.finfo(float).eps)

class ScipyOdeIntegrator(Integrator):
    """
    Integrator backed by one of the Fortran solvers wrapped by
    scipy.integrate.ode.

    The solver is always advanced one internal step at a time, so the
    furthest time it has reached is known. Requests for a time already
    covered by the last step are answered by interpolation.

    Options set after initialize() take effect at the next initialize()
    or reinitialize().
    """
    solver_name = ""

    def __init__(self, config: Optional[IntegratorConfig] = None):
        super().__init__(config)
        self.func: Optional[FuncEval] = None
        self.t: float = 0.0        # Time of the current solution
        self.t_front: float = 0.0  # Furthest time reached by the solver
        self._solver = None
        self._neq = 0
        self._np = 0
        self._y: Optional[np.ndarray] = None
        self._z_front: Optional[np.ndarray] = None  # Solver state at t_front
        self._sens: Optional[np.ndarray] = None
        self._nevals = 0
        self._nsteps = 0

    # Configuration

    def set_tolerances(self, reltol: float,
                       abstol: Union[float, Sequence[float]]) -> None:
        if np.ndim(abstol) == 0:
            atol = float(abstol)
        else:
            # Copied so later changes to the caller's array have no effect
            atol = np.array(abstol, dtype=float)
            if self._neq and len(atol) != self._neq:
                raise IntegratorError(
                    "set_tolerances",
                    f"expected {self._neq} absolute tolerances, got {len(atol)}")
        self.config.rtol = float(reltol)
        self.config.atol = atol

    def set_sensitivity_tolerances(self, reltol: float, abstol: float) -> None:
        self.config.rtol_sens = float(reltol)
        self.config.atol_sens = float(abstol)

    def set_problem_type(self, probtype: Union[int, ProblemType]) -> None:
        try:
            flags = ProblemType.from_value(probtype)
        except ValueError as e:
            raise IntegratorError("set_problem_type", str(e)) from e
        if flags & ProblemType.GMRES:
            raise IntegratorError(
                "set_problem_type", f"{self.solver_name} has no GMRES linear solver")
        if flags & ProblemType.DIAG and flags & ProblemType.DENSE:
            raise IntegratorError(
                "set_problem_type", "DIAG and DENSE are mutually exclusive")
        if flags & ProblemType.JAC and flags & ProblemType.NOJAC:
            raise IntegratorError(
                "set_problem_type", "JAC and NOJAC are mutually exclusive")
        self.config.problem_type = flags

    def set_max_step_size(self, hmax: float) -> None:
        self.config.max_step = float(hmax)

    def set_min_step_size(self, hmin: float) -> None:
        self.config.min_step = float(hmin)

    def set_max_steps(self, nmax: int) -> None:
        self.config.max_steps = int(nmax)

    # Solver setup

    def _solver_options(self) -> dict:
        """Integrator-specific keyword arguments for set_integrator"""
        return {}

    def _uses_functional_iteration(self) -> bool:
        return False

    def initialize(self, t0: float, func: FuncEval) -> None:
        """Bind func, reset statistics and start a new problem at t0."""
        self._nevals = 0
        self._nsteps = 0
        self._start(t0, func)

    def reinitialize(self, t0: float, func: FuncEval) -> None:
        """Restart at t0 keeping configuration and statistics."""
        self._start(t0, func)

    def _start(self, t0: float, func: FuncEval) -> None:
        self.func = func
        self._neq = func.n_equations()
        self._np = func.n_sens_params()
        n = self._neq

        y0 = np.asarray(func.get_initial_conditions(t0), dtype=float)
        if y0.shape != (n,):
            raise IntegratorError(
                "initialize",
                f"initial conditions have shape {y0.shape}, expected ({n},)")
        if np.ndim(self.config.atol) and len(self.config.atol) != n:
            raise IntegratorError(
                "initialize",
                f"expected {n} absolute tolerances, got {len(self.config.atol)}")

        if (self.config.problem_type & ProblemType.JAC
                and func.get_jacobian(t0, y0) is None):
            raise IntegratorError(
                "initialize", "problem type JAC requires func.get_jacobian")

        self._y = y0.copy()
        self._sens = np.zeros((n, self._np))

        if self._np:
            rhs, jac = self._sensitivity_rhs, None
            z0 = np.concatenate([y0, np.zeros(n * self._np)])
            rtol, atol = self._augmented_tolerances()
            bands = {}
        else:
            rhs, jac, bands = self._rhs, self._jacobian_callback(), self._bands()
            z0 = y0.copy()
            rtol, atol = self.config.rtol, self.config.atol

        options = dict(self._solver_options())
        options.update(bands)
        options.update(rtol=rtol, atol=atol, nsteps=self.config.max_steps,
                       max_step=self.config.max_step,
                       min_step=self.config.min_step)

        self._solver = ode(rhs, jac)
        self._solver.set_integrator(self.solver_name, **options)
        self._solver.set_initial_value(z0, t0)
        self._z_front = z0.copy()
        self.t = t0
        self.t_front = t0
        self._initialized = True
        logger.debug(f"{self.solver_name}: {n} equations, {self._np} "
                     f"sensitivity parameters, t0={t0}")

    def _bands(self) -> dict:
        if self._uses_functional_iteration():
            return {}
        if self.config.problem_type & ProblemType.DIAG:
            return {"lband": 0, "uband": 0}
        return {}

    def _jacobian_callback(self):
        if self._uses_functional_iteration():
            return None
        flags = self.config.problem_type
        if not flags & ProblemType.JAC:
            return None
        if flags & ProblemType.DIAG:
            # Banded storage with zero bandwidth is a single row
            return lambda t, y: np.diag(self.func.get_jacobian(t, y))[np.newaxis, :]
        return lambda t, y: self.func.get_jacobian(t, y)

    def _augmented_tolerances(self):
        n, npar = self._neq, self._np
        rtol = np.concatenate([np.full(n, self.config.rtol),
                               np.full(n * npar, self.config.rtol_sens)])
        atol = np.concatenate([np.broadcast_to(self.config.atol, (n,)),
                               np.full(n * npar, self.config.atol_sens)])
        return rtol, atol

    # Right-hand sides

    def _rhs(self, t: float, y: np.ndarray) -> np.ndarray:
        self._nevals += 1
        return self.func.get_rhs(t, y)

    def _sensitivity_rhs(self, t: float, z: np.ndarray) -> np.ndarray:
        """Forward sensitivity system dS/dt = J S + df/dp"""
        n, npar = self._neq, self._np
        y = z[:n]
        S = z[n:].reshape((npar, n)).T

        f0 = self._rhs(t, y)
        J = self.func.get_jacobian(t, y)
        if J is None:
            J = np.empty((n, n))
            for j in range(n):
                dy = _FD_EPS * max(abs(y[j]), 1.0)
                yp = y.copy()
                yp[j] += dy
                J[:, j] = (self._rhs(t, yp) - f0) / dy

        params = self.func.sens_params
        dfdp = np.empty((n, npar))
        for p in range(npar):
            p0 = params[p]
            dp = _FD_EPS * max(abs(p0), 1.0)
            params[p] = p0 + dp
            try:
                dfdp[:, p] = (self._rhs(t, y) - f0) / dp
            finally:
                params[p] = p0

        dSdt = J @ S + dfdp
        return np.concatenate([f0, dSdt.T.ravel()])

    # Time advance

    def _check_ready(self, method: str) -> None:
        if not self.is_initialized():
            raise IntegratorError(
                method, "Integrator must be initialized before use")

    def _advance(self, method: str, tout: float) -> None:
        """One internal step, not bounded by tout"""
        self._solver.integrate(tout, step=True)
        if not self._solver.successful():
            raise IntegratorError(
                method, f"{self.solver_name} failed at t={self.t_front} "
                f"(return code {self._solver.get_return_code()})")
        self.t_front = self._solver.t
        self._z_front = self._solver.y.copy()
        self._nsteps += 1

    def _interpolate(self, method: str, tout: float) -> None:
        """Solution at tout, which must lie inside the last internal step"""
        if tout < self.t_front:
            self._solver.integrate(tout)
            if not self._solver.successful():
                raise IntegratorError(
                    method, f"{self.solver_name} could not interpolate to "
                    f"t={tout} (return code {self._solver.get_return_code()})")
            self._store(tout, self._solver.y)
        else:
            self._store(tout, self._z_front)

    def _store(self, t: float, z: np.ndarray) -> None:
        n = self._neq
        self._y[:] = z[:n]
        if self._np:
            self._sens[:, :] = z[n:].reshape((self._np, n)).T
        self.t = t

    def integrate(self, tout: float) -> None:
        """
        Integrate to the absolute time tout.

        tout equal to the current time does nothing. tout before the
        current time raises IntegratorError and leaves the state unchanged.
        """
        self._check_ready("integrate")
        if tout < self.t:
            raise IntegratorError(
                "integrate", f"tout={tout} is before the current time {self.t}")
        if tout == self.t:
            return
        nsteps = 0
        while self.t_front < tout:
            if nsteps >= self.config.max_steps:
                raise IntegratorError(
                    "integrate", f"maximum number of steps "
                    f"({self.config.max_steps}) taken before reaching t={tout}")
            self._advance("integrate", tout)
            nsteps += 1
        self._interpolate("integrate", tout)

    def step(self, tout: float) -> float:
        """
        Take one internal step towards tout and return the time reached.

        The returned time never exceeds tout; a step that passes tout is
        interpolated back to it.
        """
        self._check_ready("step")
        if tout < self.t:
            raise IntegratorError(
                "step", f"tout={tout} is before the current time {self.t}")
        if self.t_front <= self.t:
            self._advance("step", tout)
        if self.t_front <= tout:
            self._store(self.t_front, self._z_front)
        else:
            self._interpolate("step", tout)
        return self.t

    # Results

    def solution(self, k: Optional[int] = None):
        self._check_ready("solution")
        if k is None:
            return self._y
        return self._y[k]

    def n_equations(self) -> int:
        return self._neq

    def n_evals(self) -> int:
        return self._nevals

    def n_steps(self) -> int:
        """Number of internal steps taken"""
        return self._nsteps

    def n_sens_params(self) -> int:
        return self._np

    def sensitivity(self, k: int, p: int) -> float:
        self._check_ready("sensitivity")
        if not self._np:
            return 0.0
        return float(self._sens[k, p])

class VodeIntegrator(ScipyOdeIntegrator):
    """Variable-coefficient BDF/Adams integrator (VODE)"""
    solver_name = "vode"

    def set_max_order(self, n: int) -> None:
        self.config.max_order = int(n)

    def set_method(self, t: MethodType) -> None:
        self.config.method = MethodType(t)

    def set_iterator(self, t: IterType) -> None:
        self.config.iterator = IterType(t)

    def _uses_functional_iteration(self) -> bool:
        return self.config.iterator is IterType.FUNCTIONAL

    def _solver_options(self) -> dict:
        options = {
            "method": self.config.method.value,
            "with_jacobian": self.config.iterator is IterType.NEWTON,
        }
        if self.config.max_order:
            options["order"] = self.config.max_order
        return options

class LsodaIntegrator(ScipyOdeIntegrator):
    """
    LSODA switches between Adams and BDF on its own, so method and
    iterator selection are left to the base class defaults.
    """
    solver_name = "lsoda"

    def set_max_order(self, n: int) -> None:
        self.config.max_order = int(n)

    def _solver_options(self) -> dict:
        options = {"with_jacobian": True}
        if self.config.max_order:
            options["max_order_ns"] = min(self.config.max_order, 12)
            options["max_order_s"] = min(self.config.max_order, 5)
        return options
