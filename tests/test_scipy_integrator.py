"""
Tests for the SciPy integrator backends
"""
import logging
import pytest
import numpy as np
from pykinetics.solvers.integrator import ProblemType, MethodType, IterType
from pykinetics.solvers.scipy_integrator import VodeIntegrator, LsodaIntegrator
from pykinetics.core.errors import IntegratorError
from conftest import DecaySystem

def make_integrator(cls=VodeIntegrator):
    integrator = cls()
    integrator.set_tolerances(1e-10, 1e-14)
    return integrator

@pytest.mark.parametrize("cls", [VodeIntegrator, LsodaIntegrator])
def test_decay_solution(cls, decay_system):
    """Integration of a system with known analytical solution"""
    integrator = make_integrator(cls)
    integrator.initialize(0.0, decay_system)
    assert integrator.n_equations() == 5

    integrator.integrate(1.0)
    assert integrator.t == 1.0
    y_exact = decay_system.y0 * np.exp(-2.0)
    np.testing.assert_allclose(integrator.solution(), y_exact, rtol=1e-6, atol=1e-12)
    assert integrator.solution(2) == pytest.approx(y_exact[2], rel=1e-6)
    assert integrator.n_evals() > 0
    assert 0 < integrator.n_steps() <= integrator.n_evals()

def test_integrate_in_stages(decay_system):
    integrator = make_integrator()
    integrator.initialize(0.0, decay_system)
    for tout in np.linspace(0.1, 1.0, 10):
        integrator.integrate(tout)
        np.testing.assert_allclose(
            integrator.solution(), decay_system.y0 * np.exp(-2.0 * tout),
            rtol=1e-6, atol=1e-12)

def test_integrate_to_current_time_is_noop(decay_system):
    integrator = make_integrator()
    integrator.initialize(0.0, decay_system)
    integrator.integrate(0.5)
    y = integrator.solution().copy()
    nevals = integrator.n_evals()

    integrator.integrate(0.5)
    assert integrator.t == 0.5
    np.testing.assert_array_equal(integrator.solution(), y)
    assert integrator.n_evals() == nevals

def test_integrate_backwards_raises(decay_system):
    """Repeated calls behind the current time fail the same way"""
    integrator = make_integrator()
    integrator.initialize(0.0, decay_system)
    integrator.integrate(0.5)
    y = integrator.solution().copy()

    for _ in range(3):
        with pytest.raises(IntegratorError, match="before the current time"):
            integrator.integrate(0.25)
        assert integrator.t == 0.5
        np.testing.assert_array_equal(integrator.solution(), y)

def test_step_does_not_pass_bound(decay_system):
    integrator = make_integrator()
    integrator.initialize(0.0, decay_system)
    tout = 0.5
    times = [0.0]
    while times[-1] < tout:
        times.append(integrator.step(tout))
        assert len(times) < 10000
    assert all(t <= tout for t in times)
    assert np.all(np.diff(times) > 0)
    assert times[-1] == tout
    np.testing.assert_allclose(
        integrator.solution(), decay_system.y0 * np.exp(-2.0 * tout),
        rtol=1e-6, atol=1e-12)

def test_step_then_integrate(decay_system):
    """Stepping past an interpolated time continues the same solution"""
    integrator = make_integrator()
    integrator.initialize(0.0, decay_system)
    integrator.integrate(0.3)
    t = integrator.step(2.0)
    assert 0.3 < t <= 2.0
    integrator.integrate(1.0)
    np.testing.assert_allclose(
        integrator.solution(), decay_system.y0 * np.exp(-2.0),
        rtol=1e-6, atol=1e-12)

def test_solution_buffer_is_owned(decay_system):
    integrator = make_integrator()
    integrator.initialize(0.0, decay_system)
    y = integrator.solution()
    integrator.integrate(0.5)
    assert y is integrator.solution()
    assert y[2] == pytest.approx(2.0 * np.exp(-1.0), rel=1e-6)

def test_reinitialize_keeps_configuration_and_statistics(decay_system):
    integrator = make_integrator()
    integrator.set_max_steps(5000)
    integrator.initialize(0.0, decay_system)
    integrator.integrate(1.0)
    nevals = integrator.n_evals()

    integrator.reinitialize(1.0, decay_system)
    assert integrator.t == 1.0
    assert integrator.config.rtol == 1e-10
    assert integrator.config.max_steps == 5000
    np.testing.assert_array_equal(integrator.solution(), decay_system.y0)

    integrator.integrate(2.0)
    assert integrator.n_evals() > nevals
    np.testing.assert_allclose(
        integrator.solution(), decay_system.y0 * np.exp(-2.0),
        rtol=1e-6, atol=1e-12)

    integrator.initialize(0.0, decay_system)
    assert integrator.n_evals() == 0

def test_tolerance_array_is_copied(decay_system):
    integrator = VodeIntegrator()
    atol = np.full(5, 1e-14)
    integrator.set_tolerances(1e-10, atol)
    atol[:] = 1.0
    np.testing.assert_array_equal(integrator.config.atol, np.full(5, 1e-14))

    integrator.initialize(0.0, decay_system)
    integrator.integrate(1.0)
    np.testing.assert_allclose(
        integrator.solution(), decay_system.y0 * np.exp(-2.0),
        rtol=1e-6, atol=1e-12)

def test_tolerance_array_length_checked(decay_system):
    integrator = VodeIntegrator()
    integrator.set_tolerances(1e-8, [1e-12, 1e-12])
    with pytest.raises(IntegratorError, match="absolute tolerances"):
        integrator.initialize(0.0, decay_system)

    integrator.set_tolerances(1e-8, 1e-12)
    integrator.initialize(0.0, decay_system)
    with pytest.raises(IntegratorError):
        integrator.set_tolerances(1e-8, [1e-12, 1e-12])

@pytest.mark.parametrize("flags", [
    ProblemType.GMRES,
    ProblemType.DIAG | ProblemType.DENSE,
    ProblemType.JAC | ProblemType.NOJAC,
    64,
])
def test_problem_type_rejected(flags):
    with pytest.raises(IntegratorError):
        VodeIntegrator().set_problem_type(flags)

@pytest.mark.parametrize("flags", [
    ProblemType.DENSE | ProblemType.JAC,
    ProblemType.DIAG | ProblemType.JAC,
    ProblemType.DIAG | ProblemType.NOJAC,
    int(ProblemType.DENSE | ProblemType.NOJAC),
])
def test_problem_types(flags):
    system = DecaySystem([1.0, 3.0], analytic_jacobian=True)
    integrator = make_integrator()
    integrator.set_problem_type(flags)
    integrator.initialize(0.0, system)
    integrator.integrate(1.0)
    np.testing.assert_allclose(
        integrator.solution(), system.y0 * np.exp(-2.0), rtol=1e-6)

def test_jacobian_required_for_jac(decay_system):
    integrator = VodeIntegrator()
    integrator.set_problem_type(ProblemType.DENSE | ProblemType.JAC)
    with pytest.raises(IntegratorError, match="get_jacobian"):
        integrator.initialize(0.0, decay_system)

def test_adams_functional_iteration(decay_system):
    integrator = make_integrator()
    integrator.set_method(MethodType.ADAMS)
    integrator.set_iterator(IterType.FUNCTIONAL)
    integrator.set_max_order(8)
    integrator.initialize(0.0, decay_system)
    integrator.integrate(1.0)
    np.testing.assert_allclose(
        integrator.solution(), decay_system.y0 * np.exp(-2.0),
        rtol=1e-6, atol=1e-12)

def test_stiff_system(robertson_system):
    integrator = VodeIntegrator()
    integrator.set_tolerances(1e-9, [1e-12, 1e-16, 1e-10])
    integrator.initialize(0.0, robertson_system)
    integrator.integrate(40.0)
    y = integrator.solution()
    # Reference values at t = 40
    np.testing.assert_allclose(y, [0.7158, 9.185e-6, 0.2842], rtol=1e-3)
    assert y.sum() == pytest.approx(1.0, rel=1e-5)

def test_max_steps_exceeded(robertson_system):
    integrator = VodeIntegrator()
    integrator.set_max_steps(5)
    integrator.initialize(0.0, robertson_system)
    with pytest.raises(IntegratorError, match="maximum number of steps"):
        integrator.integrate(1e5)

def test_sensitivity():
    """dy/dk of y = y0*exp(-k*t) is -t*y"""
    system = DecaySystem([1.0, 2.0], k=2.0, sensitive=True)
    integrator = make_integrator()
    integrator.set_sensitivity_tolerances(1e-8, 1e-12)
    integrator.initialize(0.0, system)
    assert integrator.n_sens_params() == 1
    assert integrator.sensitivity(0, 0) == 0.0

    integrator.integrate(1.0)
    y = system.y0 * np.exp(-2.0)
    np.testing.assert_allclose(integrator.solution(), y, rtol=1e-6)
    for k in range(2):
        assert integrator.sensitivity(k, 0) == pytest.approx(-y[k], rel=1e-4)
    # Parameters are restored after finite differencing
    assert system.sens_params[0] == 2.0

def test_no_sensitivity_parameters(decay_system):
    integrator = make_integrator()
    integrator.initialize(0.0, decay_system)
    integrator.integrate(0.5)
    assert integrator.n_sens_params() == 0
    assert integrator.sensitivity(1, 0) == 0.0

def test_lsoda_method_selection_is_logged(decay_system, caplog):
    """LSODA picks its own method, so set_method falls back to the default"""
    integrator = make_integrator(LsodaIntegrator)
    with caplog.at_level(logging.WARNING, logger="pykinetics"):
        integrator.set_method(MethodType.ADAMS)
        integrator.set_iterator(IterType.FUNCTIONAL)
    assert len(caplog.records) == 2
    assert integrator.config.method is MethodType.BDF

    integrator.set_max_order(3)
    integrator.initialize(0.0, decay_system)
    integrator.integrate(1.0)
    np.testing.assert_allclose(
        integrator.solution(), decay_system.y0 * np.exp(-2.0),
        rtol=1e-6, atol=1e-12)

@pytest.mark.parametrize("call", [
    lambda i: i.integrate(1.0),
    lambda i: i.step(1.0),
    lambda i: i.solution(),
    lambda i: i.sensitivity(0, 0),
])
def test_use_before_initialize_raises(call):
    with pytest.raises(IntegratorError, match="initialized"):
        call(VodeIntegrator())
