"""
Registry of integrator backends.

Backends are registered under a string key and looked up by name when a
simulation is configured. Every lookup returns a new instance owned by
the caller.

>>> integrator = new_integrator("CVODE")
>>> integrator.set_tolerances(1e-8, 1e-14)
"""
from typing import Callable, Dict, List
from .integrator import Integrator
from .scipy_integrator import VodeIntegrator, LsodaIntegrator
from ..core.errors import UnknownIntegratorError

_INTEGRATORS: Dict[str, Callable[[], Integrator]] = {}

def register_integrator(name: str, constructor: Callable[[], Integrator]) -> None:
    """Register a backend constructor, replacing any previous entry."""
    _INTEGRATORS[name] = constructor

def integrator_names() -> List[str]:
    """Names of all registered backends"""
    return sorted(_INTEGRATORS)

def new_integrator(name: str) -> Integrator:
    """
    Create a new integrator.

    Args:
        name: registered backend name

    Raises:
        UnknownIntegratorError: if no backend is registered under name
    """
    try:
        constructor = _INTEGRATORS[name]
    except KeyError:
        raise UnknownIntegratorError("new_integrator", name) from None
    return constructor()

register_integrator("CVODE", VodeIntegrator)
register_integrator("CVODES", VodeIntegrator)
register_integrator("LSODA", LsodaIntegrator)
