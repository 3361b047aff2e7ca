"""
Base classes and interfaces for pykinetics components.
"""
from abc import ABC, abstractmethod

class KineticsComponent(ABC):
    """
    Base class for all pykinetics components. Tracks whether the component
    is ready for evaluation and enforces interface requirements.
    """
    def __init__(self):
        # Derived classes decide when they are ready
        self._initialized = False

    @abstractmethod
    def initialize(self) -> None:
        """Prepare the component for evaluation."""
        self._initialized = True

    def is_initialized(self) -> bool:
        """Check if component has been initialized."""
        return self._initialized

class ThermoComponent(KineticsComponent):
    """Base class for species thermodynamic property managers."""
    @abstractmethod
    def update(self, t, cp_R, h_RT, s_R) -> None:
        """Evaluate reference-state properties at temperature t."""
        pass

class IntegratorComponent(KineticsComponent):
    """Base class for integrator components."""
    @abstractmethod
    def step(self, tout: float) -> float:
        """Advance solution by one internal step."""
        pass
