"""
Exception hierarchy shared by the solver and thermo packages.
"""


class KineticsError(RuntimeError):
    """Base error. Carries the procedure that raised it."""

    def __init__(self, procedure: str, msg: str = ""):
        self.procedure = procedure
        self.msg = msg
        super().__init__(f"{procedure}: {msg}" if msg else procedure)


class UnknownSpeciesThermoModel(KineticsError):
    """A species has no recognized thermo parameterization."""

    def __init__(self, procedure: str, species_name: str, model: str):
        self.species_name = species_name
        self.model = model
        super().__init__(
            procedure,
            f"species {species_name}: unknown thermo model ({model})")


class UnsupportedFeatureError(KineticsError):
    """A recognized parameterization uses an option that is not supported."""


class UnknownSpeciesThermo(KineticsError):
    """No manager exists for a combination of parameterization types."""

    def __init__(self, procedure: str, type_sum: int):
        self.type_sum = int(type_sum)
        super().__init__(
            procedure,
            f"unknown species thermo parameterization ({self.type_sum})")


class UnknownIntegratorError(KineticsError):
    """No backend is registered under the requested name."""

    def __init__(self, procedure: str, name: str):
        self.name = name
        super().__init__(procedure, f"unknown integrator type '{name}'")


class IntegratorError(KineticsError):
    """A concrete integrator failed or was driven out of order."""
