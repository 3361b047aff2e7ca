"""
pykinetics: ODE integrator interfaces and species thermo managers for
chemical kinetics simulation
"""
from importlib.metadata import version

__version__ = version("pykinetics")

from .core.base import (
    KineticsComponent,
    ThermoComponent,
    IntegratorComponent
)
from .core.errors import (
    KineticsError,
    UnknownSpeciesThermoModel,
    UnsupportedFeatureError,
    UnknownSpeciesThermo,
    UnknownIntegratorError,
    IntegratorError
)
from .solvers.integrator import (
    FuncEval,
    Integrator,
    IntegratorConfig,
    ProblemType,
    MethodType,
    IterType
)
from .solvers.factory import new_integrator, register_integrator
from .thermo.species_thermo import SpeciesThermo, SpeciesThermoType
from .thermo.factory import (
    SpeciesThermoFactory,
    get_species_thermo_types,
    new_species_thermo_mgr,
    import_species_thermo
)
from .io.ctml import parse_ctml, read_ctml
