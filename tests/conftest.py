"""
PyTest configuration and fixtures
"""
import pytest
import numpy as np
from pykinetics.solvers.integrator import FuncEval
from pykinetics.io.ctml import parse_ctml

class DecaySystem(FuncEval):
    """dy/dt = -k*y, with k as the only sensitivity parameter"""

    def __init__(self, y0, k=2.0, sensitive=False, analytic_jacobian=False):
        super().__init__()
        self.y0 = np.asarray(y0, dtype=float)
        self.k = k
        if sensitive:
            self.sens_params = np.array([k])
        self.analytic_jacobian = analytic_jacobian

    def rate(self) -> float:
        return self.sens_params[0] if len(self.sens_params) else self.k

    def get_rhs(self, t, y):
        return -self.rate() * y

    def n_equations(self):
        return len(self.y0)

    def get_initial_conditions(self, t0):
        return self.y0.copy()

    def get_jacobian(self, t, y):
        if not self.analytic_jacobian:
            return None
        return -self.rate() * np.eye(len(y))

class RobertsonSystem(FuncEval):
    """Robertson's stiff chemical kinetics problem"""

    def get_rhs(self, t, y):
        y1, y2, y3 = y
        return np.array([
            -0.04*y1 + 1e4*y2*y3,
            0.04*y1 - 1e4*y2*y3 - 3e7*y2**2,
            3e7*y2**2,
        ])

    def n_equations(self):
        return 3

    def get_initial_conditions(self, t0):
        return np.array([1.0, 0.0, 0.0])

@pytest.fixture
def decay_system():
    """Five uncoupled decaying components"""
    return DecaySystem([0.0, 0.5, 2.0, 1.0, 0.0])

@pytest.fixture
def robertson_system():
    return RobertsonSystem()

@pytest.fixture
def simple_solution():
    """Return a simple Cantera Solution for testing."""
    ct = pytest.importorskip("cantera")
    return ct.Solution('gri30.yaml')

# GRI-Mech 3.0 NASA coefficients, low range then high range
NASA_COEFFS = {
    "H2": ([2.34433112e+00, 7.98052075e-03, -1.94781510e-05, 2.01572094e-08,
            -7.37611761e-12, -9.17935173e+02, 6.83010238e-01],
           [3.33727920e+00, -4.94024731e-05, 4.99456778e-07, -1.79566394e-10,
            2.00255376e-14, -9.50158922e+02, -3.20502331e+00]),
    "O2": ([3.78245636e+00, -2.99673416e-03, 9.84730201e-06, -9.68129509e-09,
            3.24372837e-12, -1.06394356e+03, 3.65767573e+00],
           [3.28253784e+00, 1.48308754e-03, -7.57966669e-07, 2.09470555e-10,
            -2.16717794e-14, -1.08845772e+03, 5.45323129e+00]),
}

# NIST Shomate coefficients for N2, 100-500 K and 500-2000 K
N2_SHOMATE = ([28.98641, 1.853978, -9.647459, 16.63537, 0.000117,
               -8.671914, 226.4168],
              [19.50583, 19.88705, -8.598535, 1.369784, 0.527601,
               -4.935202, 212.3900])

def _array(values):
    text = ", ".join(repr(float(v)) for v in values)
    return f'<floatArray name="coeffs" size="{len(values)}">{text}</floatArray>'

def nasa_xml(low, high, tmin=200.0, tmid=1000.0, tmax=3500.0):
    return (f'<NASA Tmin="{tmin}" Tmax="{tmid}" P0="100000.0">{_array(low)}</NASA>'
            f'<NASA Tmin="{tmid}" Tmax="{tmax}" P0="100000.0">{_array(high)}</NASA>')

def shomate_xml(low, high, tmin=100.0, tmid=500.0, tmax=2000.0):
    return (f'<Shomate Tmin="{tmin}" Tmax="{tmid}" P0="100000.0">{_array(low)}</Shomate>'
            f'<Shomate Tmin="{tmid}" Tmax="{tmax}" P0="100000.0">{_array(high)}</Shomate>')

def const_cp_xml(tag="const_cp", order=None, t0=298.15, h0=0.0, s0=1.9e5, cp0=2.9e4):
    order = f' order="{order}"' if order is not None else ""
    return (f'<{tag}{order} Tmin="200.0" Tmax="3000.0" P0="100000.0">'
            f'<t0>{t0}</t0><h0 units="J/kmol">{h0}</h0>'
            f'<s0 units="J/kmol/K">{s0}</s0><cp0 units="J/kmol/K">{cp0}</cp0>'
            f'</{tag}>')

THERMO_XML = {
    "NASA": lambda: nasa_xml(*NASA_COEFFS["H2"]),
    "Shomate": lambda: shomate_xml(*N2_SHOMATE),
    "const_cp": lambda: const_cp_xml(),
    "poly1": lambda: const_cp_xml(tag="poly", order=1),
    "poly2": lambda: const_cp_xml(tag="poly", order=2),
}

def species_xml(name, model=None):
    """One species node; model None leaves out the thermo node"""
    if model is None:
        return f'<species name="{name}"><atomArray>H:2</atomArray></species>'
    return f'<species name="{name}"><thermo>{THERMO_XML[model]()}</thermo></species>'

def species_array(*species, id="species_data"):
    """Parse a species array from (name, model) pairs or raw species XML"""
    body = "".join(s if isinstance(s, str) else species_xml(*s) for s in species)
    return parse_ctml(f'<speciesData id="{id}">{body}</speciesData>')
