import numpy as np
from scipy.constants import R
from .species_thermo import HomogeneousSpeciesThermo, SpeciesThermoType

# Gas constant, J/kmol/K
GAS_CONSTANT = R * 1000.0

class SimpleThermo(HomogeneousSpeciesThermo):
    """
    Constant heat capacity.

    Coefficients per species: [t0 (K), h0 (J/kmol), s0 (J/kmol/K),
    cp0 (J/kmol/K)], the enthalpy and entropy being those at t0.
    """
    thermo_type = SpeciesThermoType.SIMPLE
    n_coeffs = 4

    def _evaluate(self, t, c):
        t0, h0, s0, cp0 = c.T
        cp_R = cp0 / GAS_CONSTANT
        h_RT = (h0 + cp0 * (t - t0)) / (GAS_CONSTANT * t)
        s_R = (s0 + cp0 * np.log(t / t0)) / GAS_CONSTANT
        return cp_R, h_RT, s_R
