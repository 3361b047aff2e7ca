import numpy as np
from .species_thermo import HomogeneousSpeciesThermo, SpeciesThermoType

class NasaThermo(HomogeneousSpeciesThermo):
    """
    NASA 7-coefficient polynomials in two temperature ranges.

    Coefficients per species: [Tmid, a0..a6 (low), a0..a6 (high)]

        cp/R = a0 + a1*T + a2*T^2 + a3*T^3 + a4*T^4
        h/RT = a0 + a1/2*T + a2/3*T^2 + a3/4*T^3 + a4/5*T^4 + a5/T
        s/R  = a0*ln(T) + a1*T + a2/2*T^2 + a3/3*T^3 + a4/4*T^4 + a6
    """
    thermo_type = SpeciesThermoType.NASA
    n_coeffs = 15

    def _evaluate(self, t, c):
        low = (t <= c[:, 0])[:, np.newaxis]
        a = np.where(low, c[:, 1:8], c[:, 8:15])

        tt = np.array([1.0, t, t**2, t**3, t**4])
        cp_R = a[:, :5] @ tt
        h_RT = a[:, :5] @ (tt / np.arange(1, 6)) + a[:, 5] / t
        s_R = (a[:, 0] * np.log(t)
               + a[:, 1:5] @ (tt[1:] / np.arange(1, 5))
               + a[:, 6])
        return cp_R, h_RT, s_R
