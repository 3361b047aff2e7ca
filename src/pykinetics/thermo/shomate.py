import numpy as np
from scipy.constants import R
from .species_thermo import HomogeneousSpeciesThermo, SpeciesThermoType

class ShomateThermo(HomogeneousSpeciesThermo):
    """
    Shomate equations in two temperature ranges, NIST form.

    Coefficients per species: [Tmid, A..G (low), A..G (high)], with cp in
    J/mol/K and H in kJ/mol. With t = T/1000:

        cp = A + B*t + C*t^2 + D*t^3 + E/t^2
        H  = A*t + B*t^2/2 + C*t^3/3 + D*t^4/4 - E/t + F
        S  = A*ln(t) + B*t + C*t^2/2 + D*t^3/3 - E/(2*t^2) + G
    """
    thermo_type = SpeciesThermoType.SHOMATE
    n_coeffs = 15

    def _evaluate(self, t, c):
        low = (t <= c[:, 0])[:, np.newaxis]
        A, B, C, D, E, F, G = np.where(low, c[:, 1:8], c[:, 8:15]).T

        tt = t / 1000.0
        cp = A + B*tt + C*tt**2 + D*tt**3 + E/tt**2
        h = A*tt + B*tt**2/2 + C*tt**3/3 + D*tt**4/4 - E/tt + F
        s = A*np.log(tt) + B*tt + C*tt**2/2 + D*tt**3/3 - E/(2*tt**2) + G

        # h is in kJ/mol, so 1000*h/(R*T) = h/(R*tt)
        return cp / R, h / (R * tt), s / R
