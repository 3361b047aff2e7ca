"""
Species reference-state thermodynamic property managers.

A manager holds the parameterizations of the species of one phase and
evaluates the dimensionless reference-state properties cp/R, h/RT and
s/R. Arrays passed to update() are indexed by species index.
"""
from abc import abstractmethod
from enum import IntFlag
from typing import Dict, List, Tuple
import numpy as np
from ..core.base import ThermoComponent
from ..core.errors import KineticsError, UnknownSpeciesThermoModel

class SpeciesThermoType(IntFlag):
    """Parameterization tags. Distinct powers of two so sums identify sets."""
    NASA = 4
    SHOMATE = 8
    SIMPLE = 16

class SpeciesThermo(ThermoComponent):
    """Interface shared by all species thermo managers"""
    thermo_type = SpeciesThermoType(0)

    @abstractmethod
    def install(self, name: str, index: int, type: SpeciesThermoType,
                coeffs, min_temp: float, max_temp: float,
                ref_pressure: float) -> None:
        """
        Install the parameterization of one species.

        Args:
            name: species name, used in error messages
            index: species index in the phase
            type: parameterization tag
            coeffs: parameterization coefficients
            min_temp: minimum temperature of validity (K)
            max_temp: maximum temperature of validity (K)
            ref_pressure: reference pressure (Pa)
        """
        pass

    @abstractmethod
    def update_one(self, k: int, t: float, cp_R: np.ndarray,
                   h_RT: np.ndarray, s_R: np.ndarray) -> None:
        """Evaluate species k only"""
        pass

    @abstractmethod
    def min_temp(self, k: int = -1) -> float:
        """Minimum valid temperature of species k, or of all species if k < 0"""
        pass

    @abstractmethod
    def max_temp(self, k: int = -1) -> float:
        """Maximum valid temperature of species k, or of all species if k < 0"""
        pass

    @abstractmethod
    def ref_pressure(self, k: int = -1) -> float:
        pass

    @abstractmethod
    def report_type(self, k: int) -> SpeciesThermoType:
        """Parameterization tag of species k"""
        pass

    @abstractmethod
    def report_params(self, k: int) -> dict:
        pass

    @abstractmethod
    def n_species(self) -> int:
        """One more than the highest installed species index"""
        pass

    def properties(self, t: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Evaluate all installed species into new arrays (cp/R, h/RT, s/R)"""
        n = self.n_species()
        cp_R, h_RT, s_R = np.zeros(n), np.zeros(n), np.zeros(n)
        self.update(t, cp_R, h_RT, s_R)
        return cp_R, h_RT, s_R

class HomogeneousSpeciesThermo(SpeciesThermo):
    """
    Manager for species that all share one parameterization.

    Coefficients are packed into a single array on initialize() so that
    update() evaluates every species in one vectorized pass.
    """
    n_coeffs = 0

    def __init__(self):
        super().__init__()
        self._slot: Dict[int, int] = {}  # species index -> row
        self._names: List[str] = []
        self._indices: List[int] = []
        self._coeff_rows: List[np.ndarray] = []
        self._tlow: List[float] = []
        self._thigh: List[float] = []
        self._p0 = None
        self._k = np.zeros(0, dtype=int)
        self._c = np.zeros((0, self.n_coeffs))

    def install(self, name, index, type, coeffs, min_temp, max_temp, ref_pressure):
        if SpeciesThermoType(type) != self.thermo_type:
            raise UnknownSpeciesThermoModel(
                f"{self.__class__.__name__}.install", name, str(int(type)))
        coeffs = np.array(coeffs, dtype=float)
        if coeffs.shape != (self.n_coeffs,):
            raise KineticsError(
                f"{self.__class__.__name__}.install",
                f"species {name}: expected {self.n_coeffs} coefficients, "
                f"got {coeffs.size}")
        if index in self._slot:
            raise KineticsError(
                f"{self.__class__.__name__}.install",
                f"species index {index} ({name}) is already installed")
        if self._p0 is not None and ref_pressure != self._p0:
            raise KineticsError(
                f"{self.__class__.__name__}.install",
                f"species {name}: reference pressure {ref_pressure} differs "
                f"from {self._p0}")
        self._p0 = float(ref_pressure)
        self._slot[index] = len(self._indices)
        self._names.append(name)
        self._indices.append(index)
        self._coeff_rows.append(coeffs)
        self._tlow.append(float(min_temp))
        self._thigh.append(float(max_temp))
        self._initialized = False

    def initialize(self) -> None:
        """Pack installed coefficients for evaluation"""
        self._k = np.array(self._indices, dtype=int)
        if self._coeff_rows:
            self._c = np.vstack(self._coeff_rows)
        else:
            self._c = np.zeros((0, self.n_coeffs))
        self._initialized = True

    @abstractmethod
    def _evaluate(self, t: float, c: np.ndarray):
        """cp/R, h/RT and s/R for each row of coefficients c"""
        pass

    def update(self, t, cp_R, h_RT, s_R) -> None:
        if not self._initialized:
            self.initialize()
        if not len(self._k):
            return
        cp, h, s = self._evaluate(t, self._c)
        cp_R[self._k] = cp
        h_RT[self._k] = h
        s_R[self._k] = s

    def update_one(self, k, t, cp_R, h_RT, s_R) -> None:
        if not self._initialized:
            self.initialize()
        row = self._row(k)
        cp, h, s = self._evaluate(t, self._c[row:row + 1])
        cp_R[k] = cp[0]
        h_RT[k] = h[0]
        s_R[k] = s[0]

    def _row(self, k: int) -> int:
        try:
            return self._slot[k]
        except KeyError:
            raise KineticsError(
                f"{self.__class__.__name__}", f"species {k} is not installed") from None

    def min_temp(self, k=-1) -> float:
        if k >= 0:
            return self._tlow[self._row(k)]
        return max(self._tlow, default=0.0)

    def max_temp(self, k=-1) -> float:
        if k >= 0:
            return self._thigh[self._row(k)]
        return min(self._thigh, default=np.inf)

    def ref_pressure(self, k=-1) -> float:
        if k >= 0:
            self._row(k)
        return self._p0 if self._p0 is not None else 0.0

    def report_type(self, k) -> SpeciesThermoType:
        self._row(k)
        return self.thermo_type

    def report_params(self, k) -> dict:
        row = self._row(k)
        return {
            "name": self._names[row],
            "type": self.thermo_type,
            "coeffs": self._coeff_rows[row].copy(),
            "min_temp": self._tlow[row],
            "max_temp": self._thigh[row],
            "ref_pressure": self._p0,
        }

    def n_species(self) -> int:
        return max(self._indices, default=-1) + 1

    def species_indices(self) -> List[int]:
        """Installed species indices, in install order"""
        return list(self._indices)
