from typing import Dict
from .species_thermo import SpeciesThermo, SpeciesThermoType
from ..core.errors import KineticsError, UnknownSpeciesThermoModel

class SpeciesThermoDuo(SpeciesThermo):
    """
    Manager for a phase whose species use exactly two parameterizations.

    Each species is installed into whichever of the two sub-managers
    handles its type, so each sub-manager stays homogeneous and evaluates
    its species without per-species dispatch. Only two sub-managers are
    supported.
    """

    def __init__(self, thermo1: SpeciesThermo, thermo2: SpeciesThermo):
        super().__init__()
        if thermo1.thermo_type & thermo2.thermo_type:
            raise KineticsError(
                "SpeciesThermoDuo",
                "sub-managers must handle different parameterizations")
        self.thermo1 = thermo1
        self.thermo2 = thermo2
        self.thermo_type = thermo1.thermo_type | thermo2.thermo_type
        self._owner: Dict[int, SpeciesThermo] = {}

    def __repr__(self) -> str:
        return (f"SpeciesThermoDuo({self.thermo1.__class__.__name__}, "
                f"{self.thermo2.__class__.__name__})")

    def install(self, name, index, type, coeffs, min_temp, max_temp, ref_pressure):
        type = SpeciesThermoType(type)
        if type == self.thermo1.thermo_type:
            mgr = self.thermo1
        elif type == self.thermo2.thermo_type:
            mgr = self.thermo2
        else:
            raise UnknownSpeciesThermoModel(
                "SpeciesThermoDuo.install", name, str(int(type)))
        if index in self._owner:
            raise KineticsError(
                "SpeciesThermoDuo.install",
                f"species index {index} ({name}) is already installed")
        mgr.install(name, index, type, coeffs, min_temp, max_temp, ref_pressure)
        self._owner[index] = mgr

    def manager_for(self, k: int) -> SpeciesThermo:
        """Sub-manager that owns species k"""
        try:
            return self._owner[k]
        except KeyError:
            raise KineticsError(
                "SpeciesThermoDuo", f"species {k} is not installed") from None

    def initialize(self) -> None:
        self.thermo1.initialize()
        self.thermo2.initialize()
        self._initialized = True

    def update(self, t, cp_R, h_RT, s_R) -> None:
        self.thermo1.update(t, cp_R, h_RT, s_R)
        self.thermo2.update(t, cp_R, h_RT, s_R)

    def update_one(self, k, t, cp_R, h_RT, s_R) -> None:
        self.manager_for(k).update_one(k, t, cp_R, h_RT, s_R)

    def min_temp(self, k=-1) -> float:
        if k >= 0:
            return self.manager_for(k).min_temp(k)
        return max(self.thermo1.min_temp(), self.thermo2.min_temp())

    def max_temp(self, k=-1) -> float:
        if k >= 0:
            return self.manager_for(k).max_temp(k)
        return min(self.thermo1.max_temp(), self.thermo2.max_temp())

    def ref_pressure(self, k=-1) -> float:
        if k >= 0:
            return self.manager_for(k).ref_pressure(k)
        return self.thermo1.ref_pressure() or self.thermo2.ref_pressure()

    def report_type(self, k) -> SpeciesThermoType:
        return self.manager_for(k).report_type(k)

    def report_params(self, k) -> dict:
        return self.manager_for(k).report_params(k)

    def n_species(self) -> int:
        return max(self.thermo1.n_species(), self.thermo2.n_species())
