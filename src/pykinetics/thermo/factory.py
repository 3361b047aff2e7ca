"""
Construction of species thermo managers from species specifications.

The parameterizations present in a phase are classified once, and the
factory picks the manager that handles exactly that set: a single-type
manager, or a SpeciesThermoDuo when two types are mixed.
"""
import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union
import numpy as np
from .species_thermo import SpeciesThermo, SpeciesThermoType
from .nasa import NasaThermo
from .shomate import ShomateThermo
from .simple import SimpleThermo
from .duo import SpeciesThermoDuo
from ..io.ctml import CTMLNode
from ..core.errors import (
    KineticsError, UnknownSpeciesThermoModel, UnsupportedFeatureError,
    UnknownSpeciesThermo
)

logger = logging.getLogger(__name__)

NASA = SpeciesThermoType.NASA
SHOMATE = SpeciesThermoType.SHOMATE
SIMPLE = SpeciesThermoType.SIMPLE

# Thermo node tag -> parameterization
_MODEL_TAGS = {
    "NASA": NASA,
    "Shomate": SHOMATE,
    "const_cp": SIMPLE,
    "poly": SIMPLE,
}

# Default reference pressure, Pa
ONE_ATM = 101325.0

def _species_thermo_type(sp: CTMLNode) -> SpeciesThermoType:
    """Parameterizations declared by one species"""
    if not sp.has_child("thermo"):
        raise UnknownSpeciesThermoModel(
            "get_species_thermo_types", sp.attrib("name"), "missing")
    th = sp.child("thermo")
    flags = SpeciesThermoType(0)
    for tag, model in _MODEL_TAGS.items():
        if not th.has_child(tag):
            continue
        if tag == "poly":
            order = th.child("poly").attrib("order")
            if order != "1":
                raise UnsupportedFeatureError(
                    "get_species_thermo_types",
                    f"species {sp.attrib('name')}: poly with order "
                    f"{order or '(none)'} not supported")
        flags |= model
    if not flags:
        raise UnknownSpeciesThermoModel(
            "get_species_thermo_types", sp.attrib("name"), "missing")
    return flags

def get_species_thermo_types(node: CTMLNode,
                             flags: SpeciesThermoType = SpeciesThermoType(0)
                             ) -> SpeciesThermoType:
    """
    Classify the species children of node.

    Args:
        node: species array holding ``species`` children
        flags: flags accumulated so far

    Returns:
        flags OR-ed with every parameterization found

    Raises:
        UnknownSpeciesThermoModel: a species has no thermo parameterization
        UnsupportedFeatureError: a poly parameterization has order other than 1
    """
    for sp in node.children("species"):
        flags |= _species_thermo_type(sp)
    return flags

class SpeciesThermoFactory:
    """
    Factory for species thermo managers.

    Only pairs of parameterizations can be combined; a phase mixing all
    three types, or Shomate with constant-cp, has no manager.
    """
    _factory: Optional["SpeciesThermoFactory"] = None

    _constructors: Dict[int, Callable[[], SpeciesThermo]] = {
        NASA: NasaThermo,
        SHOMATE: ShomateThermo,
        SIMPLE: SimpleThermo,
        NASA | SHOMATE: lambda: SpeciesThermoDuo(NasaThermo(), ShomateThermo()),
        NASA | SIMPLE: lambda: SpeciesThermoDuo(NasaThermo(), SimpleThermo()),
    }

    @classmethod
    def factory(cls) -> "SpeciesThermoFactory":
        """Shared factory instance"""
        if cls._factory is None:
            cls._factory = cls()
        return cls._factory

    @classmethod
    def delete_factory(cls) -> None:
        cls._factory = None

    def new_species_thermo(self, spec: Union[int, CTMLNode, Sequence[CTMLNode]]
                           ) -> SpeciesThermo:
        """
        Return a new manager for a species array node, a list of species
        array nodes, or a sum of SpeciesThermoType values.
        """
        if isinstance(spec, int):
            return self._new_for_type(spec)
        if isinstance(spec, CTMLNode):
            spec = [spec]
        flags = SpeciesThermoType(0)
        for node in spec:
            flags = get_species_thermo_types(node, flags)
        return self._new_for_type(flags)

    def new_species_thermo_opt(self, nodes: Sequence[CTMLNode]) -> SpeciesThermo:
        """
        Like new_species_thermo, but a species array containing a species
        without a thermo parameterization is skipped instead of raising.
        Other errors still propagate.
        """
        return self._new_for_type(classify_optional(nodes)[0])

    def _new_for_type(self, type_sum: int) -> SpeciesThermo:
        try:
            constructor = self._constructors[int(type_sum)]
        except KeyError:
            raise UnknownSpeciesThermo(
                "SpeciesThermoFactory.new_species_thermo", type_sum) from None
        mgr = constructor()
        logger.debug(f"species thermo types {int(type_sum)}: {mgr!r}")
        return mgr

def classify_optional(nodes: Sequence[CTMLNode]
                      ) -> Tuple[SpeciesThermoType, List[CTMLNode]]:
    """
    Classify several species arrays, skipping any array that contains a
    species without thermo data. Returns the flags and the arrays kept.
    """
    flags = SpeciesThermoType(0)
    kept = []
    for node in nodes:
        try:
            node_flags = get_species_thermo_types(node)
        except UnknownSpeciesThermoModel as e:
            logger.info(f"skipping species array {node.attrib('id')!r}: {e}")
            continue
        flags |= node_flags
        kept.append(node)
    return flags, kept

def new_species_thermo_mgr(spec, opt: bool = False) -> SpeciesThermo:
    """Create a manager with the shared factory"""
    f = SpeciesThermoFactory.factory()
    if opt:
        return f.new_species_thermo_opt(spec)
    return f.new_species_thermo(spec)

# Conversion factors to J/kmol (energy) and J/kmol/K (entropy, heat capacity)
_UNITS = {
    "": 1.0,
    "J/kmol": 1.0,
    "J/mol": 1.0e3,
    "kJ/mol": 1.0e6,
    "cal/mol": 4184.0,
    "kcal/mol": 4.184e6,
}

def _get_float(node: CTMLNode, name: str, default: float) -> float:
    if not node.has_child(name):
        return default
    child = node.child(name)
    units = child.attrib("units")
    if units.endswith("/K"):
        units = units[:-2]
    try:
        return child.fp_value() * _UNITS[units]
    except KeyError:
        raise KineticsError(
            "install_thermo_for_species", f"unknown units '{child.attrib('units')}'") from None

def _two_range_coeffs(name: str, regions: List[CTMLNode]):
    """[Tmid, low..., high...] from one or two polynomial regions"""
    if not 1 <= len(regions) <= 2:
        raise KineticsError(
            "install_thermo_for_species",
            f"species {name}: expected 1 or 2 temperature regions, "
            f"got {len(regions)}")
    regions = sorted(regions, key=lambda r: float(r.attrib("Tmin") or 0.0))
    low, high = regions[0], regions[-1]
    c_low = low.float_array("coeffs")
    c_high = high.float_array("coeffs")
    tmin = float(low.attrib("Tmin"))
    tmid = float(low.attrib("Tmax"))
    tmax = float(high.attrib("Tmax"))
    if len(regions) == 2 and float(high.attrib("Tmin")) != tmid:
        raise KineticsError(
            "install_thermo_for_species",
            f"species {name}: temperature regions are not contiguous")
    p0 = float(low.attrib("P0") or ONE_ATM)
    return np.concatenate([[tmid], c_low, c_high]), tmin, tmax, p0

def install_thermo_for_species(sp: CTMLNode, mgr: SpeciesThermo, index: int) -> None:
    """Read the thermo data of species node sp and install it in mgr."""
    name = sp.attrib("name")
    if not sp.has_child("thermo"):
        raise UnknownSpeciesThermoModel("install_thermo_for_species", name, "missing")
    th = sp.child("thermo")
    tags = [tag for tag in _MODEL_TAGS if th.has_child(tag)]
    if not tags:
        raise UnknownSpeciesThermoModel("install_thermo_for_species", name, "missing")
    if len(tags) > 1:
        raise KineticsError(
            "install_thermo_for_species",
            f"species {name} declares more than one parameterization: {tags}")
    tag = tags[0]

    if tag in ("NASA", "Shomate"):
        coeffs, tmin, tmax, p0 = _two_range_coeffs(name, th.children(tag))
    else:
        f = th.child(tag)
        if tag == "poly" and f.attrib("order") != "1":
            raise UnsupportedFeatureError(
                "install_thermo_for_species",
                f"species {name}: poly with order {f.attrib('order')} not supported")
        coeffs = [_get_float(f, "t0", 298.15), _get_float(f, "h0", 0.0),
                  _get_float(f, "s0", 0.0), _get_float(f, "cp0", 0.0)]
        tmin = float(f.attrib("Tmin") or 0.0)
        tmax = float(f.attrib("Tmax") or np.inf)
        p0 = float(f.attrib("P0") or ONE_ATM)

    mgr.install(name, index, _MODEL_TAGS[tag], coeffs, tmin, tmax, p0)

def import_species_thermo(nodes: Union[CTMLNode, Sequence[CTMLNode]],
                          opt: bool = False) -> Tuple[SpeciesThermo, List[str]]:
    """
    Build a manager for the species arrays in nodes and install every
    species, numbering them in document order.

    With opt=True, species arrays containing a species without thermo
    data are left out.

    Returns:
        the manager and the installed species names, by index
    """
    if isinstance(nodes, CTMLNode):
        nodes = [nodes]
    f = SpeciesThermoFactory.factory()
    if opt:
        flags, nodes = classify_optional(nodes)
        mgr = f.new_species_thermo(flags)
    else:
        mgr = f.new_species_thermo(nodes)

    names = []
    for node in nodes:
        for sp in node.children("species"):
            install_thermo_for_species(sp, mgr, len(names))
            names.append(sp.attrib("name"))
    mgr.initialize()
    return mgr, names
