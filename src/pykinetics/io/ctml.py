"""
Read-only access to CTML species specifications.

Wraps xml.etree.ElementTree elements with the small set of queries the
thermo factory needs: child lookup by name, attributes and numeric arrays.
"""
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Union
import numpy as np
from ..core.errors import KineticsError

class CTMLNode:
    """One element of a CTML document"""

    def __init__(self, element: ET.Element):
        self._element = element

    def __repr__(self) -> str:
        return f"CTMLNode({self.name()!r}, {dict(self._element.attrib)!r})"

    def name(self) -> str:
        """Tag name"""
        return self._element.tag

    def has_child(self, name: str) -> bool:
        return self._element.find(name) is not None

    def child(self, name: str) -> "CTMLNode":
        """First child with the given tag"""
        element = self._element.find(name)
        if element is None:
            raise KineticsError(
                "CTMLNode.child",
                f"node {self.name()} ({self.attrib('name')}) has no child {name}")
        return CTMLNode(element)

    def children(self, name: str = None) -> List["CTMLNode"]:
        """All children, or only those with the given tag"""
        if name is None:
            return [CTMLNode(e) for e in self._element]
        return [CTMLNode(e) for e in self._element.findall(name)]

    def attrib(self, name: str) -> str:
        """Attribute value, or an empty string if absent"""
        return self._element.get(name, "")

    def has_attrib(self, name: str) -> bool:
        return name in self._element.attrib

    def value(self) -> str:
        return (self._element.text or "").strip()

    def fp_value(self) -> float:
        return float(self.value())

    def float_array(self, name: str) -> np.ndarray:
        """Values of the floatArray child whose name attribute matches"""
        for node in self.children("floatArray"):
            if node.attrib("name") == name:
                text = node.value().replace(",", " ")
                values = np.array([float(v) for v in text.split()])
                size = node.attrib("size")
                if size and int(size) != len(values):
                    raise KineticsError(
                        "CTMLNode.float_array",
                        f"array {name} declares size {size} "
                        f"but holds {len(values)} values")
                return values
        raise KineticsError(
            "CTMLNode.float_array", f"node {self.name()} has no array {name}")

def parse_ctml(text: str) -> CTMLNode:
    """Parse a CTML document from a string"""
    return CTMLNode(ET.fromstring(text))

def read_ctml(path: Union[str, Path]) -> CTMLNode:
    """Parse a CTML document from a file"""
    return CTMLNode(ET.parse(str(path)).getroot())
