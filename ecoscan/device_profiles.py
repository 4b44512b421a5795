"""
Static recyclability reference data.

Everything here is built once at import and never mutated: the per-device
profile table, the two default material lists used for unrecognised devices,
the generic guidance templates and the ImageNet indices treated as electronics.
"""
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .models import DeviceMaterialsProfile, Material


class DeviceType(str, Enum):
    SMARTPHONE = "Smartphone"
    LAPTOP = "Laptop"
    TABLET = "Tablet"
    TV = "TV"
    PRINTER = "Printer"
    HEADPHONES = "Headphones"


# Labels offered by the device picker. Only the ones in DeviceType have a profile;
# the rest take the generic image path.
SUGGESTED_DEVICE_TYPES: Tuple[str, ...] = (
    "Smartphone",
    "Laptop",
    "Tablet",
    "Desktop Computer",
    "Monitor",
    "Printer",
    "TV",
    "Game Console",
    "Camera",
    "Headphones",
    "Speaker",
    "Router",
    "External Hard Drive",
    "Keyboard",
    "Mouse",
    "Microwave",
    "Refrigerator",
    "Other",
)

# ImageNet-1k class indices counted as electronic devices
ELECTRONIC_DEVICE_INDICES = frozenset([474] + list(range(479, 501)))


def _materials(*rows: Tuple[str, bool, float]) -> Tuple[Material, ...]:
    return tuple(Material(name=name, recyclable=recyclable, percentage=pct) for name, recyclable, pct in rows)


DEFAULT_RECYCLABLE_MATERIALS = _materials(
    ("Plastic Components", True, 40),
    ("Metal Components", True, 30),
    ("Circuit Boards", True, 20),
    ("Other Materials", False, 10),
)

DEFAULT_NON_RECYCLABLE_MATERIALS = _materials(
    ("Mixed Materials", False, 60),
    ("Plastic (Type 7)", False, 25),
    ("Metal Alloys", True, 15),
)

RECYCLABLE_INSTRUCTIONS = (
    "This device can be recycled at your local electronics recycling center. "
    "Remove any batteries before recycling."
)
RECYCLABLE_IMPACT = (
    "Recycling this device can save energy and reduce greenhouse gas emissions. "
    "It also prevents harmful materials from entering landfills."
)
NON_RECYCLABLE_INSTRUCTIONS = (
    "This device contains materials that are difficult to recycle. "
    "Please take it to a specialized e-waste facility for proper disposal."
)
NON_RECYCLABLE_IMPACT = (
    "Improper disposal of this device can lead to soil and water contamination. "
    "The materials can take hundreds of years to decompose."
)


def generic_guidance(recyclable: bool) -> Tuple[str, str]:
    """Return (disposal_instructions, environmental_impact) for the generic path."""
    if recyclable:
        return RECYCLABLE_INSTRUCTIONS, RECYCLABLE_IMPACT
    return NON_RECYCLABLE_INSTRUCTIONS, NON_RECYCLABLE_IMPACT


def default_materials(recyclable: bool) -> Tuple[Material, ...]:
    return DEFAULT_RECYCLABLE_MATERIALS if recyclable else DEFAULT_NON_RECYCLABLE_MATERIALS


_PROFILES = {
    DeviceType.SMARTPHONE: DeviceMaterialsProfile(
        recyclable=True,
        materials=_materials(
            ("Glass (Screen)", True, 20),
            ("Aluminum (Case)", True, 35),
            ("Lithium Battery", True, 25),
            ("Circuit Board", True, 15),
            ("Plastic Components", True, 5),
        ),
        disposal_instructions=(
            "Remove the battery if possible. Take to an electronics recycling center "
            "or participate in manufacturer take-back programs."
        ),
        environmental_impact=(
            "Smartphones contain valuable metals like gold, silver, and copper that can be recovered. "
            "Proper recycling prevents toxic materials from entering landfills."
        ),
    ),
    DeviceType.LAPTOP: DeviceMaterialsProfile(
        recyclable=True,
        materials=_materials(
            ("Aluminum/Metal Case", True, 30),
            ("LCD Screen", True, 20),
            ("Lithium Battery", True, 25),
            ("Circuit Board", True, 15),
            ("Plastic Components", True, 10),
        ),
        disposal_instructions=(
            "Back up your data and perform a factory reset. Remove the battery if possible. "
            "Take to an electronics recycling center or retailer with a take-back program."
        ),
        environmental_impact=(
            "Laptops contain valuable materials that can be recovered. Recycling one laptop saves "
            "the energy equivalent to the electricity used by 3.8 American homes in a year."
        ),
    ),
    DeviceType.TABLET: DeviceMaterialsProfile(
        recyclable=True,
        materials=_materials(
            ("Glass (Screen)", True, 25),
            ("Aluminum/Metal", True, 30),
            ("Lithium Battery", True, 25),
            ("Circuit Board", True, 15),
            ("Plastic Components", True, 5),
        ),
        disposal_instructions=(
            "Back up your data and perform a factory reset. Take to an electronics recycling center "
            "or participate in manufacturer take-back programs."
        ),
        environmental_impact=(
            "Tablets contain rare earth elements and precious metals. Recycling helps conserve "
            "these resources and prevents environmental contamination."
        ),
    ),
    DeviceType.TV: DeviceMaterialsProfile(
        recyclable=True,
        materials=_materials(
            ("Glass Screen", True, 60),
            ("Plastic Housing", True, 20),
            ("Circuit Boards", True, 10),
            ("Metal Components", True, 10),
        ),
        disposal_instructions=(
            "Due to size, TVs often require special handling. Many retailers offer recycling when "
            "purchasing a new TV, or take to a designated e-waste facility."
        ),
        environmental_impact=(
            "Older TVs may contain lead and mercury. Proper recycling prevents these toxins from "
            "leaching into soil and groundwater."
        ),
    ),
    DeviceType.PRINTER: DeviceMaterialsProfile(
        recyclable=True,
        materials=_materials(
            ("Plastic Housing", True, 60),
            ("Circuit Boards", True, 15),
            ("Metal Components", True, 20),
            ("Ink/Toner Residue", False, 5),
        ),
        disposal_instructions=(
            "Remove and recycle ink or toner cartridges separately. Many manufacturers and office "
            "supply stores offer take-back programs for both printers and cartridges."
        ),
        environmental_impact=(
            "Printer cartridges can take 450-1000 years to decompose in landfills. Recycling them "
            "saves plastic and metal resources."
        ),
    ),
    DeviceType.HEADPHONES: DeviceMaterialsProfile(
        recyclable=True,
        materials=_materials(
            ("Plastic Components", True, 45),
            ("Metal Components", True, 30),
            ("Foam/Fabric", False, 15),
            ("Wiring", True, 10),
        ),
        disposal_instructions=(
            "Take to an electronics recycling center. Some manufacturers like Apple and Sony have "
            "take-back programs for their audio products."
        ),
        environmental_impact=(
            "Recycling headphones recovers valuable metals and reduces plastic waste in landfills."
        ),
    ),
}

_missing = set(DeviceType) - set(_PROFILES)
if _missing:
    raise RuntimeError(f"Device types without a materials profile: {sorted(m.value for m in _missing)}")

DEVICE_PROFILES: Mapping[DeviceType, DeviceMaterialsProfile] = MappingProxyType(_PROFILES)


def lookup_profile(label: Optional[str]) -> Optional[DeviceMaterialsProfile]:
    """Exact, case-sensitive lookup. Unknown or missing labels return None."""
    if not label:
        return None
    try:
        device_type = DeviceType(label)
    except ValueError:
        return None
    return DEVICE_PROFILES[device_type]
