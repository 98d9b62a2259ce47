"""
Impact Crater Formation
=======================
Holsapple & Housen (2007) pi-group scaling for the transient crater, with
paraboloid volume, rim height and ejecta estimates from Melosh (1989).

Key principle: the regime (strength or gravity) is chosen from the nominal
inputs, then every dimension is derived with full uncertainty propagation
through the scaling constants themselves.

    D = K1 * (E_eff / (rho g))^mu,   E_eff = E * sin(theta)^(1/3)
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Tuple, Union

from .propagation import derive_quantity
from .quantity import Quantity, STANDARD_GRAVITY
from .records import BundleMixin, ValidityCheck, resolve_key

logger = logging.getLogger(__name__)

REFERENCES = [
    "Holsapple, K.A. & Housen, K.R. (2007). A crater and its ejecta: An interpretation of Deep Impact",
    "Melosh, H.J. (1989). Impact Cratering: A Geologic Process",
    "Collins, G.S. et al. (2005). Earth Impact Effects Program",
]

LIMITATIONS = [
    "Scaling laws assume homogeneous target material",
    "Does not account for atmospheric effects or projectile fragmentation",
    "Derived from laboratory experiments and terrestrial crater data",
]

OBLIQUE_ANGLE_LIMIT = 15.0  # degrees


class TargetMaterialType(Enum):
    SEDIMENTARY_ROCK = "sedimentary_rock"
    CRYSTALLINE_ROCK = "crystalline_rock"
    DRY_REGOLITH = "dry_regolith"
    WET_SEDIMENT = "wet_sediment"
    ICE = "ice"


class ScalingRegime(Enum):
    STRENGTH = "strength"
    GRAVITY = "gravity"


@dataclass(frozen=True)
class TargetMaterial:
    """
    Target material for crater formation.

    Attributes:
        name: Display name
        density: kg/m³
        strength: Cohesive strength (Pa)
        porosity: Fraction 0-1
        description: Typical rock types
    """
    name: str
    density: Quantity
    strength: Quantity
    porosity: Quantity
    description: str = ""


@dataclass(frozen=True)
class CraterScalingParameters:
    k1: Quantity
    k2: Quantity
    mu: Quantity
    nu: Quantity
    min_energy: float
    max_energy: float
    min_velocity: float
    max_velocity: float
    reference: str = REFERENCES[0]


TARGET_MATERIALS: Dict[TargetMaterialType, TargetMaterial] = {
    TargetMaterialType.SEDIMENTARY_ROCK: TargetMaterial(
        name="Sedimentary Rock",
        density=Quantity(2400, 200, "kg/m³", "Melosh (1989)", "Typical sedimentary rock density"),
        strength=Quantity(50e6, 20e6, "Pa", "Holsapple & Housen (2007)",
                          "Cohesive strength of sedimentary rock"),
        porosity=Quantity(0.15, 0.05, "1", "Literature compilation",
                          "Typical porosity of sedimentary rock"),
        description="Typical sedimentary rock target (sandstone, limestone)",
    ),
    TargetMaterialType.CRYSTALLINE_ROCK: TargetMaterial(
        name="Crystalline Rock",
        density=Quantity(2700, 100, "kg/m³", "Melosh (1989)", "Typical crystalline rock density"),
        strength=Quantity(200e6, 50e6, "Pa", "Holsapple & Housen (2007)",
                          "Cohesive strength of crystalline rock"),
        porosity=Quantity(0.05, 0.02, "1", "Literature compilation",
                          "Typical porosity of crystalline rock"),
        description="Typical crystalline rock target (granite, basalt)",
    ),
    TargetMaterialType.DRY_REGOLITH: TargetMaterial(
        name="Dry Regolith",
        density=Quantity(1800, 300, "kg/m³", "Housen & Holsapple (2011)", "Dry regolith/soil density"),
        strength=Quantity(1e3, 5e2, "Pa", "Housen & Holsapple (2011)",
                          "Cohesive strength of dry regolith"),
        porosity=Quantity(0.4, 0.1, "1", "Literature compilation", "Typical porosity of dry regolith"),
        description="Dry regolith or unconsolidated material",
    ),
    TargetMaterialType.WET_SEDIMENT: TargetMaterial(
        name="Wet Sediment",
        density=Quantity(2000, 200, "kg/m³", "Housen & Holsapple (2011)",
                         "Water-saturated sediment density"),
        strength=Quantity(10e3, 5e3, "Pa", "Housen & Holsapple (2011)",
                          "Cohesive strength of wet sediment"),
        porosity=Quantity(0.3, 0.1, "1", "Literature compilation", "Typical porosity of wet sediment"),
        description="Water-saturated sediment or mud",
    ),
    TargetMaterialType.ICE: TargetMaterial(
        name="Ice",
        density=Quantity(917, 10, "kg/m³", "CRC Handbook", "Density of ice at 0°C"),
        strength=Quantity(5e6, 2e6, "Pa", "Schultz & Gault (1985)", "Cohesive strength of ice"),
        porosity=Quantity(0.0, 0.0, "1", "Assumed", "Pure ice porosity"),
        description="Pure water ice",
    ),
}

SCALING_PARAMETERS: Dict[ScalingRegime, CraterScalingParameters] = {
    ScalingRegime.STRENGTH: CraterScalingParameters(
        k1=Quantity(1.88, 0.2, "1", "Holsapple & Housen (2007)",
                    "Diameter scaling constant for strength regime"),
        k2=Quantity(0.13, 0.02, "1", "Holsapple & Housen (2007)",
                    "Depth scaling constant for strength regime"),
        mu=Quantity(0.22, 0.02, "1", "Holsapple & Housen (2007)",
                    "Scaling exponent for strength regime"),
        nu=Quantity(0.4, 0.05, "1", "Holsapple & Housen (2007)", "Velocity scaling exponent"),
        min_energy=1e6,
        max_energy=1e18,
        min_velocity=1000,
        max_velocity=30000,
    ),
    ScalingRegime.GRAVITY: CraterScalingParameters(
        k1=Quantity(1.25, 0.15, "1", "Holsapple & Housen (2007)",
                    "Diameter scaling constant for gravity regime"),
        k2=Quantity(0.25, 0.03, "1", "Holsapple & Housen (2007)",
                    "Depth scaling constant for gravity regime"),
        mu=Quantity(0.165, 0.015, "1", "Holsapple & Housen (2007)",
                    "Scaling exponent for gravity regime"),
        nu=Quantity(0.4, 0.05, "1", "Holsapple & Housen (2007)", "Velocity scaling exponent"),
        min_energy=1e12,
        max_energy=1e25,
        min_velocity=5000,
        max_velocity=50000,
    ),
}


def get_target_material(material: Union[TargetMaterialType, str]) -> TargetMaterial:
    """Preset material. Raises UnknownSpecificationKey for an unknown string key."""
    key = resolve_key(TargetMaterialType, material, "target material")
    return TARGET_MATERIALS[key]


def get_available_target_materials() -> List[str]:
    return [m.value for m in TargetMaterialType]


@dataclass(frozen=True)
class CraterResult(BundleMixin):
    """
    Crater dimensions with uncertainties.

    Attributes:
        diameter: Transient crater diameter (m)
        depth: m
        volume: Paraboloid volume (m³)
        rim_height: m
        ejecta_volume: m³
        ejecta_range: Continuous ejecta blanket extent (m)
        formation_time: s
        scaling_regime: Regime used
        target_material: Material name
        impact_angle: Input angle (degrees)
    """
    diameter: Quantity
    depth: Quantity
    volume: Quantity
    rim_height: Quantity
    ejecta_volume: Quantity
    ejecta_range: Quantity
    formation_time: Quantity
    scaling_regime: ScalingRegime
    target_material: str
    impact_angle: Quantity
    within_validity_range: bool = True
    warnings: Tuple[str, ...] = ()
    limitations: Tuple[str, ...] = ()
    references: Tuple[str, ...] = ()

    @property
    def scaling_law(self) -> str:
        return f"Holsapple & Housen (2007) - {self.scaling_regime.value} regime"


EARTH_GRAVITY = STANDARD_GRAVITY


def determine_scaling_regime(energy: Quantity, material: TargetMaterial,
                             gravity: Quantity = EARTH_GRAVITY) -> ScalingRegime:
    """
    Strength regime while the rough crater size stays below the transition
    diameter sqrt(Y / (rho g)), gravity regime above it.
    """
    rho_g = material.density.value * gravity.value
    transition = math.sqrt(material.strength.value / rho_g)
    estimate = (energy.value / rho_g) ** 0.22
    return ScalingRegime.STRENGTH if estimate < transition else ScalingRegime.GRAVITY


def _validate(energy: Quantity, velocity: Quantity, angle: Quantity,
              params: CraterScalingParameters) -> ValidityCheck:
    check = ValidityCheck(logger)

    if energy.value < params.min_energy:
        check.warn(f"Impact energy ({energy.value:.2e} J) is below validated range "
                   f"(>{params.min_energy:.2e} J)", invalidates=True)
    if energy.value > params.max_energy:
        check.warn(f"Impact energy ({energy.value:.2e} J) is above validated range "
                   f"(<{params.max_energy:.2e} J)", invalidates=True)

    if velocity.value < params.min_velocity:
        check.warn(f"Impact velocity ({velocity.value:g} m/s) is below validated range "
                   f"(>{params.min_velocity:g} m/s)")
    if velocity.value > params.max_velocity:
        check.warn(f"Impact velocity ({velocity.value:g} m/s) is above validated range "
                   f"(<{params.max_velocity:g} m/s)")

    if angle.value < OBLIQUE_ANGLE_LIMIT:
        check.warn(f"Very oblique impact ({angle.value:g}°) - scaling laws less accurate "
                   f"for grazing impacts")

    return check


def calculate_effective_energy(energy: Quantity, angle: Quantity) -> Quantity:
    """E * sin(theta)^(1/3), angle in degrees."""
    return derive_quantity(
        {'energy': energy, 'angle': angle},
        lambda x: x['energy'] * math.sin(math.radians(x['angle'])) ** (1 / 3),
        "J", "Calculated", "Angle-corrected impact energy",
    )


def calculate_crater(
    energy: Quantity,
    velocity: Quantity,
    angle: Quantity,
    material: Union[TargetMaterial, TargetMaterialType, str] = TargetMaterialType.CRYSTALLINE_ROCK,
    gravity: Quantity = EARTH_GRAVITY,
) -> CraterResult:
    """
    Crater dimensions from impact energy.

    Args:
        energy: Impact kinetic energy (J)
        velocity: Impact velocity (m/s), used for range checks
        angle: Impact angle from horizontal (degrees)
        material: Target material or preset key
        gravity: Surface gravity (m/s²)

    Returns:
        CraterResult
    """
    if not isinstance(material, TargetMaterial):
        material = get_target_material(material)

    regime = determine_scaling_regime(energy, material, gravity)
    params = SCALING_PARAMETERS[regime]
    logger.debug("Crater scaling: %.3e J into %s (%s regime)", energy.value, material.name,
                 regime.value)

    check = _validate(energy, velocity, angle, params)
    limitations = []
    if angle.value < OBLIQUE_ANGLE_LIMIT:
        limitations.append("Scaling laws derived primarily for impact angles >15°")
    limitations.extend(LIMITATIONS)

    effective_energy = calculate_effective_energy(energy, angle)

    diameter = derive_quantity(
        {'k1': params.k1, 'energy': effective_energy, 'density': material.density,
         'gravity': gravity, 'mu': params.mu},
        lambda x: x['k1'] * (x['energy'] / (x['density'] * x['gravity'])) ** x['mu'],
        "m", "Holsapple & Housen (2007) scaling law", "Crater diameter from scaling law",
    )
    depth = derive_quantity(
        {'diameter': diameter, 'k2': params.k2},
        lambda x: x['diameter'] * x['k2'],
        "m", "Holsapple & Housen (2007) scaling law", "Crater depth",
    )
    volume = derive_quantity(
        {'diameter': diameter, 'depth': depth},
        lambda x: math.pi / 8 * x['diameter'] ** 2 * x['depth'],
        "m³", "Calculated from paraboloid geometry", "Crater volume",
    )
    rim_height = derive_quantity(
        {'diameter': diameter, 'factor': Quantity(0.07, 0.02, "1", "Melosh (1989)")},
        lambda x: x['diameter'] * x['factor'],
        "m", "Melosh (1989)", "Rim height",
    )
    ejecta_volume = derive_quantity(
        {'volume': volume, 'factor': Quantity(20, 10, "1", "Melosh (1989)")},
        lambda x: x['volume'] * x['factor'],
        "m³", "Melosh (1989)", "Ejecta volume",
    )
    ejecta_range = derive_quantity(
        {'diameter': diameter, 'factor': Quantity(2.5, 0.5, "1", "Melosh (1989)")},
        lambda x: x['diameter'] * x['factor'],
        "m", "Melosh (1989)", "Continuous ejecta range",
    )
    formation_time = derive_quantity(
        {'diameter': diameter, 'gravity': gravity},
        lambda x: math.sqrt(x['diameter'] / x['gravity']),
        "s", "Calculated from dimensional analysis", "Crater formation time",
    )

    return CraterResult(
        diameter=diameter,
        depth=depth,
        volume=volume,
        rim_height=rim_height,
        ejecta_volume=ejecta_volume,
        ejecta_range=ejecta_range,
        formation_time=formation_time,
        scaling_regime=regime,
        target_material=material.name,
        impact_angle=angle,
        within_validity_range=check.within_validity_range,
        warnings=tuple(check.warnings),
        limitations=tuple(limitations),
        references=tuple(REFERENCES),
    )


def validate_against_known_craters() -> List[Dict]:
    """
    Compare the model with Barringer (Meteor) Crater.

    Agreement is 'Good' within a factor of 2 of the observed diameter,
    'Fair' within a factor of 5, else 'Poor'.
    """
    known = [
        {
            'name': "Barringer Crater (Meteor Crater)",
            'energy': Quantity(1.5e16, 5e15, "J", "Kring (2007)", "Estimated impact energy"),
            'velocity': Quantity(12000, 2000, "m/s", "Kring (2007)", "Estimated impact velocity"),
            'angle': Quantity(45, 15, "deg", "Assumed", "Typical impact angle"),
            'material': TargetMaterialType.SEDIMENTARY_ROCK,
            'observed': {'diameter': 1200.0, 'depth': 170.0},
        },
    ]

    comparisons = []
    for crater in known:
        calculated = calculate_crater(crater['energy'], crater['velocity'], crater['angle'],
                                      crater['material'])
        ratio = calculated.diameter.value / crater['observed']['diameter']
        if 0.5 < ratio < 2.0:
            agreement = "Good"
        elif 0.2 < ratio < 5.0:
            agreement = "Fair"
        else:
            agreement = "Poor"
        comparisons.append({
            'name': crater['name'],
            'observed': crater['observed'],
            'calculated': calculated,
            'agreement': agreement,
        })
    return comparisons
