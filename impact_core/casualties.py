"""
Casualty Estimation
===================
Distance-band casualty model for a ground impact. Damage bands are sized
from the crater diameter and the seismic magnitude of the impact; a fixed
set of rings around ground zero is populated from a uniform density and
each ring takes the mortality of the band its outer edge falls in.

Key principle: mortality is a step function of distance. There is no
smoothing between bands, so totals jump when a band edge crosses a ring.

Bands (D = crater diameter in km):
    crater            D / 2        mortality 1.0
    impact region     2 D          0.8
    demolished area   5 D          0.3
    seismic damage    0.3 R_felt   0.05
    felt radius       R_felt       0.001
    beyond            -            0
"""

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple, Union

import pandas as pd

from .blast import AtmosphereType, AtmosphericConditions, BlastResult, calculate_blast_effects
from .crater import CraterResult, TargetMaterial, TargetMaterialType, calculate_crater
from .propagation import derive_quantity
from .quantity import Quantity
from .records import BundleMixin, ValidityCheck, scaled

logger = logging.getLogger(__name__)

RING_DISTANCES_KM = (1, 5, 10, 25, 50, 100)

MORTALITY_CRATER = 1.0
MORTALITY_IMPACT_REGION = 0.8
MORTALITY_DEMOLISHED = 0.3
MORTALITY_SEISMIC = 0.05
MORTALITY_INDIRECT = 0.001

INJURED_PER_FATALITY = 2.0
DISPLACED_FRACTION = 0.8

REFERENCES = [
    "Collins, G.S. et al. (2005). Earth Impact Effects Program",
    "Ben-Menahem, A. (1975). Source parameters of the Siberian explosion of June 30, 1908",
    "Glasstone, S. & Dolan, P.J. (1977). The Effects of Nuclear Weapons",
]


@dataclass(frozen=True)
class DamageBands(BundleMixin):
    """
    Outer radii of the damage bands, all in km.

    Attributes:
        crater_radius: D / 2
        impact_region_radius: 2 D
        demolished_radius: 5 D
        seismic_magnitude: Richter-equivalent magnitude
        felt_radius: Radius within which shaking is felt
        seismic_damage_radius: 0.3 * felt radius
    """
    crater_radius: Quantity
    impact_region_radius: Quantity
    demolished_radius: Quantity
    seismic_magnitude: Quantity
    felt_radius: Quantity
    seismic_damage_radius: Quantity


@dataclass(frozen=True)
class RingCasualties(BundleMixin):
    distance: float                 # outer edge, km
    population: Quantity
    fatalities: Quantity
    mortality_rate: float
    survival_rate: float            # percent


@dataclass(frozen=True)
class CasualtyResult(BundleMixin):
    """Casualty totals over all rings plus the per-ring breakdown."""
    bands: DamageBands
    rings: Tuple[RingCasualties, ...]
    fatalities: Quantity
    injured: Quantity
    displaced: Quantity
    exposed_population: Quantity
    within_validity_range: bool = True
    warnings: Tuple[str, ...] = ()
    references: Tuple[str, ...] = ()

    def to_dataframe(self) -> pd.DataFrame:
        """Per-ring table, innermost ring first."""
        return pd.DataFrame(
            [
                {
                    'distance_km': r.distance,
                    'population': r.population.value,
                    'fatalities': r.fatalities.value,
                    'fatalities_uncertainty': r.fatalities.uncertainty,
                    'mortality_rate': r.mortality_rate,
                    'survival_rate_pct': r.survival_rate,
                }
                for r in self.rings
            ],
            columns=['distance_km', 'population', 'fatalities', 'fatalities_uncertainty',
                     'mortality_rate', 'survival_rate_pct'],
        )


def calculate_seismic_magnitude(energy: Quantity) -> Quantity:
    """M = max(0, 0.67 log10 E - 5.87), E in joules. Zero for E <= 0."""
    return derive_quantity(
        {'energy': energy},
        lambda x: max(0.0, 0.67 * math.log10(x['energy']) - 5.87) if x['energy'] > 0 else 0.0,
        "1", "Schultz & Gault (1975) energy-magnitude relation", "Seismic magnitude",
    )


def calculate_damage_bands(crater_diameter: Quantity, energy: Quantity) -> DamageBands:
    """
    Damage band radii from the crater diameter (m) and impact energy (J).
    """
    diameter_km = crater_diameter.rebind("km", 1e-3)
    magnitude = calculate_seismic_magnitude(energy)
    felt = derive_quantity(
        {'magnitude': magnitude},
        lambda x: 10 ** ((x['magnitude'] - 2) / 3) * 100,
        "km", "Empirical felt-area relation", "Felt radius",
    )
    return DamageBands(
        crater_radius=scaled(diameter_km, 0.5, "km", "Crater geometry", "Crater radius"),
        impact_region_radius=scaled(diameter_km, 2.0, "km", "Crater geometry",
                                    "Impact region radius"),
        demolished_radius=scaled(diameter_km, 5.0, "km", "Crater geometry",
                                 "Demolished area radius"),
        seismic_magnitude=magnitude,
        felt_radius=felt,
        seismic_damage_radius=scaled(felt, 0.3, "km", "Empirical felt-area relation",
                                     "Seismic damage radius"),
    )


def mortality_rate(distance_km: float, bands: DamageBands) -> float:
    """Mortality of the band containing `distance_km`."""
    if distance_km <= bands.crater_radius.value:
        return MORTALITY_CRATER
    if distance_km <= bands.impact_region_radius.value:
        return MORTALITY_IMPACT_REGION
    if distance_km <= bands.demolished_radius.value:
        return MORTALITY_DEMOLISHED
    if distance_km <= bands.seismic_damage_radius.value:
        return MORTALITY_SEISMIC
    if distance_km <= bands.felt_radius.value:
        return MORTALITY_INDIRECT
    return 0.0


def estimate_casualties(bands: DamageBands, population_density: Quantity) -> CasualtyResult:
    """
    Casualties in the fixed rings around ground zero.

    Args:
        bands: Damage band radii
        population_density: Uniform density (people/km²)

    Returns:
        CasualtyResult
    """
    check = ValidityCheck(logger)
    if population_density.value < 0:
        check.warn(f"Population density ({population_density.value:g} people/km²) "
                   f"is negative", invalidates=True)
    outermost = RING_DISTANCES_KM[-1]
    if bands.felt_radius.value > outermost:
        check.warn(f"Felt radius ({bands.felt_radius.value:.0f} km) extends beyond the "
                   f"outermost ring ({outermost} km); population further out is not counted")

    rings = []
    weighted_area = 0.0
    inner = 0.0
    for distance in RING_DISTANCES_KM:
        area = math.pi * (distance ** 2 - inner ** 2)
        rate = mortality_rate(distance, bands)
        population = scaled(population_density, area, "people", "Density times annulus area",
                            f"Population within {inner:g}-{distance:g} km")
        fatalities = scaled(population, rate, "people", "Band mortality",
                            f"Fatalities within {inner:g}-{distance:g} km")
        if population.value > 0:
            survival = (population.value - fatalities.value) / population.value * 100
        else:
            survival = 100.0
        rings.append(RingCasualties(distance, population, fatalities, rate, survival))
        weighted_area += area * rate
        inner = distance

    fatalities = scaled(population_density, weighted_area, "people",
                        "Distance-band mortality model", "Immediate fatalities")
    exposed = scaled(population_density, math.pi * outermost ** 2, "people",
                     "Density times ring area", "Exposed population")

    return CasualtyResult(
        bands=bands,
        rings=tuple(rings),
        fatalities=fatalities,
        injured=scaled(fatalities, INJURED_PER_FATALITY, "people",
                       "2:1 injured to fatality ratio", "Injured"),
        displaced=scaled(exposed, DISPLACED_FRACTION, "people",
                         "80% of exposed population", "Displaced population"),
        exposed_population=exposed,
        within_validity_range=check.within_validity_range,
        warnings=tuple(check.warnings),
        references=tuple(REFERENCES),
    )


# =============================================================================
# FULL CHAIN
# =============================================================================

@dataclass(frozen=True)
class ImpactAssessment(BundleMixin):
    """Energy, crater, blast and casualties for one impact scenario."""
    mass: Quantity
    energy: Quantity
    crater: CraterResult
    blast: BlastResult
    casualties: CasualtyResult
    within_validity_range: bool = True
    warnings: Tuple[str, ...] = ()
    references: Tuple[str, ...] = ()


def calculate_impactor_mass(diameter: Quantity, density: Quantity) -> Quantity:
    """Sphere of the given diameter (m) and density (kg/m³)."""
    return derive_quantity(
        {'diameter': diameter, 'density': density},
        lambda x: x['density'] * math.pi / 6 * x['diameter'] ** 3,
        "kg", "Spherical impactor", "Impactor mass",
    )


def calculate_impact_energy(mass: Quantity, velocity: Quantity) -> Quantity:
    """Kinetic energy 0.5 m v² (J)."""
    return derive_quantity(
        {'mass': mass, 'velocity': velocity},
        lambda x: 0.5 * x['mass'] * x['velocity'] ** 2,
        "J", "Kinetic energy", "Impact energy",
    )


def assess_impact(
    diameter: Quantity,
    density: Quantity,
    velocity: Quantity,
    angle: Quantity,
    population_density: Quantity,
    material: Union[TargetMaterial, TargetMaterialType, str] = TargetMaterialType.CRYSTALLINE_ROCK,
    atmosphere: Union[AtmosphericConditions, AtmosphereType, str] = AtmosphereType.STANDARD,
    burst_altitude: Optional[Quantity] = None,
) -> ImpactAssessment:
    """
    Chain energy -> crater -> blast -> casualties for a spherical impactor.

    Args:
        diameter: Impactor diameter (m)
        density: Impactor density (kg/m³)
        velocity: Impact velocity (m/s)
        angle: Impact angle from horizontal (degrees)
        population_density: people/km² around ground zero
        material: Target material
        atmosphere: Atmospheric conditions for the blast
        burst_altitude: Height of burst (m), surface burst when None

    Returns:
        ImpactAssessment whose warnings collect every stage's warnings
    """
    logger.debug("Impact assessment: %.0f m impactor at %.0f m/s", diameter.value, velocity.value)

    mass = calculate_impactor_mass(diameter, density)
    energy = calculate_impact_energy(mass, velocity)

    crater = calculate_crater(energy, velocity, angle, material)
    blast = calculate_blast_effects(energy, burst_altitude, atmosphere)
    bands = calculate_damage_bands(crater.diameter, energy)
    casualties = estimate_casualties(bands, population_density)

    warnings = crater.warnings + blast.warnings + casualties.warnings
    references = tuple(dict.fromkeys(crater.references + blast.references + casualties.references))
    return ImpactAssessment(
        mass=mass,
        energy=energy,
        crater=crater,
        blast=blast,
        casualties=casualties,
        within_validity_range=(crater.within_validity_range and blast.within_validity_range
                               and casualties.within_validity_range),
        warnings=warnings,
        references=references,
    )
