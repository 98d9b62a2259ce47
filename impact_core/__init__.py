"""
Impact Core
===========
Physics core for asteroid impact and planetary defense analysis.

Key principle: every number a calculator returns is a Quantity carrying a
one-sigma uncertainty, its unit and its source.

Foundations:
- quantity: Value/uncertainty/unit record and physical constants
- units: Dimension-checked unit conversion
- propagation: Linear, nonlinear and Monte Carlo uncertainty propagation
- config: Pydantic-validated numerical settings

Calculators:
- crater: Holsapple & Housen (2007) crater scaling
- blast: Glasstone & Dolan (1977) fireball, airblast and thermal effects
- casualties: Distance-band casualty model and the full impact chain
- nuclear: Nuclear standoff deflection (Ahrens & Harris 1992)
- kinetic: Kinetic impactor deflection (Holsapple & Housen 2012)
- gravity_tractor: Gravity tractor deflection
- solar_deflection: Solar sail and surface-based radiation pressure deflection

Validation:
- validation: Validity ranges and leveled scientific disclaimers

Usage:
    from impact_core import Quantity, propagate_nonlinear, monte_carlo
    from impact_core import assess_impact, calculate_nuclear_deflection
    from impact_core.validation import validate_impact_parameters
"""

from .errors import (
    ImpactCoreError,
    InvalidUncertainty,
    UnknownUnit,
    DimensionMismatch,
    MissingPartialDerivative,
    UnknownCorrelationVariable,
    InsufficientSamples,
    UnknownSpecificationKey,
)

from .quantity import (
    Quantity,
    exact,
    relative,
    get_constant,
    PHYSICAL_CONSTANTS,
    SECONDS_PER_YEAR,
)

from .units import (
    Dimension,
    UnitDefinition,
    UNIT_DEFINITIONS,
    validate_unit,
    convert,
    convert_quantity,
    get_conversion_factor,
    are_compatible,
    get_units_of_type,
    get_supported_units,
    get_unit_info,
    format_value,
    format_quantity,
)

from .config import (
    PropagationConfig,
    DEFAULT_PROPAGATION_CONFIG,
    validate_config,
    load_config,
)

from .propagation import (
    DistributionType,
    Operation,
    SamplingVariable,
    CorrelationCoefficient,
    Contribution,
    PropagationResult,
    make_variables,
    propagate_linear,
    propagate_nonlinear,
    derive_quantity,
    monte_carlo,
    combine_independent,
    contributions_to_dataframe,
)

from .records import OrbitalElementChanges

# Impact effects
from .crater import (
    TargetMaterialType,
    TargetMaterial,
    ScalingRegime,
    CraterResult,
    get_target_material,
    calculate_crater,
)

from .blast import (
    AtmosphereType,
    AtmosphericConditions,
    BlastResult,
    get_atmospheric_conditions,
    calculate_blast_effects,
)

from .casualties import (
    DamageBands,
    CasualtyResult,
    ImpactAssessment,
    calculate_damage_bands,
    estimate_casualties,
    assess_impact,
)

# Deflection
from .nuclear import (
    NuclearDeviceType,
    TargetComposition,
    NuclearDevice,
    NuclearTarget,
    NuclearGeometry,
    NuclearDeflectionResult,
    get_device_specification,
    calculate_nuclear_deflection,
    create_optimal_standoff_geometry,
    create_nuclear_target,
)

from .kinetic import (
    ImpactorMaterial,
    KineticImpactor,
    KineticTargetMaterial,
    KineticGeometry,
    KineticImpactResult,
    SpacecraftOptimization,
    get_material_properties,
    calculate_kinetic_deflection,
    optimize_spacecraft,
    create_typical_spacecraft,
    create_head_on_geometry,
    create_dart_like_impactor,
)

from .gravity_tractor import (
    PropulsionType,
    TractorSpacecraft,
    TractorTarget,
    TractorGeometry,
    TractorMission,
    GravityTractorResult,
    calculate_gravity_tractor_deflection,
    create_target_from_basic_properties,
    create_ion_spacecraft,
    create_spacecraft,
    create_optimal_geometry,
    create_typical_mission as create_typical_tractor_mission,
)

from .solar_deflection import (
    SolarDeflectionMethod,
    SailType,
    SolarDistance,
    SolarSail,
    SolarTarget,
    SolarEnvironment,
    SolarMission,
    SolarDeflectionResult,
    calculate_solar_deflection,
    create_flat_solar_sail,
    create_sail,
    create_solar_environment,
    create_solar_target,
    create_typical_mission as create_typical_solar_mission,
)

from .validation import (
    DisclaimerLevel,
    DisclaimerCategory,
    ScientificDisclaimer,
    ScientificValidator,
    scientific_validator,
    validate_impact_parameters,
    validate_orbital_parameters,
    validate_deflection_parameters,
)

__version__ = "1.0.0"
