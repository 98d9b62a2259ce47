"""
Scientific Validation and Disclaimers
=====================================
Validity ranges for the physics models, range checks that produce leveled
disclaimers, and the reference database cited by them.

Key principle: a disclaimer never blocks a calculation. It describes how
far the inputs are from the ground the models were validated on so that a
caller can decide what to show.

Levels, least to most severe: INFO < WARNING < CAUTION < CRITICAL.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional, Union

from .records import BundleMixin

logger = logging.getLogger(__name__)

DATA_MAX_AGE = timedelta(days=365)


class DisclaimerLevel(Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    CAUTION = "CAUTION"
    CRITICAL = "CRITICAL"

    @property
    def priority(self) -> int:
        return _LEVEL_PRIORITY[self]


_LEVEL_PRIORITY = {
    DisclaimerLevel.INFO: 1,
    DisclaimerLevel.WARNING: 2,
    DisclaimerLevel.CAUTION: 3,
    DisclaimerLevel.CRITICAL: 4,
}


class DisclaimerCategory(Enum):
    ACCURACY = "ACCURACY"
    VALIDITY = "VALIDITY"
    ASSUMPTION = "ASSUMPTION"
    LIMITATION = "LIMITATION"
    DATA_QUALITY = "DATA_QUALITY"


class ImpactLevel(Enum):
    """How strongly a limitation affects the results."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class ModelCategory(Enum):
    IMPACT = "impact"
    ORBITAL = "orbital"
    DEFLECTION = "deflection"


@dataclass(frozen=True)
class ValidityRange:
    min_value: float
    max_value: float
    unit: str
    description: str

    def contains(self, value: float) -> bool:
        return self.min_value <= value <= self.max_value


@dataclass(frozen=True)
class ScientificReference:
    authors: str
    title: str
    year: int
    journal: Optional[str] = None
    doi: Optional[str] = None
    url: Optional[str] = None
    notes: Optional[str] = None

    def format(self) -> str:
        text = f"{self.authors} ({self.year}). {self.title}"
        if self.journal:
            text += f". *{self.journal}*"
        if self.doi:
            text += f". DOI: {self.doi}"
        if self.url:
            text += f". URL: {self.url}"
        if self.notes:
            text += f". {self.notes}"
        return text


@dataclass(frozen=True)
class ModelLimitation:
    aspect: str
    description: str
    impact: ImpactLevel
    mitigation: Optional[str] = None


@dataclass
class ScientificDisclaimer(BundleMixin):
    """
    A leveled statement about the trustworthiness of a result.

    Attributes:
        level: Severity
        category: What kind of concern it is
        message: One-line summary
        scientific_basis: Where the concern comes from
        limitations: Specific model limitations
        references: Supporting literature
        recommendations: Suggested actions
    """
    level: DisclaimerLevel
    category: DisclaimerCategory
    message: str
    scientific_basis: str
    limitations: List[ModelLimitation] = field(default_factory=list)
    references: List[ScientificReference] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)


@dataclass
class ParameterValidation:
    is_valid: bool
    disclaimer: Optional[ScientificDisclaimer] = None


# =============================================================================
# RANGES AND REFERENCES
# =============================================================================

PHYSICS_MODEL_RANGES: Dict[ModelCategory, Dict[str, ValidityRange]] = {
    ModelCategory.IMPACT: {
        'energy': ValidityRange(1e12, 1e24, "J", "Impact energy range for crater scaling laws"),
        'velocity': ValidityRange(11000, 72000, "m/s",
                                  "Impact velocity range for realistic asteroid encounters"),
        'angle': ValidityRange(0, 90, "degrees", "Impact angle from horizontal"),
        'diameter': ValidityRange(0.001, 100000, "m",
                                  "Asteroid diameter range for impact calculations"),
    },
    ModelCategory.ORBITAL: {
        'semi_major_axis': ValidityRange(0.1, 100, "AU",
                                         "Semi-major axis range for near-Earth objects"),
        'eccentricity': ValidityRange(0, 0.99, "", "Eccentricity range for bound orbits"),
        'inclination': ValidityRange(0, 180, "degrees", "Orbital inclination range"),
        'time_span': ValidityRange(-100, 100, "years",
                                   "Time span for accurate orbital propagation"),
    },
    ModelCategory.DEFLECTION: {
        'delta_v': ValidityRange(1e-6, 1000, "m/s",
                                 "Delta-V range for realistic deflection missions"),
        'lead_time': ValidityRange(1, 50, "years", "Lead time range for deflection effectiveness"),
        'asteroid_mass': ValidityRange(1e6, 1e18, "kg",
                                       "Asteroid mass range for deflection calculations"),
    },
}

SCIENTIFIC_REFERENCES: Dict[str, ScientificReference] = {
    'holsapple2007': ScientificReference(
        authors="Holsapple, K. A., & Housen, K. R.",
        title="A crater and its ejecta: An interpretation of Deep Impact",
        journal="Icarus",
        year=2007,
        doi="10.1016/j.icarus.2006.10.031",
        notes="Crater scaling laws for impact calculations",
    ),
    'collins2005': ScientificReference(
        authors="Collins, G. S., Melosh, H. J., & Marcus, R. A.",
        title="Earth Impact Effects Program: A Web-based computer program for calculating "
              "the regional environmental consequences of a meteoroid impact on Earth",
        journal="Meteoritics & Planetary Science",
        year=2005,
        doi="10.1111/j.1945-5100.2005.tb00157.x",
        notes="Comprehensive impact effects modeling",
    ),
    'glasstone1977': ScientificReference(
        authors="Glasstone, S., & Dolan, P. J.",
        title="The Effects of Nuclear Weapons",
        year=1977,
        url="https://www.fourmilab.ch/etexts/www/effects/",
        notes="Nuclear effects scaling for airburst modeling",
    ),
    'ben_menahem1975': ScientificReference(
        authors="Ben-Menahem, A.",
        title="Source parameters from spectra of long-period seismic body waves",
        journal="Journal of Geophysical Research",
        year=1975,
        doi="10.1029/JB080i026p03815",
        notes="Seismic magnitude scaling for impact events",
    ),
    'meeus1998': ScientificReference(
        authors="Meeus, J.",
        title="Astronomical Algorithms",
        year=1998,
        notes="Standard reference for astronomical calculations",
    ),
    'standish1998': ScientificReference(
        authors="Standish, E. M.",
        title="JPL Planetary and Lunar Ephemerides",
        year=1998,
        url="https://ssd.jpl.nasa.gov/planets/eph_export.html",
        notes="JPL ephemeris standards and accuracy",
    ),
    'ahrens1992': ScientificReference(
        authors="Ahrens, T. J., & Harris, A. W.",
        title="Deflection and fragmentation of near-Earth asteroids",
        journal="Nature",
        year=1992,
        doi="10.1038/360429a0",
        notes="Nuclear deflection physics and effectiveness",
    ),
}

_CATEGORY_REFERENCES = {
    ModelCategory.IMPACT: ['holsapple2007', 'collins2005', 'glasstone1977', 'ben_menahem1975'],
    ModelCategory.ORBITAL: ['meeus1998', 'standish1998'],
    ModelCategory.DEFLECTION: ['ahrens1992', 'holsapple2007'],
}


def get_relevant_references(category: Union[ModelCategory, str]) -> List[ScientificReference]:
    category = ModelCategory(category)
    return [SCIENTIFIC_REFERENCES[key] for key in _CATEGORY_REFERENCES[category]]


# =============================================================================
# VALIDATOR
# =============================================================================

class ScientificValidator:
    """
    Range checks and disclaimer generation for the physics models.

    Example:
        >>> validator = ScientificValidator()
        >>> validator.validate_parameter("impact", "velocity", 5000).disclaimer.level
        <DisclaimerLevel.CAUTION: 'CAUTION'>
    """

    def validate_parameter(self, category: Union[ModelCategory, str], parameter: str,
                           value: float, unit: Optional[str] = None) -> ParameterValidation:
        """
        Check one parameter against its validated range.

        Outside the range the disclaimer is CRITICAL when the value is below a
        tenth of the minimum or above ten times the maximum, else CAUTION.
        An unknown parameter is reported invalid with a WARNING.
        """
        category = ModelCategory(category)
        validity_range = PHYSICS_MODEL_RANGES[category].get(parameter)

        if validity_range is None:
            return ParameterValidation(False, ScientificDisclaimer(
                level=DisclaimerLevel.WARNING,
                category=DisclaimerCategory.VALIDITY,
                message=f'Unknown parameter "{parameter}" for {category.value} calculations',
                scientific_basis="Parameter not defined in validation ranges",
                limitations=[ModelLimitation(
                    aspect="Parameter validation",
                    description="Parameter not included in standard validation ranges",
                    impact=ImpactLevel.MEDIUM,
                )],
            ))

        if validity_range.contains(value):
            return ParameterValidation(True)

        far_outside = (value < validity_range.min_value * 0.1
                       or value > validity_range.max_value * 10)
        level = DisclaimerLevel.CRITICAL if far_outside else DisclaimerLevel.CAUTION
        logger.debug("%s.%s = %g outside [%g, %g]", category.value, parameter, value,
                     validity_range.min_value, validity_range.max_value)

        return ParameterValidation(False, ScientificDisclaimer(
            level=level,
            category=DisclaimerCategory.VALIDITY,
            message=(f"Parameter {parameter} ({value:g} {unit or validity_range.unit}) is outside "
                     f"validated range [{validity_range.min_value:g}, "
                     f"{validity_range.max_value:g}] {validity_range.unit}"),
            scientific_basis=validity_range.description,
            limitations=[ModelLimitation(
                aspect="Model validity",
                description="Physics models may not be accurate outside validated parameter ranges",
                impact=ImpactLevel.HIGH,
                mitigation="Use results with extreme caution and consider alternative approaches",
            )],
            references=get_relevant_references(category),
            recommendations=[
                "Verify input parameters are physically reasonable",
                "Consider using alternative calculation methods for extreme cases",
                "Consult scientific literature for specialized scenarios",
            ],
        ))

    def generate_model_disclaimer(self, model_type: Union[ModelCategory, str],
                                  limitations: List[ModelLimitation]) -> ScientificDisclaimer:
        """Assumption disclaimer: impact WARNING, orbital INFO, deflection CAUTION."""
        model_type = ModelCategory(model_type)
        levels = {
            ModelCategory.IMPACT: DisclaimerLevel.WARNING,
            ModelCategory.ORBITAL: DisclaimerLevel.INFO,
            ModelCategory.DEFLECTION: DisclaimerLevel.CAUTION,
        }
        messages = {
            ModelCategory.IMPACT: "Impact calculations use simplified models with several assumptions",
            ModelCategory.ORBITAL: "Orbital mechanics calculations include standard approximations",
            ModelCategory.DEFLECTION: "Deflection effectiveness estimates are based on idealized scenarios",
        }
        return ScientificDisclaimer(
            level=levels[model_type],
            category=DisclaimerCategory.ASSUMPTION,
            message=messages[model_type],
            scientific_basis=f"Standard {model_type.value} physics models with documented limitations",
            limitations=list(limitations),
            references=get_relevant_references(model_type),
            recommendations=[
                "Results should be interpreted as estimates with inherent uncertainties",
                "For critical applications, consult detailed mission studies",
                "Consider multiple calculation methods for cross-validation",
            ],
        )

    def generate_data_quality_disclaimer(
        self,
        data_source: str,
        uncertainty_level: Union[ImpactLevel, str],
        last_updated: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> ScientificDisclaimer:
        """
        Disclaimer for input data quality.

        HIGH uncertainty maps to CRITICAL, MEDIUM to CAUTION, LOW to INFO.
        Data last updated more than a year before `now` adds a currency
        limitation.
        """
        uncertainty_level = ImpactLevel(uncertainty_level)
        levels = {
            ImpactLevel.HIGH: DisclaimerLevel.CRITICAL,
            ImpactLevel.MEDIUM: DisclaimerLevel.CAUTION,
            ImpactLevel.LOW: DisclaimerLevel.INFO,
        }
        messages = {
            ImpactLevel.HIGH: "Input data has high uncertainty or limited observational basis",
            ImpactLevel.MEDIUM: "Input data has moderate uncertainty typical of astronomical observations",
            ImpactLevel.LOW: "Input data is well-constrained with low uncertainty",
        }

        limitations = [ModelLimitation(
            aspect="Data quality",
            description=f"{data_source} data has {uncertainty_level.value.lower()} uncertainty",
            impact=uncertainty_level,
            mitigation=("Obtain additional observations or use conservative estimates"
                        if uncertainty_level == ImpactLevel.HIGH else None),
        )]

        now = now or datetime.now()
        if last_updated is not None and now - last_updated > DATA_MAX_AGE:
            limitations.append(ModelLimitation(
                aspect="Data currency",
                description="Data may be outdated and not reflect recent observations",
                impact=ImpactLevel.MEDIUM,
                mitigation="Check for updated data from original sources",
            ))

        return ScientificDisclaimer(
            level=levels[uncertainty_level],
            category=DisclaimerCategory.DATA_QUALITY,
            message=messages[uncertainty_level],
            scientific_basis=f"Data quality assessment based on {data_source} standards",
            limitations=limitations,
            references=[SCIENTIFIC_REFERENCES['standish1998']],
            recommendations=[
                "Consider uncertainty ranges in all calculations",
                "Cross-reference with multiple data sources when possible",
                "Update data regularly from authoritative sources",
            ],
        )

    def generate_accuracy_disclaimer(self, calculation_type: str, expected_accuracy: float,
                                     uncertainty_propagation: bool = False) -> ScientificDisclaimer:
        """Accuracy in percent: above 50 CRITICAL, above 20 CAUTION, else INFO."""
        if expected_accuracy > 50:
            level = DisclaimerLevel.CRITICAL
        elif expected_accuracy > 20:
            level = DisclaimerLevel.CAUTION
        else:
            level = DisclaimerLevel.INFO

        return ScientificDisclaimer(
            level=level,
            category=DisclaimerCategory.ACCURACY,
            message=f"{calculation_type} results have estimated accuracy of ±{expected_accuracy:g}%",
            scientific_basis="Accuracy estimate based on model validation and uncertainty analysis",
            limitations=[ModelLimitation(
                aspect="Calculation accuracy",
                description=f"Results may vary by up to {expected_accuracy:g}% from actual values",
                impact=ImpactLevel.HIGH if expected_accuracy > 20 else ImpactLevel.MEDIUM,
                mitigation=("Uncertainty propagation included in results" if uncertainty_propagation
                            else "Consider additional uncertainty analysis"),
            )],
            references=[SCIENTIFIC_REFERENCES['collins2005'], SCIENTIFIC_REFERENCES['standish1998']],
            recommendations=[
                "Use results as estimates rather than precise predictions",
                "Consider accuracy limitations in decision-making",
                "Validate against independent calculations when possible",
            ],
        )

    def combine_disclaimers(self, disclaimers: List[ScientificDisclaimer]) -> ScientificDisclaimer:
        """
        Merge disclaimers into one.

        Takes the highest level, deduplicates limitations by aspect and
        references by title (first occurrence wins), and keeps the
        recommendations unique in order. A single disclaimer is returned
        unchanged; none at all yields an INFO statement.
        """
        if not disclaimers:
            return ScientificDisclaimer(
                level=DisclaimerLevel.INFO,
                category=DisclaimerCategory.ACCURACY,
                message="Calculations performed within validated parameter ranges",
                scientific_basis="Standard physics models applied correctly",
            )
        if len(disclaimers) == 1:
            return disclaimers[0]

        level = max((d.level for d in disclaimers), key=lambda lv: lv.priority)

        limitations, aspects = [], set()
        references, titles = [], set()
        recommendations = []
        for d in disclaimers:
            for limitation in d.limitations:
                if limitation.aspect not in aspects:
                    aspects.add(limitation.aspect)
                    limitations.append(limitation)
            for ref in d.references:
                if ref.title not in titles:
                    titles.add(ref.title)
                    references.append(ref)
            for rec in d.recommendations:
                if rec not in recommendations:
                    recommendations.append(rec)

        return ScientificDisclaimer(
            level=level,
            category=DisclaimerCategory.LIMITATION,
            message=(f"Multiple limitations apply to these calculations "
                     f"({len(disclaimers)} issues identified)"),
            scientific_basis="Combined assessment of model limitations and data quality",
            limitations=limitations,
            references=references,
            recommendations=recommendations,
        )

    def format_disclaimer(self, disclaimer: ScientificDisclaimer) -> str:
        """Markdown rendering of a disclaimer."""
        lines = [
            f"**{disclaimer.level.value}**: {disclaimer.message}",
            "",
            f"**Scientific Basis**: {disclaimer.scientific_basis}",
            "",
        ]

        if disclaimer.limitations:
            lines.append("**Limitations**:")
            for limitation in disclaimer.limitations:
                line = (f"- **{limitation.aspect}** ({limitation.impact.value} impact): "
                        f"{limitation.description}")
                if limitation.mitigation:
                    line += f" *Mitigation: {limitation.mitigation}*"
                lines.append(line)
            lines.append("")

        if disclaimer.recommendations:
            lines.append("**Recommendations**:")
            lines.extend(f"- {rec}" for rec in disclaimer.recommendations)
            lines.append("")

        if disclaimer.references:
            lines.append("**References**:")
            lines.extend(f"- {ref.format()}" for ref in disclaimer.references)

        return "\n".join(lines) + "\n"


scientific_validator = ScientificValidator()


def _validate_all(category: ModelCategory, params: Dict[str, Optional[float]]) -> List[ScientificDisclaimer]:
    disclaimers = []
    for parameter, value in params.items():
        if value is None:
            continue
        result = scientific_validator.validate_parameter(category, parameter, value)
        if not result.is_valid:
            disclaimers.append(result.disclaimer)
    return disclaimers


def validate_impact_parameters(energy: Optional[float] = None, velocity: Optional[float] = None,
                               angle: Optional[float] = None,
                               diameter: Optional[float] = None) -> List[ScientificDisclaimer]:
    return _validate_all(ModelCategory.IMPACT, {
        'energy': energy, 'velocity': velocity, 'angle': angle, 'diameter': diameter,
    })


def validate_orbital_parameters(semi_major_axis: Optional[float] = None,
                                eccentricity: Optional[float] = None,
                                inclination: Optional[float] = None,
                                time_span: Optional[float] = None) -> List[ScientificDisclaimer]:
    return _validate_all(ModelCategory.ORBITAL, {
        'semi_major_axis': semi_major_axis, 'eccentricity': eccentricity,
        'inclination': inclination, 'time_span': time_span,
    })


def validate_deflection_parameters(delta_v: Optional[float] = None,
                                   lead_time: Optional[float] = None,
                                   asteroid_mass: Optional[float] = None) -> List[ScientificDisclaimer]:
    return _validate_all(ModelCategory.DEFLECTION, {
        'delta_v': delta_v, 'lead_time': lead_time, 'asteroid_mass': asteroid_mass,
    })
