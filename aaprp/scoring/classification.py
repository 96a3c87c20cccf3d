"""Classification metadata for ICAO USOAP and CANSO SoE questionnaires.

Audit-area questionnaires (USOAP CMA protocol questions) classify each
question by audit area and, across areas, by ICAO critical element.
Maturity questionnaires (CANSO Standard of Excellence) classify each
question by SMS component and study area.

The engine treats category codes as opaque strings. The tables here only
supply display names, component weights and the question weighting
constants used by the weighted EI variant.
"""

from dataclasses import dataclass

from aaprp.models.questionnaire import QuestionnaireKind

PRIORITY_QUESTION_WEIGHT = 1.5
DEFAULT_QUESTION_WEIGHT = 1.0


@dataclass(frozen=True)
class Category:
    """A named classification bucket."""
    code: str
    name_en: str
    name_fr: str


@dataclass(frozen=True)
class SMSComponent(Category):
    """SMS component with its CANSO weight and study areas."""
    weight: float = 0.0
    study_areas: tuple[str, ...] = ()


@dataclass(frozen=True)
class StudyArea(Category):
    """CANSO study area and the component it belongs to."""
    component: str = ""


def _index(*items: Category) -> dict:
    return {item.code: item for item in items}


USOAP_AUDIT_AREAS: dict[str, Category] = _index(
    Category("LEG", "Primary Aviation Legislation", "Législation aéronautique de base"),
    Category("ORG", "Civil Aviation Organization", "Organisation de l'aviation civile"),
    Category("PEL", "Personnel Licensing and Training", "Licences du personnel et formation"),
    Category("OPS", "Aircraft Operations", "Exploitation des aéronefs"),
    Category("AIR", "Airworthiness of Aircraft", "Navigabilité des aéronefs"),
    Category(
        "AIG",
        "Aircraft Accident and Incident Investigation",
        "Enquêtes sur les accidents et incidents d'aéronefs",
    ),
    Category("ANS", "Air Navigation Services", "Services de navigation aérienne"),
    Category("AGA", "Aerodromes and Ground Aids", "Aérodromes et aides au sol"),
    Category("SSP", "State Safety Programme", "Programme national de sécurité"),
)

# ANS peer reviews subdivide the ANS audit area
ANS_REVIEW_AREAS: dict[str, Category] = _index(
    Category("ATS", "Air Traffic Services", "Services de la circulation aérienne"),
    Category("FPD", "Flight Procedures Design", "Conception des procédures de vol"),
    Category("AIS", "Aeronautical Information Service", "Service d'information aéronautique"),
    Category("MAP", "Aeronautical Charts", "Cartes aéronautiques"),
    Category("MET", "Meteorological Service", "Service météorologique"),
    Category(
        "CNS",
        "Communications, Navigation, Surveillance",
        "Communications, navigation, surveillance",
    ),
    Category("SAR", "Search and Rescue", "Recherche et sauvetage"),
    Category("SMS", "Safety Management System", "Système de gestion de la sécurité"),
)

CRITICAL_ELEMENTS: dict[str, Category] = _index(
    Category("CE_1", "Primary Aviation Legislation", "Législation aéronautique de base"),
    Category("CE_2", "Specific Operating Regulations", "Règlements d'exploitation spécifiques"),
    Category(
        "CE_3",
        "State Civil Aviation System and Safety Oversight Functions",
        "Système d'aviation civile de l'État",
    ),
    Category(
        "CE_4",
        "Technical Personnel Qualification and Training",
        "Qualification du personnel technique",
    ),
    Category(
        "CE_5",
        "Technical Guidance, Tools and Provision of Safety-Critical Information",
        "Orientations techniques et informations critiques",
    ),
    Category(
        "CE_6",
        "Licensing, Certification, Authorization and Approval Obligations",
        "Licences, certification et autorisation",
    ),
    Category("CE_7", "Surveillance Obligations", "Obligations de surveillance"),
    Category("CE_8", "Resolution of Safety Issues", "Résolution des problèmes de sécurité"),
)

SMS_COMPONENTS: dict[str, SMSComponent] = _index(
    SMSComponent(
        "SAFETY_POLICY_OBJECTIVES",
        "Safety Policy and Objectives",
        "Politique et objectifs de sécurité",
        weight=0.25,
        study_areas=("SA_1_1", "SA_1_2", "SA_1_3", "SA_1_4", "SA_1_5"),
    ),
    SMSComponent(
        "SAFETY_RISK_MANAGEMENT",
        "Safety Risk Management",
        "Gestion des risques de sécurité",
        weight=0.3,
        study_areas=("SA_2_1", "SA_2_2"),
    ),
    SMSComponent(
        "SAFETY_ASSURANCE",
        "Safety Assurance",
        "Assurance de la sécurité",
        weight=0.25,
        study_areas=("SA_3_1", "SA_3_2", "SA_3_3"),
    ),
    SMSComponent(
        "SAFETY_PROMOTION",
        "Safety Promotion",
        "Promotion de la sécurité",
        weight=0.2,
        study_areas=("SA_4_1", "SA_4_2"),
    ),
)

STUDY_AREAS: dict[str, StudyArea] = _index(
    StudyArea("SA_1_1", "Management Commitment", "Engagement de la direction",
              component="SAFETY_POLICY_OBJECTIVES"),
    StudyArea("SA_1_2", "Safety Accountabilities", "Responsabilités en matière de sécurité",
              component="SAFETY_POLICY_OBJECTIVES"),
    StudyArea("SA_1_3", "Appointment of Key Safety Personnel",
              "Nomination du personnel clé de sécurité", component="SAFETY_POLICY_OBJECTIVES"),
    StudyArea("SA_1_4", "Coordination of Emergency Response Planning",
              "Coordination de la planification des interventions d'urgence",
              component="SAFETY_POLICY_OBJECTIVES"),
    StudyArea("SA_1_5", "SMS Documentation", "Documentation du SGS",
              component="SAFETY_POLICY_OBJECTIVES"),
    StudyArea("SA_2_1", "Hazard Identification", "Identification des dangers",
              component="SAFETY_RISK_MANAGEMENT"),
    StudyArea("SA_2_2", "Risk Assessment and Mitigation", "Évaluation et atténuation des risques",
              component="SAFETY_RISK_MANAGEMENT"),
    StudyArea("SA_3_1", "Safety Performance Monitoring and Measurement",
              "Surveillance et mesure des performances de sécurité",
              component="SAFETY_ASSURANCE"),
    StudyArea("SA_3_2", "Management of Change", "Gestion du changement",
              component="SAFETY_ASSURANCE"),
    StudyArea("SA_3_3", "Continuous Improvement of the SMS", "Amélioration continue du SGS",
              component="SAFETY_ASSURANCE"),
    StudyArea("SA_4_1", "Training and Education", "Formation et éducation",
              component="SAFETY_PROMOTION"),
    StudyArea("SA_4_2", "Safety Communication", "Communication sur la sécurité",
              component="SAFETY_PROMOTION"),
)

MATURITY_LEVELS: dict[str, Category] = _index(
    Category("A", "Initial/Ad-hoc", "Initial/Ad-hoc"),
    Category("B", "Defined/Documented", "Défini/Documenté"),
    Category("C", "Implemented/Measured", "Mis en œuvre/Mesuré"),
    Category("D", "Managed/Controlled", "Géré/Contrôlé"),
    Category("E", "Optimizing/Leading", "Optimisé/Leader"),
)

# Classification fields per kind: (required, forbidden)
_KIND_FIELDS = {
    QuestionnaireKind.AUDIT_AREA_BASED: (
        ("audit_area",),
        ("maturity_component", "study_area"),
    ),
    QuestionnaireKind.MATURITY_BASED: (
        ("maturity_component",),
        ("audit_area",),
    ),
}


def classification_fields_for(kind: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Return the (required, forbidden) classification fields for a kind."""
    return _KIND_FIELDS[QuestionnaireKind(kind)]


def question_weight(
    weight: float | None,
    is_priority: bool,
    priority_weight: float = PRIORITY_QUESTION_WEIGHT,
) -> float:
    """Effective weight of a question in the weighted EI variant."""
    base = DEFAULT_QUESTION_WEIGHT if weight is None else weight
    return base * priority_weight if is_priority else base


def category_name(code: str, language: str = "en") -> str:
    """Display name for any category code, falling back to the code itself."""
    for table in (
        ANS_REVIEW_AREAS,
        USOAP_AUDIT_AREAS,
        CRITICAL_ELEMENTS,
        SMS_COMPONENTS,
        STUDY_AREAS,
        MATURITY_LEVELS,
    ):
        if code in table:
            item = table[code]
            return item.name_fr if language == "fr" else item.name_en
    return code
