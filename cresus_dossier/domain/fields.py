"""Budget line catalog: stored keys and the labels printed on the dossier"""

from typing import Dict, List, Tuple

FieldCatalog = List[Tuple[str, str]]

INCOME_FIELDS: FieldCatalog = [
    ("salaries", "Salaires / Retraites"),
    ("allowances", "Allocations (chômage, RSA, …)"),
    ("benefits", "Pensions et prestations familiales, bourses, aides…"),
    ("alimony_received", "Pension alimentaire reçue"),
    ("family_support", "Aides familiales"),
    ("rental_income", "Revenus locatifs"),
    ("other_income", "Revenus autres"),
]

HOUSING_FIELDS: FieldCatalog = [
    ("rent", "Loyer"),
    ("rental_charges", "Charges locatives / copropriété"),
    ("energy", "Gaz / Électricité"),
    ("fuel_wood", "Fioul / Bois"),
    ("water", "Eau"),
    ("telecom", "Téléphone - Internet"),
]

CHILDREN_FIELDS: FieldCatalog = [
    ("schooling", "Frais de scolarité (cantine, garde d'enfants, …)"),
    ("alimony_paid", "Pension alimentaire versée"),
    ("children_other", "Autres charges liées aux enfants"),
]

OTHER_FIELDS: FieldCatalog = [
    ("transport", "Transports (essence, abonnements, …)"),
    ("subscriptions", "Abonnements divers"),
    ("miscellaneous", "Frais divers (santé, …)"),
    ("other", "Autres charges"),
]

INSURANCE_FIELDS: FieldCatalog = [
    ("home", "Assurance habitation"),
    ("car", "Assurance voiture"),
    ("health", "Mutuelle"),
    ("other_insurance", "Autres assurances (prévoyance, protection juridique, obsèques, …)"),
]

TAX_FIELDS: FieldCatalog = [
    ("income_tax", "Impôt sur le revenu"),
    ("housing_tax", "Taxe d'habitation"),
    ("property_tax", "Taxe foncière"),
    ("waste_tax", "Taxe d'ordures ménagères"),
    ("sanitation", "Assainissement"),
]

# Amount sections in the order they appear in the wizard
AMOUNT_SECTIONS: Dict[str, FieldCatalog] = {
    "income": INCOME_FIELDS,
    "housing": HOUSING_FIELDS,
    "children": CHILDREN_FIELDS,
    "other": OTHER_FIELDS,
    "insurance": INSURANCE_FIELDS,
    "taxes": TAX_FIELDS,
}

EXPENSE_SECTIONS = ("housing", "children", "other", "insurance", "taxes")

DEBT_SECTIONS = ("mortgage", "consumer", "other_debts")

DEBT_TITLES = {
    "mortgage": "Crédits immobiliers",
    "consumer": "Crédits à la consommation / renouvelables",
    "other_debts": "Autres dettes (retards, découverts, charges, proches…)",
}

CIVILITIES = ["Monsieur", "Madame"]

EMPLOYMENT_STATUSES = [
    "Employé(e)",
    "Ouvrier(ère) spécialisé(e)",
    "Indépendant",
    "Travailleur indépendant",
    "Retraité(e)",
    "Recherche d'emploi",
    "En maladie",
    "Au foyer",
    "Bénéficiaire RSA",
    "Autres",
]

FAMILY_STATUSES = [
    "Célibataire",
    "Marié(e)",
    "Union libre",
    "Pacsé(e)",
    "Divorcé(e)",
    "Séparé(e)",
    "Veuf(ve)",
]

HOUSING_STATUSES = [
    "Propriétaire",
    "Locataire",
    "Hébergé(e) à titre gratuit",
    "Accession à la propriété",
]


def label_for(catalog: FieldCatalog, key: str) -> str:
    """Return the printed label of ``key``, or the key itself when unknown"""
    return dict(catalog).get(key, key)


def empty_section(catalog: FieldCatalog) -> Dict[str, int]:
    return {key: 0 for key, _ in catalog}
