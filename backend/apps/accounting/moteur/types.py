# apps/accounting/moteur/types.py
"""
Structures de données du moteur comptable

Le moteur ne dépend pas de Django : il travaille sur des instantanés
immuables (comptes, écritures, lignes comptabilisées, factures) que la
couche services construit depuis l'ORM.

Tous les montants sont des Decimal, jamais des float.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional, Tuple

ZERO = Decimal('0')
UN = Decimal('1')
CENTIME = Decimal('0.01')
PRECISION_TAUX = Decimal('0.00000001')

# Statuts d'une écriture
BROUILLON = 'BROUILLON'
VALIDEE = 'VALIDEE'


def en_decimal(valeur) -> Decimal:
    """Convertit une saisie (str, int, Decimal, float) en Decimal exact"""
    if valeur is None or valeur == '':
        return ZERO
    if isinstance(valeur, Decimal):
        return valeur
    if isinstance(valeur, float):
        return Decimal(str(valeur))
    return Decimal(valeur)


def en_devise_base(montant: Decimal, taux: Decimal, montant_base: Optional[Decimal] = None) -> Decimal:
    """
    Montant converti en devise de base ; inchangé au taux 1.

    `montant_base`, s'il est connu, prime sur montant * taux : c'est la
    contre-valeur arrêtée à la saisie, le taux n'étant qu'indicatif.
    """
    if montant_base is not None and montant:
        return montant_base
    if taux == UN:
        return montant
    return montant * taux


def arrondir(montant: Decimal, pas: Decimal = CENTIME) -> Decimal:
    """Arrondi monétaire au centime (demi vers le haut)"""
    return en_decimal(montant).quantize(pas, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class ContexteSociete:
    """
    Contexte explicite d'une société (tenant)

    Passé à chaque appel du moteur qui dépend de la configuration
    de la société : devise de base, tolérance d'équilibre, taux par défaut.
    """
    tenant: str
    devise_base: str = 'XAF'
    tolerance: Decimal = CENTIME
    # {('USD', 'CDF'): Decimal('2000')}
    taux_par_defaut: Dict[Tuple[str, str], Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class Compte:
    id: Any
    code: str
    libelle: str = ''
    type: str = ''
    parent_id: Any = None
    reconciliable: bool = False
    devise: Optional[str] = None


@dataclass(frozen=True)
class Journal:
    id: Any
    code: str
    libelle: str = ''
    type: str = 'OD'


@dataclass(frozen=True)
class Tiers:
    id: Any
    code: str
    nom: str = ''
    compte_id: Any = None


@dataclass(frozen=True)
class LigneEcriture:
    """
    Ligne d'une écriture, montants exprimés dans la devise de la ligne.

    taux_change convertit la devise de la ligne vers la devise de base
    de la société (1 pour une ligne en devise de base).
    """
    compte_id: Any
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    tiers_id: Any = None
    devise: Optional[str] = None
    taux_change: Decimal = UN
    date_echeance: Optional[date] = None
    libelle: str = ''
    id: Any = None
    # Contre-valeur en devise de base, arrondie au centime
    montant_base: Optional[Decimal] = None

    @property
    def debit_base(self) -> Decimal:
        return en_devise_base(self.debit, self.taux_change, self.montant_base)

    @property
    def credit_base(self) -> Decimal:
        return en_devise_base(self.credit, self.taux_change, self.montant_base)


@dataclass(frozen=True)
class Ecriture:
    id: Any
    numero: str
    date: date
    journal_id: Any = None
    lignes: Tuple[LigneEcriture, ...] = ()
    reference: str = ''
    statut: str = BROUILLON
    devise: Optional[str] = None
    taux_change: Decimal = UN

    @property
    def est_validee(self) -> bool:
        return self.statut == VALIDEE


@dataclass(frozen=True)
class LigneComptabilisee:
    """
    Ligne d'écriture jointe aux informations de son écriture
    (date, numéro, journal, statut). Entrée de tous les états.
    """
    compte_id: Any
    date: date
    numero: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    journal_id: Any = None
    tiers_id: Any = None
    devise: Optional[str] = None
    taux_change: Decimal = UN
    statut: str = VALIDEE
    libelle: str = ''
    reference: str = ''
    ecriture_id: Any = None
    date_echeance: Optional[date] = None
    montant_base: Optional[Decimal] = None

    @property
    def debit_base(self) -> Decimal:
        return en_devise_base(self.debit, self.taux_change, self.montant_base)

    @property
    def credit_base(self) -> Decimal:
        return en_devise_base(self.credit, self.taux_change, self.montant_base)


@dataclass(frozen=True)
class Solde:
    """Cumul débit / crédit d'un compte ; net = débit - crédit"""
    debit: Decimal = ZERO
    credit: Decimal = ZERO

    @property
    def net(self) -> Decimal:
        return self.debit - self.credit

    def __add__(self, autre: 'Solde') -> 'Solde':
        return Solde(self.debit + autre.debit, self.credit + autre.credit)


@dataclass(frozen=True)
class Facture:
    id: Any
    tiers_id: Any
    date: date
    total_ttc: Decimal
    montant_regle: Decimal = ZERO
    date_echeance: Optional[date] = None
    numero: str = ''
    type: str = 'client'

    @property
    def reste_a_payer(self) -> Decimal:
        return self.total_ttc - self.montant_regle


@dataclass(frozen=True)
class ConversionDevise:
    """Trace d'audit d'une conversion ; toujours liée à une écriture équilibrée"""
    devise_source: str
    devise_cible: str
    montant_source: Decimal
    montant_cible: Decimal
    taux_change: Decimal
    compte_source_id: Any
    compte_cible_id: Any
    ecriture_id: Any
