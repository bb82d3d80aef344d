# apps/accounting/moteur/exceptions.py
"""
Erreurs et avertissements du moteur comptable

Les erreurs bloquent l'opération (comptabilisation, conversion).
Les avertissements sont des données : ils accompagnent les états
produits sans interrompre le calcul.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any


class ErreurComptable(Exception):
    """Erreur métier du moteur comptable"""


class LigneInvalide(ErreurComptable):
    """Ligne d'écriture mal formée (montant négatif, débit et crédit...)"""


class EcritureDesequilibree(ErreurComptable):
    """Total des débits différent du total des crédits"""

    def __init__(self, total_debit: Decimal, total_credit: Decimal, tolerance: Decimal = Decimal('0')):
        self.total_debit = total_debit
        self.total_credit = total_credit
        self.ecart = total_debit - total_credit
        self.tolerance = tolerance
        super().__init__(
            f"Écriture déséquilibrée : D={total_debit} C={total_credit} "
            f"(écart de {abs(self.ecart)})"
        )


class TransitionInvalide(ErreurComptable):
    """Changement de statut non autorisé (une écriture validée est définitive)"""


class EcritureVerrouillee(ErreurComptable):
    """Tentative de modification d'une écriture validée"""


class TauxIntrouvable(ErreurComptable):
    """Aucun taux connu ni configuré pour la paire de devises"""

    def __init__(self, devise_source: str, devise_cible: str):
        self.devise_source = devise_source
        self.devise_cible = devise_cible
        super().__init__(f"Aucun taux de change {devise_source}/{devise_cible} disponible")


class ParametreInvalide(ErreurComptable):
    """Paramètre d'état ou de configuration hors des valeurs admises"""


@dataclass(frozen=True)
class Avertissement:
    code: str
    message: str

    def __str__(self):
        return self.message


@dataclass(frozen=True)
class CompteNonClasse(Avertissement):
    """Compte hors nomenclature OHADA, exclu des états de synthèse"""
    compte_id: Any = None
    code_compte: str = ''

    @classmethod
    def pour(cls, compte_id, code_compte):
        return cls(
            code='compte_non_classe',
            message=f"Le compte {code_compte} ne correspond à aucune rubrique OHADA : exclu des états de synthèse",
            compte_id=compte_id,
            code_compte=code_compte,
        )


@dataclass(frozen=True)
class EcartDeControle(Avertissement):
    """Deux dérivations du même grand livre ne concordent pas"""
    controle: str = ''
    attendu: Decimal = Decimal('0')
    obtenu: Decimal = Decimal('0')

    @property
    def ecart(self) -> Decimal:
        return self.obtenu - self.attendu

    @classmethod
    def pour(cls, controle, libelle, attendu, obtenu):
        return cls(
            code='ecart_de_controle',
            message=f"{libelle} : attendu {attendu}, obtenu {obtenu} (écart {obtenu - attendu})",
            controle=controle,
            attendu=attendu,
            obtenu=obtenu,
        )
