# apps/accounting/moteur/validation.py
"""
Contrôle d'équilibre et comptabilisation des écritures

Toute opération qui produit des lignes (saisie, facture, règlement,
conversion de devises) passe par ce module avant d'être validée.

Règles :
- Une ligne porte soit un débit soit un crédit, jamais les deux
- Les montants sont positifs
- Total débit == total crédit en devise de base. L'égalité est exacte
  pour une écriture mono-devise ; la tolérance de la société ne sert
  qu'à absorber l'arrondi des conversions quand l'écriture est multi-devises
- BROUILLON -> VALIDEE est la seule transition, et elle est définitive
"""

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, Sequence

from .exceptions import EcritureDesequilibree, LigneInvalide, TransitionInvalide
from .types import BROUILLON, UN, VALIDEE, ZERO, ContexteSociete, Ecriture, LigneEcriture, arrondir

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Equilibre:
    total_debit: Decimal
    total_credit: Decimal
    multidevise: bool = False

    @property
    def ecart(self) -> Decimal:
        return self.total_debit - self.total_credit


def controler_ligne(ligne: LigneEcriture) -> None:
    if ligne.debit < 0 or ligne.credit < 0:
        raise LigneInvalide("Les montants doivent être positifs")
    if ligne.debit > 0 and ligne.credit > 0:
        raise LigneInvalide("Une ligne ne peut pas avoir à la fois un débit et un crédit")
    if ligne.debit == 0 and ligne.credit == 0:
        raise LigneInvalide("Une ligne doit avoir soit un débit soit un crédit")
    if ligne.taux_change <= 0:
        raise LigneInvalide("Le taux de change d'une ligne doit être positif")


def _est_multidevise(lignes: Sequence[LigneEcriture], contexte: ContexteSociete) -> bool:
    return any(
        (ligne.devise and ligne.devise != contexte.devise_base) or ligne.taux_change != UN
        for ligne in lignes
    )


def calculer_equilibre(lignes: Iterable[LigneEcriture], contexte: ContexteSociete) -> Equilibre:
    """Totaux débit / crédit en devise de base, sans lever d'erreur"""
    lignes = list(lignes)
    total_debit = sum((ligne.debit_base for ligne in lignes), ZERO)
    total_credit = sum((ligne.credit_base for ligne in lignes), ZERO)

    multidevise = _est_multidevise(lignes, contexte)
    if multidevise:
        # Arrondi au dernier moment, une seule fois par total
        total_debit = arrondir(total_debit)
        total_credit = arrondir(total_credit)

    return Equilibre(total_debit, total_credit, multidevise)


def valider(lignes: Iterable[LigneEcriture], contexte: ContexteSociete) -> Equilibre:
    """
    Vérifie qu'un ensemble de lignes peut être comptabilisé.

    Lève LigneInvalide ou EcritureDesequilibree ; retourne l'équilibre
    calculé en cas de succès.
    """
    lignes = list(lignes)
    if not lignes:
        raise LigneInvalide("L'écriture doit contenir au moins une ligne")

    for ligne in lignes:
        controler_ligne(ligne)

    equilibre = calculer_equilibre(lignes, contexte)
    tolerance = contexte.tolerance if equilibre.multidevise else ZERO

    if abs(equilibre.ecart) > tolerance:
        raise EcritureDesequilibree(equilibre.total_debit, equilibre.total_credit, tolerance)

    return equilibre


def comptabiliser(ecriture: Ecriture, contexte: ContexteSociete) -> Ecriture:
    """
    Passe une écriture de BROUILLON à VALIDEE.

    Retourne une nouvelle écriture ; l'original n'est pas modifié.
    Une écriture validée ne se modifie plus : une correction se fait
    par une nouvelle écriture de contrepassation.
    """
    if ecriture.statut == VALIDEE:
        raise TransitionInvalide(f"L'écriture {ecriture.numero} est déjà validée")
    if ecriture.statut != BROUILLON:
        raise TransitionInvalide(f"Statut inconnu : {ecriture.statut}")

    equilibre = valider(ecriture.lignes, contexte)

    logger.info(
        "Écriture %s comptabilisée (%s) : %s lignes, total %s",
        ecriture.numero, contexte.tenant, len(ecriture.lignes), equilibre.total_debit
    )
    return replace(ecriture, statut=VALIDEE)


def contrepasser(ecriture: Ecriture, numero: str, date_operation, ecriture_id=None) -> Ecriture:
    """
    Écriture d'extourne d'une écriture validée : chaque ligne est
    inversée (débit <-> crédit). Le résultat est un brouillon.
    """
    if not ecriture.est_validee:
        raise TransitionInvalide("Seule une écriture validée peut être contrepassée")

    lignes = tuple(
        replace(ligne, debit=ligne.credit, credit=ligne.debit, id=None)
        for ligne in ecriture.lignes
    )
    return Ecriture(
        id=ecriture_id,
        numero=numero,
        date=date_operation,
        journal_id=ecriture.journal_id,
        lignes=lignes,
        reference=f"Extourne {ecriture.numero}",
        statut=BROUILLON,
        devise=ecriture.devise,
        taux_change=ecriture.taux_change,
    )
