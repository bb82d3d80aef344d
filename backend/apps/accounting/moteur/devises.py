# apps/accounting/moteur/devises.py
"""
Taux de change et conversions entre comptes de trésorerie

Une conversion produit une écriture à deux lignes :
- Débit : compte cible, montant dans la devise cible
- Crédit : compte source, montant dans la devise source
et la trace ConversionDevise qui y fait référence.

Chaque ligne en devise étrangère porte sa contre-valeur en devise de
base (et un taux indicatif à 8 décimales), de sorte que l'écriture est
équilibrée en devise de base et passe le contrôle d'équilibre comme
n'importe quelle autre.

Aucun taux implicite : sans taux connu ni taux configuré, TauxIntrouvable.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Dict, Optional, Tuple

from .exceptions import LigneInvalide, TauxIntrouvable
from .types import (
    UN, BROUILLON, PRECISION_TAUX, Compte, ContexteSociete, ConversionDevise, Ecriture,
    LigneEcriture, arrondir, en_decimal,
)

logger = logging.getLogger(__name__)


class SourceTaux:
    """Fournisseur de taux (table des taux, service externe...)"""

    def dernier_taux(self, tenant: str, devise_source: str, devise_cible: str,
                     jour: Optional[date] = None) -> Optional[Decimal]:
        raise NotImplementedError


class SourceTauxMemoire(SourceTaux):
    """Table de taux en mémoire : {(tenant, source, cible): [(date, taux), ...]}"""

    def __init__(self, taux: Optional[Dict[Tuple[str, str, str], list]] = None):
        self._taux = taux or {}

    def ajouter(self, tenant, devise_source, devise_cible, taux, jour=None):
        self._taux.setdefault((tenant, devise_source, devise_cible), []).append(
            (jour or date.min, en_decimal(taux))
        )

    def dernier_taux(self, tenant, devise_source, devise_cible, jour=None):
        historique = [
            (d, t) for d, t in self._taux.get((tenant, devise_source, devise_cible), [])
            if jour is None or d <= jour
        ]
        if not historique:
            return None
        return max(historique, key=lambda item: item[0])[1]


def convertir(montant, taux) -> Decimal:
    """montant * taux, en arithmétique décimale exacte"""
    return en_decimal(montant) * en_decimal(taux)


class ConvertisseurDevises:

    def __init__(self, source: SourceTaux):
        self.source = source

    def coter(self, contexte: ContexteSociete, devise_source: str, devise_cible: str,
              jour: Optional[date] = None) -> Decimal:
        """
        Dernier taux connu pour la paire, sinon le taux par défaut
        configuré pour la société. Lève TauxIntrouvable sinon.
        """
        if devise_source == devise_cible:
            return UN

        taux = self.source.dernier_taux(contexte.tenant, devise_source, devise_cible, jour)
        if taux is None:
            taux = contexte.taux_par_defaut.get((devise_source, devise_cible))
            if taux is not None:
                logger.info(
                    "Taux %s/%s absent de la table (%s) : taux par défaut %s",
                    devise_source, devise_cible, contexte.tenant, taux
                )

        if taux is None:
            raise TauxIntrouvable(devise_source, devise_cible)

        taux = en_decimal(taux)
        if taux <= 0:
            raise LigneInvalide(f"Taux {devise_source}/{devise_cible} invalide : {taux}")
        return taux


def construire_ecriture_conversion(contexte: ContexteSociete, compte_source: Compte, compte_cible: Compte,
                                   montant_source, taux, journal_id, date_operation: date,
                                   montant_cible=None, numero: str = '', ecriture_id=None,
                                   taux_source_base=None) -> Tuple[Ecriture, ConversionDevise]:
    """
    Écriture (brouillon) de conversion et sa trace d'audit.

    `taux` convertit la devise source en devise cible. Si aucune des deux
    devises n'est la devise de base, `taux_source_base` (devise source ->
    devise de base) est nécessaire pour valoriser les lignes.
    """
    montant_source = en_decimal(montant_source)
    taux = en_decimal(taux)

    if montant_source <= 0:
        raise LigneInvalide("Le montant à convertir doit être positif")
    if taux <= 0:
        raise LigneInvalide("Le taux de change doit être positif")
    if compte_source.id == compte_cible.id:
        raise LigneInvalide("Les comptes source et cible doivent être différents")

    devise_source = compte_source.devise or contexte.devise_base
    devise_cible = compte_cible.devise or contexte.devise_base
    if devise_source == devise_cible:
        raise LigneInvalide("Les devises source et cible doivent être différentes")

    if montant_cible is None:
        montant_cible = arrondir(convertir(montant_source, taux))
    montant_cible = en_decimal(montant_cible)
    if montant_cible <= 0:
        raise LigneInvalide("Le montant converti doit être positif")

    # Une seule contre-valeur en devise de base, portée par les deux lignes :
    # l'écriture reste équilibrée quel que soit l'arrondi des taux stockés.
    # Montant cible imposé (frais, arrondi bancaire) : la contre-valeur suit
    # le montant effectivement reçu ou remis en devise de base.
    if devise_cible == contexte.devise_base:
        valeur_base = montant_cible
    elif devise_source == contexte.devise_base:
        valeur_base = montant_source
    else:
        if taux_source_base is None:
            raise TauxIntrouvable(devise_source, contexte.devise_base)
        valeur_base = arrondir(convertir(montant_source, taux_source_base))

    def valoriser(montant, devise):
        if devise == contexte.devise_base:
            return UN, None
        return (valeur_base / montant).quantize(PRECISION_TAUX), valeur_base

    taux_ligne_cible, base_cible = valoriser(montant_cible, devise_cible)
    taux_ligne_source, base_source = valoriser(montant_source, devise_source)

    libelle = f"Conversion {devise_source} → {devise_cible}"
    ecriture_id = ecriture_id or uuid.uuid4().hex

    ecriture = Ecriture(
        id=ecriture_id,
        numero=numero,
        date=date_operation,
        journal_id=journal_id,
        reference=libelle,
        statut=BROUILLON,
        devise=devise_cible,
        taux_change=taux,
        lignes=(
            LigneEcriture(
                compte_id=compte_cible.id,
                debit=montant_cible,
                devise=devise_cible,
                taux_change=taux_ligne_cible,
                montant_base=base_cible,
                libelle=libelle,
            ),
            LigneEcriture(
                compte_id=compte_source.id,
                credit=montant_source,
                devise=devise_source,
                taux_change=taux_ligne_source,
                montant_base=base_source,
                libelle=libelle,
            ),
        ),
    )

    conversion = ConversionDevise(
        devise_source=devise_source,
        devise_cible=devise_cible,
        montant_source=montant_source,
        montant_cible=montant_cible,
        taux_change=taux,
        compte_source_id=compte_source.id,
        compte_cible_id=compte_cible.id,
        ecriture_id=ecriture_id,
    )
    return ecriture, conversion
