# apps/accounting/moteur/etats/synthese.py
"""
États financiers de synthèse et contrôles croisés

Un même grand livre alimente le SIG, le TFT et le bilan. Trois contrôles
vérifient que ces dérivations concordent :

- résultat net du SIG == résultat net du TFT (période)
- total actif - total passif == résultat net cumulé à la date d'arrêté
- flux de trésorerie du TFT == variation des comptes de trésorerie

Un écart ne bloque pas la production des états : il est rapporté sous
forme d'avertissement, avec les comptes non classés exclus du calcul.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Tuple

from ..exceptions import Avertissement, EcartDeControle
from ..plan_comptable import PlanComptable
from ..soldes import Plage, accumuler
from ..types import ContexteSociete, LigneComptabilisee
from .bilan import Bilan, deriver_bilan
from .sig import SIG, deriver_sig
from .tft import TFT, deriver_tft

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EtatsFinanciers:
    debut: date
    fin: date
    sig: SIG
    tft: TFT
    bilan: Bilan
    resultat_cumule: SIG
    avertissements: Tuple[Avertissement, ...] = ()

    @property
    def est_coherent(self) -> bool:
        return not any(isinstance(a, EcartDeControle) for a in self.avertissements)


def controler(contexte: ContexteSociete, sig: SIG, tft: TFT, bilan: Bilan,
              resultat_cumule: SIG) -> List[EcartDeControle]:
    ecarts = []
    tolerance = contexte.tolerance

    if abs(sig.resultat_net - tft.resultat_net) > tolerance:
        ecarts.append(EcartDeControle.pour(
            'sig_tft', "Résultat net TFT différent du résultat net SIG",
            sig.resultat_net, tft.resultat_net,
        ))

    difference = bilan.total_actif - bilan.total_passif
    if abs(difference - resultat_cumule.resultat_net) > tolerance:
        ecarts.append(EcartDeControle.pour(
            'equation_bilan', "Total actif - total passif différent du résultat net",
            resultat_cumule.resultat_net, difference,
        ))

    if abs(tft.flux.flux_total - tft.variation_tresorerie) > tolerance:
        ecarts.append(EcartDeControle.pour(
            'tresorerie', "Flux du TFT différents de la variation de trésorerie",
            tft.variation_tresorerie, tft.flux.flux_total,
        ))

    return ecarts


def deriver_etats_financiers(contexte: ContexteSociete, plan: PlanComptable,
                             lignes: Iterable[LigneComptabilisee], debut: date, fin: date) -> EtatsFinanciers:
    lignes = list(lignes)
    periode = accumuler(lignes, Plage.entre(debut, fin))
    ouverture = accumuler(lignes, Plage.avant(debut))
    cumuls = accumuler(lignes, Plage.jusqu_au(fin))

    sig = deriver_sig(plan, periode)
    tft = deriver_tft(plan, periode, ouverture, cumuls)
    bilan = deriver_bilan(plan, cumuls)
    resultat_cumule = deriver_sig(plan, cumuls)

    avertissements: List[Avertissement] = list(plan.avertissements(cumuls))
    avertissements.extend(controler(contexte, sig, tft, bilan, resultat_cumule))

    for avertissement in avertissements:
        logger.warning("[%s] %s", contexte.tenant, avertissement.message)

    return EtatsFinanciers(
        debut=debut,
        fin=fin,
        sig=sig,
        tft=tft,
        bilan=bilan,
        resultat_cumule=resultat_cumule,
        avertissements=tuple(avertissements),
    )
