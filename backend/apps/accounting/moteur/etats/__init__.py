# apps/accounting/moteur/etats/__init__.py
from .balance import BalanceGenerale, LigneBalance, TotauxBalance, balance_generale
from .bilan import Bilan, LigneBilan, deriver_bilan
from .livres import (
    CompteGrandLivre, EcritureJournal, JournalAuxiliaire, LigneBalanceTiers, MouvementGrandLivre,
    balance_tiers, grand_livre, journal_auxiliaire, livre_tresorerie,
)
from .sig import SIG, deriver_sig
from .synthese import EtatsFinanciers, controler, deriver_etats_financiers
from .tft import TFT, FluxTresorerie, FormationResultat, deriver_tft

__all__ = [
    'BalanceGenerale', 'LigneBalance', 'TotauxBalance', 'balance_generale',
    'Bilan', 'LigneBilan', 'deriver_bilan',
    'CompteGrandLivre', 'EcritureJournal', 'JournalAuxiliaire', 'LigneBalanceTiers',
    'MouvementGrandLivre', 'balance_tiers', 'grand_livre', 'journal_auxiliaire', 'livre_tresorerie',
    'SIG', 'deriver_sig',
    'EtatsFinanciers', 'controler', 'deriver_etats_financiers',
    'TFT', 'FluxTresorerie', 'FormationResultat', 'deriver_tft',
]
