from .compte import CompteOHADA
from .journal import Journal
from .tiers import Tiers
from .ecriture import EcritureComptable, LigneEcriture
from .facture import Facture
from .devise import TauxChange, ConversionDevise


__all__ = [
    'CompteOHADA',
    'Journal',
    'Tiers',
    'EcritureComptable',
    'LigneEcriture',
    'Facture',
    'TauxChange',
    'ConversionDevise',
]
