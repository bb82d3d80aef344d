from .compte_admin import CompteOHADAAdmin
from .journal_admin import JournalAdmin
from .tiers_admin import TiersAdmin
from .ecriture_admin import EcritureComptableAdmin
from .facture_admin import ConversionDeviseAdmin, FactureAdmin, TauxChangeAdmin

__all__ = [
    'CompteOHADAAdmin',
    'JournalAdmin',
    'TiersAdmin',
    'EcritureComptableAdmin',
    'FactureAdmin',
    'TauxChangeAdmin',
    'ConversionDeviseAdmin',
]
