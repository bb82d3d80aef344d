# apps/accounting/serializers/__init__.py
"""
Serializers pour l'application accounting
"""

from .base import (
    CompteOHADASerializer,
    CompteOHADAMinimalSerializer,
    JournalSerializer,
    JournalMinimalSerializer,
)

from .tiers import (
    TiersSerializer,
    TiersMinimalSerializer,
    BlocageSerializer,
)

from .ecritures import (
    EcritureComptableSerializer,
    EcritureComptableMinimalSerializer,
    LigneEcritureSerializer,
    ContrepassationSerializer,
)

from .factures import (
    FactureSerializer,
    ReglementSerializer,
)

from .devises import (
    TauxChangeSerializer,
    ConversionDeviseSerializer,
    ConversionCreationSerializer,
    CotationSerializer,
)

from .etats import (
    PeriodeSerializer,
    BalanceGeneraleSerializer,
    CompteGrandLivreSerializer,
    JournalAuxiliaireSerializer,
    LigneBalanceTiersSerializer,
    LigneBalanceAgeeSerializer,
    EtatsFinanciersSerializer,
)

__all__ = [
    # Comptes OHADA
    'CompteOHADASerializer',
    'CompteOHADAMinimalSerializer',

    # Journaux
    'JournalSerializer',
    'JournalMinimalSerializer',

    # Tiers
    'TiersSerializer',
    'TiersMinimalSerializer',
    'BlocageSerializer',

    # Écritures et lignes
    'EcritureComptableSerializer',
    'EcritureComptableMinimalSerializer',
    'LigneEcritureSerializer',
    'ContrepassationSerializer',

    # Factures
    'FactureSerializer',
    'ReglementSerializer',

    # Devises
    'TauxChangeSerializer',
    'ConversionDeviseSerializer',
    'ConversionCreationSerializer',
    'CotationSerializer',

    # États
    'PeriodeSerializer',
    'BalanceGeneraleSerializer',
    'CompteGrandLivreSerializer',
    'JournalAuxiliaireSerializer',
    'LigneBalanceTiersSerializer',
    'LigneBalanceAgeeSerializer',
    'EtatsFinanciersSerializer',
]
