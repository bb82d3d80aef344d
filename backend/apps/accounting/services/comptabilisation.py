# apps/accounting/services/comptabilisation.py
"""
Création et validation des écritures

Toute opération qui mouvemente le grand livre (saisie, facture,
règlement, conversion, extourne) passe par ce module : l'écriture et
ses lignes sont créées dans une même transaction, puis validées par
le moteur sous verrou de ligne (select_for_update).

Les erreurs métier du moteur (ErreurComptable) remontent telles quelles ;
rien n'est écrit si l'une d'elles est levée.
"""

import logging
from datetime import date
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from apps.accounting.models import ConversionDevise, EcritureComptable, Facture, Journal, LigneEcriture
from apps.accounting.moteur import types as moteur
from apps.accounting.moteur.devises import ConvertisseurDevises, construire_ecriture_conversion
from apps.accounting.moteur.exceptions import LigneInvalide, TransitionInvalide
from apps.accounting.moteur.plan_comptable import classer
from apps.accounting.moteur.validation import comptabiliser, contrepasser
from .contexte import contexte_par_defaut
from .taux import SourceTauxBase

logger = logging.getLogger(__name__)


@transaction.atomic
def creer_ecriture(journal, libelle, lignes, date_ecriture=None, reference='', devise='',
                   taux_change=Decimal('1'), user=None, valider=False, contexte=None, date_piece=None):
    """
    Crée une écriture et toutes ses lignes ; jamais d'en-tête sans lignes.

    `lignes` : dicts aux noms des champs de LigneEcriture (compte, tiers,
    montant_debit, montant_credit, libelle, devise, taux_change, montant_base,
    date_echeance).
    """
    if not lignes:
        raise LigneInvalide("L'écriture doit contenir au moins une ligne")

    ecriture = EcritureComptable.objects.create(
        journal=journal,
        date_ecriture=date_ecriture or date.today(),
        date_piece=date_piece,
        libelle=libelle,
        reference=reference,
        devise=devise or '',
        taux_change=taux_change,
        created_by=user,
    )

    for numero, donnees in enumerate(lignes, start=1):
        LigneEcriture.objects.create(ecriture=ecriture, numero_ligne=numero, **donnees)

    if valider:
        comptabiliser_ecriture(ecriture, contexte=contexte, user=user)
    return ecriture


def comptabiliser_ecriture(ecriture, contexte=None, user=None):
    """
    BROUILLON -> VALIDEE, atomique.

    L'écriture est relue sous verrou : deux validations concurrentes de
    la même écriture ne peuvent pas aboutir toutes les deux.
    """
    contexte = contexte or contexte_par_defaut()

    with transaction.atomic():
        verrouillee = EcritureComptable.objects.select_for_update().get(pk=ecriture.pk)
        comptabiliser(verrouillee.vers_moteur(), contexte)

        maintenant = timezone.now()
        EcritureComptable.objects.filter(pk=ecriture.pk).update(
            statut=moteur.VALIDEE,
            date_validation=maintenant,
            validee_par=user,
        )

    ecriture.statut = moteur.VALIDEE
    ecriture.date_validation = maintenant
    ecriture.validee_par = user
    return ecriture


def _persister(ecriture_moteur, journal, libelle, user=None):
    """Enregistre un brouillon produit par le moteur"""
    return creer_ecriture(
        journal=journal,
        libelle=libelle,
        date_ecriture=ecriture_moteur.date,
        reference=ecriture_moteur.reference[:50],
        devise=ecriture_moteur.devise or '',
        taux_change=ecriture_moteur.taux_change.quantize(moteur.PRECISION_TAUX),
        user=user,
        lignes=[
            {
                'compte_id': ligne.compte_id,
                'tiers_id': ligne.tiers_id,
                'montant_debit': moteur.arrondir(ligne.debit),
                'montant_credit': moteur.arrondir(ligne.credit),
                'devise': ligne.devise or '',
                'taux_change': ligne.taux_change.quantize(moteur.PRECISION_TAUX),
                'montant_base': None if ligne.montant_base is None else moteur.arrondir(ligne.montant_base),
                'libelle': ligne.libelle[:200] if ligne.libelle else libelle,
                'date_echeance': ligne.date_echeance,
            }
            for ligne in ecriture_moteur.lignes
        ],
    )


def contrepasser_ecriture(ecriture, date_operation=None, contexte=None, user=None):
    """Extourne d'une écriture validée : nouvelle écriture inversée, validée"""
    contexte = contexte or contexte_par_defaut()
    extourne = contrepasser(ecriture.vers_moteur(), numero='', date_operation=date_operation or date.today())

    with transaction.atomic():
        nouvelle = _persister(extourne, ecriture.journal, f"Extourne {ecriture.numero}", user)
        comptabiliser_ecriture(nouvelle, contexte=contexte, user=user)

    logger.info("Écriture %s contrepassée par %s (%s)", ecriture.numero, nouvelle.numero, contexte.tenant)
    return nouvelle


def enregistrer_conversion(compte_source, compte_cible, montant_source, date_conversion=None, taux=None,
                           montant_cible=None, journal=None, notes='', contexte=None, source=None, user=None):
    """
    Conversion entre deux comptes de trésorerie de devises différentes.

    Sans taux fourni, le dernier taux connu est coté (table, puis taux par
    défaut de la société) ; TauxIntrouvable sinon. L'écriture est validée
    et la trace ConversionDevise créée dans la même transaction.
    """
    contexte = contexte or contexte_par_defaut()
    convertisseur = ConvertisseurDevises(source or SourceTauxBase())
    date_conversion = date_conversion or date.today()

    devise_source = compte_source.devise or contexte.devise_base
    devise_cible = compte_cible.devise or contexte.devise_base

    if taux is None:
        taux = convertisseur.coter(contexte, devise_source, devise_cible, date_conversion)

    taux_source_base = None
    if contexte.devise_base not in (devise_source, devise_cible):
        taux_source_base = convertisseur.coter(contexte, devise_source, contexte.devise_base, date_conversion)

    journal = journal or Journal.par_type('OD')
    ecriture_moteur, conversion = construire_ecriture_conversion(
        contexte,
        compte_source.vers_moteur(),
        compte_cible.vers_moteur(),
        montant_source,
        taux,
        journal.pk,
        date_conversion,
        montant_cible=montant_cible,
        taux_source_base=taux_source_base,
    )

    with transaction.atomic():
        ecriture = _persister(ecriture_moteur, journal, ecriture_moteur.reference, user)
        comptabiliser_ecriture(ecriture, contexte=contexte, user=user)

        trace = ConversionDevise.objects.create(
            devise_source=conversion.devise_source,
            devise_cible=conversion.devise_cible,
            montant_source=moteur.arrondir(conversion.montant_source),
            montant_cible=moteur.arrondir(conversion.montant_cible),
            taux_change=conversion.taux_change.quantize(moteur.PRECISION_TAUX),
            compte_source=compte_source,
            compte_cible=compte_cible,
            ecriture=ecriture,
            date_conversion=date_conversion,
            notes=notes,
        )

    logger.info(
        "Conversion %s %s -> %s %s au taux %s (%s, écriture %s)",
        trace.montant_source, trace.devise_source, trace.montant_cible, trace.devise_cible,
        trace.taux_change, contexte.tenant, ecriture.numero
    )
    return trace


def comptabiliser_facture(facture, contexte=None, user=None):
    """
    Facture -> écriture validée au journal des ventes ou des achats.

    Client :       D 411 (TTC) / C 70x (HT) / C 443 (TVA)
    Fournisseur :  D 60x (HT) / D 445 (TVA) / C 401 (TTC)

    Un client plafonné ne peut pas dépasser son plafond de crédit :
    solde comptable + TTC de la facture.
    """
    if facture.statut != 'BROUILLON':
        raise TransitionInvalide(f"La facture {facture.numero} est déjà comptabilisée")
    if facture.total_ttc <= 0:
        raise LigneInvalide("Une facture de montant nul ne peut pas être comptabilisée")

    tiers = facture.tiers
    if tiers.is_bloque:
        raise LigneInvalide(f"Le tiers {tiers.code} est bloqué : {tiers.motif_blocage}")
    if facture.est_client and tiers.plafond_credit is not None:
        encours = tiers.solde_comptable + facture.total_ttc
        if encours > tiers.plafond_credit:
            raise LigneInvalide(
                f"Plafond de crédit du client {tiers.code} dépassé : "
                f"encours {encours} pour un plafond de {tiers.plafond_credit}"
            )

    sens_tiers, sens_gestion = ('montant_debit', 'montant_credit') if facture.est_client \
        else ('montant_credit', 'montant_debit')

    lignes = [{
        'compte': tiers.compte_collectif,
        'tiers': tiers,
        sens_tiers: facture.total_ttc,
        'date_echeance': facture.date_echeance,
        'libelle': f"Facture {facture.numero} {tiers.raison_sociale}"[:200],
    }, {
        'compte': facture.compte_gestion,
        sens_gestion: facture.total_ht,
        'libelle': f"Facture {facture.numero}",
    }]
    if facture.total_tva > 0:
        lignes.append({
            'compte': facture.compte_tva,
            sens_gestion: facture.total_tva,
            'libelle': f"TVA facture {facture.numero}",
        })

    with transaction.atomic():
        ecriture = creer_ecriture(
            journal=Journal.par_type('VT' if facture.est_client else 'AC'),
            libelle=f"Facture {facture.numero}",
            reference=facture.numero,
            date_ecriture=facture.date_facture,
            lignes=lignes,
            user=user,
            valider=True,
            contexte=contexte,
        )
        facture.ecriture = ecriture
        facture.statut = 'COMPTABILISEE'
        facture.save()

    logger.info("Facture %s comptabilisée (écriture %s)", facture.numero, ecriture.numero)
    return ecriture


def enregistrer_reglement(facture, montant, compte_tresorerie, date_reglement=None, contexte=None, user=None):
    """
    Règlement total ou partiel d'une facture comptabilisée.

    Le montant ne peut pas dépasser le reste à payer. La facture passe
    à PAYEE lorsque le reste devient nul.
    """
    contexte = contexte or contexte_par_defaut()
    montant = moteur.en_decimal(montant)

    if montant <= 0:
        raise LigneInvalide("Le montant du règlement doit être positif")
    if compte_tresorerie.devise and compte_tresorerie.devise != contexte.devise_base:
        raise LigneInvalide("Règlement sur un compte en devise : passer d'abord par une conversion")

    rubrique = classer(compte_tresorerie.code).rubrique
    if rubrique not in ('banque', 'caisse'):
        raise LigneInvalide(f"Le compte {compte_tresorerie.code} n'est pas un compte de banque ou de caisse")

    with transaction.atomic():
        facture = Facture.objects.select_for_update().select_related('tiers').get(pk=facture.pk)
        if facture.statut != 'COMPTABILISEE':
            raise TransitionInvalide(f"La facture {facture.numero} n'est pas en attente de règlement")
        if montant > facture.reste_a_payer:
            raise LigneInvalide(
                f"Le règlement ({montant}) dépasse le reste à payer ({facture.reste_a_payer})"
            )

        tiers = facture.tiers
        ligne_tiers = {'compte': tiers.compte_collectif, 'tiers': tiers,
                       'libelle': f"Règlement {facture.numero}"}
        ligne_tresorerie = {'compte': compte_tresorerie, 'libelle': f"Règlement {facture.numero}"}
        if facture.est_client:
            ligne_tresorerie['montant_debit'] = montant
            ligne_tiers['montant_credit'] = montant
        else:
            ligne_tiers['montant_debit'] = montant
            ligne_tresorerie['montant_credit'] = montant

        ecriture = creer_ecriture(
            journal=Journal.par_type('CA' if rubrique == 'caisse' else 'BQ'),
            libelle=f"Règlement {facture.numero}",
            reference=facture.numero,
            date_ecriture=date_reglement or date.today(),
            lignes=[ligne_tresorerie, ligne_tiers],
            user=user,
            valider=True,
            contexte=contexte,
        )

        facture.montant_regle += montant
        if facture.reste_a_payer == 0:
            facture.statut = 'PAYEE'
        facture.save()

    logger.info(
        "Règlement de %s sur la facture %s (reste %s, %s)",
        montant, facture.numero, facture.reste_a_payer, contexte.tenant
    )
    return ecriture
