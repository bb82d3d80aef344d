# apps/api/viewsets/etats.py
"""
États comptables en lecture seule

Tous les états sont calculés à la demande sur les écritures validées
du schéma courant. Paramètres communs : debut, fin (AAAA-MM-JJ).

- GET /api/etats/balance_generale/?debut=&fin=&devise=
- GET /api/etats/grand_livre/?debut=&fin=&comptes=1,2
- GET /api/etats/journal/?debut=&fin=&journal=ID
- GET /api/etats/livre_tresorerie/?debut=&fin=&nature=banque|caisse
- GET /api/etats/balance_tiers/?debut=&fin=&rubrique=fournisseurs|clients
- GET /api/etats/balance_agee/?date=&type=client|fournisseur
- GET /api/etats/etats_financiers/?debut=&fin=
"""

from datetime import date

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounting.moteur.balance_agee import totaliser
from apps.accounting.serializers import (
    BalanceGeneraleSerializer,
    CompteGrandLivreSerializer,
    EtatsFinanciersSerializer,
    JournalAuxiliaireSerializer,
    LigneBalanceAgeeSerializer,
    LigneBalanceTiersSerializer,
    PeriodeSerializer,
)
from apps.accounting.services import etats
from apps.accounting.services.contexte import contexte_depuis_requete
from .erreurs import ERREURS_METIER, reponse_erreur


class EtatsViewSet(viewsets.ViewSet):

    permission_classes = [IsAuthenticated]

    def _periode(self, request):
        serializer = PeriodeSerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        return serializer.validated_data

    @action(detail=False, methods=['get'])
    def balance_generale(self, request):
        periode = self._periode(request)
        balance = etats.generer_balance_generale(
            contexte_depuis_requete(request), periode['debut'], periode['fin'], devise=periode.get('devise')
        )
        return Response(BalanceGeneraleSerializer(balance).data)

    @action(detail=False, methods=['get'])
    def grand_livre(self, request):
        periode = self._periode(request)
        comptes = request.query_params.get('comptes')
        try:
            compte_ids = [int(c) for c in comptes.split(',') if c] if comptes else None
        except ValueError:
            return Response({'error': "Liste de comptes invalide"}, status=status.HTTP_400_BAD_REQUEST)

        livre = etats.generer_grand_livre(
            contexte_depuis_requete(request), periode['debut'], periode['fin'],
            compte_ids=compte_ids, devise=periode.get('devise'),
        )
        return Response(CompteGrandLivreSerializer(livre, many=True).data)

    @action(detail=False, methods=['get'])
    def journal(self, request):
        periode = self._periode(request)
        try:
            journal_id = int(request.query_params.get('journal', ''))
        except ValueError:
            return Response({'error': "Paramètre journal requis"}, status=status.HTTP_400_BAD_REQUEST)

        journal = etats.generer_journal(contexte_depuis_requete(request), journal_id, periode['debut'], periode['fin'])
        return Response(JournalAuxiliaireSerializer(journal).data)

    @action(detail=False, methods=['get'])
    def livre_tresorerie(self, request):
        periode = self._periode(request)
        try:
            livre = etats.generer_livre_tresorerie(
                contexte_depuis_requete(request), periode['debut'], periode['fin'],
                nature=request.query_params.get('nature') or None, devise=periode.get('devise'),
            )
        except ERREURS_METIER as e:
            return reponse_erreur(e)
        return Response(CompteGrandLivreSerializer(livre, many=True).data)

    @action(detail=False, methods=['get'])
    def balance_tiers(self, request):
        periode = self._periode(request)
        try:
            lignes = etats.generer_balance_tiers(
                contexte_depuis_requete(request), periode['debut'], periode['fin'],
                rubrique=request.query_params.get('rubrique', 'fournisseurs'),
            )
        except ERREURS_METIER as e:
            return reponse_erreur(e)
        return Response(LigneBalanceTiersSerializer(lignes, many=True).data)

    @action(detail=False, methods=['get'])
    def balance_agee(self, request):
        type_facture = request.query_params.get('type', 'client')
        if type_facture not in ('client', 'fournisseur'):
            return Response({'error': f"Type de facture inconnu : {type_facture}"},
                            status=status.HTTP_400_BAD_REQUEST)
        try:
            date_reference = date.fromisoformat(request.query_params.get('date') or date.today().isoformat())
        except ValueError:
            return Response({'error': "Date attendue au format AAAA-MM-JJ"}, status=status.HTTP_400_BAD_REQUEST)

        lignes = etats.generer_balance_agee(contexte_depuis_requete(request), date_reference, type_facture)
        return Response({
            'date_reference': date_reference,
            'lignes': LigneBalanceAgeeSerializer(lignes, many=True).data,
            'total': LigneBalanceAgeeSerializer(totaliser(lignes)).data,
        })

    @action(detail=False, methods=['get'])
    def etats_financiers(self, request):
        periode = self._periode(request)
        resultat = etats.generer_etats_financiers(contexte_depuis_requete(request), periode['debut'], periode['fin'])
        return Response(EtatsFinanciersSerializer(resultat).data)
