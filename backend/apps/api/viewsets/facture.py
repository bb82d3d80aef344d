# apps/api/viewsets/facture.py
"""
ViewSet des factures clients et fournisseurs

- Saisie en brouillon
- comptabiliser/ : écriture au journal des ventes ou des achats
- regler/ : règlement total ou partiel par banque ou caisse
"""

from datetime import date

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounting.models import Facture
from apps.accounting.serializers import EcritureComptableSerializer, FactureSerializer, ReglementSerializer
from apps.accounting.services.comptabilisation import comptabiliser_facture, enregistrer_reglement
from apps.accounting.services.contexte import contexte_depuis_requete
from .erreurs import ERREURS_METIER, reponse_erreur, utilisateur


class FactureViewSet(viewsets.ModelViewSet):

    queryset = Facture.objects.all()
    serializer_class = FactureSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['type', 'statut', 'tiers']
    search_fields = ['numero', 'tiers__raison_sociale']
    ordering_fields = ['date_facture', 'date_echeance', 'numero', 'total_ttc']
    ordering = ['-date_facture', '-numero']

    def get_queryset(self):
        return super().get_queryset().select_related('tiers', 'compte_gestion', 'compte_tva', 'ecriture')

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        if instance.statut != 'BROUILLON':
            return Response(
                {'error': f"La facture {instance.numero} est comptabilisée : suppression impossible"},
                status=status.HTTP_400_BAD_REQUEST
            )
        return super().destroy(request, *args, **kwargs)

    @action(detail=True, methods=['post'])
    def comptabiliser(self, request, pk=None):
        facture = self.get_object()
        try:
            ecriture = comptabiliser_facture(
                facture, contexte=contexte_depuis_requete(request), user=utilisateur(request)
            )
        except ERREURS_METIER as e:
            return reponse_erreur(e)

        facture.refresh_from_db()
        return Response({
            'facture': FactureSerializer(facture).data,
            'ecriture': EcritureComptableSerializer(ecriture).data,
        })

    @action(detail=True, methods=['post'])
    def regler(self, request, pk=None):
        """
        POST /api/factures/{id}/regler/
        Body: {"montant": "1000.00", "compte_tresorerie": 12, "date_reglement": "2024-03-01"}
        """
        facture = self.get_object()
        serializer = ReglementSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        donnees = serializer.validated_data

        try:
            ecriture = enregistrer_reglement(
                facture,
                donnees['montant'],
                donnees['compte_tresorerie'],
                date_reglement=donnees.get('date_reglement') or date.today(),
                contexte=contexte_depuis_requete(request),
                user=utilisateur(request),
            )
        except ERREURS_METIER as e:
            return reponse_erreur(e)

        facture.refresh_from_db()
        return Response({
            'facture': FactureSerializer(facture).data,
            'ecriture': EcritureComptableSerializer(ecriture).data,
        }, status=status.HTTP_201_CREATED)
