# apps/api/viewsets/devise.py
"""
Taux de change et conversions entre comptes de trésorerie
"""

from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounting.models import ConversionDevise, TauxChange
from apps.accounting.moteur.devises import ConvertisseurDevises
from apps.accounting.serializers import (
    ConversionCreationSerializer,
    ConversionDeviseSerializer,
    CotationSerializer,
    TauxChangeSerializer,
)
from apps.accounting.services.comptabilisation import enregistrer_conversion
from apps.accounting.services.contexte import contexte_depuis_requete
from apps.accounting.services.taux import SourceTauxBase
from .erreurs import ERREURS_METIER, reponse_erreur, utilisateur


def coter(request):
    """Dernier taux connu à la date, sinon taux par défaut de la société"""
    serializer = CotationSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    donnees = serializer.validated_data

    try:
        taux = ConvertisseurDevises(SourceTauxBase()).coter(
            contexte_depuis_requete(request),
            donnees['devise_source'],
            donnees['devise_cible'],
            donnees.get('date'),
        )
    except ERREURS_METIER as e:
        return reponse_erreur(e)

    return Response({
        'devise_source': donnees['devise_source'],
        'devise_cible': donnees['devise_cible'],
        'taux': str(taux),
    })


class TauxChangeViewSet(viewsets.ModelViewSet):
    """
    Table des taux de change

    - GET /api/taux/coter/?devise_source=USD&devise_cible=CDF&date=2024-01-31
      Dernier taux connu à la date, sinon taux par défaut de la société
    """

    queryset = TauxChange.objects.all()
    serializer_class = TauxChangeSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_fields = ['devise_source', 'devise_cible', 'date']
    ordering = ['-date']

    @action(detail=False, methods=['get'], url_path='coter')
    def cotation(self, request):
        return coter(request)


class ConversionDeviseViewSet(mixins.CreateModelMixin,
                              mixins.ListModelMixin,
                              mixins.RetrieveModelMixin,
                              viewsets.GenericViewSet):
    """
    Conversions de devises : une conversion crée une écriture validée
    (débit du compte cible, crédit du compte source) et sa trace.
    Pas de modification ni de suppression : une conversion se contrepasse.
    """

    queryset = ConversionDevise.objects.all()
    serializer_class = ConversionDeviseSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.OrderingFilter]
    filterset_fields = ['devise_source', 'devise_cible', 'date_conversion']
    ordering = ['-date_conversion', '-created_at']

    def get_queryset(self):
        return super().get_queryset().select_related('compte_source', 'compte_cible', 'ecriture')

    def get_serializer_class(self):
        if self.action == 'create':
            return ConversionCreationSerializer
        return super().get_serializer_class()

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        donnees = serializer.validated_data

        try:
            trace = enregistrer_conversion(
                donnees['compte_source'],
                donnees['compte_cible'],
                donnees['montant_source'],
                date_conversion=donnees.get('date_conversion'),
                taux=donnees.get('taux'),
                montant_cible=donnees.get('montant_cible'),
                notes=donnees.get('notes', ''),
                contexte=contexte_depuis_requete(request),
                user=utilisateur(request),
            )
        except ERREURS_METIER as e:
            return reponse_erreur(e)

        return Response(ConversionDeviseSerializer(trace).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'])
    def taux(self, request):
        """GET /api/conversions/taux/?devise_source=USD&devise_cible=CDF"""
        return coter(request)
