# apps/api/viewsets/ecriture.py
"""
ViewSet pour la gestion des écritures comptables OHADA

Fonctionnalités principales :
- Saisie d'une écriture complète (en-tête + lignes) en une transaction
- Validation définitive BROUILLON -> VALIDEE
- Contrepassation des écritures validées
- Contrôle d'équilibre avant saisie
"""

from decimal import Decimal

from django.db import transaction
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounting.models import EcritureComptable, LigneEcriture
from apps.accounting.moteur import types as moteur, validation
from apps.accounting.moteur.exceptions import EcritureDesequilibree
from apps.accounting.serializers import (
    ContrepassationSerializer,
    EcritureComptableMinimalSerializer,
    EcritureComptableSerializer,
    LigneEcritureSerializer,
)
from apps.accounting.services.comptabilisation import (
    comptabiliser_ecriture, contrepasser_ecriture, creer_ecriture,
)
from apps.accounting.services.contexte import contexte_depuis_requete
from .erreurs import ERREURS_METIER, reponse_erreur, utilisateur


class EcritureComptableViewSet(viewsets.ModelViewSet):
    """
    ViewSet pour la gestion des écritures comptables

    Endpoints :
    - GET /ecritures/ : Liste des écritures avec filtres
    - POST /ecritures/ : Créer une écriture (en-tête + lignes, "valider": true pour valider)
    - GET /ecritures/{id}/ : Détail d'une écriture
    - PUT/PATCH /ecritures/{id}/ : Modifier une écriture brouillon
    - DELETE /ecritures/{id}/ : Supprimer une écriture brouillon

    Actions personnalisées :
    - valider/ : Valider une écriture
    - contrepasser/ : Extourner une écriture validée
    - verifier_equilibre/ : Contrôle d'équilibre de lignes non enregistrées
    """

    queryset = EcritureComptable.objects.all()
    serializer_class = EcritureComptableSerializer
    permission_classes = [IsAuthenticated]

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = {
        'journal': ['exact'],
        'statut': ['exact'],
        'date_ecriture': ['exact', 'gte', 'lte'],
    }
    search_fields = ['numero', 'libelle', 'reference']
    ordering_fields = ['date_ecriture', 'numero', 'created_at']
    ordering = ['-date_ecriture', '-numero']

    def get_queryset(self):
        queryset = super().get_queryset().select_related(
            'journal', 'created_by', 'validee_par'
        ).prefetch_related('lignes__compte', 'lignes__tiers')

        params = self.request.query_params
        if params.get('compte'):
            queryset = queryset.filter(lignes__compte__code__startswith=params['compte'])
        if params.get('tiers'):
            queryset = queryset.filter(lignes__tiers=params['tiers'])

        return queryset.distinct()

    def get_serializer_class(self):
        if self.action == 'list':
            return EcritureComptableMinimalSerializer
        return self.serializer_class

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        donnees = dict(serializer.validated_data)
        lignes = donnees.pop('lignes')
        valider = donnees.pop('valider', False)

        try:
            ecriture = creer_ecriture(
                lignes=lignes,
                user=utilisateur(request),
                valider=valider,
                contexte=contexte_depuis_requete(request),
                **donnees
            )
        except ERREURS_METIER as e:
            return reponse_erreur(e)

        return Response(EcritureComptableSerializer(ecriture).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        """Remplace l'en-tête et les lignes d'un brouillon"""
        partial = kwargs.pop('partial', False)
        instance = self.get_object()

        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        donnees = dict(serializer.validated_data)
        lignes = donnees.pop('lignes', None)
        donnees.pop('valider', None)

        try:
            with transaction.atomic():
                for attr, value in donnees.items():
                    setattr(instance, attr, value)
                instance.save()

                if lignes is not None:
                    instance.lignes.all().delete()
                    for numero, ligne in enumerate(lignes, start=1):
                        LigneEcriture.objects.create(ecriture=instance, numero_ligne=numero, **ligne)
        except ERREURS_METIER as e:
            return reponse_erreur(e)

        return Response(EcritureComptableSerializer(instance).data)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()

        if instance.est_validee:
            return Response(
                {'error': f"Impossible de supprimer l'écriture validée {instance.numero} : la contrepasser"},
                status=status.HTTP_400_BAD_REQUEST
            )

        with transaction.atomic():
            instance.lignes.all().delete()
            instance.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'])
    def valider(self, request, pk=None):
        """
        Valider une écriture (passer de BROUILLON à VALIDEE)

        POST /api/ecritures/{id}/valider/
        """
        ecriture = self.get_object()

        try:
            comptabiliser_ecriture(ecriture, contexte=contexte_depuis_requete(request), user=utilisateur(request))
        except ERREURS_METIER as e:
            return reponse_erreur(e)

        return Response({
            'message': f"Écriture {ecriture.numero} validée avec succès",
            'ecriture': EcritureComptableSerializer(ecriture).data
        })

    @action(detail=True, methods=['post'])
    def contrepasser(self, request, pk=None):
        """
        Extourne d'une écriture validée

        POST /api/ecritures/{id}/contrepasser/
        Body: {"date_operation": "2024-02-01"}
        """
        ecriture = self.get_object()
        serializer = ContrepassationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            extourne = contrepasser_ecriture(
                ecriture,
                date_operation=serializer.validated_data.get('date_operation'),
                contexte=contexte_depuis_requete(request),
                user=utilisateur(request),
            )
        except ERREURS_METIER as e:
            return reponse_erreur(e)

        return Response({
            'message': f"Écriture {ecriture.numero} contrepassée par {extourne.numero}",
            'ecriture': EcritureComptableSerializer(extourne).data
        }, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['post'])
    def verifier_equilibre(self, request):
        """
        Vérifier l'équilibre de lignes avant saisie

        POST /api/ecritures/verifier_equilibre/
        Body: {"lignes": [...]}
        """
        serializer = LigneEcritureSerializer(data=request.data.get('lignes', []), many=True)
        serializer.is_valid(raise_exception=True)

        if not serializer.validated_data:
            return Response({'error': 'Aucune ligne fournie'}, status=status.HTTP_400_BAD_REQUEST)

        contexte = contexte_depuis_requete(request)
        lignes = [
            moteur.LigneEcriture(
                compte_id=donnees['compte'].pk,
                debit=donnees.get('montant_debit', Decimal('0')),
                credit=donnees.get('montant_credit', Decimal('0')),
                devise=donnees.get('devise') or None,
                taux_change=donnees.get('taux_change') or moteur.UN,
            )
            for donnees in serializer.validated_data
        ]
        try:
            equilibre = validation.valider(lignes, contexte)
            equilibree = True
        except EcritureDesequilibree:
            equilibre = validation.calculer_equilibre(lignes, contexte)
            equilibree = False
        except ERREURS_METIER as e:
            return reponse_erreur(e)

        return Response({
            'total_debit': str(equilibre.total_debit),
            'total_credit': str(equilibre.total_credit),
            'ecart': str(equilibre.ecart),
            'multidevise': equilibre.multidevise,
            'equilibree': equilibree,
            'message': 'Écriture équilibrée' if equilibree else f'Écart de {abs(equilibre.ecart)}'
        })
