# apps/api/viewsets/tiers.py
"""
ViewSet pour la gestion des tiers (clients, fournisseurs, employés) via API REST
"""

from django.db.models import Q
from django_filters import BooleanFilter, CharFilter, ChoiceFilter, FilterSet
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounting.models import LigneEcriture, Tiers
from apps.accounting.serializers import BlocageSerializer, TiersMinimalSerializer, TiersSerializer
from .erreurs import utilisateur


class TiersFilter(FilterSet):
    """Filtre pour les tiers"""

    code = CharFilter(field_name='code', lookup_expr='icontains')
    raison_sociale = CharFilter(field_name='raison_sociale', lookup_expr='icontains')
    type_tiers = ChoiceFilter(field_name='type_tiers', choices=Tiers.TYPES_TIERS)
    is_active = BooleanFilter(field_name='is_active')
    is_bloque = BooleanFilter(field_name='is_bloque')
    categorie = CharFilter(method='filter_categorie')

    def filter_categorie(self, queryset, name, value):
        """Filtre par catégorie (fournisseur, client, employe)"""
        if value == 'fournisseur':
            return queryset.filter(type_tiers__in=['FLOC', 'FGRP'])
        elif value == 'client':
            return queryset.filter(type_tiers__in=['CLOC', 'CGRP'])
        elif value == 'employe':
            return queryset.filter(type_tiers='EMPL')
        return queryset

    class Meta:
        model = Tiers
        fields = ['code', 'raison_sociale', 'type_tiers', 'is_active', 'is_bloque', 'categorie']


class TiersViewSet(viewsets.ModelViewSet):
    """
    ViewSet pour les tiers (clients, fournisseurs, employés)

    Endpoints:
    - GET /api/tiers/ - Liste des tiers
    - POST /api/tiers/ - Créer un tiers (code et compte collectif automatiques)
    - GET /api/tiers/{id}/ - Détail d'un tiers
    - PUT /api/tiers/{id}/ - Modifier un tiers
    - DELETE /api/tiers/{id}/ - Désactiver un tiers

    Actions supplémentaires:
    - GET /api/tiers/clients/ - Liste des clients
    - GET /api/tiers/fournisseurs/ - Liste des fournisseurs
    - GET /api/tiers/{id}/ecritures/ - Lignes validées du tiers
    - POST /api/tiers/{id}/bloquer/ - Bloquer un tiers
    - POST /api/tiers/{id}/debloquer/ - Débloquer un tiers
    - GET /api/tiers/recherche_rapide/?q= - Recherche pour autocomplete
    """

    queryset = Tiers.objects.all()
    serializer_class = TiersSerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = TiersFilter
    search_fields = ['code', 'raison_sociale', 'sigle', 'numero_contribuable', 'matricule']
    ordering_fields = ['code', 'raison_sociale', 'type_tiers', 'created_at']
    ordering = ['type_tiers', 'code']

    def get_serializer_class(self):
        if self.action == 'list' and self.request.query_params.get('minimal'):
            return TiersMinimalSerializer
        return super().get_serializer_class()

    def get_queryset(self):
        return super().get_queryset().select_related('compte_collectif', 'created_by')

    def _liste(self, queryset):
        page = self.paginate_queryset(queryset)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)

        serializer = self.get_serializer(queryset, many=True)
        return Response(serializer.data)

    @action(detail=False, methods=['get'])
    def clients(self, request):
        return self._liste(self.get_queryset().filter(type_tiers__in=['CLOC', 'CGRP']))

    @action(detail=False, methods=['get'])
    def fournisseurs(self, request):
        return self._liste(self.get_queryset().filter(type_tiers__in=['FLOC', 'FGRP']))

    @action(detail=True, methods=['get'])
    def ecritures(self, request, pk=None):
        """Lignes validées du tiers, les plus récentes d'abord"""
        tiers = self.get_object()

        lignes = LigneEcriture.objects.filter(
            tiers=tiers, ecriture__statut='VALIDEE'
        ).select_related('ecriture', 'ecriture__journal', 'compte').order_by(
            '-ecriture__date_ecriture', '-ecriture__numero'
        )

        date_debut = request.query_params.get('date_debut')
        date_fin = request.query_params.get('date_fin')
        if date_debut:
            lignes = lignes.filter(ecriture__date_ecriture__gte=date_debut)
        if date_fin:
            lignes = lignes.filter(ecriture__date_ecriture__lte=date_fin)

        return Response({
            'tiers': {'code': tiers.code, 'raison_sociale': tiers.raison_sociale},
            'solde': str(tiers.solde_comptable),
            'lignes': [
                {
                    'id': ligne.id,
                    'date': ligne.ecriture.date_ecriture,
                    'journal': ligne.ecriture.journal.code,
                    'numero_ecriture': ligne.ecriture.numero,
                    'compte': ligne.compte.code,
                    'libelle': ligne.libelle,
                    'debit': str(ligne.montant_debit),
                    'credit': str(ligne.montant_credit),
                    'date_echeance': ligne.date_echeance,
                }
                for ligne in lignes
            ],
        })

    @action(detail=True, methods=['post'])
    def bloquer(self, request, pk=None):
        """Bloque un tiers avec un motif"""
        tiers = self.get_object()
        serializer = BlocageSerializer(data=request.data)

        if serializer.is_valid():
            motif = serializer.validated_data['motif']
            tiers.bloquer(motif)
            return Response({
                'message': f'Le tiers {tiers.code} a été bloqué',
                'motif': motif
            })

        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    @action(detail=True, methods=['post'])
    def debloquer(self, request, pk=None):
        tiers = self.get_object()
        tiers.debloquer()

        return Response({
            'message': f'Le tiers {tiers.code} a été débloqué'
        })

    @action(detail=False, methods=['get'])
    def recherche_rapide(self, request):
        query = request.query_params.get('q', '')
        if len(query) < 2:
            return Response([])

        tiers = self.get_queryset().filter(
            Q(code__icontains=query) |
            Q(raison_sociale__icontains=query) |
            Q(sigle__icontains=query)
        ).filter(is_active=True, is_bloque=False)[:10]

        return Response(TiersMinimalSerializer(tiers, many=True).data)

    def perform_create(self, serializer):
        serializer.save(created_by=utilisateur(self.request))

    def destroy(self, request, *args, **kwargs):
        """Un tiers mouvementé est désactivé, jamais supprimé"""
        instance = self.get_object()

        if LigneEcriture.objects.filter(tiers=instance).exists():
            instance.is_active = False
            instance.save()
            return Response(
                {'message': f'Le tiers {instance.code} a été désactivé'},
                status=status.HTTP_200_OK
            )

        return super().destroy(request, *args, **kwargs)
