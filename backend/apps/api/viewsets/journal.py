# backend/apps/api/viewsets/journal.py

from django.db.models import Count
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounting.models import Journal
from apps.accounting.serializers import (
    JournalAuxiliaireSerializer,
    JournalMinimalSerializer,
    JournalSerializer,
    PeriodeSerializer,
)
from apps.accounting.services.contexte import contexte_depuis_requete
from apps.accounting.services.etats import generer_journal


class JournalViewSet(viewsets.ModelViewSet):
    """
    ViewSet pour la gestion des journaux comptables OHADA

    Endpoints:
    - GET /api/journaux/ : Liste tous les journaux
    - GET /api/journaux/{id}/ : Détail d'un journal
    - POST /api/journaux/ : Créer un journal
    - PUT /api/journaux/{id}/ : Modifier un journal
    - DELETE /api/journaux/{id}/ : Supprimer un journal sans écritures

    Actions spéciales:
    - GET /api/journaux/actifs/ : Journaux actifs uniquement
    - GET /api/journaux/par_type/ : Journaux groupés par type
    - GET /api/journaux/{id}/ecritures/?debut=&fin= : Journal auxiliaire de la période
    """

    queryset = Journal.objects.all()
    serializer_class = JournalSerializer
    permission_classes = [IsAuthenticated]

    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ['type', 'is_active']
    search_fields = ['code', 'libelle']
    ordering_fields = ['code', 'libelle', 'created_at']
    ordering = ['code']

    def get_queryset(self):
        return super().get_queryset().select_related('compte_contrepartie')

    def get_serializer_class(self):
        if self.action == 'list' and self.request.query_params.get('minimal'):
            return JournalMinimalSerializer
        return super().get_serializer_class()

    @action(detail=False, methods=['get'])
    def actifs(self, request):
        journaux = self.get_queryset().filter(is_active=True)
        serializer = JournalMinimalSerializer(journaux, many=True)
        return Response(serializer.data)

    @action(detail=False, methods=['get'])
    def par_type(self, request):
        """Nombre de journaux et d'écritures par type"""
        resultat = {}
        types = dict(Journal.TYPES_JOURNAL)
        stats = self.get_queryset().values('type').annotate(
            nb_journaux=Count('id', distinct=True),
            nb_ecritures=Count('ecritures', distinct=True),
        )
        for ligne in stats:
            resultat[ligne['type']] = {
                'libelle': types.get(ligne['type'], ligne['type']),
                'nb_journaux': ligne['nb_journaux'],
                'nb_ecritures': ligne['nb_ecritures'],
            }
        return Response(resultat)

    @action(detail=True, methods=['get'])
    def ecritures(self, request, pk=None):
        """Journal auxiliaire : écritures validées de la période, regroupées"""
        journal = self.get_object()
        periode = PeriodeSerializer(data=request.query_params)
        periode.is_valid(raise_exception=True)

        resultat = generer_journal(
            contexte_depuis_requete(request), journal.pk,
            periode.validated_data['debut'], periode.validated_data['fin'],
        )
        return Response(JournalAuxiliaireSerializer(resultat).data)

    def destroy(self, request, *args, **kwargs):
        instance = self.get_object()
        if instance.ecritures.exists():
            return Response(
                {'error': f"Le journal {instance.code} contient des écritures : suppression impossible"},
                status=status.HTTP_400_BAD_REQUEST
            )
        return super().destroy(request, *args, **kwargs)
