# apps/api/viewsets/compte_ohada.py
"""
ViewSet pour la gestion des comptes OHADA via API REST
Gère les comptes du plan comptable avec filtres et recherche
"""

from datetime import date

from django.db.models import Count
from django_filters import BooleanFilter, CharFilter, FilterSet
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, status, viewsets
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.accounting.models import CompteOHADA, LigneEcriture
from apps.accounting.serializers import (
    CompteGrandLivreSerializer,
    CompteOHADAMinimalSerializer,
    CompteOHADASerializer,
)
from apps.accounting.services.contexte import contexte_depuis_requete
from apps.accounting.services.etats import generer_grand_livre


class CompteOHADAPagination(PageNumberPagination):
    page_size = 100
    page_size_query_param = 'page_size'
    max_page_size = 2000


class CompteOHADAFilter(FilterSet):
    """Filtre personnalisé pour les comptes OHADA"""

    code = CharFilter(field_name='code', lookup_expr='exact')
    code_startswith = CharFilter(field_name='code', lookup_expr='startswith')
    libelle = CharFilter(field_name='libelle', lookup_expr='icontains')
    classe = CharFilter(field_name='classe', lookup_expr='exact')
    type = CharFilter(field_name='type', lookup_expr='exact')
    devise = CharFilter(field_name='devise', lookup_expr='iexact')
    is_active = BooleanFilter(field_name='is_active')

    class Meta:
        model = CompteOHADA
        fields = ['code', 'code_startswith', 'libelle', 'classe', 'type', 'devise', 'is_active']


class CompteOHADAViewSet(viewsets.ModelViewSet):
    """
    ViewSet pour les comptes OHADA

    Endpoints:
    - GET /api/comptes/ - Liste des comptes
    - POST /api/comptes/ - Créer un compte
    - GET /api/comptes/{id}/ - Détail d'un compte
    - PUT /api/comptes/{id}/ - Modifier un compte
    - DELETE /api/comptes/{id}/ - Supprimer (ou désactiver) un compte

    Actions supplémentaires:
    - GET /api/comptes/actifs/ - Comptes actifs uniquement
    - GET /api/comptes/par_classe/ - Nombre de comptes par classe
    - GET /api/comptes/non_classes/ - Comptes hors nomenclature OHADA
    - GET /api/comptes/{id}/classement/ - Classe et rubrique OHADA du compte
    - GET /api/comptes/{id}/mouvements/ - Grand livre du compte
    """

    queryset = CompteOHADA.objects.all()
    serializer_class = CompteOHADASerializer
    permission_classes = [IsAuthenticated]
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_class = CompteOHADAFilter
    search_fields = ['code', 'libelle']
    ordering_fields = ['code', 'libelle', 'classe', 'created_at']
    ordering = ['code']
    pagination_class = CompteOHADAPagination

    def get_serializer_class(self):
        if self.action == 'list' and self.request.query_params.get('minimal'):
            return CompteOHADAMinimalSerializer
        return super().get_serializer_class()

    def get_queryset(self):
        queryset = super().get_queryset()

        classes = self.request.query_params.get('classes', '').split(',')
        if classes and classes[0]:
            queryset = queryset.filter(classe__in=classes)

        return queryset

    @action(detail=False, methods=['get'])
    def actifs(self, request):
        """Retourne uniquement les comptes actifs"""
        queryset = self.filter_queryset(self.get_queryset()).filter(is_active=True)
        serializer = CompteOHADAMinimalSerializer(queryset, many=True)
        return Response(serializer.data)

    @action(detail=False, methods=['get'])
    def par_classe(self, request):
        """Nombre de comptes par classe"""
        comptes = self.get_queryset().values('classe').annotate(nb_comptes=Count('id')).order_by('classe')
        return Response({f"classe_{c['classe']}": c['nb_comptes'] for c in comptes})

    @action(detail=False, methods=['get'])
    def non_classes(self, request):
        """
        Comptes dont le code ne correspond à aucune rubrique OHADA.
        Ils figurent dans la balance mais sont exclus des états de synthèse.
        """
        comptes = [c for c in self.get_queryset() if not c.classement.est_classe]
        return Response(CompteOHADAMinimalSerializer(comptes, many=True).data)

    @action(detail=True, methods=['get'])
    def classement(self, request, pk=None):
        compte = self.get_object()
        classement = compte.classement
        return Response({
            'code': compte.code,
            'classe': classement.classe,
            'rubrique': classement.rubrique,
            'libelle_rubrique': classement.libelle,
            'est_classe': classement.est_classe,
        })

    @action(detail=True, methods=['get'])
    def mouvements(self, request, pk=None):
        """
        Grand livre du compte sur la période (date_debut, date_fin).
        Sans dates : depuis l'origine jusqu'à aujourd'hui.
        """
        compte = self.get_object()
        try:
            debut = date.fromisoformat(request.query_params.get('date_debut') or '1900-01-01')
            fin = date.fromisoformat(request.query_params.get('date_fin') or date.today().isoformat())
        except ValueError:
            return Response({'error': "Dates attendues au format AAAA-MM-JJ"}, status=status.HTTP_400_BAD_REQUEST)

        livre = generer_grand_livre(contexte_depuis_requete(request), debut, fin, compte_ids=[compte.pk])
        if not livre:
            return Response({'compte': compte.code, 'mouvements': []})
        return Response(CompteGrandLivreSerializer(livre[0]).data)

    def destroy(self, request, *args, **kwargs):
        """Un compte mouvementé n'est jamais supprimé : il est désactivé"""
        instance = self.get_object()

        if LigneEcriture.objects.filter(compte=instance).exists():
            instance.is_active = False
            instance.save()
            return Response(
                {'message': f"Le compte {instance.code} est mouvementé : il a été désactivé"},
                status=status.HTTP_200_OK
            )

        return super().destroy(request, *args, **kwargs)
