# apps/api/urls.py
"""
Configuration des URLs pour l'API REST
"""
from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import (
    TokenObtainPairView,
    TokenRefreshView,
    TokenVerifyView
)

from apps.api.viewsets.compte_ohada import CompteOHADAViewSet
from apps.api.viewsets.devise import ConversionDeviseViewSet, TauxChangeViewSet
from apps.api.viewsets.ecriture import EcritureComptableViewSet
from apps.api.viewsets.etats import EtatsViewSet
from apps.api.viewsets.facture import FactureViewSet
from apps.api.viewsets.journal import JournalViewSet
from apps.api.viewsets.tiers import TiersViewSet

router = DefaultRouter()

router.register('comptes', CompteOHADAViewSet, basename='compte')
router.register('journaux', JournalViewSet, basename='journal')
router.register('tiers', TiersViewSet, basename='tiers')
router.register('ecritures', EcritureComptableViewSet, basename='ecriture')
router.register('factures', FactureViewSet, basename='facture')
router.register('taux', TauxChangeViewSet, basename='taux')
router.register('conversions', ConversionDeviseViewSet, basename='conversion')
router.register('etats', EtatsViewSet, basename='etats')

urlpatterns = [
    # JWT Authentication
    path('token/', TokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('token/refresh/', TokenRefreshView.as_view(), name='token_refresh'),
    path('token/verify/', TokenVerifyView.as_view(), name='token_verify'),

    path('', include(router.urls)),
]
