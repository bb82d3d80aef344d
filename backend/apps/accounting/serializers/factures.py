# apps/accounting/serializers/factures.py
"""
Serializers pour les factures et leurs règlements
"""

from decimal import Decimal

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from apps.accounting.models import CompteOHADA, Facture
from .tiers import TiersMinimalSerializer


class FactureSerializer(serializers.ModelSerializer):

    tiers_detail = TiersMinimalSerializer(source='tiers', read_only=True)
    reste_a_payer = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)
    ecriture_numero = serializers.CharField(source='ecriture.numero', read_only=True, default=None)

    class Meta:
        model = Facture
        fields = [
            'id',
            'numero',
            'type',
            'tiers',
            'tiers_detail',
            'date_facture',
            'date_echeance',
            'compte_gestion',
            'compte_tva',
            'total_ht',
            'total_tva',
            'total_ttc',
            'montant_regle',
            'reste_a_payer',
            'statut',
            'ecriture',
            'ecriture_numero',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['total_ttc', 'montant_regle', 'statut', 'ecriture', 'created_at', 'updated_at']

    def validate(self, attrs):
        if self.instance is not None and self.instance.statut != 'BROUILLON':
            raise serializers.ValidationError("Une facture comptabilisée ne peut plus être modifiée")

        type_facture = attrs.get('type') or getattr(self.instance, 'type', 'client')
        tiers = attrs.get('tiers') or getattr(self.instance, 'tiers', None)
        compte_gestion = attrs.get('compte_gestion') or getattr(self.instance, 'compte_gestion', None)

        if tiers is not None:
            if type_facture == 'client' and not tiers.est_client:
                raise serializers.ValidationError({'tiers': "Une facture client doit porter sur un client"})
            if type_facture == 'fournisseur' and not tiers.est_fournisseur:
                raise serializers.ValidationError({'tiers': "Une facture fournisseur doit porter sur un fournisseur"})

        classe_attendue = '7' if type_facture == 'client' else '6'
        if compte_gestion is not None and compte_gestion.classe != classe_attendue:
            raise serializers.ValidationError({
                'compte_gestion': f"Le compte de gestion doit être un compte de classe {classe_attendue}"
            })

        return attrs

    def _enregistrer(self, instance, validated_data):
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        try:
            instance.save()
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.messages)
        return instance

    def create(self, validated_data):
        return self._enregistrer(Facture(), validated_data)

    def update(self, instance, validated_data):
        return self._enregistrer(instance, validated_data)


class ReglementSerializer(serializers.Serializer):
    montant = serializers.DecimalField(max_digits=18, decimal_places=2, min_value=Decimal('0.01'))
    compte_tresorerie = serializers.PrimaryKeyRelatedField(queryset=CompteOHADA.objects.filter(is_active=True))
    date_reglement = serializers.DateField(required=False)
