# apps/accounting/serializers/tiers.py
"""
Serializers pour les tiers (auxiliaires) OHADA
- Tiers : Fournisseurs, Clients, Employés
- Codification automatique et compte collectif déduit du type
"""

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from apps.accounting.models import Tiers
from .base import CompteOHADAMinimalSerializer


class TiersSerializer(serializers.ModelSerializer):
    """
    Serializer complet pour les tiers OHADA

    - Code généré à la création (FLOC00001, CGRP00002, etc.)
    - Compte collectif déduit du type s'il n'est pas fourni
    - Solde comptable sur les écritures validées
    """

    compte_collectif_detail = CompteOHADAMinimalSerializer(
        source='compte_collectif',
        read_only=True
    )

    type_display = serializers.CharField(source='get_type_tiers_display', read_only=True)
    solde_comptable = serializers.DecimalField(max_digits=18, decimal_places=2, read_only=True)
    tiers_complet = serializers.SerializerMethodField()

    class Meta:
        model = Tiers
        fields = [
            'id',
            'code',
            'type_tiers',
            'type_display',
            'compte_collectif',
            'compte_collectif_detail',
            'raison_sociale',
            'sigle',
            'matricule',
            'numero_contribuable',
            'adresse',
            'ville',
            'pays',
            'telephone',
            'email',
            'delai_paiement',
            'plafond_credit',
            'is_active',
            'is_bloque',
            'motif_blocage',
            'solde_comptable',
            'tiers_complet',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['code', 'is_bloque', 'motif_blocage', 'created_at', 'updated_at']
        extra_kwargs = {
            'compte_collectif': {'required': False},
        }

    def get_tiers_complet(self, obj):
        return f"{obj.code} - {obj.raison_sociale}"

    def validate_matricule(self, value):
        type_tiers = self.initial_data.get('type_tiers') or getattr(self.instance, 'type_tiers', None)

        if type_tiers == 'EMPL' and not value:
            raise serializers.ValidationError("Le matricule est obligatoire pour un employé")

        if value and type_tiers != 'EMPL':
            raise serializers.ValidationError("Le matricule est réservé aux employés")

        return value or None

    def validate_numero_contribuable(self, value):
        return value or None

    def validate_plafond_credit(self, value):
        type_tiers = self.initial_data.get('type_tiers') or getattr(self.instance, 'type_tiers', None)

        if value and type_tiers not in ['CLOC', 'CGRP']:
            raise serializers.ValidationError("Le plafond de crédit est réservé aux clients")

        if value is not None and value <= 0:
            raise serializers.ValidationError("Le plafond de crédit doit être positif")

        return value

    def validate_delai_paiement(self, value):
        if value is not None and value > 365:
            raise serializers.ValidationError("Le délai de paiement doit être entre 0 et 365 jours")
        return value

    def validate(self, attrs):
        if attrs.get('type_tiers') == 'EMPL':
            attrs['plafond_credit'] = None
            attrs['delai_paiement'] = 0
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
        return self._enregistrer(Tiers(), validated_data)

    def update(self, instance, validated_data):
        if 'type_tiers' in validated_data and validated_data['type_tiers'] != instance.type_tiers:
            raise serializers.ValidationError({'type_tiers': "Le type d'un tiers ne peut pas être modifié"})
        return self._enregistrer(instance, validated_data)


class TiersMinimalSerializer(serializers.ModelSerializer):
    """Serializer minimal pour les listes déroulantes et les lignes d'écriture"""

    tiers_complet = serializers.SerializerMethodField()

    class Meta:
        model = Tiers
        fields = ['id', 'code', 'type_tiers', 'raison_sociale', 'tiers_complet', 'is_active', 'is_bloque']

    def get_tiers_complet(self, obj):
        return f"{obj.code} - {obj.raison_sociale}"


class BlocageSerializer(serializers.Serializer):
    motif = serializers.CharField(max_length=500)

    def validate_motif(self, value):
        if len(value.strip()) < 5:
            raise serializers.ValidationError("Le motif doit contenir au moins 5 caractères")
        return value.strip()
