# apps/accounting/services/__init__.py
"""
Services comptables : passerelle entre l'ORM et le moteur

- contexte : ContexteSociete de la société courante
- depot : lecture des instantanés (plan, tiers, lignes validées, factures)
- taux : source de taux sur la table TauxChange
- comptabilisation : création et validation atomiques des écritures
- etats : génération des états financiers
"""
