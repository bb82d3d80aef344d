# apps/accounting/moteur/__init__.py
"""
Moteur comptable OHADA

Partie double, classement des comptes et états financiers, sans
dépendance à Django. La couche services (apps.accounting.services)
construit les instantanés depuis l'ORM et appelle ce moteur.
"""
