from .tenant import Tenant
from .domain import Domain

__all__ = ['Tenant', 'Domain']
