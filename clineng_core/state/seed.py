# =============================================================================
# clineng_core/state/seed.py
# Built-in demo data shown on a cold start with an empty mirror
# =============================================================================

from typing import List

from .entities import Customer, Equipment, Supplier


def seed_customers() -> List[Customer]:
    return [
        Customer(
            id="c1",
            name="Hospital das Clínicas",
            tax_id="12.345.678/0001-90",
            email="contato@hc.org",
            phone="(11) 98888-7777",
            address="Av. Paulista, 1000",
        ),
        Customer(
            id="c2",
            name="Clínica Saúde Vital",
            tax_id="98.765.432/0001-21",
            email="adm@saudevital.com",
            phone="(11) 97777-6666",
            address="Rua das Flores, 45",
        ),
    ]


def seed_equipment() -> List[Equipment]:
    return []


def seed_suppliers() -> List[Supplier]:
    return []
